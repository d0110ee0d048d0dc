# tests/test_auth.py
"""
Testes de autenticação: login, logout, troca obrigatória de senha,
recuperação de senha e dependências de acesso.
"""

from datetime import timedelta
from unittest.mock import patch

from auth.dependencies import extract_token
from auth.models import User
from auth.security import (
    create_access_token,
    decode_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)
from utils.timezone import get_utc_now
from utils.token_blacklist import is_token_revoked

from tests.conftest import SENHA_PADRAO_TESTES, autenticar, criar_usuario


class TestSecurity:

    def test_hash_e_verificacao(self):
        hashed = get_password_hash("segredo-123")
        assert hashed != "segredo-123"
        assert verify_password("segredo-123", hashed)
        assert not verify_password("outra", hashed)

    def test_token_carrega_identidade(self):
        token = create_access_token({"sub": "maria", "user_id": 5, "is_staff": False})
        payload = decode_token(token)

        assert payload["sub"] == "maria"
        assert payload["user_id"] == 5
        assert payload["jti"]
        assert "exp" in payload

    def test_token_expirado(self):
        token = create_access_token({"sub": "maria", "user_id": 5}, expires_delta=timedelta(seconds=-1))
        assert decode_token(token) is None

    def test_token_adulterado(self):
        assert decode_token("nao.e.um.jwt") is None

    def test_reset_token_guardado_como_hash(self):
        token = generate_reset_token()
        assert hash_reset_token(token) != token
        assert hash_reset_token(token) == hash_reset_token(token)


class TestExtractToken:

    def _request(self, cookies=None, headers=None):
        class FakeRequest:
            pass
        request = FakeRequest()
        request.cookies = cookies or {}
        request.headers = headers or {}
        return request

    def test_cookie_com_prefixo_bearer(self):
        assert extract_token(self._request(cookies={"access_token": "Bearer abc"})) == "abc"

    def test_cookie_sem_prefixo(self):
        assert extract_token(self._request(cookies={"access_token": "abc"})) == "abc"

    def test_header_authorization(self):
        assert extract_token(self._request(headers={"Authorization": "Bearer xyz"})) == "xyz"

    def test_sem_token(self):
        assert extract_token(self._request()) is None


class TestLogin:

    def test_login_por_usuario(self, client, colaborador):
        response = client.post(
            "/auth/login",
            data={"login": "maria", "password": SENHA_PADRAO_TESTES},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"
        assert "access_token" in response.headers["set-cookie"]
        assert "HttpOnly" in response.headers["set-cookie"]

    def test_login_por_email_registra_ultimo_acesso(self, client, db, colaborador):
        response = client.post(
            "/auth/login",
            data={"login": "MARIA@empresa.com", "password": SENHA_PADRAO_TESTES},
            follow_redirects=False,
        )

        assert response.status_code == 303
        db.expire_all()
        assert db.get(User, colaborador.id).last_login is not None

    def test_senha_errada(self, client, colaborador):
        response = client.post(
            "/auth/login", data={"login": "maria", "password": "errada"}, follow_redirects=False
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/auth/login"
        assert "access_token" not in response.headers.get("set-cookie", "")

    def test_conta_desativada(self, client, db, colaborador):
        colaborador.is_active = False
        db.commit()

        response = client.post(
            "/auth/login",
            data={"login": "maria", "password": SENHA_PADRAO_TESTES},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/auth/login"
        page = client.get("/auth/login")
        assert "desativada" in page.text

    def test_pagina_de_login_redireciona_logado(self, colaborador_client):
        response = colaborador_client.get("/auth/login", follow_redirects=False)
        assert response.headers["location"] == "/dashboard"


class TestAcessoAsPaginas:

    def test_sem_login_vai_para_o_login(self, client):
        response = client.get("/meu-perfil", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/auth/login"

    def test_troca_de_senha_obrigatoria(self, client, db, colaborador):
        colaborador.force_password_change = True
        db.commit()
        autenticar(client, colaborador)

        response = client.get("/meu-perfil", follow_redirects=False)

        assert response.headers["location"] == "/profile/change-password"
        assert client.get("/profile/change-password").status_code == 200

    def test_usuario_desativado_perde_a_sessao(self, colaborador_client, db, colaborador):
        colaborador.is_active = False
        db.commit()

        response = colaborador_client.get("/meu-perfil", follow_redirects=False)

        assert response.headers["location"] == "/auth/login"
        assert 'access_token=""' in response.headers["set-cookie"] or "Max-Age=0" in response.headers["set-cookie"]

    def test_api_de_usuario_desativado(self, colaborador_client, db, colaborador):
        colaborador.is_active = False
        db.commit()
        assert colaborador_client.get("/api/v1/departments").status_code == 401


class TestLogout:

    def test_logout_revoga_token(self, client, colaborador):
        token = autenticar(client, colaborador)

        response = client.get("/auth/logout", follow_redirects=False)

        assert response.headers["location"] == "/auth/login"
        assert is_token_revoked(token)

        client.cookies.set("access_token", token)
        assert client.get("/api/v1/departments").status_code == 401


class TestTrocaDeSenha:

    def test_troca_encerra_obrigatoriedade(self, client, db, colaborador):
        colaborador.force_password_change = True
        db.commit()
        autenticar(client, colaborador)

        response = client.post(
            "/profile/change-password",
            data={"password": "nova-senha-99", "confirm_password": "nova-senha-99"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/meu-perfil"
        db.expire_all()
        user = db.get(User, colaborador.id)
        assert user.force_password_change is False
        assert verify_password("nova-senha-99", user.password_hash)

    def test_admin_volta_ao_dashboard(self, admin_client):
        response = admin_client.post(
            "/profile/change-password",
            data={"password": "nova-senha-99", "confirm_password": "nova-senha-99"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/dashboard"

    def test_senha_fraca(self, colaborador_client):
        response = colaborador_client.post(
            "/profile/change-password", data={"password": "123", "confirm_password": "123"}
        )
        assert response.status_code == 400

    def test_confirmacao_diferente(self, colaborador_client):
        response = colaborador_client.post(
            "/profile/change-password",
            data={"password": "nova-senha-99", "confirm_password": "nova-senha-98"},
        )
        assert response.status_code == 400


class TestRecuperacaoDeSenha:

    def test_resposta_igual_para_email_desconhecido(self, client):
        response = client.post(
            "/auth/esqueci-senha", data={"email": "ninguem@empresa.com"}, follow_redirects=False
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/auth/esqueci-senha"

    def test_gera_token_e_envia_link(self, client, db, colaborador):
        with patch(
            "sistemas.banco_horas.services_notificacao.NotificationService.link_redefinicao_senha"
        ) as enviar:
            client.post("/auth/esqueci-senha", data={"email": "maria@empresa.com"}, follow_redirects=False)

        db.expire_all()
        user = db.get(User, colaborador.id)
        assert user.reset_password_token is not None
        assert user.reset_password_expires is not None

        token = enviar.call_args[0][2]
        assert hash_reset_token(token) == user.reset_password_token

    def _preparar_token(self, db, user, expira_em=timedelta(hours=1)):
        token = generate_reset_token()
        user.reset_password_token = hash_reset_token(token)
        user.reset_password_expires = get_utc_now() + expira_em
        db.commit()
        return token

    def test_redefine_senha(self, client, db, colaborador):
        token = self._preparar_token(db, colaborador)

        assert client.get(f"/auth/resetar-senha/{token}").status_code == 200
        response = client.post(
            f"/auth/resetar-senha/{token}",
            data={"password": "recuperada-77", "confirm_password": "recuperada-77"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/auth/login"
        db.expire_all()
        user = db.get(User, colaborador.id)
        assert verify_password("recuperada-77", user.password_hash)
        assert user.reset_password_token is None

    def test_token_expirado(self, client, db, colaborador):
        token = self._preparar_token(db, colaborador, expira_em=timedelta(minutes=-5))

        response = client.get(f"/auth/resetar-senha/{token}", follow_redirects=False)
        assert response.headers["location"] == "/auth/esqueci-senha"

    def test_token_desconhecido(self, client):
        response = client.post(
            "/auth/resetar-senha/invalido",
            data={"password": "recuperada-77", "confirm_password": "recuperada-77"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/auth/esqueci-senha"


class TestDependenciasDeAcesso:

    def test_gerente_sem_staff_nao_acessa_admin(self, client, db):
        gerente = criar_usuario(db, "gerson", gerente=True)
        autenticar(client, gerente)

        assert client.get("/admin/colaboradores").status_code == 403
        assert client.get("/api/v1/profiles").status_code == 200
