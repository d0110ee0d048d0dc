# tests/test_api_movimentacoes.py
"""
Testes de integração da API de movimentações (/api/v1/movements)
e das aprovações (/admin/movimentacoes/*)
"""

from datetime import date

from sistemas.banco_horas.models import Movimentacao

from tests.conftest import autenticar, lancar

PAYLOAD = {
    "data_movimentacao": "2026-03-10",
    "entrada": True,
    "motivo": "Plantão de fim de semana",
    "hora_total": "04:00",
}


class TestCriarMovimentacao:

    def test_cria_pendente(self, colaborador_client, db, colaborador):
        response = colaborador_client.post("/api/v1/movements", json=PAYLOAD)

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["movement"]["hora_total"] == "04:00"
        assert data["movement"]["status_nome"] == "Pendente"
        assert data["movement"]["colaborador_id"] == colaborador.perfil.id

    def test_envio_repetido_retorna_200(self, colaborador_client, db):
        primeira = colaborador_client.post("/api/v1/movements", json=PAYLOAD)
        segunda = colaborador_client.post("/api/v1/movements", json=PAYLOAD)

        assert segunda.status_code == 200
        assert segunda.json()["duplicate"] is True
        assert segunda.json()["movement"]["id"] == primeira.json()["movement"]["id"]
        assert db.query(Movimentacao).count() == 1

    def test_horarios_inicial_e_final(self, colaborador_client):
        payload = {**PAYLOAD, "hora_total": None, "hora_inicial": "18:00", "hora_final": "20:15"}
        response = colaborador_client.post("/api/v1/movements", json=payload)

        assert response.status_code == 201
        assert response.json()["movement"]["hora_total"] == "02:15"

    def test_sem_autenticacao(self, client):
        response = client.post("/api/v1/movements", json=PAYLOAD)
        assert response.status_code == 401
        assert response.json()["detail"] == "Não autorizado"

    def test_token_no_header_authorization(self, client, colaborador):
        from auth.security import create_access_token

        token = create_access_token({"sub": colaborador.username, "user_id": colaborador.id})
        response = client.post(
            "/api/v1/movements", json=PAYLOAD, headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 201

    def test_horario_malformado(self, colaborador_client):
        response = colaborador_client.post("/api/v1/movements", json={**PAYLOAD, "hora_total": "4h"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["details"]

    def test_duracao_com_sinal_ou_zero(self, colaborador_client, db):
        for hora_total in ("-05:00", "+02:00", "00:00", "01:30:99"):
            response = colaborador_client.post("/api/v1/movements", json={**PAYLOAD, "hora_total": hora_total})
            assert response.status_code == 400, hora_total
        assert db.query(Movimentacao).count() == 0

    def test_duracao_sem_zero_a_esquerda_e_duplicada(self, colaborador_client, db):
        primeira = colaborador_client.post("/api/v1/movements", json={**PAYLOAD, "hora_total": "02:00"})
        segunda = colaborador_client.post("/api/v1/movements", json={**PAYLOAD, "hora_total": "2:00"})

        assert primeira.status_code == 201
        assert segunda.status_code == 200
        assert segunda.json()["duplicate"] is True
        assert db.query(Movimentacao).count() == 1

    def test_sem_duracao(self, colaborador_client):
        payload = {k: v for k, v in PAYLOAD.items() if k != "hora_total"}
        assert colaborador_client.post("/api/v1/movements", json=payload).status_code == 400

    def test_admin_lanca_para_colaborador(self, admin_client, colaborador):
        payload = {**PAYLOAD, "colaborador_id": colaborador.perfil.id}
        response = admin_client.post("/api/v1/movements", json=payload)

        assert response.status_code == 201
        assert response.json()["movement"]["colaborador_nome"] == colaborador.perfil.nome

    def test_colaborador_ignora_colaborador_id(self, colaborador_client, colaborador, outro_colaborador):
        payload = {**PAYLOAD, "colaborador_id": outro_colaborador.perfil.id}
        response = colaborador_client.post("/api/v1/movements", json=payload)

        assert response.json()["movement"]["colaborador_id"] == colaborador.perfil.id


class TestConsultarEAlterar:

    def test_dono_consulta(self, colaborador_client, db, colaborador):
        mov = lancar(db, colaborador)
        response = colaborador_client.get(f"/api/v1/movements/{mov.id}")

        assert response.status_code == 200
        assert response.json()["movement"]["id"] == mov.id

    def test_nao_consulta_de_outro(self, client, db, colaborador, outro_colaborador):
        mov = lancar(db, colaborador)
        autenticar(client, outro_colaborador)

        assert client.get(f"/api/v1/movements/{mov.id}").status_code == 403

    def test_inexistente(self, admin_client):
        response = admin_client.get("/api/v1/movements/999")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_atualizar(self, colaborador_client, db, colaborador):
        mov = lancar(db, colaborador)
        response = colaborador_client.put(f"/api/v1/movements/{mov.id}", json={"motivo": "Ajuste"})

        assert response.status_code == 200
        assert response.json()["movement"]["motivo"] == "Ajuste"

    def test_cancelar(self, colaborador_client, db, colaborador):
        mov = lancar(db, colaborador)
        response = colaborador_client.patch(f"/api/v1/movements/{mov.id}/cancelar")

        assert response.status_code == 200
        assert response.json()["movement"]["status_nome"] == "Cancelado"

    def test_cancelar_de_outro(self, client, db, colaborador, outro_colaborador):
        mov = lancar(db, colaborador)
        autenticar(client, outro_colaborador)

        assert client.patch(f"/api/v1/movements/{mov.id}/cancelar").status_code == 403

    def test_cancelar_aprovada(self, colaborador_client, db, colaborador, admin):
        mov = lancar(db, colaborador, aprovar_com=admin)
        assert colaborador_client.patch(f"/api/v1/movements/{mov.id}/cancelar").status_code == 409


class TestAprovacoes:

    def test_admin_aprova(self, admin_client, db, colaborador):
        mov = lancar(db, colaborador)
        response = admin_client.patch(f"/admin/movimentacoes/{mov.id}/aprovar")

        assert response.status_code == 200
        assert response.json()["movement"]["status_nome"] == "Aprovado"

    def test_decisao_repetida_retorna_409(self, admin_client, db, colaborador):
        mov = lancar(db, colaborador)
        admin_client.patch(f"/admin/movimentacoes/{mov.id}/rejeitar")

        response = admin_client.patch(f"/admin/movimentacoes/{mov.id}/aprovar")
        assert response.status_code == 409

    def test_colaborador_nao_aprova(self, colaborador_client, db, colaborador):
        mov = lancar(db, colaborador)
        assert colaborador_client.patch(f"/admin/movimentacoes/{mov.id}/aprovar").status_code == 403

    def test_aprovar_todas(self, admin_client, db, colaborador, outro_colaborador):
        lancar(db, colaborador, motivo="A")
        lancar(db, outro_colaborador, motivo="B")

        response = admin_client.patch("/admin/movimentacoes/aprovar-todas")

        assert response.status_code == 200
        assert response.json()["approved"] == 2

    def test_pendentes_e_estatisticas(self, admin_client, db, colaborador):
        lancar(db, colaborador)

        pendentes = admin_client.get("/admin/movimentacoes/pendentes/api").json()
        stats = admin_client.get("/admin/api/dashboard-stats").json()

        assert len(pendentes["pendingMovements"]) == 1
        assert stats["stats"]["pendentes"] == 1

    def test_atividade_recente(self, admin_client, db, colaborador):
        lancar(db, colaborador)
        response = admin_client.get("/admin/api/recent-activity")

        assert response.status_code == 200
        assert response.json()["activities"][0]["acao"] == "CRIAÇÃO"


class TestSolicitarFolgaApi:

    def test_folga_parcial(self, colaborador_client, db, colaborador, admin):
        lancar(db, colaborador, "05:00", aprovar_com=admin)
        response = colaborador_client.post("/api/v1/movements/solicitar-folga", json={
            "tipo_folga": "parcial",
            "data_folga": "2026-04-02",
            "motivo": "Cartório",
            "horas_parciais": "02:00",
        })

        assert response.status_code == 201
        assert response.json()["movement"]["entrada"] is False

    def test_folga_parcial_com_sinal(self, colaborador_client, db, colaborador, admin):
        lancar(db, colaborador, "05:00", aprovar_com=admin)
        response = colaborador_client.post("/api/v1/movements/solicitar-folga", json={
            "tipo_folga": "parcial",
            "data_folga": "2026-04-02",
            "horas_parciais": "-02:00",
        })

        assert response.status_code == 400
        assert db.query(Movimentacao).filter(Movimentacao.entrada.is_(False)).count() == 0

    def test_saldo_insuficiente(self, colaborador_client):
        response = colaborador_client.post("/api/v1/movements/solicitar-folga", json={
            "tipo_folga": "integral",
            "data_folga": "2026-04-02",
        })
        assert response.status_code == 400
        assert "saldo" in response.json()["message"].lower()


class TestRelatorioGeral:

    def test_estatisticas_do_periodo(self, admin_client, db, colaborador):
        lancar(db, colaborador, data_mov=date(2026, 3, 10))
        response = admin_client.get("/api/v1/reports/general?data_inicio=2026-03-01&data_fim=2026-03-31")

        assert response.status_code == 200
        report = response.json()["report"]
        assert report["stats"]["total"] == 1
        assert report["periodo"]["data_inicio"] == "2026-03-01"

    def test_sem_periodo(self, admin_client):
        report = admin_client.get("/api/v1/reports/general").json()["report"]
        assert report["periodo"] == {"data_inicio": "N/A", "data_fim": "N/A"}

    def test_periodo_invertido(self, admin_client):
        response = admin_client.get("/api/v1/reports/general?data_inicio=2026-04-01&data_fim=2026-03-01")
        assert response.status_code == 400

    def test_exige_admin(self, colaborador_client):
        assert colaborador_client.get("/api/v1/reports/general").status_code == 403
