# tests/test_validators.py
"""
Testes dos validadores (utils/validators.py) e da política de senhas
(utils/password_policy.py)
"""

from datetime import date, datetime

import pytest

from utils.password_policy import (
    MIN_PASSWORD_LENGTH,
    check_password_strength,
    get_password_requirements,
)
from utils.validators import (
    format_cpf,
    normalize_email,
    only_digits,
    parse_iso_date,
    validate_cep,
    validate_cpf,
    validate_email,
    validate_telefone,
)


class TestEmail:

    @pytest.mark.parametrize("email", ["maria@empresa.com", "a.b+c@sub.empresa.com.br"])
    def test_validos(self, email):
        assert validate_email(email)

    @pytest.mark.parametrize("email", ["", None, "maria", "maria@", "@empresa.com", "maria@empresa"])
    def test_invalidos(self, email):
        assert not validate_email(email)

    def test_normalize(self):
        assert normalize_email("  Maria@Empresa.COM ") == "maria@empresa.com"
        assert normalize_email(None) == ""


class TestDadosCadastrais:

    def test_cpf(self):
        assert validate_cpf("529.982.247-25")
        assert validate_cpf("52998224725")
        assert not validate_cpf("529.982.247-26")
        assert not validate_cpf("111.111.111-11")
        assert not validate_cpf("123")

    def test_format_cpf(self):
        assert format_cpf("52998224725") == "529.982.247-25"
        assert format_cpf("123") == "123"

    def test_telefone(self):
        assert validate_telefone("(67) 99999-1234")
        assert validate_telefone("+55 67 3321-0000")
        assert not validate_telefone("99999-1234")
        assert not validate_telefone("(01) 99999-1234")

    def test_cep(self):
        assert validate_cep("79002-000")
        assert not validate_cep("7900")

    def test_only_digits(self):
        assert only_digits("(67) 9.9") == "6799"
        assert only_digits(None) == ""


class TestDatas:

    def test_parse_iso_date(self):
        assert parse_iso_date("2026-10-19") == date(2026, 10, 19)
        assert parse_iso_date(datetime(2026, 10, 19, 8, 30)) == date(2026, 10, 19)
        assert parse_iso_date(date(2026, 1, 1)) == date(2026, 1, 1)

    @pytest.mark.parametrize("valor", [None, "", "19/10/2026", "2026-13-01"])
    def test_parse_iso_date_invalida(self, valor):
        assert parse_iso_date(valor) is None


class TestPoliticaDeSenhas:

    def test_senha_valida(self):
        assert check_password_strength("cafe-com-leite", "cafe-com-leite") == (True, [])

    def test_curta(self):
        valida, erros = check_password_strength("abc")
        assert not valida
        assert str(MIN_PASSWORD_LENGTH) in erros[0]

    @pytest.mark.parametrize("senha", ["123456", "Mudar123", "admin123"])
    def test_senhas_comuns(self, senha):
        valida, erros = check_password_strength(senha)
        assert not valida
        assert any("comum" in e for e in erros)

    def test_confirmacao(self):
        valida, erros = check_password_strength("cafe-com-leite", "cafe-com-pao")
        assert not valida
        assert erros == ["As senhas não coincidem."]

    def test_sem_confirmacao_nao_compara(self):
        assert check_password_strength("cafe-com-leite")[0]

    def test_requisitos(self):
        requisitos = get_password_requirements()
        assert requisitos["min_length"] == MIN_PASSWORD_LENGTH
        assert "comum" in requisitos["description"]
