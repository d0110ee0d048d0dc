# tests/test_horas.py
"""
Testes da aritmética de horas (sistemas/banco_horas/horas.py)

Uso:
    pytest tests/test_horas.py -v
"""

import unittest

import pytest

from sistemas.banco_horas.horas import (
    hhmm_para_minutos,
    formatar_minutos,
    formatar_positivo,
    formatar_negativo,
    formatar_saldo,
    calcular_hora_total,
    carga_horaria_diaria,
    somar_movimentacoes,
    duracao_para_minutos,
    normalizar_duracao,
    horario_para_minutos,
)


class TestHHMMParaMinutos(unittest.TestCase):

    def test_valores_validos(self):
        self.assertEqual(hhmm_para_minutos("02:30"), 150)
        self.assertEqual(hhmm_para_minutos("00:00"), 0)
        self.assertEqual(hhmm_para_minutos("40:15"), 2415)

    def test_sinal(self):
        self.assertEqual(hhmm_para_minutos("-01:30"), -90)
        self.assertEqual(hhmm_para_minutos("+01:30"), 90)

    def test_invalidos_retornam_none(self):
        for valor in (None, "", "  ", "abc", "10", "10:60", "aa:10", "-xx:00", "01:30:99"):
            with self.subTest(valor=valor):
                self.assertIsNone(hhmm_para_minutos(valor))


class TestFormatacao:

    def test_formatar_minutos(self):
        assert formatar_minutos(150) == "02:30"
        assert formatar_minutos(-90) == "-01:30"
        assert formatar_minutos(None) == "00:00"

    def test_formatar_positivo(self):
        assert formatar_positivo(125) == "+02:05"
        assert formatar_positivo(0) == "+00:00"
        assert formatar_positivo(-30) == "+00:00"

    def test_formatar_negativo(self):
        assert formatar_negativo(90) == "-01:30"
        assert formatar_negativo(None) == "-00:00"

    def test_formatar_saldo(self):
        assert formatar_saldo(120) == "+02:00"
        assert formatar_saldo(-45) == "-00:45"
        assert formatar_saldo(0) == "+00:00"


class TestCalcularHoraTotal:

    def test_mesmo_dia(self):
        assert calcular_hora_total("08:00", "12:30") == "04:30"

    def test_atravessa_meia_noite(self):
        assert calcular_hora_total("22:00", "02:00") == "04:00"

    def test_inicio_igual_fim_conta_24h(self):
        assert calcular_hora_total("08:00", "08:00") == "24:00"

    @pytest.mark.parametrize("inicio,fim", [(None, "10:00"), ("08:00", ""), ("x", "10:00")])
    def test_incompleto_retorna_none(self, inicio, fim):
        assert calcular_hora_total(inicio, fim) is None


class TestCargaHoraria:

    def test_sem_expediente_usa_8h(self):
        assert carga_horaria_diaria(None, None) == 480

    def test_jornada_longa_desconta_almoco(self):
        # 08:00-17:00 = 9h, menos 1h de almoço
        assert carga_horaria_diaria("08:00", "17:00") == 480

    def test_jornada_curta_sem_almoco(self):
        assert carga_horaria_diaria("08:00", "12:00") == 240

    def test_jornada_noturna(self):
        # 22:00-06:00 = 8h, menos almoço
        assert carga_horaria_diaria("22:00", "06:00") == 420


class TestSomarMovimentacoes:

    def test_separa_creditos_e_debitos(self):
        creditos, debitos = somar_movimentacoes([
            ("02:00", True),
            ("01:30", True),
            ("00:45", False),
        ])
        assert creditos == 210
        assert debitos == 45

    def test_ignora_duracoes_invalidas(self):
        creditos, debitos = somar_movimentacoes([("xx", True), (None, False), ("01:00", True)])
        assert (creditos, debitos) == (60, 0)


class TestDuracao:

    def test_duracao_valida(self):
        assert duracao_para_minutos("02:30") == 150
        assert duracao_para_minutos(" 2:05 ") == 125
        assert duracao_para_minutos("40:00") == 2400

    @pytest.mark.parametrize("valor", ["-05:00", "+02:00", "00:00", "01:30:99", "1:2:3", "", None, "0a:10"])
    def test_duracao_invalida(self, valor):
        assert duracao_para_minutos(valor) is None
        assert normalizar_duracao(valor) is None

    def test_normalizar(self):
        assert normalizar_duracao("2:00") == "02:00"
        assert normalizar_duracao("02:00") == "02:00"

    def test_horario_do_relogio(self):
        assert horario_para_minutos("23:59") == 1439
        assert horario_para_minutos("00:00") == 0
        assert horario_para_minutos("24:00") is None
        assert horario_para_minutos("-08:00") is None

    def test_soma_ignora_duracao_com_sinal(self):
        creditos, debitos = somar_movimentacoes([("-05:00", True), ("01:00", True), ("+00:30", False)])
        assert (creditos, debitos) == (60, 0)
