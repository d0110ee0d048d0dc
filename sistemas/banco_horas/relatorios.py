# sistemas/banco_horas/relatorios.py
"""
Relatórios de movimentações: leitura dos filtros da query string e
resumo das horas aprovadas.
"""

from typing import Mapping, Optional, List

from sqlalchemy.orm import Session

from utils.validators import parse_iso_date

from .exceptions import DadosInvalidosError
from .horas import formatar_saldo
from .models import Movimentacao
from .services import listar_movimentacoes, resumo_movimentacoes

FILTROS_INTEIROS = ("colaborador_id", "status_id", "exclude_status_id", "limit")
FILTROS_DATA = {
    "data_inicio": "Data de início inválida",
    "data_fim": "Data de fim inválida",
}
VALORES_VERDADEIROS = ("true", "1", "entrada", "credito", "crédito")
VALORES_FALSOS = ("false", "0", "saida", "saída", "debito", "débito")


def filtros_da_query(params: Mapping[str, str]) -> dict:
    """
    Converte os parâmetros do formulário de filtros.

    Campos vazios são ignorados; valores malformados levantam
    DadosInvalidosError (400).
    """
    filtros = {}

    for campo in FILTROS_INTEIROS:
        valor = (params.get(campo) or "").strip()
        if not valor:
            continue
        try:
            numero = int(valor)
        except ValueError:
            raise DadosInvalidosError(f"Valor inválido para {campo}.")
        # ids e limit começam em 1
        if numero <= 0:
            raise DadosInvalidosError(f"Valor inválido para {campo}.")
        filtros[campo] = numero

    for campo, mensagem in FILTROS_DATA.items():
        valor = (params.get(campo) or "").strip()
        if not valor:
            continue
        data = parse_iso_date(valor)
        if data is None:
            raise DadosInvalidosError(mensagem)
        filtros[campo] = data

    entrada = (params.get("entrada") or "").strip().lower()
    if entrada in VALORES_VERDADEIROS:
        filtros["entrada"] = True
    elif entrada in VALORES_FALSOS:
        filtros["entrada"] = False
    elif entrada:
        raise DadosInvalidosError("Valor inválido para entrada.")

    return filtros


def resumo_relatorio(movimentacoes: List[Movimentacao]) -> dict:
    """Totais exibidos no rodapé do relatório (somente horas aprovadas)."""
    saldo = resumo_movimentacoes(movimentacoes)
    return {
        "totalHorasPositivas": saldo.positivo,
        "totalHorasNegativas": saldo.negativo,
        "saldoTotalHoras": formatar_saldo(saldo.total_minutos),
    }


def gerar_relatorio(db: Session, filtros: dict, colaborador_id: Optional[int] = None) -> dict:
    """
    Movimentações filtradas + resumo.

    colaborador_id, quando informado, substitui o do filtro (relatório do
    próprio colaborador).
    """
    if colaborador_id is not None:
        filtros = {**filtros, "colaborador_id": colaborador_id}
    movimentacoes = listar_movimentacoes(db, **filtros)
    return {
        "movimentacoes": movimentacoes,
        "summary": resumo_relatorio(movimentacoes),
    }
