# sistemas/banco_horas/services_escala.py
"""
Escala mensal: plantões, férias e sobreaviso por colaborador e dia.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Optional, List

from sqlalchemy.orm import Session

from .exceptions import DadosInvalidosError, RegistroNaoEncontradoError
from .models import Escala, Perfil

logger = logging.getLogger(__name__)

TIPO_FERIAS = "Férias"
OBSERVACAO_FERIAS = "Período de Férias"
MAX_DIAS_FERIAS = 366


def _limites_mes(ano: int, mes: int):
    if not 1 <= mes <= 12:
        raise DadosInvalidosError("Mês inválido.")
    ultimo_dia = calendar.monthrange(ano, mes)[1]
    return date(ano, mes, 1), date(ano, mes, ultimo_dia)


def listar_escala_mes(db: Session, ano: int, mes: int) -> List[Escala]:
    inicio, fim = _limites_mes(ano, mes)
    return (
        db.query(Escala)
        .filter(Escala.data >= inicio, Escala.data <= fim)
        .order_by(Escala.data, Escala.perfil_id)
        .all()
    )


def aniversariantes_mes(db: Session, mes: int) -> List[dict]:
    """Colaboradores que fazem aniversário no mês: [{perfil_id, dia}]."""
    perfis = db.query(Perfil).filter(Perfil.data_nascimento.isnot(None)).all()
    return [
        {"perfil_id": p.id, "dia": p.data_nascimento.day}
        for p in perfis
        if p.data_nascimento.month == mes
    ]


def dados_escala_mes(db: Session, ano: int, mes: int) -> dict:
    escalas = listar_escala_mes(db, ano, mes)
    return {
        "escalas": [e.to_dict() for e in escalas],
        "aniversariantes": aniversariantes_mes(db, mes),
    }


def salvar_escala(
    db: Session,
    perfil_id: int,
    data: date,
    tipo_escala: str,
    hora_inicio: Optional[str] = None,
    hora_fim: Optional[str] = None,
    observacoes: Optional[str] = None,
    commit: bool = True,
) -> Escala:
    """Cria ou substitui a escala do colaborador no dia."""
    if not (tipo_escala or "").strip():
        raise DadosInvalidosError("O tipo de escala é obrigatório.")
    if db.query(Perfil.id).filter(Perfil.id == perfil_id).first() is None:
        raise RegistroNaoEncontradoError("Colaborador não encontrado.")

    escala = db.query(Escala).filter(Escala.perfil_id == perfil_id, Escala.data == data).first()
    if escala is None:
        escala = Escala(perfil_id=perfil_id, data=data)
        db.add(escala)

    escala.tipo_escala = tipo_escala.strip()
    escala.hora_inicio = hora_inicio or None
    escala.hora_fim = hora_fim or None
    escala.observacoes = observacoes or None

    if commit:
        db.commit()
        db.refresh(escala)
    return escala


def obter_escala_dia(db: Session, perfil_id: int, data: date) -> Optional[Escala]:
    return db.query(Escala).filter(Escala.perfil_id == perfil_id, Escala.data == data).first()


def remover_escala(db: Session, perfil_id: int, data: date) -> None:
    escala = obter_escala_dia(db, perfil_id, data)
    if escala is None:
        raise RegistroNaoEncontradoError("Escala não encontrada para remover.")
    db.delete(escala)
    db.commit()


def lancar_ferias(db: Session, perfil_id: int, data_inicio: date, data_fim: date) -> int:
    """
    Marca Férias em todos os dias do intervalo (inclusivo).

    Returns:
        Quantidade de dias lançados
    """
    if data_inicio > data_fim:
        raise DadosInvalidosError("A data de início não pode ser posterior à data de fim.")
    total = (data_fim - data_inicio).days + 1
    if total > MAX_DIAS_FERIAS:
        raise DadosInvalidosError(f"O período de férias não pode passar de {MAX_DIAS_FERIAS} dias.")

    for deslocamento in range(total):
        salvar_escala(
            db, perfil_id, data_inicio + timedelta(days=deslocamento), TIPO_FERIAS,
            observacoes=OBSERVACAO_FERIAS, commit=False
        )
        db.flush()

    db.commit()
    logger.info(f"Férias lançadas para perfil {perfil_id}: {data_inicio} a {data_fim} ({total} dias)")
    return total
