# sistemas/banco_horas/schemas.py
"""
Schemas Pydantic para o Banco de Horas
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .horas import horario_para_minutos, normalizar_duracao


def _validar_hhmm(valor: Optional[str]) -> Optional[str]:
    """Horário do relógio (00:00 a 23:59)."""
    if valor in (None, ""):
        return None
    if horario_para_minutos(valor) is None:
        raise ValueError("Horário inválido, use o formato HH:MM")
    return valor.strip()


def _validar_duracao(valor: Optional[str]) -> Optional[str]:
    """Duração sem sinal e maior que zero, devolvida como HH:MM."""
    if valor in (None, ""):
        return None
    duracao = normalizar_duracao(valor)
    if duracao is None:
        raise ValueError("Quantidade de horas inválida, use HH:MM maior que zero e sem sinal")
    return duracao


# =====================================================
# MOVIMENTAÇÕES
# =====================================================

class MovimentacaoCreate(BaseModel):
    """Lançamento de horas (modal "Lançar Horas")"""
    data_movimentacao: date = Field(..., description="Data da movimentação (ISO 8601)")
    entrada: bool = Field(..., description="True = crédito, False = débito")
    motivo: str = Field(..., min_length=1)
    hora_total: Optional[str] = None
    hora_inicial: Optional[str] = None
    hora_final: Optional[str] = None
    forma_pagamento_id: Optional[int] = None
    colaborador_id: Optional[int] = Field(None, description="Somente administradores")

    @field_validator("hora_inicial", "hora_final")
    @classmethod
    def validar_horarios(cls, v):
        return _validar_hhmm(v)

    @field_validator("hora_total")
    @classmethod
    def validar_duracao(cls, v):
        return _validar_duracao(v)

    @model_validator(mode="after")
    def exige_duracao(self):
        if not self.hora_total and not (self.hora_inicial and self.hora_final):
            raise ValueError("Informe hora_total ou hora_inicial e hora_final")
        return self


class MovimentacaoUpdate(BaseModel):
    data_movimentacao: Optional[date] = None
    hora_inicial: Optional[str] = None
    hora_final: Optional[str] = None
    hora_total: Optional[str] = None
    motivo: Optional[str] = None
    entrada: Optional[bool] = None
    forma_pagamento_id: Optional[int] = None
    status_id: Optional[int] = None

    @field_validator("hora_inicial", "hora_final")
    @classmethod
    def validar_horarios(cls, v):
        return _validar_hhmm(v)

    @field_validator("hora_total")
    @classmethod
    def validar_duracao(cls, v):
        return _validar_duracao(v)


class SolicitacaoFolga(BaseModel):
    """Pedido de folga do colaborador"""
    tipo_folga: str
    data_folga: date
    motivo: str = ""
    horas_parciais: Optional[str] = None

    @field_validator("horas_parciais")
    @classmethod
    def validar_horas_parciais(cls, v):
        return _validar_duracao(v)


# =====================================================
# SETORES E PERFIS
# =====================================================

class SetorRequest(BaseModel):
    nome: str = Field(..., min_length=1, max_length=100)
    descricao: Optional[str] = None

    @field_validator("nome")
    @classmethod
    def nome_nao_vazio(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("O nome do setor é obrigatório")
        return v.strip()


class PerfilRoleRequest(BaseModel):
    # Sem coerção: "sim" ou 1 não são aceitos
    gerente: Any = None


# =====================================================
# ESCALA
# =====================================================

class EscalaRequest(BaseModel):
    perfil_id: int
    data: date
    tipo_escala: str = Field(..., min_length=1, max_length=50)
    hora_inicio: Optional[str] = None
    hora_fim: Optional[str] = None
    observacoes: Optional[str] = None

    @field_validator("hora_inicio", "hora_fim")
    @classmethod
    def validar_horarios(cls, v):
        return _validar_hhmm(v)


class EscalaRemoverRequest(BaseModel):
    perfil_id: int
    data: date


class FeriasRequest(BaseModel):
    perfil_id: int
    data_inicio: date
    data_fim: date



# =====================================================
# ADMINISTRAÇÃO
# =====================================================

class StatusColaboradorRequest(BaseModel):
    """Ativar/desativar colaborador (switch da listagem)"""
    isActive: bool
