# sistemas/banco_horas/models.py
"""
Modelos de dados do Banco de Horas

- Setor: agrupamento de colaboradores
- Perfil: ficha do colaborador (1:1 com User)
- StatusMovimentacao: estado do fluxo de aprovação
- FormaPagamento: como o tempo é compensado
- Movimentacao: crédito/débito de horas
- MovimentacaoLog: histórico de ações sobre uma movimentação
- Escala: plantão/férias/sobreaviso por dia
"""

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Date, DateTime,
    ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from database.connection import Base
from utils.timezone import get_utc_now


class Setor(Base):
    __tablename__ = "setores"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(100), unique=True, nullable=False)
    descricao = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    perfis = relationship("Perfil", back_populates="setor")

    def __repr__(self):
        return f"<Setor(id={self.id}, nome='{self.nome}')>"


class Perfil(Base):
    """
    Ficha do colaborador.

    ch_primeira/ch_segunda guardam o expediente (entrada e saída, HH:MM),
    usado para calcular a carga horária de uma folga integral.
    """
    __tablename__ = "perfis"

    id = Column(Integer, primary_key=True, index=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id"), unique=True, nullable=True)
    setor_id = Column(Integer, ForeignKey("setores.id"), nullable=True, index=True)

    nome = Column(String(200), nullable=False, index=True)
    gerente = Column(Boolean, default=False, nullable=False)
    funcao = Column(String(100), nullable=True)

    # Expediente
    ch_primeira = Column(String(5), nullable=True)
    ch_segunda = Column(String(5), nullable=True)

    # Dados pessoais
    foto_url = Column(String(255), nullable=True)
    data_nascimento = Column(Date, nullable=True)
    sexo = Column(String(20), nullable=True)
    cpf = Column(String(14), nullable=True)
    telefone = Column(String(20), nullable=True)
    linkedin = Column(String(255), nullable=True)

    # Endereço
    cep = Column(String(9), nullable=True)
    logradouro = Column(String(255), nullable=True)
    numero = Column(String(20), nullable=True)
    bairro = Column(String(100), nullable=True)
    cidade = Column(String(100), nullable=True)
    estado = Column(String(2), nullable=True)

    # Posição do colaborador na grade da escala
    ordem_escala = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    usuario = relationship("User", back_populates="perfil")
    setor = relationship("Setor", back_populates="perfis")
    movimentacoes = relationship("Movimentacao", back_populates="colaborador")
    escalas = relationship("Escala", back_populates="perfil", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Perfil(id={self.id}, nome='{self.nome}')>"


class StatusMovimentacao(Base):
    """
    Estado do fluxo de aprovação.

    analise=True   -> aguardando decisão (Pendente)
    autorizado=True -> entra no saldo (Aprovado)
    ambos False    -> Rejeitado/Cancelado
    """
    __tablename__ = "status_movimentacao"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(50), unique=True, nullable=False)
    analise = Column(Boolean, default=False, nullable=False)
    autorizado = Column(Boolean, default=False, nullable=False)
    cor = Column(String(20), nullable=True)

    def __repr__(self):
        return f"<StatusMovimentacao(id={self.id}, nome='{self.nome}')>"


class FormaPagamento(Base):
    __tablename__ = "formas_pagamento"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(100), unique=True, nullable=False)
    descricao = Column(Text, nullable=True)


class Movimentacao(Base):
    """
    Lançamento de horas.

    entrada=True é crédito, entrada=False é débito. hora_total é a duração
    no formato HH:MM.
    """
    __tablename__ = "movimentacoes"

    id = Column(Integer, primary_key=True, index=True)
    colaborador_id = Column(Integer, ForeignKey("perfis.id"), nullable=False, index=True)
    data_movimentacao = Column(Date, nullable=False, index=True)
    hora_inicial = Column(String(5), nullable=True)
    hora_final = Column(String(5), nullable=True)
    hora_total = Column(String(8), nullable=False)
    motivo = Column(Text, nullable=False)
    entrada = Column(Boolean, nullable=False)
    status_id = Column(Integer, ForeignKey("status_movimentacao.id"), nullable=False, index=True)
    forma_pagamento_id = Column(Integer, ForeignKey("formas_pagamento.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    colaborador = relationship("Perfil", back_populates="movimentacoes")
    status = relationship("StatusMovimentacao")
    forma_pagamento = relationship("FormaPagamento")
    logs = relationship(
        "MovimentacaoLog",
        back_populates="movimentacao",
        cascade="all, delete-orphan",
        order_by="MovimentacaoLog.created_at"
    )

    __table_args__ = (
        Index("ix_movimentacoes_duplicidade", "colaborador_id", "data_movimentacao", "created_at"),
    )

    def to_dict(self) -> dict:
        """Representação usada pela API e pelas páginas (com nomes resolvidos)."""
        perfil = self.colaborador
        return {
            "id": self.id,
            "colaborador_id": self.colaborador_id,
            "colaborador_nome": perfil.nome if perfil else None,
            "foto_url": perfil.foto_url if perfil else None,
            "setor_nome": perfil.setor.nome if perfil and perfil.setor else None,
            "data_movimentacao": self.data_movimentacao.isoformat() if self.data_movimentacao else None,
            "hora_inicial": self.hora_inicial,
            "hora_final": self.hora_final,
            "hora_total": self.hora_total,
            "motivo": self.motivo,
            "entrada": self.entrada,
            "status_id": self.status_id,
            "status_nome": self.status.nome if self.status else None,
            "analise": self.status.analise if self.status else None,
            "autorizado": self.status.autorizado if self.status else None,
            "cor": self.status.cor if self.status else None,
            "forma_pagamento_id": self.forma_pagamento_id,
            "forma_pagamento_nome": self.forma_pagamento.nome if self.forma_pagamento else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        tipo = "crédito" if self.entrada else "débito"
        return f"<Movimentacao(id={self.id}, {tipo} {self.hora_total}, colaborador={self.colaborador_id})>"


class MovimentacaoLog(Base):
    __tablename__ = "movimentacoes_logs"

    id = Column(Integer, primary_key=True, index=True)
    movimentacao_id = Column(Integer, ForeignKey("movimentacoes.id", ondelete="CASCADE"), nullable=False, index=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id"), nullable=True)
    acao = Column(String(50), nullable=False)
    detalhes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now, index=True)

    movimentacao = relationship("Movimentacao", back_populates="logs")
    usuario = relationship("User")


class Escala(Base):
    """Uma atribuição por colaborador por dia."""
    __tablename__ = "escalas"

    id = Column(Integer, primary_key=True, index=True)
    perfil_id = Column(Integer, ForeignKey("perfis.id", ondelete="CASCADE"), nullable=False, index=True)
    data = Column(Date, nullable=False, index=True)
    tipo_escala = Column(String(50), nullable=False)
    hora_inicio = Column(String(5), nullable=True)
    hora_fim = Column(String(5), nullable=True)
    observacoes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    perfil = relationship("Perfil", back_populates="escalas")

    __table_args__ = (
        UniqueConstraint("perfil_id", "data", name="uq_escalas_perfil_data"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "perfil_id": self.perfil_id,
            "data": self.data.isoformat() if self.data else None,
            "tipo_escala": self.tipo_escala,
            "hora_inicio": self.hora_inicio,
            "hora_fim": self.hora_fim,
            "observacoes": self.observacoes,
        }
