# sistemas/banco_horas/services.py
"""
Regras de negócio das movimentações do banco de horas.

- Criação com proteção contra envio duplicado (janela de 5 minutos)
- Cálculo de saldo (apenas movimentações com status autorizado)
- Fluxo de aprovação: aprovar, rejeitar, aprovar todas, cancelar
- Solicitação de folga (integral ou parcial)
- Estatísticas para o dashboard

Todas as funções recebem a sessão do banco; commits acontecem aqui.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, List, Iterable

from sqlalchemy import func, case
from sqlalchemy.orm import Session, joinedload

from auth.models import User
from config import JANELA_DUPLICIDADE_MINUTOS
from utils.logging_config import get_logger
from utils.timezone import get_utc_now

from .exceptions import (
    RegistroNaoEncontradoError,
    DadosInvalidosError,
    SaldoInsuficienteError,
    TransicaoInvalidaError,
    PermissaoNegadaError,
    StatusNaoConfiguradoError,
)
from .horas import (
    duracao_para_minutos,
    normalizar_duracao,
    formatar_minutos,
    formatar_positivo,
    formatar_negativo,
    calcular_hora_total,
    carga_horaria_diaria,
    somar_movimentacoes,
)
from .models import Movimentacao, MovimentacaoLog, StatusMovimentacao, FormaPagamento, Perfil, Setor

logger = get_logger(__name__)

# ============================================
# STATUS
# ============================================

STATUS_PENDENTE = "Pendente"
STATUS_APROVADO = "Aprovado"
STATUS_REJEITADO = "Rejeitado"
STATUS_CANCELADO = "Cancelado"

# Ações gravadas em movimentacoes_logs
ACAO_CRIACAO = "CRIAÇÃO"
ACAO_APROVADO = "APROVADO"
ACAO_REJEITADO = "REJEITADO"
ACAO_CANCELADO = "CANCELADO"
ACAO_ATUALIZACAO = "ATUALIZAÇÃO"

TIPO_FOLGA_INTEGRAL = "integral"
TIPO_FOLGA_PARCIAL = "parcial"
PREFIXO_MOTIVO_FOLGA = "Solicitação de Folga: "


def obter_status(db: Session, nome: str) -> StatusMovimentacao:
    """Status pelo nome; ausência indica banco sem seed."""
    status = db.query(StatusMovimentacao).filter(StatusMovimentacao.nome == nome).first()
    if status is None:
        raise StatusNaoConfiguradoError(f'Status "{nome}" não configurado no sistema.')
    return status


def listar_status(db: Session) -> List[StatusMovimentacao]:
    return db.query(StatusMovimentacao).order_by(StatusMovimentacao.id).all()


def contar_pendentes(db: Session) -> int:
    return (
        db.query(func.count(Movimentacao.id))
        .select_from(Movimentacao)
        .join(StatusMovimentacao, Movimentacao.status_id == StatusMovimentacao.id)
        .filter(StatusMovimentacao.analise.is_(True))
        .scalar()
    ) or 0


# ============================================
# CONSULTAS
# ============================================

def _query_movimentacoes(db: Session):
    return db.query(Movimentacao).options(
        joinedload(Movimentacao.colaborador).joinedload(Perfil.setor),
        joinedload(Movimentacao.status),
        joinedload(Movimentacao.forma_pagamento),
    )


def obter_movimentacao(db: Session, movimentacao_id: int) -> Movimentacao:
    mov = _query_movimentacoes(db).filter(Movimentacao.id == movimentacao_id).first()
    if mov is None:
        raise RegistroNaoEncontradoError("Movimentação não encontrada.")
    return mov


def listar_movimentacoes(
    db: Session,
    colaborador_id: Optional[int] = None,
    status_id: Optional[int] = None,
    exclude_status_id: Optional[int] = None,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None,
    entrada: Optional[bool] = None,
    limit: Optional[int] = None,
) -> List[Movimentacao]:
    """
    Lista movimentações com filtros opcionais.

    exclude_status_id só vale quando status_id não é informado
    (usado para esconder as canceladas da listagem padrão).
    Ordenação: data da movimentação e criação, mais recentes primeiro.
    """
    query = _query_movimentacoes(db)

    if colaborador_id:
        query = query.filter(Movimentacao.colaborador_id == colaborador_id)

    if status_id:
        query = query.filter(Movimentacao.status_id == status_id)
    elif exclude_status_id:
        query = query.filter(Movimentacao.status_id != exclude_status_id)

    if data_inicio:
        query = query.filter(Movimentacao.data_movimentacao >= data_inicio)
    if data_fim:
        query = query.filter(Movimentacao.data_movimentacao <= data_fim)
    if entrada is not None:
        query = query.filter(Movimentacao.entrada.is_(entrada))

    query = query.order_by(Movimentacao.data_movimentacao.desc(), Movimentacao.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def listar_pendentes(db: Session) -> List[Movimentacao]:
    return (
        _query_movimentacoes(db)
        .join(StatusMovimentacao, Movimentacao.status_id == StatusMovimentacao.id)
        .filter(StatusMovimentacao.analise.is_(True))
        .order_by(Movimentacao.data_movimentacao.desc(), Movimentacao.created_at.desc())
        .all()
    )


# ============================================
# SALDO
# ============================================

@dataclass
class SaldoHoras:
    """Saldo do banco de horas em minutos, com as formatações usadas nas telas."""
    creditos_minutos: int = 0
    debitos_minutos: int = 0

    @property
    def total_minutos(self) -> int:
        return self.creditos_minutos - self.debitos_minutos

    @property
    def formatado(self) -> str:
        return formatar_minutos(self.total_minutos)

    @property
    def positivo(self) -> str:
        return formatar_positivo(self.creditos_minutos)

    @property
    def negativo(self) -> str:
        return formatar_negativo(self.debitos_minutos)

    def __add__(self, other: "SaldoHoras") -> "SaldoHoras":
        return SaldoHoras(
            self.creditos_minutos + other.creditos_minutos,
            self.debitos_minutos + other.debitos_minutos,
        )

    def to_dict(self) -> dict:
        return {
            "total_minutes": self.total_minutos,
            "formatted": self.formatado,
            "positive": self.positivo,
            "negative": self.negativo,
        }


def calcular_saldo(db: Session, perfil_id: int) -> SaldoHoras:
    """Saldo = créditos autorizados - débitos autorizados."""
    linhas = (
        db.query(Movimentacao.hora_total, Movimentacao.entrada)
        .join(StatusMovimentacao, Movimentacao.status_id == StatusMovimentacao.id)
        .filter(
            Movimentacao.colaborador_id == perfil_id,
            StatusMovimentacao.autorizado.is_(True),
        )
        .all()
    )
    creditos, debitos = somar_movimentacoes(linhas)
    return SaldoHoras(creditos, debitos)


def resumo_movimentacoes(movimentacoes: Iterable[Movimentacao]) -> SaldoHoras:
    """Totais de uma lista já filtrada, considerando só as autorizadas."""
    creditos, debitos = somar_movimentacoes(
        (m.hora_total, m.entrada)
        for m in movimentacoes
        if m.status is not None and m.status.autorizado
    )
    return SaldoHoras(creditos, debitos)


def carga_horaria_perfil(perfil: Perfil) -> int:
    return carga_horaria_diaria(perfil.ch_primeira, perfil.ch_segunda)


# ============================================
# LOG DE MOVIMENTAÇÕES
# ============================================

def registrar_log(
    db: Session,
    movimentacao_id: int,
    usuario_id: Optional[int],
    acao: str,
    detalhes: Optional[str] = None
) -> MovimentacaoLog:
    """Adiciona um registro ao histórico (o commit fica com quem chamou)."""
    log = MovimentacaoLog(
        movimentacao_id=movimentacao_id,
        usuario_id=usuario_id,
        acao=acao,
        detalhes=detalhes,
    )
    db.add(log)
    return log


def atividade_recente(db: Session, limit: int = 10) -> List[dict]:
    """Últimas ações registradas, com autor, foto e setor."""
    logs = (
        db.query(MovimentacaoLog)
        .options(joinedload(MovimentacaoLog.usuario).joinedload(User.perfil).joinedload(Perfil.setor))
        .order_by(MovimentacaoLog.created_at.desc(), MovimentacaoLog.id.desc())
        .limit(limit)
        .all()
    )
    atividades = []
    for log in logs:
        usuario = log.usuario
        perfil = usuario.perfil if usuario else None
        atividades.append({
            "id": log.id,
            "movimentacao_id": log.movimentacao_id,
            "acao": log.acao,
            "description": log.detalhes,
            "createdAt": log.created_at.isoformat() if log.created_at else None,
            "user_name": perfil.nome if perfil else (usuario.full_name if usuario else None),
            "foto_url": perfil.foto_url if perfil else None,
            "department_name": perfil.setor.nome if perfil and perfil.setor else None,
        })
    return atividades


# ============================================
# CRIAÇÃO
# ============================================

@dataclass
class ResultadoCriacao:
    movimentacao: Movimentacao
    criada: bool


def criar_movimentacao(
    db: Session,
    colaborador_id: int,
    data_movimentacao: date,
    motivo: str,
    entrada: bool,
    hora_total: Optional[str] = None,
    hora_inicial: Optional[str] = None,
    hora_final: Optional[str] = None,
    forma_pagamento_id: Optional[int] = None,
    usuario_id: Optional[int] = None,
) -> ResultadoCriacao:
    """
    Cria uma movimentação pendente numa única transação.

    Se já existe uma movimentação idêntica (colaborador, data, duração,
    motivo e direção) criada nos últimos JANELA_DUPLICIDADE_MINUTOS, nada é
    gravado e a existente é devolvida com criada=False.
    """
    if not hora_total:
        hora_total = calcular_hora_total(hora_inicial, hora_final)
    # Forma canônica: "2:00" e "02:00" precisam cair na mesma checagem de duplicidade
    hora_total = normalizar_duracao(hora_total)
    if hora_total is None:
        raise DadosInvalidosError("Informe a quantidade de horas (HH:MM) ou os horários inicial e final.")
    motivo = (motivo or "").strip()
    if not motivo:
        raise DadosInvalidosError("O motivo é obrigatório.")

    status_pendente = obter_status(db, STATUS_PENDENTE)

    try:
        # Serializa envios concorrentes do mesmo colaborador (no-op no SQLite)
        perfil = (
            db.query(Perfil)
            .filter(Perfil.id == colaborador_id)
            .with_for_update()
            .first()
        )
        if perfil is None:
            raise RegistroNaoEncontradoError("Colaborador não encontrado.")

        limite = get_utc_now() - timedelta(minutes=JANELA_DUPLICIDADE_MINUTOS)
        duplicada = (
            db.query(Movimentacao.id)
            .filter(
                Movimentacao.colaborador_id == colaborador_id,
                Movimentacao.data_movimentacao == data_movimentacao,
                Movimentacao.hora_total == hora_total,
                Movimentacao.motivo == motivo,
                Movimentacao.entrada.is_(bool(entrada)),
                Movimentacao.created_at >= limite,
            )
            .order_by(Movimentacao.id)
            .first()
        )
        if duplicada is not None:
            db.rollback()
            logger.warning(
                f"Movimentação duplicada detectada (colaborador={colaborador_id}, "
                f"data={data_movimentacao}, horas={hora_total}); devolvendo id={duplicada.id}"
            )
            return ResultadoCriacao(obter_movimentacao(db, duplicada.id), criada=False)

        mov = Movimentacao(
            colaborador_id=colaborador_id,
            data_movimentacao=data_movimentacao,
            hora_inicial=hora_inicial or None,
            hora_final=hora_final or None,
            hora_total=hora_total,
            motivo=motivo,
            entrada=bool(entrada),
            status_id=status_pendente.id,
            forma_pagamento_id=forma_pagamento_id or None,
        )
        db.add(mov)
        db.flush()
        registrar_log(db, mov.id, usuario_id, ACAO_CRIACAO, "Movimentação criada e enviada para aprovação.")
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Movimentação {mov.id} criada: colaborador={colaborador_id} "
        f"{'crédito' if mov.entrada else 'débito'} {hora_total}"
    )
    return ResultadoCriacao(obter_movimentacao(db, mov.id), criada=True)


def solicitar_folga(
    db: Session,
    perfil: Perfil,
    tipo_folga: str,
    data_folga: date,
    motivo: str,
    horas_parciais: Optional[str] = None,
    usuario_id: Optional[int] = None,
) -> ResultadoCriacao:
    """
    Pedido de folga do colaborador: vira um débito pendente.

    - integral: debita a carga horária diária do perfil
    - parcial: debita horas_parciais (HH:MM, maior que zero)

    Raises:
        SaldoInsuficienteError: saldo não positivo ou menor que o débito
        DadosInvalidosError: tipo de folga ou horas parciais inválidos
    """
    if tipo_folga not in (TIPO_FOLGA_INTEGRAL, TIPO_FOLGA_PARCIAL):
        raise DadosInvalidosError("Tipo de folga inválido. Use 'integral' ou 'parcial'.")

    saldo = calcular_saldo(db, perfil.id)
    if saldo.total_minutos <= 0:
        raise SaldoInsuficienteError("Você não possui saldo de horas positivo para solicitar uma folga.")

    if tipo_folga == TIPO_FOLGA_INTEGRAL:
        minutos = carga_horaria_perfil(perfil)
        if saldo.total_minutos < minutos:
            raise SaldoInsuficienteError("Saldo de horas insuficiente para uma folga integral.")
    else:
        minutos = duracao_para_minutos(horas_parciais)
        if minutos is None:
            raise DadosInvalidosError("A quantidade de horas parciais deve ser maior que zero.")
        if saldo.total_minutos < minutos:
            raise SaldoInsuficienteError("Saldo de horas insuficiente para a quantidade de horas solicitada.")

    return criar_movimentacao(
        db,
        colaborador_id=perfil.id,
        data_movimentacao=data_folga,
        hora_total=formatar_minutos(minutos),
        motivo=f"{PREFIXO_MOTIVO_FOLGA}{(motivo or '').strip()}",
        entrada=False,
        usuario_id=usuario_id,
    )


# ============================================
# FLUXO DE APROVAÇÃO
# ============================================

def _decidir(
    db: Session,
    movimentacao_id: int,
    ator: User,
    nome_status: str,
    acao: str,
    detalhes: str
) -> Movimentacao:
    mov = obter_movimentacao(db, movimentacao_id)
    if not mov.status.analise:
        raise TransicaoInvalidaError(
            f"A movimentação já está com status \"{mov.status.nome}\" e não pode ser alterada."
        )

    novo_status = obter_status(db, nome_status)
    mov.status_id = novo_status.id
    registrar_log(db, mov.id, ator.id, acao, detalhes)
    db.commit()

    logger.info("Movimentação decidida", movimentacao_id=mov.id, status=nome_status, ator=ator.username)
    return obter_movimentacao(db, mov.id)


def aprovar_movimentacao(db: Session, movimentacao_id: int, ator: User) -> Movimentacao:
    return _decidir(
        db, movimentacao_id, ator, STATUS_APROVADO, ACAO_APROVADO,
        "Movimentação aprovada pelo administrador."
    )


def rejeitar_movimentacao(db: Session, movimentacao_id: int, ator: User) -> Movimentacao:
    return _decidir(
        db, movimentacao_id, ator, STATUS_REJEITADO, ACAO_REJEITADO,
        "Movimentação rejeitada pelo administrador."
    )


def aprovar_todas(db: Session, ator: User) -> List[Movimentacao]:
    """Aprova todas as pendentes. Retorna as movimentações aprovadas."""
    aprovado = obter_status(db, STATUS_APROVADO)
    pendentes = listar_pendentes(db)

    for mov in pendentes:
        mov.status_id = aprovado.id
        registrar_log(db, mov.id, ator.id, ACAO_APROVADO, "Movimentação aprovada em massa pelo administrador.")
    db.commit()

    if pendentes:
        logger.info(f"{len(pendentes)} movimentações aprovadas em massa por {ator.username}")
    return pendentes


def cancelar_movimentacao(db: Session, movimentacao_id: int, ator: User) -> Movimentacao:
    """O próprio colaborador cancela um pedido ainda pendente."""
    mov = obter_movimentacao(db, movimentacao_id)
    perfil = ator.perfil
    if perfil is None or mov.colaborador_id != perfil.id:
        raise PermissaoNegadaError("Você só pode cancelar as suas próprias solicitações.")
    if not mov.status.analise:
        raise TransicaoInvalidaError("Apenas solicitações pendentes podem ser canceladas.")

    cancelado = obter_status(db, STATUS_CANCELADO)
    mov.status_id = cancelado.id
    registrar_log(db, mov.id, ator.id, ACAO_CANCELADO, "Solicitação cancelada pelo colaborador.")
    db.commit()
    return obter_movimentacao(db, mov.id)


CAMPOS_EDITAVEIS = (
    "data_movimentacao", "hora_inicial", "hora_final", "hora_total",
    "motivo", "entrada", "forma_pagamento_id", "status_id",
)


def atualizar_movimentacao(db: Session, movimentacao_id: int, dados: dict, ator: User) -> Movimentacao:
    """
    Altera campos de uma movimentação e registra ATUALIZAÇÃO no histórico.

    Administradores editam qualquer campo. O dono edita apenas pedidos
    pendentes e não pode mudar o status.
    """
    mov = obter_movimentacao(db, movimentacao_id)

    if not ator.is_staff:
        perfil = ator.perfil
        if perfil is None or perfil.id != mov.colaborador_id:
            raise PermissaoNegadaError("Você não pode alterar esta movimentação.")
        if not mov.status.analise:
            raise TransicaoInvalidaError("Apenas solicitações pendentes podem ser alteradas.")
        if "status_id" in dados:
            raise PermissaoNegadaError("Apenas administradores podem alterar o status.")

    if "hora_total" in dados:
        hora_total = normalizar_duracao(dados["hora_total"])
        if hora_total is None:
            raise DadosInvalidosError("Quantidade de horas inválida (use HH:MM, maior que zero).")
        dados = {**dados, "hora_total": hora_total}

    alterados = []
    for campo in CAMPOS_EDITAVEIS:
        if campo in dados and getattr(mov, campo) != dados[campo]:
            setattr(mov, campo, dados[campo])
            alterados.append(campo)

    if not alterados:
        return mov

    if "status_id" in alterados:
        status = db.query(StatusMovimentacao).filter(StatusMovimentacao.id == mov.status_id).first()
        if status is None:
            db.rollback()
            raise DadosInvalidosError("Status inválido.")

    registrar_log(db, mov.id, ator.id, ACAO_ATUALIZACAO, f"Campos alterados: {', '.join(alterados)}.")
    db.commit()
    return obter_movimentacao(db, mov.id)


# ============================================
# ESTATÍSTICAS
# ============================================

def estatisticas_movimentacoes(
    db: Session,
    data_inicio: Optional[date] = None,
    data_fim: Optional[date] = None
) -> dict:
    """Contagens gerais (dashboard do administrador e relatório geral)."""
    query = (
        db.query(
            func.count(Movimentacao.id),
            func.sum(case((Movimentacao.entrada.is_(True), 1), else_=0)),
            func.sum(case((Movimentacao.entrada.is_(False), 1), else_=0)),
            func.sum(case((StatusMovimentacao.autorizado.is_(True), 1), else_=0)),
            func.sum(case((StatusMovimentacao.analise.is_(True), 1), else_=0)),
            func.sum(case(
                ((StatusMovimentacao.autorizado.is_(False)) & (StatusMovimentacao.analise.is_(False)), 1),
                else_=0
            )),
        )
        .select_from(Movimentacao)
        .join(StatusMovimentacao, Movimentacao.status_id == StatusMovimentacao.id)
    )
    if data_inicio:
        query = query.filter(Movimentacao.data_movimentacao >= data_inicio)
    if data_fim:
        query = query.filter(Movimentacao.data_movimentacao <= data_fim)

    total, entradas, saidas, aprovadas, pendentes, rejeitadas = (int(v or 0) for v in query.one())
    return {
        "total": total,
        "entradas": entradas,
        "saidas": saidas,
        "aprovadas": aprovadas,
        "pendentes": pendentes,
        "rejeitadas": rejeitadas,
    }


def estatisticas_perfil(db: Session, perfil_id: int) -> dict:
    total, em_analise = (
        db.query(
            func.count(Movimentacao.id),
            func.sum(case((StatusMovimentacao.analise.is_(True), 1), else_=0)),
        )
        .select_from(Movimentacao)
        .join(StatusMovimentacao, Movimentacao.status_id == StatusMovimentacao.id)
        .filter(Movimentacao.colaborador_id == perfil_id)
        .one()
    )
    return {"total_movimentacoes": int(total or 0), "total_analise": int(em_analise or 0)}


def estatisticas_setores(db: Session) -> List[dict]:
    """Colaboradores e gerentes por setor."""
    linhas = (
        db.query(
            Setor.id,
            Setor.nome,
            func.count(Perfil.id),
            func.sum(case((Perfil.gerente.is_(True), 1), else_=0)),
        )
        .outerjoin(Perfil, Perfil.setor_id == Setor.id)
        .group_by(Setor.id, Setor.nome)
        .order_by(Setor.nome)
        .all()
    )
    return [
        {"id": sid, "nome": nome, "total_colaboradores": int(total or 0), "total_gerentes": int(gerentes or 0)}
        for sid, nome, total, gerentes in linhas
    ]


def listar_formas_pagamento(db: Session) -> List[FormaPagamento]:
    return db.query(FormaPagamento).order_by(FormaPagamento.nome).all()
