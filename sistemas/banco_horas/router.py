# sistemas/banco_horas/router.py
"""
API do Banco de Horas: movimentações, folgas, relatório geral e sugestões.

Erros de negócio (BancoHorasError) são convertidos em JSON pelo handler
registrado em main.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from auth.dependencies import get_current_user, require_staff
from auth.models import User
from database.connection import get_db
from utils.rate_limit import limiter, LIMITS
from utils.uploads import UploadInvalidoError, salvar_anexo_sugestao

from .exceptions import DadosInvalidosError, PermissaoNegadaError, RegistroNaoEncontradoError
from .models import Perfil
from .relatorios import filtros_da_query
from .schemas import MovimentacaoCreate, MovimentacaoUpdate, SolicitacaoFolga
from .services import (
    obter_movimentacao,
    criar_movimentacao,
    solicitar_folga as solicitar_folga_service,
    atualizar_movimentacao,
    cancelar_movimentacao,
    estatisticas_movimentacoes,
)
from .services_notificacao import get_notification_service, emails_administradores
from .services_sugestao import enviar_sugestao

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/movements", tags=["Movimentações"])
reports_router = APIRouter(prefix="/api/v1/reports", tags=["Relatórios"])
sugestao_router = APIRouter(prefix="/api/v1/sugestao", tags=["Sugestões"])


def _perfil_do_usuario(user: User):
    if user.perfil is None:
        raise RegistroNaoEncontradoError("O seu usuário não possui um perfil de funcionário associado.")
    return user.perfil


def _agendar_notificacao_criacao(
    background_tasks: BackgroundTasks,
    db: Session,
    mov: dict,
    ator: User,
    lancado_pelo_admin: bool
) -> None:
    """Admin lançando para outro colaborador avisa o colaborador; caso contrário avisa os admins."""
    servico = get_notification_service()
    if lancado_pelo_admin:
        colaborador = db.query(User).join(User.perfil).filter(Perfil.id == mov["colaborador_id"]).first()
        if colaborador is not None:
            background_tasks.add_task(
                servico.lancamento_admin_para_colaborador,
                mov, colaborador.email, colaborador.first_name, ator.full_name
            )
        return

    admins = emails_administradores(db)
    if admins:
        background_tasks.add_task(servico.nova_movimentacao_para_admins, mov, admins)


# ============================================
# MOVIMENTAÇÕES
# ============================================

@router.get("/{movimentacao_id}")
async def obter(
    movimentacao_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Detalhes de uma movimentação (colaborador vê apenas as próprias)."""
    mov = obter_movimentacao(db, movimentacao_id)
    if not current_user.is_staff:
        perfil = current_user.perfil
        if perfil is None or perfil.id != mov.colaborador_id:
            raise PermissaoNegadaError("Você não pode visualizar esta movimentação.")
    return {"success": True, "movement": mov.to_dict()}


@router.post("", status_code=201)
async def criar(
    dados: MovimentacaoCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Lança horas (crédito ou débito) como pendente.

    Administradores podem informar colaborador_id para lançar em nome de
    outro colaborador. Um envio idêntico nos últimos minutos devolve a
    movimentação já existente (200) em vez de criar outra.
    """
    lancado_pelo_admin = bool(current_user.is_staff and dados.colaborador_id)
    if lancado_pelo_admin:
        colaborador_id = dados.colaborador_id
    else:
        colaborador_id = _perfil_do_usuario(current_user).id

    resultado = criar_movimentacao(
        db,
        colaborador_id=colaborador_id,
        data_movimentacao=dados.data_movimentacao,
        motivo=dados.motivo,
        entrada=dados.entrada,
        hora_total=dados.hora_total,
        hora_inicial=dados.hora_inicial,
        hora_final=dados.hora_final,
        forma_pagamento_id=dados.forma_pagamento_id,
        usuario_id=current_user.id,
    )
    mov = resultado.movimentacao.to_dict()

    if not resultado.criada:
        return JSONResponse(
            status_code=200,
            content={
                "success": True,
                "duplicate": True,
                "message": "Esta movimentação já foi registrada.",
                "movement": mov,
            }
        )

    _agendar_notificacao_criacao(background_tasks, db, mov, current_user, lancado_pelo_admin)
    return {"success": True, "message": "Movimentação enviada para aprovação!", "movement": mov}


@router.put("/{movimentacao_id}")
async def atualizar(
    movimentacao_id: int,
    dados: MovimentacaoUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    mov = atualizar_movimentacao(db, movimentacao_id, dados.model_dump(exclude_unset=True), current_user)
    return {"success": True, "message": "Movimentação atualizada com sucesso", "movement": mov.to_dict()}


@router.patch("/{movimentacao_id}/cancelar")
async def cancelar(
    movimentacao_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    mov = cancelar_movimentacao(db, movimentacao_id, current_user)
    return {"success": True, "message": "Solicitação cancelada.", "movement": mov.to_dict()}


@router.post("/solicitar-folga", status_code=201)
async def solicitar_folga(
    dados: SolicitacaoFolga,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Folga integral (carga horária do dia) ou parcial (horas_parciais)."""
    perfil = _perfil_do_usuario(current_user)
    resultado = solicitar_folga_service(
        db,
        perfil=perfil,
        tipo_folga=dados.tipo_folga,
        data_folga=dados.data_folga,
        motivo=dados.motivo,
        horas_parciais=dados.horas_parciais,
        usuario_id=current_user.id,
    )
    mov = resultado.movimentacao.to_dict()
    if resultado.criada:
        _agendar_notificacao_criacao(background_tasks, db, mov, current_user, lancado_pelo_admin=False)

    return JSONResponse(
        status_code=201 if resultado.criada else 200,
        content={
            "success": True,
            "message": "Solicitação de folga enviada para aprovação!",
            "movement": mov,
        }
    )


# ============================================
# RELATÓRIO GERAL
# ============================================

@reports_router.get("/general")
async def relatorio_geral(
    request: Request,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Estatísticas do período (data_inicio/data_fim em ISO 8601)."""
    filtros = filtros_da_query(request.query_params)
    data_inicio = filtros.get("data_inicio")
    data_fim = filtros.get("data_fim")
    if data_inicio and data_fim and data_inicio > data_fim:
        raise DadosInvalidosError("A data de início não pode ser posterior à data de fim.")

    return {
        "success": True,
        "report": {
            "periodo": {
                "data_inicio": data_inicio.isoformat() if data_inicio else "N/A",
                "data_fim": data_fim.isoformat() if data_fim else "N/A",
            },
            "stats": estatisticas_movimentacoes(db, data_inicio, data_fim),
        },
    }


# ============================================
# SUGESTÕES
# ============================================

@sugestao_router.post("", status_code=201)
@limiter.limit(LIMITS["upload"])
async def criar_sugestao(
    request: Request,
    nome: str = Form(...),
    categoria: str = Form(...),
    detalhes: str = Form(...),
    categoria_outro: Optional[str] = Form(None),
    anexo: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_staff),
):
    """Abre uma issue no GitHub com a sugestão (anexo opcional: imagem até 5MB)."""
    anexo_url = None
    if anexo is not None and anexo.filename:
        try:
            caminho = await salvar_anexo_sugestao(anexo, current_user.id)
        except UploadInvalidoError as e:
            return JSONResponse(status_code=400, content={"success": False, "message": str(e)})
        anexo_url = f"{str(request.base_url).rstrip('/')}{caminho}"

    issue = await enviar_sugestao(nome, categoria, detalhes, categoria_outro, anexo_url)
    return {
        "success": True,
        "message": f"Sugestão enviada com sucesso! Issue #{issue.get('number')} criada no GitHub.",
    }
