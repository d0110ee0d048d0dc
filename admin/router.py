# admin/router.py
"""
Router de administração - Colaboradores, Setores, Aprovações e Relatórios

Páginas usam require_staff_page (redireciona ao login / 403);
endpoints JSON usam require_staff (401/403 em JSON).
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request
from fastapi.responses import RedirectResponse, Response, StreamingResponse
from sqlalchemy.orm import Session

from database.connection import get_db
from auth.dependencies import require_staff, require_staff_page
from auth.models import User
from utils.flash import flash
from utils.rate_limit import limiter, LIMITS
from utils.templates import render
from utils.audit import (
    log_user_created, log_user_updated, log_user_status_change,
    log_movement_decision, log_data_export
)

from sistemas.banco_horas.exceptions import BancoHorasError, DadosInvalidosError
from sistemas.banco_horas.horas import formatar_positivo, formatar_negativo, formatar_saldo
from sistemas.banco_horas.models import Movimentacao
from sistemas.banco_horas.relatorios import filtros_da_query, gerar_relatorio
from sistemas.banco_horas.schemas import StatusColaboradorRequest
from sistemas.banco_horas.services import (
    calcular_saldo,
    resumo_movimentacoes,
    listar_pendentes,
    listar_status,
    aprovar_movimentacao,
    rejeitar_movimentacao,
    aprovar_todas,
    estatisticas_movimentacoes,
    estatisticas_setores,
    atividade_recente,
)
from sistemas.banco_horas.services_cadastro import (
    listar_setores,
    obter_setor,
    criar_setor,
    atualizar_setor,
    excluir_setor,
    listar_perfis,
    obter_perfil,
    criar_colaborador,
    atualizar_colaborador,
    definir_ativo,
)
from sistemas.banco_horas.services_export import ExportService, COLUNAS_GERAL, nome_arquivo
from sistemas.banco_horas.services_notificacao import get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Administração"])


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _int_ou_none(valor: Optional[str]) -> Optional[int]:
    """Selects do formulário chegam como texto ("" = nenhum)."""
    valor = (valor or "").strip()
    if not valor:
        return None
    try:
        return int(valor)
    except ValueError:
        raise DadosInvalidosError("Setor inválido.")


def _checkbox(valor: Optional[str]) -> bool:
    return (valor or "").lower() in ("true", "on", "1")


# ============================================
# COLABORADORES
# ============================================

@router.get("/colaboradores")
async def colaboradores_page(
    request: Request,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    """Listagem com o saldo de cada colaborador e os totais gerais."""
    colaboradores = []
    creditos = debitos = 0
    for perfil in listar_perfis(db):
        saldo = calcular_saldo(db, perfil.id)
        creditos += saldo.creditos_minutos
        debitos += saldo.debitos_minutos
        colaboradores.append({"perfil": perfil, "saldo": saldo})

    return render(request, "admin/colaboradores.html", {
        "title": "Gestão de Colaboradores",
        "active_page": "colaboradores",
        "colaboradores": colaboradores,
        "total_horas_positivas": formatar_positivo(creditos),
        "total_horas_negativas": formatar_negativo(debitos),
        "saldo_total_horas": formatar_saldo(creditos - debitos),
    })


@router.get("/colaboradores/novo")
async def novo_colaborador_page(
    request: Request,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    return render(request, "admin/colaborador_form.html", {
        "title": "Adicionar Colaborador",
        "active_page": "colaboradores",
        "setores": listar_setores(db),
        "colaborador": None,
    })


@router.post("/colaboradores")
async def criar_colaborador_submit(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    first_name: str = Form(""),
    last_name: str = Form(""),
    setor_id: str = Form(""),
    gerente: str = Form(""),
    ch_primeira: str = Form(""),
    ch_segunda: str = Form(""),
    funcao: str = Form(""),
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    """Cria usuário + perfil. Senha em branco usa a senha padrão com troca obrigatória."""
    try:
        perfil = criar_colaborador(
            db,
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            password=password or None,
            setor_id=_int_ou_none(setor_id),
            gerente=_checkbox(gerente),
            ch_primeira=ch_primeira,
            ch_segunda=ch_segunda,
            funcao=funcao,
        )
    except BancoHorasError as e:
        flash(request, str(e), "error")
        return _redirect("/admin/colaboradores/novo")

    log_user_created(perfil.usuario_id, perfil.usuario.username, admin.username, request)
    flash(request, "Colaborador criado com sucesso!", "success")
    return _redirect("/admin/colaboradores")


@router.get("/colaboradores/editar/{perfil_id}")
async def editar_colaborador_page(
    request: Request,
    perfil_id: int,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    colaborador = obter_perfil(db, perfil_id)
    return render(request, "admin/colaborador_form.html", {
        "title": f"Editar {colaborador.nome}",
        "active_page": "colaboradores",
        "setores": listar_setores(db),
        "colaborador": colaborador,
    })


@router.post("/colaboradores/editar/{perfil_id}")
async def editar_colaborador_submit(
    request: Request,
    perfil_id: int,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    first_name: str = Form(""),
    last_name: str = Form(""),
    setor_id: str = Form(""),
    gerente: str = Form(""),
    ch_primeira: str = Form(""),
    ch_segunda: str = Form(""),
    funcao: str = Form(""),
    is_active: str = Form(""),
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    try:
        alterados = atualizar_colaborador(db, perfil_id, {
            "username": username,
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "setor_id": _int_ou_none(setor_id),
            "gerente": _checkbox(gerente),
            "ch_primeira": ch_primeira,
            "ch_segunda": ch_segunda,
            "funcao": funcao,
            "is_active": _checkbox(is_active),
        })
    except BancoHorasError as e:
        flash(request, str(e), "error")
        return _redirect(f"/admin/colaboradores/editar/{perfil_id}")

    perfil = obter_perfil(db, perfil_id)
    if perfil.usuario is not None and alterados:
        log_user_updated(perfil.usuario.id, perfil.usuario.username, admin.username, request, alterados)
    flash(request, "Colaborador atualizado com sucesso!", "success")
    return _redirect("/admin/colaboradores")


@router.patch("/colaboradores/{perfil_id}/status")
async def alterar_status_colaborador(
    request: Request,
    perfil_id: int,
    dados: StatusColaboradorRequest,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Ativa/desativa o acesso do colaborador."""
    usuario = definir_ativo(db, perfil_id, dados.isActive)
    log_user_status_change(usuario.id, usuario.username, admin.username, request, dados.isActive)
    return {"success": True, "message": "Status atualizado com sucesso."}


@router.get("/api/recent-activity")
async def recent_activity(admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    """Últimas 10 ações do histórico de movimentações."""
    return {"success": True, "activities": atividade_recente(db, limit=10)}


# ============================================
# SETORES (páginas)
# ============================================

@router.get("/setores")
async def setores_page(
    request: Request,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    return render(request, "admin/setores.html", {
        "title": "Gestão de Setores",
        "active_page": "setores",
        "setores": listar_setores(db),
        "estatisticas": estatisticas_setores(db),
    })


@router.get("/setores/novo")
async def novo_setor_page(request: Request, admin: User = Depends(require_staff_page)):
    return render(request, "admin/setor_form.html", {
        "title": "Adicionar Novo Setor",
        "active_page": "setores",
        "setor": None,
    })


@router.post("/setores")
async def criar_setor_submit(
    request: Request,
    nome: str = Form(""),
    descricao: str = Form(""),
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    try:
        criar_setor(db, nome, descricao or None)
    except BancoHorasError as e:
        flash(request, str(e), "error")
        return _redirect("/admin/setores/novo")

    flash(request, "Setor criado com sucesso!", "success")
    return _redirect("/admin/setores")


@router.get("/setores/{setor_id}/editar")
async def editar_setor_page(
    request: Request,
    setor_id: int,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    try:
        setor = obter_setor(db, setor_id)
    except BancoHorasError as e:
        flash(request, str(e), "error")
        return _redirect("/admin/setores")

    return render(request, "admin/setor_form.html", {
        "title": f"Editar Setor: {setor.nome}",
        "active_page": "setores",
        "setor": setor,
    })


@router.post("/setores/{setor_id}/editar")
async def editar_setor_submit(
    request: Request,
    setor_id: int,
    nome: str = Form(""),
    descricao: str = Form(""),
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    try:
        atualizar_setor(db, setor_id, nome, descricao or None)
    except BancoHorasError as e:
        flash(request, str(e), "error")
        return _redirect(f"/admin/setores/{setor_id}/editar")

    flash(request, "Setor atualizado com sucesso!", "success")
    return _redirect("/admin/setores")


@router.post("/setores/{setor_id}/apagar")
async def apagar_setor_submit(
    request: Request,
    setor_id: int,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    """Setores com colaboradores não são apagados (mensagem de erro)."""
    try:
        excluir_setor(db, setor_id)
    except BancoHorasError as e:
        flash(request, str(e), "error")
        return _redirect("/admin/setores")

    flash(request, "Setor apagado com sucesso!", "success")
    return _redirect("/admin/setores")


# ============================================
# APROVAÇÕES
# ============================================

def _notificar_decisao(background_tasks: BackgroundTasks, mov: Movimentacao, ator: User, status: str) -> None:
    usuario = mov.colaborador.usuario if mov.colaborador else None
    if usuario is None or not usuario.email:
        return
    background_tasks.add_task(
        get_notification_service().status_para_colaborador,
        mov.to_dict(), usuario.email, usuario.first_name or mov.colaborador.nome, ator.full_name, status
    )


@router.get("/aprovacoes")
async def aprovacoes_page(
    request: Request,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    return render(request, "admin/aprovacoes.html", {
        "title": "Aprovação de Solicitações",
        "active_page": "aprovacoes",
        "solicitacoes": listar_pendentes(db),
    })


@router.patch("/movimentacoes/aprovar-todas")
async def aprovar_todas_api(
    request: Request,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    aprovadas = aprovar_todas(db, admin)
    if not aprovadas:
        return {"success": True, "message": "Nenhuma solicitação pendente para aprovar.", "approved": 0}

    log_movement_decision(admin.id, admin.username, request, None, approved=True, count=len(aprovadas))
    return {
        "success": True,
        "message": "Todas as solicitações pendentes foram aprovadas.",
        "approved": len(aprovadas),
    }


@router.patch("/movimentacoes/{movimentacao_id}/aprovar")
async def aprovar_api(
    request: Request,
    movimentacao_id: int,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    mov = aprovar_movimentacao(db, movimentacao_id, admin)
    log_movement_decision(admin.id, admin.username, request, mov.id, approved=True)
    _notificar_decisao(background_tasks, mov, admin, "Aprovada")
    return {"success": True, "message": "Movimentação aprovada com sucesso.", "movement": mov.to_dict()}


@router.patch("/movimentacoes/{movimentacao_id}/rejeitar")
async def rejeitar_api(
    request: Request,
    movimentacao_id: int,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    mov = rejeitar_movimentacao(db, movimentacao_id, admin)
    log_movement_decision(admin.id, admin.username, request, mov.id, approved=False)
    _notificar_decisao(background_tasks, mov, admin, "Rejeitada")
    return {"success": True, "message": "Movimentação rejeitada com sucesso.", "movement": mov.to_dict()}


@router.get("/movimentacoes/pendentes")
async def pendentes_page(
    request: Request,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    return render(request, "admin/pendentes.html", {
        "title": "Analisar Solicitações Pendentes",
        "active_page": "pendentes",
        "pendentes": listar_pendentes(db),
    })


@router.get("/movimentacoes/pendentes/api")
async def pendentes_api(admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    return {"success": True, "pendingMovements": [m.to_dict() for m in listar_pendentes(db)]}


@router.get("/api/dashboard-stats")
async def dashboard_stats(admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    """Pendentes + contagens gerais (atualização do dashboard)."""
    return {
        "success": True,
        "pendingMovements": [m.to_dict() for m in listar_pendentes(db)],
        "stats": estatisticas_movimentacoes(db),
    }


# ============================================
# RELATÓRIOS E EXPORTAÇÃO
# ============================================

@router.get("/relatorios")
async def relatorios_page(
    request: Request,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    return render(request, "admin/relatorios.html", {
        "title": "Relatórios",
        "active_page": "relatorios",
        "colaboradores": listar_perfis(db),
        "status": listar_status(db),
    })


@router.get("/api/relatorios")
async def relatorios_api(
    request: Request,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Movimentações filtradas pela query string + totais aprovados."""
    relatorio = gerar_relatorio(db, filtros_da_query(request.query_params))
    return {
        "success": True,
        "movimentacoes": [m.to_dict() for m in relatorio["movimentacoes"]],
        "summary": relatorio["summary"],
    }


def _anexo(nome: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{nome}"'}


def _resumo_colaborador(filtros: dict, movimentacoes) -> Optional[dict]:
    """Resumo do período só quando o relatório é de um colaborador."""
    if not filtros.get("colaborador_id") or not movimentacoes:
        return None
    return resumo_movimentacoes(movimentacoes).to_dict()


@router.get("/relatorios/exportar")
@limiter.limit(LIMITS["export"])
async def exportar_csv(
    request: Request,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    relatorio = gerar_relatorio(db, filtros_da_query(request.query_params))
    movimentacoes = relatorio["movimentacoes"]
    conteudo = ExportService().exportar_csv(movimentacoes, COLUNAS_GERAL)

    log_data_export(admin.id, admin.username, request, "relatorio_movimentacoes", len(movimentacoes), "csv")
    return Response(
        content=conteudo,
        media_type="text/csv; charset=utf-8",
        headers=_anexo(nome_arquivo("relatorio_movimentacoes", "csv")),
    )


@router.get("/relatorios/exportar-xlsx")
@limiter.limit(LIMITS["export"])
async def exportar_xlsx(
    request: Request,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    filtros = filtros_da_query(request.query_params)
    movimentacoes = gerar_relatorio(db, filtros)["movimentacoes"]
    buffer = ExportService().exportar_excel(movimentacoes, COLUNAS_GERAL, _resumo_colaborador(filtros, movimentacoes))

    log_data_export(admin.id, admin.username, request, "relatorio_movimentacoes", len(movimentacoes), "xlsx")
    return StreamingResponse(
        buffer,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=_anexo(nome_arquivo("relatorio_movimentacoes", "xlsx")),
    )


@router.get("/relatorios/exportar-pdf")
@limiter.limit(LIMITS["export"])
async def exportar_pdf(
    request: Request,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    filtros = filtros_da_query(request.query_params)
    movimentacoes = gerar_relatorio(db, filtros)["movimentacoes"]
    buffer = ExportService().exportar_pdf(
        movimentacoes,
        "Relatório Geral de Movimentações",
        COLUNAS_GERAL,
        _resumo_colaborador(filtros, movimentacoes),
    )

    log_data_export(admin.id, admin.username, request, "relatorio_movimentacoes", len(movimentacoes), "pdf")
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers=_anexo(nome_arquivo("relatorio", "pdf")),
    )
