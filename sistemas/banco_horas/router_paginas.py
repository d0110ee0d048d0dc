# sistemas/banco_horas/router_paginas.py
"""
Páginas do colaborador e dashboard.

- / e /dashboard (administrador vê o painel; colaborador vai para /meu-perfil)
- /meu-perfil: saldo, estatísticas e últimas movimentações
- /profile/*: edição de dados, foto, troca de senha, relatórios e folgas
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import RedirectResponse, Response, StreamingResponse
from sqlalchemy.orm import Session

from auth.dependencies import get_page_user, get_optional_user
from auth.models import User
from auth.security import get_password_hash
from database.connection import get_db
from utils.audit import log_password_change, log_data_export
from utils.flash import flash
from utils.rate_limit import limiter, LIMITS
from utils.password_policy import check_password_strength, get_password_requirements
from utils.templates import render
from utils.uploads import UploadInvalidoError, salvar_foto_perfil, remover_foto_antiga

from .exceptions import BancoHorasError, RegistroNaoEncontradoError
from .relatorios import filtros_da_query, gerar_relatorio
from .services import (
    calcular_saldo,
    resumo_movimentacoes,
    listar_movimentacoes,
    listar_pendentes,
    listar_status,
    listar_formas_pagamento,
    estatisticas_movimentacoes,
    estatisticas_perfil,
    estatisticas_setores,
)
from .services_cadastro import atualizar_dados_proprios
from .services_export import ExportService, COLUNAS_COLABORADOR, nome_arquivo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Páginas"])

MENSAGEM_SEM_PERFIL = "O seu usuário não possui um perfil de funcionário associado."


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _sem_perfil(request: Request):
    return render(request, "error.html", {
        "title": "Perfil não encontrado",
        "message": MENSAGEM_SEM_PERFIL,
    }, status_code=404)


# ============================================
# HOME / DASHBOARD
# ============================================

@router.get("/")
async def home(request: Request, user=Depends(get_optional_user)):
    if user is not None:
        return _redirect("/dashboard")
    return render(request, "home.html", {"title": "Bem-vindo ao Banco de Horas"})


@router.get("/dashboard")
async def dashboard(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    """Painel do administrador; colaboradores são levados ao próprio perfil."""
    if not user.is_staff:
        return _redirect("/meu-perfil")

    return render(request, "dashboard.html", {
        "title": "Dashboard do Administrador",
        "active_page": "dashboard",
        "stats": estatisticas_movimentacoes(db),
        "pendentes": listar_pendentes(db),
        "recentes": listar_movimentacoes(db, limit=5),
        "setores": estatisticas_setores(db),
        "total_usuarios": db.query(User).count(),
        "formas_pagamento": listar_formas_pagamento(db),
    })


@router.get("/meu-perfil")
async def meu_perfil(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    perfil = user.perfil
    if perfil is None:
        return _sem_perfil(request)

    return render(request, "profile/home.html", {
        "title": "Meu Perfil",
        "active_page": "home",
        "perfil": perfil,
        "estatisticas": estatisticas_perfil(db, perfil.id),
        "saldo": calcular_saldo(db, perfil.id),
        "recentes": listar_movimentacoes(db, colaborador_id=perfil.id, limit=10),
        "formas_pagamento": listar_formas_pagamento(db),
    })


# ============================================
# DADOS DO PERFIL
# ============================================

@router.get("/profile/editar")
async def editar_perfil_page(request: Request, user: User = Depends(get_page_user)):
    if user.perfil is None:
        return _sem_perfil(request)
    return render(request, "profile/editar.html", {
        "title": "Editar Meu Perfil",
        "active_page": "profile",
        "perfil": user.perfil,
    })


@router.post("/profile/editar")
async def editar_perfil_submit(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    form = await request.form()
    dados = {k: v for k, v in form.items() if isinstance(v, str)}
    try:
        atualizar_dados_proprios(db, user, dados.pop("nome", ""), dados.pop("email", ""), dados)
    except BancoHorasError as e:
        db.rollback()
        flash(request, str(e), "error")
        return _redirect("/profile/editar")

    flash(request, "Perfil atualizado com sucesso!", "success")
    return _redirect("/profile/editar")


@router.post("/profile/foto")
@limiter.limit(LIMITS["upload"])
async def enviar_foto(
    request: Request,
    foto: UploadFile = File(None),
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    """Troca a foto do perfil (JPEG/PNG/GIF até 2MB) e apaga a anterior."""
    perfil = user.perfil
    if perfil is None:
        return _sem_perfil(request)
    if foto is None or not foto.filename:
        flash(request, "Nenhum arquivo foi selecionado.", "error")
        return _redirect("/profile/editar")

    try:
        foto_url = await salvar_foto_perfil(foto, user.id)
    except UploadInvalidoError as e:
        flash(request, str(e), "error")
        return _redirect("/profile/editar")

    antiga = perfil.foto_url
    perfil.foto_url = foto_url
    db.commit()
    remover_foto_antiga(antiga)

    flash(request, "Foto do perfil atualizada com sucesso!", "success")
    return _redirect("/profile/editar")


# ============================================
# SENHA
# ============================================

@router.get("/profile/change-password")
async def change_password_page(request: Request, user: User = Depends(get_page_user)):
    return render(request, "profile/change_password.html", {
        "title": "Alterar Senha",
        "active_page": "profile",
        "errors": [],
        "requisitos": get_password_requirements(),
    })


@router.post("/profile/change-password")
async def change_password_submit(
    request: Request,
    password: str = Form(""),
    confirm_password: str = Form(""),
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    """Também encerra a troca obrigatória do primeiro acesso."""
    valida, erros = check_password_strength(password, confirm_password)
    if not valida:
        return render(request, "profile/change_password.html", {
            "title": "Alterar Senha",
            "active_page": "profile",
            "errors": erros,
            "requisitos": get_password_requirements(),
        }, status_code=400)

    user.password_hash = get_password_hash(password)
    user.force_password_change = False
    db.commit()

    log_password_change(user.id, user.username, request)
    flash(request, "Senha alterada com sucesso!", "success")
    return _redirect("/dashboard" if user.is_staff else "/meu-perfil")


# ============================================
# RELATÓRIOS DO COLABORADOR
# ============================================

@router.get("/profile/relatorio")
async def relatorio_page(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    """Página "Gerenciar Horas": sempre restrita ao próprio perfil."""
    perfil = user.perfil
    if perfil is None:
        return _sem_perfil(request)
    return render(request, "profile/relatorio.html", {
        "title": "Gerenciar Horas",
        "active_page": "gerenciar",
        "movimentacoes": listar_movimentacoes(db, colaborador_id=perfil.id),
        "status": listar_status(db),
        "saldo": calcular_saldo(db, perfil.id),
        "formas_pagamento": listar_formas_pagamento(db),
    })


@router.get("/profile/folgas")
async def folgas_page(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    """Central de Folgas: débitos do colaborador e saldo disponível."""
    perfil = user.perfil
    if perfil is None:
        return _sem_perfil(request)
    return render(request, "profile/folgas.html", {
        "title": "Central de Folgas",
        "active_page": "folga",
        "movimentacoes": listar_movimentacoes(db, colaborador_id=perfil.id, entrada=False),
        "saldo": calcular_saldo(db, perfil.id),
    })


def _relatorio_proprio(request: Request, user: User, db: Session):
    perfil = user.perfil
    if perfil is None:
        raise RegistroNaoEncontradoError(MENSAGEM_SEM_PERFIL)
    return perfil, gerar_relatorio(db, filtros_da_query(request.query_params), colaborador_id=perfil.id)


def _anexo(nome: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{nome}"'}


@router.get("/profile/api/relatorio")
async def relatorio_api(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    """Filtros da query string; colaborador_id é sempre o do usuário logado."""
    _, relatorio = _relatorio_proprio(request, user, db)
    return {
        "success": True,
        "movimentacoes": [m.to_dict() for m in relatorio["movimentacoes"]],
        "summary": relatorio["summary"],
    }


@router.get("/profile/relatorio/exportar-csv")
@limiter.limit(LIMITS["export"])
async def exportar_csv(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    _, relatorio = _relatorio_proprio(request, user, db)
    movimentacoes = relatorio["movimentacoes"]
    conteudo = ExportService().exportar_csv(movimentacoes, COLUNAS_COLABORADOR)
    log_data_export(user.id, user.username, request, "meu_relatorio", len(movimentacoes), "csv")
    return Response(
        content=conteudo,
        media_type="text/csv; charset=utf-8",
        headers=_anexo(nome_arquivo("meu_relatorio", "csv")),
    )


@router.get("/profile/relatorio/exportar-xlsx")
@limiter.limit(LIMITS["export"])
async def exportar_xlsx(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    perfil, relatorio = _relatorio_proprio(request, user, db)
    movimentacoes = relatorio["movimentacoes"]
    buffer = ExportService().exportar_excel(
        movimentacoes, COLUNAS_COLABORADOR, resumo_movimentacoes(movimentacoes).to_dict()
    )
    log_data_export(user.id, user.username, request, "meu_relatorio", len(movimentacoes), "xlsx")
    return StreamingResponse(
        buffer,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=_anexo(nome_arquivo("meu_relatorio", "xlsx")),
    )


@router.get("/profile/relatorio/exportar-pdf")
@limiter.limit(LIMITS["export"])
async def exportar_pdf(
    request: Request,
    user: User = Depends(get_page_user),
    db: Session = Depends(get_db)
):
    """PDF com a tabela filtrada e o resumo das horas aprovadas do período."""
    perfil, relatorio = _relatorio_proprio(request, user, db)
    movimentacoes = relatorio["movimentacoes"]
    buffer = ExportService().exportar_pdf(
        movimentacoes,
        f"Relatório de Movimentações - {perfil.nome}",
        COLUNAS_COLABORADOR,
        resumo_movimentacoes(movimentacoes).to_dict(),
    )
    log_data_export(user.id, user.username, request, "meu_relatorio", len(movimentacoes), "pdf")
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers=_anexo(nome_arquivo("meu_relatorio", "pdf")),
    )
