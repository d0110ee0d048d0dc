# sistemas/banco_horas/router_escala.py
"""
Gestão de escalas (somente administradores): página do calendário e API.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from auth.dependencies import require_staff, require_staff_page
from auth.models import User
from database.connection import get_db
from utils.templates import render

from .schemas import EscalaRequest, EscalaRemoverRequest, FeriasRequest
from .services_cadastro import listar_perfis
from .services_escala import dados_escala_mes, salvar_escala, remover_escala, lancar_ferias

router = APIRouter(prefix="/admin/escala", tags=["Escala"])


@router.get("")
async def escala_page(
    request: Request,
    admin: User = Depends(require_staff_page),
    db: Session = Depends(get_db)
):
    return render(request, "admin/escala.html", {
        "title": "Gestão de Escalas",
        "active_page": "escala",
        "colaboradores": listar_perfis(db),
    })


@router.get("/api")
async def escala_mes(
    ano: int = Query(..., ge=1900, le=2999),
    mes: int = Query(..., ge=1, le=12),
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Escalas do mês e aniversariantes (para destacar no calendário)."""
    return {"success": True, **dados_escala_mes(db, ano, mes)}


@router.post("/api", status_code=201)
async def salvar(dados: EscalaRequest, admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    escala = salvar_escala(
        db,
        perfil_id=dados.perfil_id,
        data=dados.data,
        tipo_escala=dados.tipo_escala,
        hora_inicio=dados.hora_inicio,
        hora_fim=dados.hora_fim,
        observacoes=dados.observacoes,
    )
    return {"success": True, "message": "Escala salva com sucesso!", "escala": escala.to_dict()}


@router.delete("/api")
async def remover(dados: EscalaRemoverRequest, admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    remover_escala(db, dados.perfil_id, dados.data)
    return {"success": True, "message": "Escala removida com sucesso!"}


@router.post("/api/ferias", status_code=201)
async def ferias(dados: FeriasRequest, admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    """Lança Férias em todos os dias do intervalo (inclusivo)."""
    dias = lancar_ferias(db, dados.perfil_id, dados.data_inicio, dados.data_fim)
    return {"success": True, "message": "Período de férias lançado com sucesso!", "dias": dias}
