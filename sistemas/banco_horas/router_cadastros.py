# sistemas/banco_horas/router_cadastros.py
"""
API de cadastros: setores, perfis e busca de colaboradores.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth.dependencies import get_current_user, require_staff, require_manager
from auth.models import User
from database.connection import get_db

from .schemas import SetorRequest, PerfilRoleRequest
from .services import listar_movimentacoes
from .services_cadastro import (
    listar_setores,
    obter_setor,
    setor_to_dict,
    criar_setor,
    atualizar_setor,
    excluir_setor,
    listar_perfis,
    obter_perfil,
    perfil_to_dict,
    definir_gerente,
    buscar_perfis,
    perfil_com_movimentacoes,
)

departments_router = APIRouter(prefix="/api/v1/departments", tags=["Setores"])
profiles_router = APIRouter(prefix="/api/v1/profiles", tags=["Perfis"])
search_router = APIRouter(prefix="/api/v1/search", tags=["Busca"])


# ============================================
# SETORES
# ============================================

@departments_router.get("")
async def listar(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "departments": listar_setores(db)}


@departments_router.get("/{setor_id}")
async def obter(setor_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "department": setor_to_dict(obter_setor(db, setor_id))}


@departments_router.post("", status_code=201)
async def criar(dados: SetorRequest, admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    setor = criar_setor(db, dados.nome, dados.descricao)
    return {"success": True, "message": "Setor criado com sucesso!", "department": setor_to_dict(setor, 0)}


@departments_router.put("/{setor_id}")
async def atualizar(
    setor_id: int,
    dados: SetorRequest,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    setor = atualizar_setor(db, setor_id, dados.nome, dados.descricao)
    return {"success": True, "message": "Setor atualizado com sucesso", "department": setor_to_dict(setor)}


@departments_router.delete("/{setor_id}")
async def excluir(setor_id: int, admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    """400 quando há colaboradores vinculados ao setor."""
    excluir_setor(db, setor_id)
    return {"success": True, "message": "Setor deletado com sucesso"}


# ============================================
# PERFIS (listagem também para gerentes)
# ============================================

@profiles_router.get("")
async def listar_perfis_api(
    setor_id: Optional[int] = None,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db)
):
    return {"success": True, "profiles": [perfil_to_dict(p) for p in listar_perfis(db, setor_id)]}


@profiles_router.get("/{perfil_id}")
async def obter_perfil_api(perfil_id: int, admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    return {"success": True, "profile": perfil_to_dict(obter_perfil(db, perfil_id))}


@profiles_router.patch("/{perfil_id}/role")
async def alterar_gerente(
    perfil_id: int,
    dados: PerfilRoleRequest,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Promove/rebaixa a gerente. `gerente` precisa ser true ou false."""
    perfil = definir_gerente(db, perfil_id, dados.gerente)
    return {
        "success": True,
        "message": "Status de gerente atualizado com sucesso!",
        "profile": perfil_to_dict(perfil),
    }


@profiles_router.get("/{perfil_id}/movements")
async def movimentacoes_do_perfil(
    perfil_id: int,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    obter_perfil(db, perfil_id)
    movimentacoes = listar_movimentacoes(db, colaborador_id=perfil_id)
    return {"success": True, "movements": [m.to_dict() for m in movimentacoes]}


# ============================================
# BUSCA
# ============================================

@search_router.get("/profiles")
async def buscar(
    q: str = Query(""),
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """Autocomplete por nome (mínimo 2 caracteres, até 7 resultados)."""
    return {"success": True, "profiles": buscar_perfis(db, q)}


@search_router.get("/profiles/{perfil_id}/details")
async def detalhes(perfil_id: int, admin: User = Depends(require_staff), db: Session = Depends(get_db)):
    return {"success": True, **perfil_com_movimentacoes(db, perfil_id)}
