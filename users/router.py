# users/router.py
"""
Endpoints de consulta de usuários
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database.connection import get_db
from auth.models import User
from auth.schemas import UserResponse
from auth.dependencies import get_current_user, require_staff

router = APIRouter(prefix="/api/v1/users", tags=["Usuários"])


@router.get("")
async def list_users(
    skip: int = 0,
    limit: int = 100,
    admin: User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Lista todos os usuários do sistema.

    **Acesso:** Apenas administradores
    """
    users = db.query(User).order_by(User.username).offset(skip).limit(limit).all()
    return {
        "success": True,
        "users": [UserResponse.model_validate(u).model_dump(mode="json") for u in users],
    }


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Obtém um usuário específico.

    **Acesso:** o próprio usuário ou administradores. O hash da senha nunca
    é retornado.
    """
    if not current_user.is_staff and current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso negado"
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Usuário não encontrado"
        )

    return {"success": True, "user": UserResponse.model_validate(user).model_dump(mode="json")}
