# auth/schemas.py
"""
Schemas Pydantic para usuários
"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserResponse(BaseModel):
    """Dados públicos do usuário (o hash da senha nunca é exposto)"""
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool
    is_staff: bool
    force_password_change: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    perfil_id: Optional[int] = None

    class Config:
        from_attributes = True
