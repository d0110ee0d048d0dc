# auth/models.py
"""
Modelo de usuário para autenticação
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from database.connection import Base
from utils.timezone import get_utc_now


class User(Base):
    """Identidade de login. Os dados funcionais ficam no Perfil (1:1)."""

    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, index=True, nullable=False)
    email = Column(String(254), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(150), nullable=True)
    last_name = Column(String(150), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_staff = Column(Boolean, default=False, nullable=False)
    force_password_change = Column(Boolean, default=False, nullable=False)

    # Recuperação de senha
    reset_password_token = Column(String(128), nullable=True, index=True)
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)

    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    perfil = relationship("Perfil", back_populates="usuario", uselist=False)

    @property
    def full_name(self) -> str:
        nome = " ".join(p for p in (self.first_name, self.last_name) if p)
        return nome or self.username

    @property
    def perfil_id(self):
        return self.perfil.id if self.perfil is not None else None

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', is_staff={self.is_staff})>"
