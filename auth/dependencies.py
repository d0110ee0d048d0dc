# auth/dependencies.py
"""
Dependencies de autenticação para injeção nas rotas

O token JWT viaja no cookie HttpOnly "access_token" (páginas e API).
O header Authorization: Bearer também é aceito nas rotas de API.

- Rotas de API: 401/403 em JSON
- Páginas: redirecionamento para o login (ou para a troca de senha obrigatória)
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session, joinedload

from database.connection import get_db
from auth.models import User
from auth.security import decode_token
from utils.token_blacklist import is_token_revoked
from utils.audit import log_access_denied
from sistemas.banco_horas.models import Perfil
from sistemas.banco_horas.services import contar_pendentes

AUTH_COOKIE_NAME = "access_token"
LOGIN_URL = "/auth/login"
CHANGE_PASSWORD_URL = "/profile/change-password"

# Caminhos liberados enquanto a troca de senha é obrigatória
FORCED_CHANGE_ALLOWED = (CHANGE_PASSWORD_URL, "/auth/logout")


class LoginRedirect(Exception):
    """
    Interrompe uma rota de página e redireciona.

    Tratada em main.py; clear_cookie remove o cookie de sessão.
    """

    def __init__(self, url: str = LOGIN_URL, clear_cookie: bool = False):
        self.url = url
        self.clear_cookie = clear_cookie
        super().__init__(url)


def extract_token(request: Request) -> Optional[str]:
    """Lê o JWT do cookie de autenticação ou do header Authorization."""
    cookie_token = request.cookies.get(AUTH_COOKIE_NAME)
    if cookie_token:
        return cookie_token[7:] if cookie_token.startswith("Bearer ") else cookie_token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


def _resolve_user(request: Request, db: Session) -> Optional[User]:
    token = extract_token(request)
    if not token:
        return None

    payload = decode_token(token)
    if payload is None or is_token_revoked(token):
        return None

    user_id = payload.get("user_id")
    if user_id is None:
        return None

    # perfil e setor carregados já aqui: páginas de erro leem o usuário depois
    # que a sessão da requisição foi fechada
    return (
        db.query(User)
        .options(joinedload(User.perfil).joinedload(Perfil.setor))
        .filter(User.id == user_id)
        .first()
    )


# ==========================================
# API (JSON)
# ==========================================

async def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
) -> User:
    """
    Usuário autenticado para rotas de API.
    Lança HTTPException 401 se o token estiver ausente, inválido ou revogado.
    """
    user = _resolve_user(request, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Não autorizado"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário desativado"
        )
    request.state.user = user
    return user


async def require_staff(
    request: Request,
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Exige usuário administrativo (is_staff).

    Uso:
        @router.get("/rota-admin")
        def rota(admin: User = Depends(require_staff)):
            ...
    """
    if not current_user.is_staff:
        log_access_denied(current_user.id, current_user.username, request, "staff_required")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito a administradores"
        )
    return current_user


async def require_manager(
    request: Request,
    current_user: User = Depends(get_current_user)
) -> User:
    """Exige administrador ou gerente (perfil.gerente)."""
    perfil = current_user.perfil
    if not (current_user.is_staff or (perfil is not None and perfil.gerente)):
        log_access_denied(current_user.id, current_user.username, request, "manager_required")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito a gerentes"
        )
    return current_user


# ==========================================
# Páginas (HTML)
# ==========================================

async def get_page_user(
    request: Request,
    db: Session = Depends(get_db)
) -> User:
    """
    Usuário autenticado para páginas.

    - Sem token válido: redireciona ao login
    - Conta desativada: limpa o cookie e redireciona ao login
    - Troca de senha obrigatória: redireciona para /profile/change-password
    """
    user = _resolve_user(request, db)
    if user is None:
        raise LoginRedirect(LOGIN_URL)

    if not user.is_active:
        raise LoginRedirect(LOGIN_URL, clear_cookie=True)

    if user.force_password_change and request.url.path not in FORCED_CHANGE_ALLOWED:
        raise LoginRedirect(CHANGE_PASSWORD_URL)

    request.state.user = user
    if user.is_staff:
        # Contador de aprovações exibido no menu administrativo
        request.state.pending_count = contar_pendentes(db)
    return user


async def require_staff_page(
    request: Request,
    current_user: User = Depends(get_page_user)
) -> User:
    """Páginas /admin/*: usuário comum recebe 403."""
    if not current_user.is_staff:
        log_access_denied(current_user.id, current_user.username, request, "staff_required")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso negado. Esta área é restrita a administradores."
        )
    return current_user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Usuário se autenticado e ativo, ou None.
    Útil para a página inicial e o login.
    """
    user = _resolve_user(request, db)
    if user is None or not user.is_active:
        return None
    return user
