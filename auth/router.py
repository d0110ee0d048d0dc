# auth/router.py
"""
Páginas de autenticação: login, logout, esqueci a senha e redefinição

SECURITY: O JWT fica em cookie HttpOnly para prevenir roubo via XSS.
"""

from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from database.connection import get_db
from auth.models import User
from auth.security import (
    verify_password, get_password_hash, create_access_token,
    generate_reset_token, hash_reset_token
)
from auth.dependencies import AUTH_COOKIE_NAME, LOGIN_URL, extract_token, get_optional_user
from config import ACCESS_TOKEN_EXPIRE_MINUTES, RESET_PASSWORD_EXPIRE_MINUTES, IS_PRODUCTION
from sistemas.banco_horas.services_notificacao import get_notification_service
from utils.flash import flash
from utils.templates import render
from utils.timezone import get_utc_now, to_local
from utils.validators import normalize_email

# SECURITY: Rate Limiting
from utils.rate_limit import limiter, LIMITS

# SECURITY: Audit Logging
from utils.audit import (
    log_login_success, log_login_failure, log_logout,
    log_password_reset_request, log_password_reset
)

# SECURITY: Política de senhas
from utils.password_policy import check_password_strength

# SECURITY: Token blacklist para revogação
from utils.token_blacklist import revoke_token

router = APIRouter(prefix="/auth", tags=["Autenticação"])

MENSAGEM_CREDENCIAIS = "Email/usuário ou senha inválidos."
MENSAGEM_INATIVO = "Esta conta foi desativada. Entre em contato com o administrador."
MENSAGEM_RESET_ENVIADO = (
    "Se um usuário com esse email existir no nosso sistema, um link de recuperação foi enviado."
)
MENSAGEM_RESET_INVALIDO = "O link de redefinição é inválido ou expirou."


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _buscar_por_login(db: Session, login: str):
    """Login aceita email ou nome de usuário."""
    login = (login or "").strip()
    if not login:
        return None
    if "@" in login:
        return db.query(User).filter(User.email == normalize_email(login)).first()
    return db.query(User).filter(User.username == login).first()


def _usuario_pelo_token_reset(db: Session, token: str):
    if not token:
        return None
    user = db.query(User).filter(User.reset_password_token == hash_reset_token(token)).first()
    if user is None or user.reset_password_expires is None:
        return None
    # SQLite devolve datetimes naive (UTC)
    if to_local(user.reset_password_expires) < get_utc_now():
        return None
    return user


# ==========================================
# LOGIN / LOGOUT
# ==========================================

@router.get("/login")
async def login_page(request: Request, user=Depends(get_optional_user)):
    if user is not None:
        return _redirect("/dashboard")
    return render(request, "auth/login.html", {"title": "Login"})


@router.post("/login")
@limiter.limit(LIMITS["login"])  # SECURITY: tentativas por minuto por IP
async def login_submit(
    request: Request,
    login: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db)
):
    """
    Autentica por email ou nome de usuário.

    Sucesso: cookie HttpOnly com o JWT e redireciona ao dashboard.
    Falha: mensagem flash e volta ao login.
    """
    user = _buscar_por_login(db, login)

    if user is None or not verify_password(password, user.password_hash):
        log_login_failure(login, request, "user_not_found" if user is None else "invalid_password")
        flash(request, MENSAGEM_CREDENCIAIS, "error")
        return _redirect(LOGIN_URL)

    if not user.is_active:
        log_login_failure(login, request, "user_inactive")
        flash(request, MENSAGEM_INATIVO, "error")
        return _redirect(LOGIN_URL)

    access_token = create_access_token(
        data={"sub": user.username, "user_id": user.id, "is_staff": user.is_staff},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    user.last_login = get_utc_now()
    db.commit()

    response = _redirect("/dashboard")
    # SECURITY: cookie HttpOnly
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=f"Bearer {access_token}",
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/"
    )

    log_login_success(user.id, user.username, request)
    return response


@router.get("/logout")
async def logout(request: Request, user=Depends(get_optional_user)):
    """Revoga o token e remove o cookie."""
    token = extract_token(request)
    if token:
        revoke_token(token)
    if user is not None:
        log_logout(user.id, user.username, request)

    response = _redirect(LOGIN_URL)
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        path="/"
    )
    return response


# ==========================================
# RECUPERAÇÃO DE SENHA
# ==========================================

@router.get("/esqueci-senha")
async def esqueci_senha_page(request: Request):
    return render(request, "auth/esqueci_senha.html", {"title": "Recuperar Senha"})


@router.post("/esqueci-senha")
@limiter.limit(LIMITS["password_reset"])
async def esqueci_senha(
    request: Request,
    background_tasks: BackgroundTasks,
    email: str = Form(""),
    db: Session = Depends(get_db)
):
    """
    Gera o link de redefinição (válido por 1 hora).

    A resposta é sempre a mesma para não revelar quais emails existem.
    """
    email = normalize_email(email)
    user = db.query(User).filter(User.email == email).first() if email else None
    log_password_reset_request(email, request, user_found=user is not None)

    if user is not None and user.is_active:
        token = generate_reset_token()
        # Apenas o hash fica gravado
        user.reset_password_token = hash_reset_token(token)
        user.reset_password_expires = get_utc_now() + timedelta(minutes=RESET_PASSWORD_EXPIRE_MINUTES)
        db.commit()

        background_tasks.add_task(
            get_notification_service().link_redefinicao_senha,
            user.email, user.first_name, token
        )

    flash(request, MENSAGEM_RESET_ENVIADO, "success")
    return _redirect("/auth/esqueci-senha")


@router.get("/resetar-senha/{token}")
async def resetar_senha_page(request: Request, token: str, db: Session = Depends(get_db)):
    if _usuario_pelo_token_reset(db, token) is None:
        flash(request, MENSAGEM_RESET_INVALIDO, "error")
        return _redirect("/auth/esqueci-senha")
    return render(request, "auth/resetar_senha.html", {"title": "Redefinir Senha", "token": token})


@router.post("/resetar-senha/{token}")
@limiter.limit(LIMITS["password_reset"])
async def resetar_senha(
    request: Request,
    token: str,
    password: str = Form(""),
    confirm_password: str = Form(""),
    db: Session = Depends(get_db)
):
    user = _usuario_pelo_token_reset(db, token)
    if user is None:
        flash(request, MENSAGEM_RESET_INVALIDO, "error")
        return _redirect("/auth/esqueci-senha")

    valida, erros = check_password_strength(password, confirm_password)
    if not valida:
        return render(
            request,
            "auth/resetar_senha.html",
            {"title": "Redefinir Senha", "token": token, "errors": erros},
            status_code=400
        )

    user.password_hash = get_password_hash(password)
    user.reset_password_token = None
    user.reset_password_expires = None
    user.force_password_change = False
    db.commit()

    log_password_reset(user.id, user.username, request)
    flash(request, "Senha redefinida com sucesso! Faça login com a nova senha.", "success")
    return _redirect(LOGIN_URL)
