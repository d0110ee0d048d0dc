# utils/rate_limit.py
# -*- coding: utf-8 -*-
"""
Rate Limiting do Banco de Horas

SECURITY: Protege login e recuperação de senha contra força bruta.

Uso:
    from utils.rate_limit import limiter, rate_limit_exceeded_handler

    # No main.py
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Nos routers
    @router.post("/login")
    @limiter.limit(LIMITS["login"])
    async def login(request: Request):
        ...
"""

import os
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from utils.flash import flash

logger = logging.getLogger(__name__)

# ==================================================
# CONFIGURAÇÃO
# ==================================================


def get_real_ip(request: Request) -> str:
    """
    Obtém IP real do cliente, considerando headers de proxy.

    Prioridade:
    1. X-Forwarded-For (primeiro IP da lista)
    2. X-Real-IP
    3. IP direto da conexão
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "200/minute")
RATE_LIMIT_LOGIN = os.getenv("RATE_LIMIT_LOGIN", "10/minute")
RATE_LIMIT_PASSWORD_RESET = os.getenv("RATE_LIMIT_PASSWORD_RESET", "5/minute")
RATE_LIMIT_UPLOAD = os.getenv("RATE_LIMIT_UPLOAD", "10/minute")
RATE_LIMIT_EXPORT = os.getenv("RATE_LIMIT_EXPORT", "20/minute")

# Storage: memória por padrão, Redis em produção (ex: redis://host:6379)
RATE_LIMIT_STORAGE = os.getenv("RATE_LIMIT_STORAGE", "memory://")

limiter = Limiter(
    key_func=get_real_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=RATE_LIMIT_ENABLED,
    storage_uri=RATE_LIMIT_STORAGE,
)


# ==================================================
# HANDLERS
# ==================================================

MENSAGEM_LIMITE = "Muitas tentativas. Tente novamente em alguns minutos."


async def rate_limit_exceeded_handler(request: Request, exc: Exception):
    """
    Handler para rate limit excedido.

    Rotas de API recebem JSON 429; formulários das páginas voltam para a
    página de origem com uma mensagem flash.
    """
    exc_detail = getattr(exc, "detail", str(exc))
    logger.warning(
        f"Rate limit excedido: {get_real_ip(request)} - {request.url.path} - {exc_detail}"
    )

    if "/api/" in request.url.path:
        return JSONResponse(
            status_code=429,
            content={
                "detail": MENSAGEM_LIMITE,
                "error": "rate_limit_exceeded",
                "retry_after": "60"
            },
            headers={"Retry-After": "60"}
        )

    flash(request, MENSAGEM_LIMITE, "error")
    return RedirectResponse(url=request.url.path, status_code=303)


# ==================================================
# CONSTANTES PARA USO DIRETO
# ==================================================

LIMITS = {
    "login": RATE_LIMIT_LOGIN,
    "password_reset": RATE_LIMIT_PASSWORD_RESET,
    "default": RATE_LIMIT_DEFAULT,
    "upload": RATE_LIMIT_UPLOAD,
    "export": RATE_LIMIT_EXPORT,
}
