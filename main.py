# main.py
"""
Banco de Horas - Aplicação FastAPI Principal

Reúne:
- Autenticação (login, logout, recuperação de senha)
- API do banco de horas (/api/v1/*)
- Páginas do administrador (/admin/*) e do colaborador (/meu-perfil, /profile/*)

Com autenticação via JWT em cookie HttpOnly.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from config import BASE_DIR, IS_PRODUCTION, SESSION_SECRET_KEY, UPLOAD_FOLDER
from database.init_db import init_database
from middleware.request_id import RequestIDMiddleware, get_request_id
from utils.logging_config import setup_logging
from utils.rate_limit import limiter, rate_limit_exceeded_handler
from utils.templates import render

from auth.dependencies import AUTH_COOKIE_NAME, LoginRedirect
from auth.router import router as auth_router
from users.router import router as users_router
from admin.router import router as admin_router

# Import dos módulos do banco de horas
from sistemas.banco_horas.exceptions import BancoHorasError, status_http
from sistemas.banco_horas.router import router as movements_router, reports_router, sugestao_router
from sistemas.banco_horas.router_cadastros import departments_router, profiles_router, search_router
from sistemas.banco_horas.router_escala import router as escala_router
from sistemas.banco_horas.router_paginas import router as paginas_router

logger = logging.getLogger(__name__)

STATIC_DIR = BASE_DIR / "frontend" / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle events da aplicação.
    Executa na inicialização e no shutdown.
    """
    # Startup
    setup_logging()
    logger.info("🚀 Iniciando Banco de Horas...")
    init_database()
    yield
    # Shutdown
    logger.info("👋 Encerrando Banco de Horas...")


# Cria a aplicação FastAPI
app = FastAPI(
    title="Banco de Horas",
    description="Controle de banco de horas: lançamentos, aprovações, escalas e relatórios",
    version="1.0.0",
    lifespan=lifespan
)

# SECURITY: Rate limiting (slowapi)
app.state.limiter = limiter

# Request ID para rastreamento nos logs
app.add_middleware(RequestIDMiddleware)

# Sessão assinada para as mensagens flash
app.add_middleware(
    SessionMiddleware,
    secret_key=SESSION_SECRET_KEY,
    same_site="lax",
    https_only=IS_PRODUCTION,
)

# Configuração de CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Fotos de perfil e anexos
UPLOAD_FOLDER.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(UPLOAD_FOLDER)), name="uploads")

# Arquivos estáticos
if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


# ==================================================
# TRATAMENTO DE ERROS
# ==================================================

def is_api_request(request: Request) -> bool:
    """Rotas JSON: /api/v1/*, /admin/api/*, /profile/api/* e .../api"""
    path = request.url.path
    return "/api/" in path or path.endswith("/api")


def wants_json(request: Request) -> bool:
    if is_api_request(request) or request.method != "GET":
        return True
    return "application/json" in request.headers.get("accept", "")


@app.exception_handler(LoginRedirect)
async def login_redirect_handler(request: Request, exc: LoginRedirect):
    response = RedirectResponse(url=exc.url, status_code=303)
    if exc.clear_cookie:
        response.delete_cookie(AUTH_COOKIE_NAME, path="/")
    return response


@app.exception_handler(BancoHorasError)
async def banco_horas_error_handler(request: Request, exc: BancoHorasError):
    """Erros de negócio: JSON nas rotas de API, página de erro nas demais."""
    status_code = status_http(exc)
    if status_code >= 500:
        logger.error(f"Erro de configuração em {request.url.path}: {exc}")

    if wants_json(request):
        return JSONResponse(status_code=status_code, content={"success": False, "message": str(exc)})
    return render(request, "error.html", {"title": "Erro", "message": str(exc)}, status_code=status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if wants_json(request):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    if exc.status_code == 404:
        titulo, mensagem = "Página não encontrada", "A página que você procura não existe."
    else:
        titulo, mensagem = "Erro", exc.detail
    return render(request, "error.html", {"title": titulo, "message": mensagem}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Validação Pydantic: 400 com os erros por campo."""
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Dados inválidos.",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Erro inesperado: detalhes só fora de produção."""
    logger.exception(f"Erro não tratado em {request.method} {request.url.path}: {exc}")

    if is_api_request(request):
        content = {"success": False, "message": "Erro interno do servidor."}
        if not IS_PRODUCTION:
            content["error"] = str(exc)
        content["request_id"] = get_request_id()
        return JSONResponse(status_code=500, content=content)

    return render(request, "error.html", {
        "title": "Erro no Servidor",
        "message": "Ocorreu um erro inesperado. Tente novamente mais tarde.",
        "error": None if IS_PRODUCTION else str(exc),
    }, status_code=500)


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# ==================================================
# ROTAS DO PORTAL
# ==================================================

@app.get("/health")
async def health_check():
    """Health check para monitoramento"""
    return {"status": "ok", "service": "banco-horas"}


# ==================================================
# ROUTERS DE AUTENTICAÇÃO E USUÁRIOS
# ==================================================

app.include_router(auth_router)
app.include_router(users_router)


# ==================================================
# ROUTER DE ADMINISTRAÇÃO
# ==================================================

app.include_router(admin_router)
app.include_router(escala_router)


# ==================================================
# API DO BANCO DE HORAS
# ==================================================

app.include_router(movements_router)
app.include_router(reports_router)
app.include_router(sugestao_router)
app.include_router(departments_router)
app.include_router(profiles_router)
app.include_router(search_router)


# ==================================================
# PÁGINAS (Jinja2)
# ==================================================

app.include_router(paginas_router)


# ==================================================
# EXECUÇÃO DIRETA
# ==================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
