# middleware/request_id.py
"""
Middleware que atribui um Request ID a cada requisição.

- Reaproveita o header X-Request-ID quando enviado pelo proxy
- Disponibiliza o ID via contextvars (get_request_id) para os logs
- Devolve o ID no header X-Request-ID da resposta
- Registra método, caminho, status e duração de cada requisição

Uso em outros módulos:
    from middleware.request_id import get_request_id
"""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

logger = logging.getLogger(__name__)


def get_request_id() -> Optional[str]:
    """
    Retorna o Request ID da requisição atual.

    Retorna None fora do contexto de uma requisição.
    """
    return _request_id_ctx.get()


def set_request_id(request_id: Optional[str]) -> None:
    """Define o Request ID da requisição atual (uso interno do middleware)."""
    _request_id_ctx.set(request_id)


def generate_request_id() -> str:
    """Gera um novo Request ID (UUID v4)."""
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Uso:
        app.add_middleware(RequestIDMiddleware)
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        existing_request_id = request.headers.get(REQUEST_ID_HEADER)
        if existing_request_id:
            request_id = existing_request_id[:MAX_REQUEST_ID_LENGTH]
        else:
            request_id = generate_request_id()

        request.state.request_id = request_id
        set_request_id(request_id)
        inicio = time.perf_counter()

        try:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            duracao_ms = (time.perf_counter() - inicio) * 1000
            if not request.url.path.startswith("/uploads"):
                logger.info(
                    "%s %s -> %s (%.1f ms)",
                    request.method, request.url.path, response.status_code, duracao_ms
                )
            return response

        except Exception as e:
            # Deixa a exceção seguir para os handlers de erro
            logger.error(f"[{request_id}] Erro durante requisição: {e}")
            raise

        finally:
            set_request_id(None)
