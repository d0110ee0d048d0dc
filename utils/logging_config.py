# utils/logging_config.py
"""
Configuração centralizada de logging estruturado com structlog.

- Produção: JSON (uma linha por evento)
- Desenvolvimento: console legível
- request_id da requisição atual incluído automaticamente

USO:
    from utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Movimentação aprovada", movimentacao_id=10, aprovador="admin")
"""

import logging
import sys
from functools import lru_cache

import structlog

from config import IS_PRODUCTION
from middleware.request_id import get_request_id

SERVICE_NAME = "banco-horas"


def add_request_id(logger, method_name: str, event_dict: dict) -> dict:
    """
    Processador structlog que adiciona request_id automaticamente.

    Obtém o request_id do ContextVar definido no middleware.
    """
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def add_service_info(logger, method_name: str, event_dict: dict) -> dict:
    """Adiciona o nome do serviço ao log."""
    event_dict["service"] = SERVICE_NAME
    return event_dict


def _shared_processors() -> list:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_request_id,
        add_service_info,
    ]


def configure_structlog():
    """
    Configura structlog para logging estruturado.

    Os eventos são entregues ao logging padrão, que decide o formato final
    através do ProcessorFormatter instalado em configure_stdlib_logging().
    """
    structlog.configure(
        processors=_shared_processors() + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging():
    """
    Configura o logging padrão do Python para renderizar também os eventos
    de bibliotecas (uvicorn, sqlalchemy) no mesmo formato do structlog.
    """
    root_level = logging.INFO if IS_PRODUCTION else logging.DEBUG

    if IS_PRODUCTION:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(root_level)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
        foreign_pre_chain=_shared_processors(),
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)
    root_logger.handlers = [handler]

    # Silencia loggers verbosos
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


def setup_logging():
    """
    Função principal de configuração de logging.

    Chamada no lifespan da aplicação (main.py).
    """
    configure_stdlib_logging()
    configure_structlog()


@lru_cache(maxsize=128)
def get_logger(name: str):
    """
    Obtém um logger structlog.

    Uso:
        logger = get_logger(__name__)
        logger.info("mensagem", chave="valor")
    """
    return structlog.get_logger(name)


configure_structlog()


__all__ = [
    "setup_logging",
    "get_logger",
    "add_request_id",
    "add_service_info",
]
