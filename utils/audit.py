# utils/audit.py
"""
SECURITY: Audit logging de eventos sensíveis.

Eventos registrados:
- AUTH_*: login, logout, troca e redefinição de senha
- USER_*: cadastro e alteração de colaboradores
- MOVEMENT_*: decisões sobre movimentações do banco de horas
- DATA_EXPORT: exportação de relatórios
- ACCESS_DENIED: acesso a área restrita

O histórico funcional de cada movimentação fica em movimentacoes_logs;
este módulo cobre a trilha de segurança (quem, de onde, quando).
"""

import json
import logging
import os
from enum import Enum
from typing import Optional, Dict, Any

from fastapi import Request

from config import BASE_DIR, ENV
from middleware.request_id import get_request_id
from utils.timezone import get_utc_now

audit_logger = logging.getLogger("security.audit")
audit_logger.setLevel(logging.INFO)

# Arquivo de auditoria (fora dos testes)
if ENV != "test":
    LOG_DIR = os.getenv("AUDIT_LOG_DIR", str(BASE_DIR / "logs"))
    os.makedirs(LOG_DIR, exist_ok=True)

    audit_handler = logging.FileHandler(
        os.path.join(LOG_DIR, "audit.log"),
        encoding="utf-8"
    )
    audit_handler.setLevel(logging.INFO)
    audit_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    audit_logger.addHandler(audit_handler)


class AuditEvent(str, Enum):
    """Tipos de eventos de auditoria"""
    AUTH_LOGIN_SUCCESS = "AUTH_LOGIN_SUCCESS"
    AUTH_LOGIN_FAILURE = "AUTH_LOGIN_FAILURE"
    AUTH_LOGOUT = "AUTH_LOGOUT"
    AUTH_PASSWORD_CHANGE = "AUTH_PASSWORD_CHANGE"
    AUTH_PASSWORD_RESET_REQUEST = "AUTH_PASSWORD_RESET_REQUEST"
    AUTH_PASSWORD_RESET = "AUTH_PASSWORD_RESET"

    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"
    USER_ACTIVATED = "USER_ACTIVATED"
    USER_DEACTIVATED = "USER_DEACTIVATED"

    MOVEMENT_APPROVED = "MOVEMENT_APPROVED"
    MOVEMENT_REJECTED = "MOVEMENT_REJECTED"
    MOVEMENT_BULK_APPROVED = "MOVEMENT_BULK_APPROVED"

    ACCESS_DENIED = "ACCESS_DENIED"
    DATA_EXPORT = "DATA_EXPORT"


def get_client_ip(request: Optional[Request]) -> str:
    """SECURITY: Extrai IP real do cliente considerando proxies."""
    if not request:
        return "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def mask_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """SECURITY: Mascara dados sensíveis antes de logar."""
    sensitive_keys = {
        "password", "senha", "secret", "token", "authorization", "cpf", "password_hash"
    }

    masked = {}
    for key, value in data.items():
        key_lower = key.lower()

        if any(s in key_lower for s in sensitive_keys):
            masked[key] = "***MASKED***"
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        elif isinstance(value, str) and len(value) > 100:
            masked[key] = value[:100] + "...[truncated]"
        else:
            masked[key] = value

    return masked


def build_audit_record(
    event: AuditEvent,
    user_id: Optional[int] = None,
    username: Optional[str] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True,
) -> Dict[str, Any]:
    """Monta o registro de auditoria (separado para facilitar testes)."""
    request_id = get_request_id()
    if not request_id and request:
        request_id = getattr(request.state, "request_id", None)

    record = {
        "event": event.value,
        "timestamp": get_utc_now().isoformat(),
        "success": success,
        "user_id": user_id,
        "username": username,
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("User-Agent", "unknown") if request else "unknown",
        "path": str(request.url.path) if request else "unknown",
        "method": request.method if request else "unknown",
        "request_id": request_id,
    }
    if details:
        record["details"] = mask_sensitive_data(details)
    return record


def log_audit_event(
    event: AuditEvent,
    user_id: Optional[int] = None,
    username: Optional[str] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True,
    severity: str = "INFO"
):
    """
    SECURITY: Registra evento de auditoria.

    Example:
        log_audit_event(
            AuditEvent.AUTH_LOGIN_SUCCESS,
            user_id=user.id,
            username=user.username,
            request=request,
        )
    """
    record = build_audit_record(event, user_id, username, request, details, success)
    log_message = json.dumps(record, ensure_ascii=False, default=str)

    level = getattr(logging, severity.upper(), logging.INFO)
    audit_logger.log(level, log_message)


# ============================================
# Funções de conveniência para eventos comuns
# ============================================

def log_login_success(user_id: int, username: str, request: Request):
    log_audit_event(
        AuditEvent.AUTH_LOGIN_SUCCESS,
        user_id=user_id,
        username=username,
        request=request
    )


def log_login_failure(identifier: str, request: Request, reason: str = "invalid_credentials"):
    log_audit_event(
        AuditEvent.AUTH_LOGIN_FAILURE,
        username=identifier,
        request=request,
        details={"reason": reason},
        success=False,
        severity="WARNING"
    )


def log_logout(user_id: int, username: str, request: Request):
    log_audit_event(
        AuditEvent.AUTH_LOGOUT,
        user_id=user_id,
        username=username,
        request=request
    )


def log_password_change(user_id: int, username: str, request: Request, changed_by: Optional[str] = None):
    log_audit_event(
        AuditEvent.AUTH_PASSWORD_CHANGE,
        user_id=user_id,
        username=username,
        request=request,
        details={"changed_by": changed_by or username}
    )


def log_password_reset_request(email: str, request: Request, user_found: bool):
    """Registra pedido de recuperação (a resposta ao usuário é sempre genérica)."""
    log_audit_event(
        AuditEvent.AUTH_PASSWORD_RESET_REQUEST,
        username=email,
        request=request,
        details={"user_found": user_found},
        success=user_found
    )


def log_password_reset(user_id: int, username: str, request: Request):
    log_audit_event(
        AuditEvent.AUTH_PASSWORD_RESET,
        user_id=user_id,
        username=username,
        request=request
    )


def log_user_created(created_user_id: int, created_username: str, created_by: str, request: Request):
    log_audit_event(
        AuditEvent.USER_CREATED,
        user_id=created_user_id,
        username=created_username,
        request=request,
        details={"created_by": created_by}
    )


def log_user_updated(user_id: int, username: str, updated_by: str, request: Request, fields: list):
    log_audit_event(
        AuditEvent.USER_UPDATED,
        user_id=user_id,
        username=username,
        request=request,
        details={"updated_by": updated_by, "fields": fields}
    )


def log_user_status_change(user_id: int, username: str, changed_by: str, request: Request, active: bool):
    log_audit_event(
        AuditEvent.USER_ACTIVATED if active else AuditEvent.USER_DEACTIVATED,
        user_id=user_id,
        username=username,
        request=request,
        details={"changed_by": changed_by},
        severity="INFO" if active else "WARNING"
    )


def log_movement_decision(
    user_id: int,
    username: str,
    request: Optional[Request],
    movimentacao_id: Optional[int],
    approved: bool,
    count: int = 1
):
    """Registra aprovação/rejeição (individual ou em massa)."""
    if movimentacao_id is None:
        event = AuditEvent.MOVEMENT_BULK_APPROVED
    else:
        event = AuditEvent.MOVEMENT_APPROVED if approved else AuditEvent.MOVEMENT_REJECTED
    log_audit_event(
        event,
        user_id=user_id,
        username=username,
        request=request,
        details={"movimentacao_id": movimentacao_id, "count": count}
    )


def log_access_denied(user_id: Optional[int], username: Optional[str], request: Request, reason: str):
    log_audit_event(
        AuditEvent.ACCESS_DENIED,
        user_id=user_id,
        username=username,
        request=request,
        details={"reason": reason},
        success=False,
        severity="WARNING"
    )


def log_data_export(
    user_id: int,
    username: str,
    request: Request,
    export_type: str,
    record_count: int,
    format: str = "unknown"
):
    """
    Registra exportação de dados para compliance.

    Args:
        export_type: Tipo de dados exportados (ex: "relatorio_movimentacoes")
        record_count: Quantidade de registros
        format: csv, xlsx ou pdf
    """
    log_audit_event(
        AuditEvent.DATA_EXPORT,
        user_id=user_id,
        username=username,
        request=request,
        details={
            "export_type": export_type,
            "record_count": record_count,
            "format": format
        }
    )
