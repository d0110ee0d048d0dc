# utils/templates.py
"""
Templates Jinja2 das páginas renderizadas no servidor.

render() injeta em todo template o usuário logado, o contador de
aprovações pendentes (menu do administrador) e as mensagens flash.
"""

from datetime import date, datetime
from typing import Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from config import TEMPLATES_DIR
from utils.flash import get_flashed_messages
from utils.timezone import format_local, format_date

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _data_br(valor) -> str:
    if isinstance(valor, datetime):
        return format_local(valor, "%d/%m/%Y")
    if isinstance(valor, date):
        return format_date(valor)
    return valor or ""


def _data_hora_local(valor: Optional[datetime]) -> str:
    return format_local(valor) if valor else ""


templates.env.filters["data_br"] = _data_br
templates.env.filters["data_hora_local"] = _data_hora_local
templates.env.globals["get_flashed_messages"] = get_flashed_messages


def render(request: Request, name: str, context: Optional[dict] = None, status_code: int = 200):
    """TemplateResponse com o contexto comum das páginas."""
    ctx = {
        "user": getattr(request.state, "user", None),
        "pending_count": getattr(request.state, "pending_count", 0),
    }
    ctx.update(context or {})
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)
