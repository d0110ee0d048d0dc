# utils/flash.py
"""
Mensagens flash para as páginas renderizadas no servidor.

As mensagens ficam na sessão assinada (SessionMiddleware) até a próxima
renderização de template, que as consome.

Uso:
    flash(request, "Colaborador criado com sucesso.", "success")
    return RedirectResponse("/admin/colaboradores", status_code=303)
"""

from typing import List, Dict

from fastapi import Request

SESSION_KEY = "_flashes"
CATEGORIAS = {"success", "error", "warning", "info"}


def flash(request: Request, message: str, category: str = "info") -> None:
    """Agenda uma mensagem para a próxima página exibida."""
    if category not in CATEGORIAS:
        category = "info"
    mensagens = request.session.get(SESSION_KEY, [])
    mensagens.append({"message": message, "category": category})
    request.session[SESSION_KEY] = mensagens


def get_flashed_messages(request: Request) -> List[Dict[str, str]]:
    """Retorna e remove as mensagens pendentes da sessão."""
    if "session" not in request.scope:
        return []
    return request.session.pop(SESSION_KEY, [])
