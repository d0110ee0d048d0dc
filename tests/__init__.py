# tests/__init__.py
"""
Suite de testes do Banco de Horas.

- Regras de negócio (horas, movimentações, folgas, escala, cadastros)
- API e páginas via TestClient
- Utilitários (rate limit, request id, timezone, auditoria, uploads)
"""
