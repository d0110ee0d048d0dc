# auth/__init__.py
"""Autenticação: usuário, JWT em cookie e dependências de acesso."""
