# sistemas/banco_horas/__init__.py
"""
Módulo Banco de Horas

Controle das horas extras e folgas dos colaboradores:
1. Lançamento de créditos e débitos (com proteção contra envio duplicado)
2. Aprovação pelos administradores, com notificação por email
3. Saldo calculado apenas com movimentações aprovadas
4. Escalas mensais, relatórios e exportação (CSV, Excel, PDF)
"""
