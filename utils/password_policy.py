# utils/password_policy.py
"""
SECURITY: Política de senhas.

Regras aplicadas na troca e na redefinição de senha:
- Comprimento mínimo de 6 caracteres
- Confirmação idêntica à nova senha
- Senhas triviais bloqueadas
"""

from typing import Tuple, List, Optional

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128

# Senhas triviais bloqueadas
COMMON_PASSWORDS = {
    "123456", "1234567", "12345678", "123456789", "1234567890",
    "111111", "000000", "123123", "654321", "abcdef", "abc123",
    "qwerty", "password", "senha", "senha123", "mudar123", "admin123",
}


def check_password_strength(password: str, confirmation: Optional[str] = None) -> Tuple[bool, List[str]]:
    """
    SECURITY: Verifica uma nova senha.

    Args:
        password: Nova senha
        confirmation: Confirmação digitada (ignorada quando None)

    Returns:
        Tuple (is_valid, list_of_errors)
    """
    errors = []
    password = password or ""

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres.")

    if len(password) > MAX_PASSWORD_LENGTH:
        errors.append(f"A senha deve ter no máximo {MAX_PASSWORD_LENGTH} caracteres.")

    if password and password.lower() in COMMON_PASSWORDS:
        errors.append("Esta senha é muito comum e não pode ser usada.")

    if confirmation is not None and password != confirmation:
        errors.append("As senhas não coincidem.")

    return len(errors) == 0, errors


def get_password_requirements() -> dict:
    """Requisitos de senha exibidos nas páginas de troca/redefinição."""
    return {
        "min_length": MIN_PASSWORD_LENGTH,
        "max_length": MAX_PASSWORD_LENGTH,
        "description": (
            f"A senha deve ter entre {MIN_PASSWORD_LENGTH} e {MAX_PASSWORD_LENGTH} caracteres "
            "e não pode ser uma senha comum."
        )
    }
