# utils/validators.py
"""
Validadores reutilizáveis do Banco de Horas.

- Email
- CPF, telefone e CEP (dados cadastrais do perfil)
- Datas ISO

USO:
    from utils.validators import validate_email, parse_iso_date

    if not validate_email(email):
        raise ValueError("Email inválido")
"""

import re
from datetime import datetime, date
from typing import Optional, Union


# ============================================
# EMAIL
# ============================================

def validate_email(email: str) -> bool:
    """Valida formato de email."""
    if not email or not isinstance(email, str):
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email.strip()))


def normalize_email(email: str) -> str:
    """Normaliza email: lowercase e trim."""
    if not email:
        return ""
    return email.strip().lower()


# ============================================
# DADOS CADASTRAIS
# ============================================

def validate_cpf(cpf: str) -> bool:
    """
    Valida um CPF brasileiro (com ou sem formatação).

    Confere os dois dígitos verificadores.
    """
    cpf = re.sub(r'[^\d]', '', str(cpf or ""))

    if len(cpf) != 11 or cpf == cpf[0] * 11:
        return False

    soma = sum(int(cpf[i]) * (10 - i) for i in range(9))
    resto = soma % 11
    digito1 = 0 if resto < 2 else 11 - resto
    if int(cpf[9]) != digito1:
        return False

    soma = sum(int(cpf[i]) * (11 - i) for i in range(10))
    resto = soma % 11
    digito2 = 0 if resto < 2 else 11 - resto
    return int(cpf[10]) == digito2


def only_digits(value: Optional[str]) -> str:
    return re.sub(r'[^\d]', '', str(value or ""))


def format_cpf(cpf: str) -> str:
    """Formata CPF: 000.000.000-00"""
    digits = only_digits(cpf)
    if len(digits) != 11:
        return cpf
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def validate_telefone(telefone: str) -> bool:
    """Aceita telefones com DDD, com ou sem código do país."""
    tel = only_digits(telefone)
    if tel.startswith('55') and len(tel) > 11:
        tel = tel[2:]
    if len(tel) not in (10, 11):
        return False
    return 11 <= int(tel[:2]) <= 99


def validate_cep(cep: str) -> bool:
    return len(only_digits(cep)) == 8


# ============================================
# DATAS
# ============================================

def parse_iso_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Converte 'YYYY-MM-DD' em date.

    Returns:
        date ou None se vazio ou inválido
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None
