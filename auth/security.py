# auth/security.py
"""
Funções de segurança: hash de senha, JWT e tokens de redefinição
"""

import hashlib
import secrets
import uuid
from datetime import timedelta
from typing import Optional
from jose import JWTError, jwt
import bcrypt

from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from utils.timezone import get_utc_now


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verifica se a senha corresponde ao hash (hash inválido conta como falha)"""
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            password_hash.encode('utf-8')
        )
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    """Gera hash da senha"""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt()
    ).decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Cria um token JWT com os dados fornecidos.

    Args:
        data: Dados a codificar (ex: {"sub": username, "user_id": 1})
        expires_delta: Tempo de expiração customizado

    Returns:
        Token JWT como string
    """
    to_encode = data.copy()
    expire = get_utc_now() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))

    # jti permite revogar o token no logout
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decodifica um token JWT.

    Returns:
        Dicionário com dados do token ou None se inválido/expirado
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def generate_reset_token() -> str:
    """Token aleatório enviado por email para redefinição de senha."""
    return secrets.token_hex(32)


def hash_reset_token(token: str) -> str:
    """Apenas o hash do token é persistido."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
