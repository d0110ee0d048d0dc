# utils/token_blacklist.py
"""
SECURITY: Blacklist para revogação de tokens JWT.

Usada no logout: o cookie é removido do navegador, e o token deixa de
ser aceito mesmo que tenha sido copiado antes.

A blacklist é mantida em memória e descarta tokens já expirados.
"""

import hashlib
import threading
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple
import logging

from jose import jwt

from config import SECRET_KEY, ALGORITHM
from utils.timezone import get_utc_now, UTC

logger = logging.getLogger("security.token_blacklist")


class TokenBlacklist:
    """
    SECURITY: Gerencia tokens revogados.

    Thread-safe usando locks para acesso concorrente.
    """

    def __init__(self, cleanup_interval: timedelta = timedelta(minutes=30)):
        # jti -> expiração do token
        self._blacklist: Dict[str, datetime] = {}
        self._lock = threading.Lock()
        self._last_cleanup = get_utc_now()
        self._cleanup_interval = cleanup_interval

    def _extract_jti_and_exp(self, token: str) -> Optional[Tuple[str, datetime]]:
        """
        Extrai JTI e expiração do token.

        Se o token não tem JTI, usa um hash do próprio token.
        """
        try:
            payload = jwt.decode(
                token,
                SECRET_KEY,
                algorithms=[ALGORITHM],
                options={"verify_exp": False}
            )
        except Exception as e:
            logger.warning(f"Erro ao decodificar token para blacklist: {e}")
            return None

        jti = payload.get("jti") or hashlib.sha256(token.encode()).hexdigest()[:32]

        exp = payload.get("exp")
        if exp:
            exp_time = datetime.fromtimestamp(exp, tz=UTC)
        else:
            exp_time = get_utc_now() + timedelta(hours=24)

        return jti, exp_time

    def revoke(self, token: str) -> bool:
        """
        SECURITY: Revoga um token.

        Returns:
            True se revogado (ou já expirado), False se o token é ilegível
        """
        result = self._extract_jti_and_exp(token)
        if not result:
            return False

        jti, exp_time = result
        if exp_time < get_utc_now():
            logger.debug("Token já expirado, não adicionado à blacklist")
            return True

        with self._lock:
            self._blacklist[jti] = exp_time
            logger.info(f"Token revogado: {jti[:8]}...")
            self._maybe_cleanup()

        return True

    def is_revoked(self, token: str) -> bool:
        """Token ilegível é considerado revogado."""
        result = self._extract_jti_and_exp(token)
        if not result:
            return True

        jti, _ = result
        with self._lock:
            return jti in self._blacklist

    def _maybe_cleanup(self):
        """Remove tokens expirados. Chamado dentro do lock."""
        now = get_utc_now()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        expirados = [jti for jti, exp in self._blacklist.items() if exp < now]
        for jti in expirados:
            del self._blacklist[jti]
        self._last_cleanup = now
        logger.debug(f"Cleanup da blacklist: {len(expirados)} removidos, {len(self._blacklist)} ativos")

    def __len__(self) -> int:
        with self._lock:
            return len(self._blacklist)

    def clear(self):
        """Limpa a blacklist. Apenas para testes."""
        with self._lock:
            self._blacklist.clear()


_blacklist_instance = TokenBlacklist()


def get_token_blacklist() -> TokenBlacklist:
    return _blacklist_instance


def revoke_token(token: str) -> bool:
    """Função de conveniência para revogar um token."""
    return get_token_blacklist().revoke(token)


def is_token_revoked(token: str) -> bool:
    """Função de conveniência para verificar se um token foi revogado."""
    return get_token_blacklist().is_revoked(token)
