# utils/timezone.py
"""
POLÍTICA GLOBAL DE TIMEZONE DO SISTEMA

REGRAS:
1. GRAVAÇÃO NO BANCO: Sempre UTC (timezone-aware)
2. EXIBIÇÃO NAS PÁGINAS E RELATÓRIOS: Sempre America/Sao_Paulo (UTC-3)
3. SERIALIZAÇÃO JSON: ISO 8601 com timezone explícito

USO:
    from utils.timezone import get_utc_now, to_local, format_local

    created_at = get_utc_now()
    texto = format_local(created_at)

IMPORTANTE:
- Nunca use datetime.utcnow() ou datetime.now() diretamente
- Datas de movimentação (sem hora) usam today_local()
"""

from datetime import datetime, date, timezone
from typing import Optional
import pytz

# =============================================================================
# CONFIGURAÇÃO DE TIMEZONE
# =============================================================================

TIMEZONE_LOCAL_NAME = "America/Sao_Paulo"
TIMEZONE_LOCAL = pytz.timezone(TIMEZONE_LOCAL_NAME)

UTC = timezone.utc


# =============================================================================
# FUNÇÕES PRINCIPAIS
# =============================================================================

def now_utc() -> datetime:
    """
    Retorna o datetime atual em UTC com timezone-aware.

    USE ESTA FUNÇÃO para gravar timestamps no banco de dados.
    """
    return datetime.now(UTC)


def now_local() -> datetime:
    """Retorna o datetime atual no timezone local (America/Sao_Paulo)."""
    return datetime.now(TIMEZONE_LOCAL)


def today_local() -> date:
    """Data de hoje no timezone local."""
    return now_local().date()


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Converte um datetime para o timezone local.

    Datetimes naive são tratados como UTC (é assim que o SQLite os devolve).
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(TIMEZONE_LOCAL)


def to_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Converte um datetime para UTC.

    Datetimes naive são tratados como horário local.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = TIMEZONE_LOCAL.localize(dt)
    return dt.astimezone(UTC)


def format_local(dt: Optional[datetime], fmt: str = "%d/%m/%Y %H:%M") -> str:
    """Formata um datetime no horário local. Retorna string vazia para None."""
    local = to_local(dt)
    if local is None:
        return ""
    return local.strftime(fmt)


def format_date(d: Optional[date], fmt: str = "%d/%m/%Y") -> str:
    """Formata uma data no padrão brasileiro."""
    if d is None:
        return ""
    return d.strftime(fmt)


def get_utc_now() -> datetime:
    """Alias usado como default das colunas de timestamp."""
    return now_utc()
