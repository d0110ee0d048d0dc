#!/usr/bin/env python
"""
Testes para validar a política de timezone do sistema.

Política:
- Backend grava em UTC (timezone-aware)
- Páginas e relatórios exibem em America/Sao_Paulo (UTC-3)

Uso:
    pytest tests/test_timezone.py -v
"""

from datetime import date, datetime, timezone


class TestTimezoneModule:
    """Testes do módulo utils/timezone.py"""

    def test_now_utc_returns_timezone_aware(self):
        """now_utc() deve retornar datetime com timezone UTC."""
        from utils.timezone import now_utc

        result = now_utc()

        assert result.tzinfo is not None, "Deve ser timezone-aware"
        assert result.tzinfo == timezone.utc, "Deve ser UTC"

    def test_now_local_returns_timezone_aware(self):
        from utils.timezone import now_local, TIMEZONE_LOCAL_NAME

        result = now_local()

        assert result.tzinfo is not None, "Deve ser timezone-aware"
        # pytz timezones têm representações diferentes, comparamos pelo nome
        assert TIMEZONE_LOCAL_NAME in str(result.tzinfo), "Deve ser timezone local"

    def test_to_local_converts_utc_to_local(self):
        """to_local() deve converter UTC para America/Sao_Paulo."""
        from utils.timezone import to_local

        utc_time = datetime(2026, 7, 1, 12, 0, tzinfo=timezone.utc)
        local_time = to_local(utc_time)

        diff_hours = local_time.utcoffset().total_seconds() / 3600
        assert diff_hours == -3, f"Offset deve ser -3h, mas é {diff_hours}h"

    def test_to_local_handles_naive_datetime(self):
        """to_local() deve tratar datetime naive como UTC (valores vindos do SQLite)."""
        from utils.timezone import to_local

        naive = datetime(2026, 1, 20, 18, 30, 0)
        local = to_local(naive)

        assert local.tzinfo is not None, "Resultado deve ser timezone-aware"
        assert local.hour == 15, f"Hora deve ser 15, mas é {local.hour}"

    def test_to_utc_handles_naive_as_local(self):
        from utils.timezone import to_utc

        result = to_utc(datetime(2026, 1, 20, 21, 30))

        assert result.tzinfo == timezone.utc
        assert result == datetime(2026, 1, 21, 0, 30, tzinfo=timezone.utc)

    def test_none_is_preserved(self):
        from utils.timezone import to_local, to_utc, format_local, format_date

        assert to_local(None) is None
        assert to_utc(None) is None
        assert format_local(None) == ""
        assert format_date(None) == ""


class TestFormatting:

    def test_format_local_usa_padrao_brasileiro(self):
        from utils.timezone import format_local

        utc = datetime(2026, 3, 10, 2, 15, tzinfo=timezone.utc)
        # 02:15 UTC ainda é o dia anterior em Sao Paulo
        assert format_local(utc) == "09/03/2026 23:15"

    def test_format_date(self):
        from utils.timezone import format_date

        assert format_date(date(2026, 10, 19)) == "19/10/2026"
        assert format_date(date(2026, 10, 19), "%Y-%m-%d") == "2026-10-19"

    def test_today_local_is_date(self):
        from utils.timezone import today_local, now_local

        assert today_local() == now_local().date()

    def test_get_utc_now_alias(self):
        from utils.timezone import get_utc_now

        assert get_utc_now().tzinfo == timezone.utc
