# -*- coding: utf-8 -*-
"""
tradevault/shared/utils/datetime_helpers.py

Utilidades para manejo consistente de timestamps UTC.

SQLite devuelve datetimes naive aunque la columna sea timezone=True;
toda comparación de plazos (deadline, auto_complete_at, TTL) pasa por
ensure_utc() antes de compararse con utcnow().

Autor: TradeVault
Fecha: 2026-10-05
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Retorna el timestamp UTC actual (timezone-aware).

    Examples:
        >>> now = utcnow()
        >>> now.tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Asegura que un datetime sea UTC timezone-aware.

    Examples:
        >>> dt_naive = datetime(2026, 10, 5, 14, 30, 0)
        >>> ensure_utc(dt_naive).tzinfo == timezone.utc
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def is_past(dt: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True si `dt` existe y ya pasó respecto a `now` (UTC)."""
    if dt is None:
        return False
    return ensure_utc(dt) <= (now or utcnow())


def to_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """
    Convierte datetime a string ISO 8601 con 'Z' para UTC.

    Examples:
        >>> to_iso8601(datetime(2026, 10, 5, 14, 30, 0, tzinfo=timezone.utc))
        '2026-10-05T14:30:00Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace('+00:00', 'Z')


__all__ = ["utcnow", "ensure_utc", "is_past", "to_iso8601"]
# Fin del archivo tradevault/shared/utils/datetime_helpers.py
