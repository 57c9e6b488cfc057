# -*- coding: utf-8 -*-
"""
tradevault/shared/events/outbox.py

Cola de eventos pendientes asociada a la sesión SQLAlchemy.

Los servicios encolan eventos durante la unidad de trabajo; atomic()
los publica solo cuando la transacción externa confirma y descarta
los encolados dentro de un bloque que hizo rollback.

Autor: TradeVault
Fecha: 2026-10-06
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from .bus import DomainEvent, EventBus

_OUTBOX_KEY = "tradevault.outbox"

_Entry = Tuple[EventBus, DomainEvent]


def _outbox(session: AsyncSession) -> List[_Entry]:
    return session.info.setdefault(_OUTBOX_KEY, [])


def enqueue(session: AsyncSession, bus: Optional[EventBus], event: DomainEvent) -> None:
    if bus is None:
        return
    _outbox(session).append((bus, event))


def outbox_mark(session: AsyncSession) -> int:
    return len(_outbox(session))


def discard_since(session: AsyncSession, mark: int) -> None:
    del _outbox(session)[mark:]


async def flush(session: AsyncSession) -> int:
    """Publica y vacía los eventos pendientes. Devuelve cuántos publicó."""
    pending = list(_outbox(session))
    _outbox(session).clear()
    for bus, event in pending:
        await bus.publish(event)
    return len(pending)


__all__ = ["enqueue", "flush", "outbox_mark", "discard_since"]

# Fin del archivo tradevault/shared/events/outbox.py
