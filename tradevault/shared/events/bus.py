# -*- coding: utf-8 -*-
"""
tradevault/shared/events/bus.py

EventBus en proceso para eventos del ciclo de vida.

- Suscripción por tipo de evento o comodín "*".
- Handlers async; se invocan en orden de suscripción.
- Un handler que falla se loguea y NO interrumpe a los demás ni al
  publicador: la transacción ya está confirmada cuando se publica.

Los consumidores (mensajería, email, push en tiempo real) se
suscriben aquí; el motor de órdenes no conoce el transporte.

Autor: TradeVault
Fecha: 2026-10-06
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List

from tradevault.shared.utils.datetime_helpers import utcnow

logger = logging.getLogger(__name__)

WILDCARD = "*"


class EventName(str, Enum):
    ORDER_CREATED = "OrderCreated"
    ORDER_STATUS_CHANGED = "OrderStatusChanged"
    ESCROW_POSTED = "EscrowPosted"
    DISPUTE_FILED = "DisputeFiled"
    DISPUTE_RESPONDED = "DisputeResponded"
    DISPUTE_MESSAGE_ADDED = "DisputeMessageAdded"
    DISPUTE_EVIDENCE_ADDED = "DisputeEvidenceAdded"
    DISPUTE_RESOLVED = "DisputeResolved"
    DISPUTE_CLOSED = "DisputeClosed"
    WITHDRAWAL_REQUESTED = "WithdrawalRequested"
    WITHDRAWAL_SETTLED = "WithdrawalSettled"


@dataclass(frozen=True)
class DomainEvent:
    name: EventName
    aggregate_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utcnow)


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """Pub/sub en proceso con handlers async por tipo de evento."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}
        self.published = 0
        self.failed = 0

    def subscribe(self, name: EventName | str, handler: EventHandler) -> None:
        key = name.value if isinstance(name, EventName) else name
        self._handlers.setdefault(key, []).append(handler)

    def unsubscribe(self, name: EventName | str, handler: EventHandler) -> None:
        key = name.value if isinstance(name, EventName) else name
        handlers = self._handlers.get(key, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: DomainEvent) -> None:
        targets = list(self._handlers.get(event.name.value, []))
        targets.extend(self._handlers.get(WILDCARD, []))
        self.published += 1

        for handler in targets:
            try:
                await handler(event)
            except Exception:
                self.failed += 1
                logger.exception(
                    "event_handler_failed event=%s aggregate=%s handler=%s",
                    event.name.value,
                    event.aggregate_id,
                    getattr(handler, "__qualname__", repr(handler)),
                )


__all__ = ["EventBus", "EventHandler", "EventName", "DomainEvent", "WILDCARD"]

# Fin del archivo tradevault/shared/events/bus.py
