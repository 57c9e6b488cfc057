# -*- coding: utf-8 -*-
"""
tradevault/shared/events/__init__.py

Bus de eventos de dominio en proceso (publish/subscribe).

Autor: TradeVault
Fecha: 2026-10-06
"""

from .bus import DomainEvent, EventBus, EventHandler, EventName
from .outbox import discard_since, enqueue, flush, outbox_mark

__all__ = [
    "DomainEvent",
    "EventBus",
    "EventHandler",
    "EventName",
    "enqueue",
    "flush",
    "outbox_mark",
    "discard_since",
]

# Fin del archivo tradevault/shared/events/__init__.py
