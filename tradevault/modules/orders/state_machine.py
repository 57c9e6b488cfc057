# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/state_machine.py

Tabla de transiciones y reglas de autorización de órdenes.

    pending    → paid | cancelled
    paid       → processing | cancelled | disputed
    processing → delivered | cancelled | disputed
    delivered  → completed | disputed
    disputed   → completed | refunded      (solo vía motor de disputas)

Terminales: completed, cancelled, refunded.

Autor: TradeVault
Fecha: 2026-10-10
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from tradevault.errors import AlreadyTerminal, InvalidTransition, NotAuthorized
from tradevault.shared.auth_context import Actor
from .enums import OrderStatus

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.DISPUTED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.DISPUTED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED, OrderStatus.DISPUTED}),
    OrderStatus.DISPUTED: frozenset({OrderStatus.COMPLETED, OrderStatus.REFUNDED}),
}

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}
)

# Destinos que solo alcanza el motor de disputas
DISPUTE_DRIVEN: FrozenSet[OrderStatus] = frozenset({OrderStatus.DISPUTED, OrderStatus.REFUNDED})

# Estados desde los que el comprador puede abrir disputa
DISPUTABLE: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.DELIVERED}
)


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def check_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """
    Valida current → target.

    Returns:
        True si la transición debe aplicarse; False si es un replay
        (current == target) y debe tratarse como no-op.

    Raises:
        AlreadyTerminal: la orden ya está en un estado terminal
        InvalidTransition: la transición no está en la tabla
    """
    if current == target:
        return False
    if is_terminal(current):
        raise AlreadyTerminal(
            f"Order is already {current.value}; cannot move to {target.value}",
            current=current.value,
            target=target.value,
        )
    if target not in TRANSITIONS.get(current, frozenset()):
        raise InvalidTransition(
            f"Cannot transition order from {current.value} to {target.value}",
            current=current.value,
            target=target.value,
        )
    return True


def authorize_transition(
    target: OrderStatus,
    actor: Actor,
    *,
    buyer_id: str,
    seller_id: str,
) -> None:
    """
    Quién puede pedir cada destino:
    - paid: comprador (o sistema/admin al capturar el pago)
    - processing / delivered: solo el vendedor
    - completed: comprador o sistema (timer de revisión)
    - cancelled: comprador, vendedor, admin o sistema (timeout)
    """
    is_buyer = actor.user_id == buyer_id
    is_seller = actor.user_id == seller_id

    if target == OrderStatus.PAID:
        allowed = is_buyer or actor.is_system or actor.is_admin
    elif target in (OrderStatus.PROCESSING, OrderStatus.DELIVERED):
        allowed = is_seller
    elif target == OrderStatus.COMPLETED:
        allowed = is_buyer or actor.is_system
    elif target == OrderStatus.CANCELLED:
        allowed = is_buyer or is_seller or actor.is_admin or actor.is_system
    else:
        allowed = False

    if not allowed:
        raise NotAuthorized(
            f"Actor {actor.user_id} ({actor.role.value}) may not move order to {target.value}",
            target=target.value,
        )


__all__ = [
    "TRANSITIONS",
    "TERMINAL_STATUSES",
    "DISPUTE_DRIVEN",
    "DISPUTABLE",
    "is_terminal",
    "check_transition",
    "authorize_transition",
]

# Fin del archivo tradevault/modules/orders/state_machine.py
