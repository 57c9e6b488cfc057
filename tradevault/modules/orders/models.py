# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/models.py

Modelo ORM de órdenes.

Invariantes de montos (fijados al crear, nunca recalculados):
- total_amount   = price + buyer_fee
- seller_receives = price - seller_fee

El status solo cambia vía OrderService / DisputeService; la columna
version (version_id_col) detecta escrituras concurrentes.

Autor: TradeVault
Fecha: 2026-10-10
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradevault.shared.database.base import Base, TimestampMixin, as_str_enum
from .enums import CancelledBy, OrderStatus


class Order(TimestampMixin, Base):
    """Una transacción comprador-vendedor sobre un listing."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    listing_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    selected_tier: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ---- Montos (unidades mínimas) ----
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    buyer_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)
    seller_fee: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    seller_receives: Mapped[int] = mapped_column(BigInteger, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="NGN")

    status: Mapped[OrderStatus] = mapped_column(
        as_str_enum(OrderStatus, name="order_status"),
        nullable=False,
        default=OrderStatus.PENDING,
    )

    # ---- Entrega ----
    delivery_days: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    delivery_deadline: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    delivery_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    auto_complete_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # ---- Cierre ----
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    buyer_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_by: Mapped[Optional[CancelledBy]] = mapped_column(
        as_str_enum(CancelledBy, name="order_cancelled_by"),
        nullable=True,
    )
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("price > 0", name="price_positive"),
        CheckConstraint("buyer_fee >= 0 AND seller_fee >= 0", name="fees_non_negative"),
        CheckConstraint("total_amount = price + buyer_fee", name="total_amount"),
        CheckConstraint("seller_receives = price - seller_fee", name="seller_receives"),
        CheckConstraint("buyer_id <> seller_id", name="distinct_parties"),
        Index("ix_orders_status_auto_complete", "status", "auto_complete_at"),
        Index("ix_orders_status_created", "status", "created_at"),
    )

    @property
    def platform_fee(self) -> int:
        return self.buyer_fee + self.seller_fee

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.seller_id)

    def __repr__(self) -> str:
        return f"<Order {self.order_number} status={self.status.value} total={self.total_amount}>"


__all__ = ["Order"]

# Fin del archivo tradevault/modules/orders/models.py
