# -*- coding: utf-8 -*-
"""
tradevault/modules/escrow/models.py

Modelos ORM del escrow.

Tablas:
- escrow_transactions: una por orden; montos retenidos/liberados/reembolsados
- escrow_operations: registro de idempotencia (order_id, operation_type)

Invariante:
    release_amount + refund_amount + fee_amount <= amount
    (== amount en cualquier estado terminal)

Autor: TradeVault
Fecha: 2026-10-09
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradevault.shared.database.base import Base, BigIntPK, TimestampMixin, as_str_enum
from .enums import EscrowOperationType, EscrowStatus


class EscrowTransaction(TimestampMixin, Base):
    """
    Retención de fondos de una orden.

    - amount: total retenido (== order.total_amount)
    - release_amount: pagado al vendedor
    - refund_amount: devuelto al comprador
    - fee_amount: retenido por la plataforma
    - is_frozen: disputa abierta; no admite release/refund ordinarios
    - version: control optimista (version_id_col)
    """

    __tablename__ = "escrow_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    order_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("orders.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )

    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="NGN")

    status: Mapped[EscrowStatus] = mapped_column(
        as_str_enum(EscrowStatus, name="escrow_status"),
        nullable=False,
        default=EscrowStatus.HELD,
    )

    release_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    refund_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    fee_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    is_frozen: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    frozen_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    held_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    released_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    refunded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    processed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        CheckConstraint(
            "release_amount >= 0 AND refund_amount >= 0 AND fee_amount >= 0",
            name="parts_non_negative",
        ),
        CheckConstraint(
            "release_amount + refund_amount + fee_amount <= amount",
            name="conserved",
        ),
    )

    @property
    def remaining(self) -> int:
        return self.amount - self.release_amount - self.refund_amount - self.fee_amount

    def __repr__(self) -> str:
        return (
            f"<EscrowTransaction order={self.order_id} status={self.status.value} amount={self.amount} "
            f"released={self.release_amount} refunded={self.refund_amount} fee={self.fee_amount}>"
        )


class EscrowOperation(Base):
    """Una fila por operación aplicada; la unicidad hace idempotente el replay."""

    __tablename__ = "escrow_operations"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    order_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    escrow_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("escrow_transactions.id", ondelete="RESTRICT"),
        nullable=True,
    )

    operation_type: Mapped[EscrowOperationType] = mapped_column(
        as_str_enum(EscrowOperationType, name="escrow_operation_type"),
        nullable=False,
    )

    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    performed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("order_id", "operation_type", name="uq_escrow_operations_order_operation"),
    )


__all__ = ["EscrowTransaction", "EscrowOperation"]

# Fin del archivo tradevault/modules/escrow/models.py
