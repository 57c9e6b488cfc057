# -*- coding: utf-8 -*-
"""
tradevault/modules/disputes/models.py

Modelos ORM de disputas y su hilo de mensajes.

- disputes.order_id es UNIQUE: una disputa por orden.
- dispute_messages es append-only.

Autor: TradeVault
Fecha: 2026-10-12
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradevault.shared.database.base import Base, BigIntPK, TimestampMixin, as_str_enum
from .enums import DisputeReason, DisputeStatus, ResolutionType


class Dispute(TimestampMixin, Base):
    """Disputa abierta por el comprador contra el vendedor de una orden."""

    __tablename__ = "disputes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    dispute_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    order_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("orders.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )

    filed_by: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    against_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    reason: Mapped[DisputeReason] = mapped_column(
        as_str_enum(DisputeReason, name="dispute_reason"),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)

    seller_response: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    evidence: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[DisputeStatus] = mapped_column(
        as_str_enum(DisputeStatus, name="dispute_status"),
        nullable=False,
        default=DisputeStatus.OPEN,
    )
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # ---- Resolución ----
    resolution_type: Mapped[Optional[ResolutionType]] = mapped_column(
        as_str_enum(ResolutionType, name="dispute_resolution_type"),
        nullable=True,
    )
    resolution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    refund_amount: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    release_amount: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    resolved_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    auto_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    closed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_disputes_status_deadline", "status", "deadline"),
    )

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.filed_by, self.against_id)

    def __repr__(self) -> str:
        return f"<Dispute {self.dispute_number} order={self.order_id} status={self.status.value}>"


class DisputeMessage(TimestampMixin, Base):
    """Entrada del hilo de una disputa."""

    __tablename__ = "dispute_messages"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    dispute_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("disputes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(String(64), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


__all__ = ["Dispute", "DisputeMessage"]

# Fin del archivo tradevault/modules/disputes/models.py
