# -*- coding: utf-8 -*-
"""
tradevault/shared/locks/models.py

Tabla distributed_locks: una fila por lock con dueño y expiración.
La PK sobre lock_name garantiza que solo un worker la posea a la vez.

Autor: TradeVault
Fecha: 2026-10-07
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from tradevault.shared.database.base import Base
from tradevault.shared.utils.datetime_helpers import utcnow


class DistributedLock(Base):
    __tablename__ = "distributed_locks"

    lock_name: Mapped[str] = mapped_column(String(120), primary_key=True)
    owner_token: Mapped[str] = mapped_column(String(64), nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_distributed_locks_expires_at", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<DistributedLock name={self.lock_name} owner={self.owner_token[:8]} expires={self.expires_at}>"


__all__ = ["DistributedLock"]

# Fin del archivo tradevault/shared/locks/models.py
