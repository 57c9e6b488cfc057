# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/models.py

Modelos ORM del ledger: wallets, asientos y cuentas bancarias.

Tablas:
- wallets: saldo denormalizado por usuario (mantenido por LedgerStore)
- wallet_transactions: ledger append-only
- bank_accounts: destinos de retiro

Autor: TradeVault
Fecha: 2026-10-07
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from tradevault.shared.database.base import Base, BigIntPK, TimestampMixin, as_str_enum
from .enums import TransactionStatus, TransactionType


class Wallet(TimestampMixin, Base):
    """
    Saldo del usuario (denormalizado para lectura rápida).

    Columnas:
    - available_balance: fondos gastables
    - pending_balance: fondos apartados por retiros en vuelo
    - total_earned / total_spent / total_withdrawn: acumulados

    Constraints:
    - ck_wallets_available_non_negative: available_balance >= 0
    - ck_wallets_pending_non_negative: pending_balance >= 0

    Solo LedgerStore.post / LedgerStore.settle modifican estos campos.
    """

    __tablename__ = "wallets"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    available_balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    pending_balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_earned: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_spent: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_withdrawn: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="NGN")

    __table_args__ = (
        CheckConstraint("available_balance >= 0", name="available_non_negative"),
        CheckConstraint("pending_balance >= 0", name="pending_non_negative"),
    )

    @property
    def total_balance(self) -> int:
        return self.available_balance + self.pending_balance

    def __repr__(self) -> str:
        return (
            f"<Wallet id={self.id} user={self.user_id} "
            f"available={self.available_balance} pending={self.pending_balance}>"
        )


class WalletTransaction(TimestampMixin, Base):
    """
    Ledger inmutable de movimientos de una wallet.

    - amount: monto bruto con signo
    - fee: comisión asociada (informativa)
    - net_amount: efecto real sobre el saldo
    - balance_after: available_balance tras aplicar el asiento
    - reference: clave de idempotencia por wallet

    El único cambio permitido sobre una fila existente es la liquidación
    de un retiro pending → completed | failed.
    """

    __tablename__ = "wallet_transactions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    wallet_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("wallets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    tx_type: Mapped[TransactionType] = mapped_column(
        as_str_enum(TransactionType, name="wallet_tx_type"),
        nullable=False,
    )

    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    fee: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    net_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    balance_after: Mapped[int] = mapped_column(BigInteger, nullable=False)

    status: Mapped[TransactionStatus] = mapped_column(
        as_str_enum(TransactionStatus, name="wallet_tx_status"),
        nullable=False,
        default=TransactionStatus.COMPLETED,
    )

    order_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("orders.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    reference: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    tx_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    settled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("wallet_id", "reference", name="uq_wallet_transactions_wallet_reference"),
        CheckConstraint("amount <> 0", name="amount_nonzero"),
        Index("ix_wallet_transactions_wallet_created", "wallet_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<WalletTransaction id={self.id} wallet={self.wallet_id} type={self.tx_type.value} "
            f"net={self.net_amount:+d} status={self.status.value}>"
        )


class BankAccount(TimestampMixin, Base):
    """Cuenta bancaria destino de retiros. Una sola por defecto por usuario."""

    __tablename__ = "bank_accounts"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    bank_name: Mapped[str] = mapped_column(String(120), nullable=False)
    bank_code: Mapped[str] = mapped_column(String(20), nullable=False)
    account_number: Mapped[str] = mapped_column(String(20), nullable=False)
    account_name: Mapped[str] = mapped_column(String(160), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("user_id", "bank_code", "account_number", name="uq_bank_accounts_user_account"),
    )

    @property
    def masked_account_number(self) -> str:
        return f"****{self.account_number[-4:]}"

    def __repr__(self) -> str:
        return f"<BankAccount id={self.id} user={self.user_id} bank={self.bank_code} default={self.is_default}>"


__all__ = ["Wallet", "WalletTransaction", "BankAccount"]

# Fin del archivo tradevault/modules/ledger/models.py
