# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/schemas.py

Schemas Pydantic para wallets, asientos, retiros y cuentas bancarias.
Los montos viajan en unidades mínimas (enteros).

Autor: TradeVault
Fecha: 2026-10-14
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .enums import TransactionStatus, TransactionType


# ========== REQUEST SCHEMAS ==========

class DepositIn(BaseModel):
    amount: int = Field(..., gt=0)
    reference: str = Field(..., min_length=1, max_length=100, description="ID del cargo en la pasarela")
    description: Optional[str] = Field(None, max_length=500)


class WithdrawalIn(BaseModel):
    amount: int = Field(..., gt=0)
    bank_account_id: int
    idempotency_key: Optional[str] = Field(None, max_length=80)


class WithdrawalFailIn(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class BankAccountIn(BaseModel):
    bank_name: str = Field(..., min_length=1, max_length=120)
    bank_code: str = Field(..., min_length=1, max_length=20)
    account_number: str = Field(..., min_length=6, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=160)
    is_default: bool = False

    @field_validator("account_number")
    @classmethod
    def digits_only(cls, v: str) -> str:
        v = v.strip()
        if not v.isdigit():
            raise ValueError("Account number must contain digits only")
        return v


# ========== RESPONSE SCHEMAS ==========

class WalletRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    available_balance: int
    pending_balance: int
    total_earned: int
    total_spent: int
    total_withdrawn: int
    currency: str
    updated_at: datetime


class WalletTransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    wallet_id: int
    tx_type: TransactionType
    amount: int
    fee: int
    net_amount: int
    balance_after: int
    status: TransactionStatus
    order_id: Optional[str] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("tx_metadata", "metadata"),
    )
    settled_at: Optional[datetime] = None
    created_at: datetime


class WalletTransactionListResponse(BaseModel):
    items: List[WalletTransactionRead]
    limit: int
    offset: int


class WalletStatsRead(BaseModel):
    total_deposits: int
    total_withdrawals: int
    total_spent: int
    total_earned: int
    pending_transactions: int


class BankAccountRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bank_name: str
    bank_code: str
    masked_account_number: str
    account_name: str
    is_default: bool
    is_verified: bool
    created_at: datetime


class ReconciliationRead(BaseModel):
    wallet_id: int
    reconciled_at: Optional[str] = None
    is_balanced: bool
    expected_total: int
    expected_available: int
    expected_pending: int
    actual_available: int
    actual_pending: int
    discrepancies: List[Dict[str, Any]] = Field(default_factory=list)


__all__ = [
    "DepositIn",
    "WithdrawalIn",
    "WithdrawalFailIn",
    "BankAccountIn",
    "WalletRead",
    "WalletTransactionRead",
    "WalletTransactionListResponse",
    "WalletStatsRead",
    "BankAccountRead",
    "ReconciliationRead",
]

# Fin del archivo tradevault/modules/ledger/schemas.py
