# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/routes.py

Rutas de wallets (prefijo /wallets):
- /wallets/me, depósitos y cuentas bancarias del actor
- asientos, estadísticas y retiros por wallet_id
- liquidación de retiros y reconciliación (admin)

Autor: TradeVault
Fecha: 2026-10-14
"""

from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.dependencies import get_wallet_service
from tradevault.shared.auth_context import Actor, get_current_actor
from tradevault.shared.database.database import get_async_session
from .enums import TransactionStatus, TransactionType
from .repositories import TransactionFilters
from .schemas import (
    BankAccountIn,
    BankAccountRead,
    DepositIn,
    ReconciliationRead,
    WalletRead,
    WalletStatsRead,
    WalletTransactionListResponse,
    WalletTransactionRead,
    WithdrawalFailIn,
    WithdrawalIn,
)
from .services import BankAccountInput, WalletService

router = APIRouter(prefix="/wallets", tags=["wallets"])


# ── Wallet del actor

@router.get("/me", response_model=WalletRead, summary="Wallet del usuario actual")
async def get_my_wallet(
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    return await svc.get_wallet(session, actor.user_id)


@router.post(
    "/me/deposits",
    response_model=WalletTransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Acreditar depósito confirmado",
)
async def deposit(
    payload: DepositIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    return await svc.deposit(
        session,
        actor,
        payload.amount,
        reference=payload.reference,
        description=payload.description,
    )


# ── Cuentas bancarias

@router.get("/me/bank-accounts", response_model=List[BankAccountRead], summary="Cuentas bancarias")
async def list_bank_accounts(
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    return await svc.list_bank_accounts(session, actor)


@router.post(
    "/me/bank-accounts",
    response_model=BankAccountRead,
    status_code=status.HTTP_201_CREATED,
    summary="Agregar cuenta bancaria",
)
async def add_bank_account(
    payload: BankAccountIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    return await svc.add_bank_account(session, actor, BankAccountInput(**payload.model_dump()))


@router.post(
    "/me/bank-accounts/{account_id}/default",
    response_model=BankAccountRead,
    summary="Marcar cuenta por defecto",
)
async def set_default_bank_account(
    account_id: int,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    return await svc.set_default_bank_account(session, actor, account_id)


@router.delete(
    "/me/bank-accounts/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar cuenta bancaria",
)
async def delete_bank_account(
    account_id: int,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    await svc.delete_bank_account(session, actor, account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Retiros (liquidación admin)

@router.post(
    "/withdrawals/{tx_id}/complete",
    response_model=WalletTransactionRead,
    summary="Confirmar retiro (admin)",
)
async def complete_withdrawal(
    tx_id: int,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    return await svc.complete_withdrawal(session, tx_id, actor)


@router.post(
    "/withdrawals/{tx_id}/fail",
    response_model=WalletTransactionRead,
    summary="Rechazar retiro (admin)",
)
async def fail_withdrawal(
    tx_id: int,
    payload: Optional[WithdrawalFailIn] = None,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    return await svc.fail_withdrawal(
        session, tx_id, actor, reason=payload.reason if payload else None
    )


# ── Por wallet_id

@router.get(
    "/{wallet_id}/transactions",
    response_model=WalletTransactionListResponse,
    summary="Asientos de la wallet",
)
async def list_transactions(
    wallet_id: int,
    tx_type: Optional[TransactionType] = None,
    tx_status: Optional[TransactionStatus] = Query(None, alias="status"),
    order_id: Optional[str] = None,
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    filters = TransactionFilters(
        tx_type=tx_type,
        status=tx_status,
        order_id=order_id,
        created_from=created_from,
        created_to=created_to,
        limit=limit,
        offset=offset,
    )
    rows = await svc.list_transactions(session, wallet_id, actor, filters)
    return WalletTransactionListResponse(
        items=[WalletTransactionRead.model_validate(r) for r in rows],
        limit=limit,
        offset=offset,
    )


@router.get("/{wallet_id}/stats", response_model=WalletStatsRead, summary="Estadísticas de la wallet")
async def wallet_stats(
    wallet_id: int,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    stats = await svc.wallet_stats(session, wallet_id, actor)
    return WalletStatsRead(**asdict(stats))


@router.post(
    "/{wallet_id}/withdrawals",
    response_model=WalletTransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Solicitar retiro",
)
async def request_withdrawal(
    wallet_id: int,
    payload: WithdrawalIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    return await svc.request_withdrawal(
        session,
        wallet_id,
        actor,
        payload.amount,
        payload.bank_account_id,
        idempotency_key=payload.idempotency_key,
    )


@router.get(
    "/{wallet_id}/reconciliation",
    response_model=ReconciliationRead,
    summary="Reconciliar wallet (admin)",
)
async def reconcile_wallet(
    wallet_id: int,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: WalletService = Depends(get_wallet_service),
):
    result = await svc.reconcile(session, wallet_id, actor)
    return result.to_dict()


__all__ = ["router"]

# Fin del archivo tradevault/modules/ledger/routes.py
