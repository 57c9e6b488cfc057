# -*- coding: utf-8 -*-
"""
tradevault/shared/scheduler/jobs/escrow_sweep_jobs.py

Sweeps de timeouts del ciclo de vida:

- dispute_deadlines:  disputas open sin respuesta con plazo vencido
                      → auto-resolución buyer_favor
- order_auto_complete: órdenes delivered con auto_complete_at vencido
                      → completed (release al vendedor)
- pending_expiry:     órdenes pending más viejas que el TTL
                      → cancelled ("payment timeout")

Autor: TradeVault
Fecha: 2026-10-13
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from tradevault.shared.database.database import Database
from tradevault.shared.locks.lease import LeaseLock
from .sweep_runner import SweepResult, run_sweep

if TYPE_CHECKING:
    from tradevault.dependencies import ServiceRegistry
    from tradevault.shared.scheduler.scheduler_service import SchedulerService

logger = logging.getLogger(__name__)

DISPUTE_DEADLINES = "dispute_deadlines"
ORDER_AUTO_COMPLETE = "order_auto_complete"
PENDING_EXPIRY = "pending_expiry"


async def sweep_dispute_deadlines(
    db: Database,
    lease: LeaseLock,
    services: "ServiceRegistry",
    now: Optional[datetime] = None,
) -> SweepResult:
    disputes = services.disputes
    return await run_sweep(
        DISPUTE_DEADLINES,
        db=db,
        lease=lease,
        lock_ttl_seconds=services.settings.sweep_lock_ttl_seconds,
        list_ids=disputes.overdue,
        handle_one=disputes.auto_resolve,
        now=now,
    )


async def sweep_order_auto_complete(
    db: Database,
    lease: LeaseLock,
    services: "ServiceRegistry",
    now: Optional[datetime] = None,
) -> SweepResult:
    orders = services.orders
    return await run_sweep(
        ORDER_AUTO_COMPLETE,
        db=db,
        lease=lease,
        lock_ttl_seconds=services.settings.sweep_lock_ttl_seconds,
        list_ids=orders.due_for_auto_complete,
        handle_one=orders.auto_complete,
        now=now,
    )


async def sweep_pending_expiry(
    db: Database,
    lease: LeaseLock,
    services: "ServiceRegistry",
    now: Optional[datetime] = None,
) -> SweepResult:
    orders = services.orders
    return await run_sweep(
        PENDING_EXPIRY,
        db=db,
        lease=lease,
        lock_ttl_seconds=services.settings.sweep_lock_ttl_seconds,
        list_ids=orders.pending_expired,
        handle_one=orders.expire_pending,
        now=now,
    )


def register_escrow_sweep_jobs(
    scheduler: "SchedulerService",
    db: Database,
    services: "ServiceRegistry",
) -> list[str]:
    """
    Registra los tres sweeps con el intervalo de EscrowSettings.

    Returns:
        IDs de los jobs registrados
    """
    lease = LeaseLock(db.session_factory)
    interval = services.settings.sweep_interval_seconds
    job_ids = [
        scheduler.add_interval_job(
            func, job_id, seconds=interval, db=db, lease=lease, services=services
        )
        for job_id, func in (
            (DISPUTE_DEADLINES, sweep_dispute_deadlines),
            (ORDER_AUTO_COMPLETE, sweep_order_auto_complete),
            (PENDING_EXPIRY, sweep_pending_expiry),
        )
    ]
    logger.info("escrow_sweeps_registered jobs=%s interval_s=%d", ",".join(job_ids), interval)
    return job_ids


__all__ = [
    "DISPUTE_DEADLINES",
    "ORDER_AUTO_COMPLETE",
    "PENDING_EXPIRY",
    "sweep_dispute_deadlines",
    "sweep_order_auto_complete",
    "sweep_pending_expiry",
    "register_escrow_sweep_jobs",
]

# Fin del archivo tradevault/shared/scheduler/jobs/escrow_sweep_jobs.py
