# -*- coding: utf-8 -*-
"""
tradevault/shared/scheduler/jobs/sweep_runner.py

Esqueleto común de los sweeps de timeouts.

1. Solo el líder (lease en distributed_locks) ejecuta la pasada.
2. Los IDs candidatos se leen en una sesión propia.
3. Cada fila se procesa en su propia unidad de trabajo: un error en una
   fila no revierte a las demás, y una fila que otro worker ya atendió
   (handler devuelve False) cuenta como skipped.

Autor: TradeVault
Fecha: 2026-10-13
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.errors import EscrowDomainError
from tradevault.observability.metrics import record_sweep_action
from tradevault.shared.database.database import Database
from tradevault.shared.locks.lease import LeaseLock
from tradevault.shared.utils.datetime_helpers import to_iso8601, utcnow

logger = logging.getLogger(__name__)

ListIds = Callable[[AsyncSession, datetime], Awaitable[list[str]]]
HandleOne = Callable[[AsyncSession, str, datetime], Awaitable[bool]]


@dataclass
class SweepResult:
    job: str
    started_at: str
    leader: bool = False
    scanned: int = 0
    handled: int = 0
    skipped: int = 0
    failed: int = 0
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


async def run_sweep(
    job: str,
    *,
    db: Database,
    lease: LeaseLock,
    lock_ttl_seconds: int,
    list_ids: ListIds,
    handle_one: HandleOne,
    now: Optional[datetime] = None,
) -> SweepResult:
    now = now or utcnow()
    started = time.perf_counter()
    result = SweepResult(job=job, started_at=to_iso8601(now))

    async with lease.hold(f"sweep:{job}", lock_ttl_seconds) as leader:
        result.leader = leader
        if not leader:
            logger.debug("[%s] skipped: another worker holds the lease", job)
            return result

        async with db.session_scope() as session:
            ids = await list_ids(session, now)
        result.scanned = len(ids)

        for row_id in ids:
            try:
                async with db.session_scope() as session:
                    done = await handle_one(session, row_id, now)
            except EscrowDomainError as exc:
                result.failed += 1
                logger.warning("[%s] row=%s error_code=%s detail=%s", job, row_id, exc.error_code, exc.detail)
                continue
            except Exception:
                result.failed += 1
                logger.exception("[%s] row=%s unexpected error", job, row_id)
                continue

            if done:
                result.handled += 1
            else:
                result.skipped += 1

    record_sweep_action(job, result.handled)
    result.duration_ms = round((time.perf_counter() - started) * 1000, 2)

    if result.scanned:
        logger.info(
            "[%s] scanned=%d handled=%d skipped=%d failed=%d duration_ms=%.2f",
            job, result.scanned, result.handled, result.skipped, result.failed, result.duration_ms,
        )
    return result


__all__ = ["SweepResult", "run_sweep"]

# Fin del archivo tradevault/shared/scheduler/jobs/sweep_runner.py
