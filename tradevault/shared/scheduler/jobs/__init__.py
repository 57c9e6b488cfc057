# -*- coding: utf-8 -*-
"""
tradevault/shared/scheduler/jobs/__init__.py

Jobs programados del sistema.

Autor: TradeVault
Fecha: 2026-10-13
"""

from .escrow_sweep_jobs import (
    register_escrow_sweep_jobs,
    sweep_dispute_deadlines,
    sweep_order_auto_complete,
    sweep_pending_expiry,
)
from .sweep_runner import SweepResult, run_sweep

__all__ = [
    "register_escrow_sweep_jobs",
    "sweep_dispute_deadlines",
    "sweep_order_auto_complete",
    "sweep_pending_expiry",
    "SweepResult",
    "run_sweep",
]
