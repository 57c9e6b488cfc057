# -*- coding: utf-8 -*-
"""
tradevault/observability/metrics.py

Contadores Prometheus del dominio orden/escrow/disputa.

Autor: TradeVault
Fecha: 2026-10-08
"""

from __future__ import annotations

from prometheus_client import Counter

ORDER_TRANSITIONS = Counter(
    "escrow_order_transitions_total",
    "Order status transitions applied",
    ["from_status", "to_status"],
)

ESCROW_POSTINGS = Counter(
    "escrow_postings_total",
    "Escrow operations posted to the ledger",
    ["operation"],
)

INTEGRITY_ERRORS = Counter(
    "escrow_integrity_errors_total",
    "Escrow conservation violations detected (aborted units of work)",
    ["kind"],
)

SWEEP_ACTIONS = Counter(
    "escrow_sweep_actions_total",
    "Rows handled by timeout sweeps",
    ["job"],
)


def record_transition(from_status: str, to_status: str) -> None:
    ORDER_TRANSITIONS.labels(from_status, to_status).inc()


def record_posting(operation: str) -> None:
    ESCROW_POSTINGS.labels(operation).inc()


def record_integrity_error(kind: str) -> None:
    INTEGRITY_ERRORS.labels(kind).inc()


def record_sweep_action(job: str, count: int = 1) -> None:
    if count:
        SWEEP_ACTIONS.labels(job).inc(count)


__all__ = [
    "ORDER_TRANSITIONS",
    "ESCROW_POSTINGS",
    "INTEGRITY_ERRORS",
    "SWEEP_ACTIONS",
    "record_transition",
    "record_posting",
    "record_integrity_error",
    "record_sweep_action",
]

# Fin del archivo tradevault/observability/metrics.py
