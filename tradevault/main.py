# -*- coding: utf-8 -*-
"""
tradevault/main.py

Aplicación FastAPI de TradeVault: órdenes, escrow, disputas y wallets.

Lifespan:
- STARTUP: logging, Database en app.state.db (create_all en dev/test),
  EventBus + servicios de dominio en app.state.services, scheduler de
  sweeps (si está habilitado)
- SHUTDOWN: scheduler primero, luego el pool de conexiones

Uso:
    uvicorn tradevault.main:app

Autor: TradeVault
Fecha: 2026-10-14
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import anyio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradevault import __version__
from tradevault.core import database_from_settings, get_settings, setup_logging
from tradevault.dependencies import build_services
from tradevault.modules.disputes.routes import router as disputes_router
from tradevault.modules.ledger.routes import router as wallets_router
from tradevault.modules.orders.routes import router as orders_router
from tradevault.observability import setup_observability
from tradevault.shared.config.settings_base import BaseAppSettings
from tradevault.shared.events import EventBus
from tradevault.shared.middleware import JSONExceptionMiddleware, register_exception_handlers
from tradevault.shared.scheduler import SchedulerService
from tradevault.shared.scheduler.jobs import register_escrow_sweep_jobs

logger = logging.getLogger(__name__)


def _make_lifespan(settings: BaseAppSettings, event_bus: Optional[EventBus]):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ────────── STARTUP ──────────
        setup_logging(settings.log_level, settings.log_format)

        db = database_from_settings(settings)
        if settings.db_create_schema:
            await db.create_all()
            logger.info("db_schema_created dialect=%s", db.engine.dialect.name)

        services = build_services(settings.escrow, event_bus)
        app.state.db = db
        app.state.services = services
        app.state.event_bus = services.event_bus

        scheduler: Optional[SchedulerService] = None
        if settings.scheduler_enabled:
            scheduler = SchedulerService()
            register_escrow_sweep_jobs(scheduler, db, services)
            scheduler.start()
        app.state.scheduler = scheduler

        logger.info(
            "app_started name=%s env=%s version=%s scheduler=%s",
            settings.app_name, settings.python_env, __version__, scheduler is not None,
        )
        try:
            yield
        finally:
            # ────────── SHUTDOWN ──────────
            with anyio.CancelScope(shield=True):
                if scheduler is not None:
                    scheduler.shutdown(wait=True)
                await db.dispose()
            logger.info("app_stopped name=%s", settings.app_name)

    return lifespan


def create_app(
    settings: Optional[BaseAppSettings] = None,
    *,
    event_bus: Optional[EventBus] = None,
) -> FastAPI:
    """
    Construye la app. Los tests pasan settings propios (URL sqlite
    temporal, scheduler apagado) y opcionalmente un EventBus para
    observar eventos publicados.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Order lifecycle, escrow ledger and dispute resolution",
        version=__version__,
        lifespan=_make_lifespan(settings, event_bus),
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(JSONExceptionMiddleware)
    register_exception_handlers(app)

    if settings.metrics_enabled:
        setup_observability(app)

    app.include_router(orders_router)
    app.include_router(disputes_router)
    app.include_router(wallets_router)

    @app.get("/health", tags=["health"])
    async def health():
        db = getattr(app.state, "db", None)
        db_ok = await db.check_health() if db is not None else False
        body = {"status": "ok" if db_ok else "degraded", "database": db_ok, "version": __version__}
        return JSONResponse(status_code=200 if db_ok else 503, content=body)

    return app


app = create_app()

# Fin del archivo tradevault/main.py
