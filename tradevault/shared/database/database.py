# -*- coding: utf-8 -*-
"""
tradevault/shared/database/database.py

Engine + session factory de SQLAlchemy async, encapsulados en `Database`.

Provee:
- Database: engine (create_async_engine) + session_factory (async_sessionmaker)
- Dependencia FastAPI: get_async_session (lee app.state.db)
- context manager: Database.session_scope()
- Database.check_health()

Notas:
- No hay engine a nivel de módulo: la app crea un Database en el lifespan
  y los tests crean el suyo propio (SQLite por archivo).
- En SQLite se desactiva el BEGIN implícito de pysqlite y se emite BEGIN
  explícito, para que SAVEPOINT (begin_nested) funcione correctamente.

Autor: TradeVault
Fecha: 2026-10-06
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from tradevault.shared.database.base import Base

logger = logging.getLogger(__name__)


def _install_sqlite_hooks(engine: AsyncEngine) -> None:
    """Transacciones explícitas + foreign keys en SQLite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


class Database:
    """Engine + session factory para una URL de base de datos."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.is_sqlite = url.startswith("sqlite")

        engine_kwargs: dict[str, Any] = {"echo": echo}
        if self.is_sqlite:
            engine_kwargs["poolclass"] = NullPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        if self.is_sqlite:
            _install_sqlite_hooks(self.engine)

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            class_=AsyncSession,
            autoflush=False,
        )

        logger.info(
            "db_engine_created dialect=%s echo=%s",
            self.engine.dialect.name,
            echo,
        )

    async def create_all(self) -> None:
        """Crea el esquema (dev/test). En producción se usan migraciones."""
        # Registrar todos los modelos en Base.metadata
        import tradevault.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Sesión para scripts, jobs y tests. El commit queda a cargo del llamador."""
        async with self.session_factory() as session:
            try:
                yield session
            finally:
                if session.in_transaction():
                    await session.rollback()

    async def check_health(self, timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
        """
        Verifica conectividad a la base de datos.

        Returns:
            True si la conexión es exitosa, False en caso contrario
        """
        try:
            async with asyncio.timeout(timeout_s):
                async with self.engine.connect() as conn:
                    await conn.execute(text(sql))
            return True
        except Exception as exc:
            logger.warning("db_health_check_failed error=%s", exc)
            return False


# ── Dependencia FastAPI
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    db: Database = request.app.state.db
    async with db.session_scope() as session:
        yield session


__all__ = ["Database", "get_async_session"]
# Fin del archivo tradevault/shared/database/database.py
