# -*- coding: utf-8 -*-
"""
tradevault/shared/database/unit_of_work.py

Unidad de trabajo atómica sobre una AsyncSession.

atomic(session):
- Bloque externo sin transacción activa: BEGIN ... COMMIT.
- Bloque externo con una transacción autoiniciada por lecturas previas:
  el cuerpo corre en un SAVEPOINT y al salir se hace COMMIT de la sesión.
- Bloque anidado (dentro de otro atomic): SAVEPOINT; un error revierte
  solo este bloque y se propaga al llamador.
- StaleDataError (version_id_col) y errores de lock del motor se
  traducen a Conflict (reintentable).
- Los eventos encolados en el outbox se publican tras el COMMIT externo
  y se descartan si el bloque que los encoló se revierte.

Autor: TradeVault
Fecha: 2026-10-06
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from tradevault.errors import Conflict
from tradevault.shared.events import outbox

logger = logging.getLogger(__name__)

_DEPTH_KEY = "tradevault.atomic_depth"

# lock_not_available, serialization_failure, deadlock_detected
_LOCK_SQLSTATES = {"55P03", "40001", "40P01"}


def is_lock_contention(exc: DBAPIError) -> bool:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _LOCK_SQLSTATES:
        return True
    return "database is locked" in str(exc).lower()


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    depth = session.info.get(_DEPTH_KEY, 0)
    outermost = depth == 0
    mark = outbox.outbox_mark(session)
    session.info[_DEPTH_KEY] = depth + 1
    try:
        if not session.in_transaction():
            async with session.begin():
                yield session
        else:
            async with session.begin_nested():
                yield session
            if outermost:
                await session.commit()
    except StaleDataError as exc:
        outbox.discard_since(session, mark)
        logger.info("uow_conflict kind=stale_version error=%s", exc)
        raise Conflict("Concurrent modification detected; retry the request") from exc
    except DBAPIError as exc:
        outbox.discard_since(session, mark)
        if is_lock_contention(exc):
            logger.info("uow_conflict kind=lock_contention error=%s", exc)
            raise Conflict("Resource is locked by a concurrent request; retry") from exc
        raise
    except BaseException:
        outbox.discard_since(session, mark)
        raise
    finally:
        session.info[_DEPTH_KEY] = depth

    if outermost:
        await outbox.flush(session)


__all__ = ["atomic", "is_lock_contention"]

# Fin del archivo tradevault/shared/database/unit_of_work.py
