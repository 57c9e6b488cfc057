# -*- coding: utf-8 -*-
"""
tradevault/shared/auth_context.py

Helper unificado para extraer el actor (user_id + rol) del contexto de
autenticación.

La autenticación vive fuera de este servicio: el gateway valida la
sesión y reenvía la identidad en headers:
    X-User-Id:   identificador del usuario
    X-User-Role: buyer | seller | admin

Este módulo es la ÚNICA FUENTE DE VERDAD para convertir esos headers
en un Actor. Las sweeps internas usan SYSTEM_ACTOR.

Autor: TradeVault
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Header, HTTPException, status

logger = logging.getLogger(__name__)


class ActorRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
    SYSTEM = "system"


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: ActorRole

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    @property
    def is_system(self) -> bool:
        return self.role == ActorRole.SYSTEM


SYSTEM_ACTOR = Actor(user_id="system", role=ActorRole.SYSTEM)

# Roles que el gateway puede declarar; "system" nunca llega por HTTP
_PUBLIC_ROLES = {ActorRole.BUYER, ActorRole.SELLER, ActorRole.ADMIN}


def extract_actor(user_id: Optional[str], role: Optional[str]) -> Actor:
    """
    Construye el Actor a partir de los valores del contexto.

    Raises:
        HTTPException 401: Si falta user_id o el rol no es válido
    """
    if not user_id or not user_id.strip():
        logger.warning("Auth context missing user id")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user id in auth context",
        )

    try:
        parsed_role = ActorRole((role or ActorRole.BUYER.value).strip().lower())
    except ValueError:
        logger.warning("Invalid role in auth context: %s", role)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid role in auth context",
        )

    if parsed_role not in _PUBLIC_ROLES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Role not allowed from the outside",
        )

    return Actor(user_id=user_id.strip(), role=parsed_role)


async def get_current_actor(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Actor:
    """Dependencia FastAPI: Actor a partir de X-User-Id / X-User-Role."""
    return extract_actor(x_user_id, x_user_role)


__all__ = [
    "Actor",
    "ActorRole",
    "SYSTEM_ACTOR",
    "extract_actor",
    "get_current_actor",
]

# Fin del archivo tradevault/shared/auth_context.py
