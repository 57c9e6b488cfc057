# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/routes.py

Rutas de órdenes:
- POST /orders                     crear (comprador = actor)
- GET  /orders                     listar con filtros
- GET  /orders/stats               conteos por status
- GET  /orders/{id}                detalle
- POST /orders/{id}/transition     transición de estado

Los errores de dominio se traducen en el handler global.

Autor: TradeVault
Fecha: 2026-10-14
"""

from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.dependencies import get_order_service
from tradevault.shared.auth_context import Actor, ActorRole, get_current_actor
from tradevault.shared.database.database import get_async_session
from .enums import OrderStatus
from .repositories import OrderFilters
from .schemas import (
    OrderCreateIn,
    OrderListResponse,
    OrderRead,
    OrderStatsRead,
    OrderTransitionIn,
)
from .services import CreateOrderInput, OrderService, TransitionPayload

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Crear orden",
)
async def create_order(
    payload: OrderCreateIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.create_order(session, actor, CreateOrderInput(**payload.model_dump()))
    return order


@router.get("", response_model=OrderListResponse, summary="Listar órdenes")
async def list_orders(
    buyer_id: Optional[str] = None,
    seller_id: Optional[str] = None,
    listing_id: Optional[str] = None,
    status_filter: Optional[List[OrderStatus]] = Query(None, alias="status"),
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: OrderService = Depends(get_order_service),
):
    filters = OrderFilters(
        buyer_id=buyer_id,
        seller_id=seller_id,
        listing_id=listing_id,
        statuses=list(status_filter or []),
        created_from=created_from,
        created_to=created_to,
        limit=limit,
        offset=offset,
    )
    orders = await svc.list_orders(session, actor, filters)
    return OrderListResponse(
        items=[OrderRead.model_validate(o) for o in orders],
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=OrderStatsRead, summary="Estadísticas de órdenes")
async def order_stats(
    role: ActorRole = Query(ActorRole.BUYER, description="buyer o seller"),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: OrderService = Depends(get_order_service),
):
    stats = await svc.order_stats(session, actor, as_role=role)
    return OrderStatsRead(**asdict(stats))


@router.get("/{order_id}", response_model=OrderRead, summary="Obtener orden")
async def get_order(
    order_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: OrderService = Depends(get_order_service),
):
    return await svc.get_order(session, order_id, actor)


@router.post(
    "/{order_id}/transition",
    response_model=OrderRead,
    summary="Transicionar orden",
)
async def transition_order(
    order_id: str,
    payload: OrderTransitionIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: OrderService = Depends(get_order_service),
):
    return await svc.transition(
        session,
        order_id,
        payload.status,
        actor,
        TransitionPayload(delivery=payload.delivery, reason=payload.reason),
    )


__all__ = ["router"]

# Fin del archivo tradevault/modules/orders/routes.py
