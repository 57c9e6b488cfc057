# -*- coding: utf-8 -*-
"""
tradevault/modules/disputes/routes.py

Rutas de disputas (prefijo /disputes).

Autor: TradeVault
Fecha: 2026-10-14
"""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.dependencies import get_dispute_service
from tradevault.shared.auth_context import Actor, get_current_actor
from tradevault.shared.database.database import get_async_session
from .enums import DisputeStatus
from .repositories import DisputeFilters
from .schemas import (
    DisputeCloseIn,
    DisputeCreateIn,
    DisputeDetailRead,
    DisputeEvidenceIn,
    DisputeListResponse,
    DisputeMessageIn,
    DisputeMessageRead,
    DisputeRead,
    DisputeResolveIn,
    DisputeRespondIn,
    DisputeStatsRead,
)
from .services import DisputeService, Resolution

router = APIRouter(prefix="/disputes", tags=["disputes"])


@router.post(
    "",
    response_model=DisputeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Abrir disputa",
)
async def file_dispute(
    payload: DisputeCreateIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    return await svc.file_dispute(
        session,
        actor,
        payload.order_id,
        payload.reason,
        payload.description,
        evidence=payload.evidence,
    )


@router.get("", response_model=DisputeListResponse, summary="Listar disputas")
async def list_disputes(
    status_filter: Optional[DisputeStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    disputes = await svc.list_disputes(
        session, actor, DisputeFilters(status=status_filter, limit=limit, offset=offset)
    )
    return DisputeListResponse(
        items=[DisputeRead.model_validate(d) for d in disputes],
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=DisputeStatsRead, summary="Estadísticas de disputas")
async def dispute_stats(
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    stats = await svc.dispute_stats(session, actor)
    return DisputeStatsRead(**asdict(stats))


@router.get("/{dispute_id}", response_model=DisputeDetailRead, summary="Detalle con mensajes")
async def get_dispute(
    dispute_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    detail = await svc.get_dispute(session, dispute_id, actor)
    body = DisputeRead.model_validate(detail.dispute).model_dump()
    return DisputeDetailRead(
        **body,
        messages=[DisputeMessageRead.model_validate(m) for m in detail.messages],
    )


@router.post("/{dispute_id}/respond", response_model=DisputeRead, summary="Respuesta del vendedor")
async def respond(
    dispute_id: str,
    payload: DisputeRespondIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    return await svc.respond(session, dispute_id, actor, payload.response)


@router.post(
    "/{dispute_id}/messages",
    response_model=DisputeMessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Agregar mensaje",
)
async def add_message(
    dispute_id: str,
    payload: DisputeMessageIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    return await svc.add_message(
        session, dispute_id, actor, payload.message, attachments=payload.attachments
    )


@router.post("/{dispute_id}/evidence", response_model=DisputeRead, summary="Agregar evidencia")
async def add_evidence(
    dispute_id: str,
    payload: DisputeEvidenceIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    return await svc.add_evidence(session, dispute_id, actor, payload.model_dump(exclude_none=True))


@router.post("/{dispute_id}/resolve", response_model=DisputeRead, summary="Resolver (admin)")
async def resolve(
    dispute_id: str,
    payload: DisputeResolveIn,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    return await svc.resolve(
        session,
        dispute_id,
        actor,
        Resolution(
            resolution_type=payload.resolution_type,
            refund_amount=payload.refund_amount,
            release_amount=payload.release_amount,
            notes=payload.notes,
        ),
    )


@router.post("/{dispute_id}/close", response_model=DisputeRead, summary="Cerrar sin split")
async def close(
    dispute_id: str,
    payload: Optional[DisputeCloseIn] = None,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_async_session),
    svc: DisputeService = Depends(get_dispute_service),
):
    return await svc.close(session, dispute_id, actor, notes=payload.notes if payload else None)


__all__ = ["router"]

# Fin del archivo tradevault/modules/disputes/routes.py
