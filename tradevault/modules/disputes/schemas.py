# -*- coding: utf-8 -*-
"""
tradevault/modules/disputes/schemas.py

Schemas Pydantic de request/response para disputas.

Autor: TradeVault
Fecha: 2026-10-14
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import DisputeReason, DisputeStatus, ResolutionType


# ========== REQUEST SCHEMAS ==========

class DisputeCreateIn(BaseModel):
    order_id: str = Field(..., min_length=1, max_length=64)
    reason: DisputeReason
    description: str = Field(..., min_length=1, max_length=8000)
    evidence: List[Dict[str, Any]] = Field(default_factory=list, max_length=20)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Description must not be blank")
        return v.strip()


class DisputeRespondIn(BaseModel):
    response: str = Field(..., min_length=1, max_length=8000)


class DisputeMessageIn(BaseModel):
    message: str = Field(..., min_length=1, max_length=8000)
    attachments: List[str] = Field(default_factory=list, max_length=10)


class DisputeEvidenceIn(BaseModel):
    """Evidencia libre: type screenshot|document|link, cualquier otro se guarda opaco."""
    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1, max_length=32)
    url: Optional[str] = Field(None, max_length=2048)
    description: Optional[str] = Field(None, max_length=2000)


class DisputeResolveIn(BaseModel):
    resolution_type: ResolutionType
    refund_amount: Optional[int] = Field(None, ge=0)
    release_amount: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=4000)

    @model_validator(mode="after")
    def split_required_for_partial(self) -> "DisputeResolveIn":
        partial = {ResolutionType.PARTIAL_REFUND, ResolutionType.MUTUAL_AGREEMENT}
        if (
            self.resolution_type in partial
            and self.refund_amount is None
            and self.release_amount is None
        ):
            raise ValueError("refund_amount or release_amount is required for a split resolution")
        return self


class DisputeCloseIn(BaseModel):
    notes: Optional[str] = Field(None, max_length=4000)


# ========== RESPONSE SCHEMAS ==========

class DisputeMessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dispute_id: str
    sender_id: str
    message: str
    attachments: List[str] = Field(default_factory=list)
    is_admin: bool
    created_at: datetime


class DisputeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    dispute_number: str
    order_id: str
    filed_by: str
    against_id: str
    reason: DisputeReason
    description: str
    seller_response: Optional[str] = None
    responded_at: Optional[datetime] = None
    evidence: List[Dict[str, Any]] = Field(default_factory=list)
    status: DisputeStatus
    deadline: datetime

    resolution_type: Optional[ResolutionType] = None
    resolution: Optional[str] = None
    refund_amount: Optional[int] = None
    release_amount: Optional[int] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    auto_resolved: bool = False
    closed_by: Optional[str] = None
    closed_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime


class DisputeDetailRead(DisputeRead):
    messages: List[DisputeMessageRead] = Field(default_factory=list)


class DisputeListResponse(BaseModel):
    items: List[DisputeRead]
    limit: int
    offset: int


class DisputeStatsRead(BaseModel):
    total: int
    open: int
    under_review: int
    resolved: int
    as_filed_by: int
    as_against: int


__all__ = [
    "DisputeCreateIn",
    "DisputeRespondIn",
    "DisputeMessageIn",
    "DisputeEvidenceIn",
    "DisputeResolveIn",
    "DisputeCloseIn",
    "DisputeRead",
    "DisputeDetailRead",
    "DisputeMessageRead",
    "DisputeListResponse",
    "DisputeStatsRead",
]

# Fin del archivo tradevault/modules/disputes/schemas.py
