# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/schemas.py

Schemas Pydantic de request/response para órdenes.

Autor: TradeVault
Fecha: 2026-10-14
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import CancelledBy, OrderStatus


# ========== REQUEST SCHEMAS ==========

class OrderCreateIn(BaseModel):
    """Request para crear una orden. El comprador es el actor autenticado."""
    seller_id: str = Field(..., min_length=1, max_length=64)
    listing_id: str = Field(..., min_length=1, max_length=64)
    price: int = Field(..., gt=0, description="Precio en unidades mínimas")
    selected_tier: Optional[str] = Field(None, max_length=64)
    requirements: Optional[str] = Field(None, max_length=8000)
    delivery_days: Optional[int] = Field(None, gt=0, le=365)

    @field_validator("seller_id", "listing_id")
    @classmethod
    def strip_ids(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Identifier must not be blank")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "seller_id": "seller-42",
                "listing_id": "listing-7",
                "price": 45000,
                "selected_tier": "standard",
            }
        }
    )


class OrderTransitionIn(BaseModel):
    """
    Transición pública. `delivery` solo aplica a delivered, `reason`
    a cancelled.
    """
    status: OrderStatus
    delivery: Optional[Dict[str, Any]] = None
    reason: Optional[str] = Field(None, max_length=2000)


# ========== RESPONSE SCHEMAS ==========

class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_number: str
    buyer_id: str
    seller_id: str
    listing_id: str
    selected_tier: Optional[str] = None
    requirements: Optional[str] = None

    price: int
    buyer_fee: int
    seller_fee: int
    total_amount: int
    seller_receives: int
    currency: str

    status: OrderStatus
    delivery_days: int
    delivery_deadline: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    delivery_data: Optional[Dict[str, Any]] = None
    auto_complete_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    buyer_confirmed: bool = False
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[CancelledBy] = None
    cancellation_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    items: List[OrderRead]
    limit: int
    offset: int


class OrderStatsRead(BaseModel):
    total: int
    pending: int
    processing: int
    completed: int
    disputed: int


__all__ = [
    "OrderCreateIn",
    "OrderTransitionIn",
    "OrderRead",
    "OrderListResponse",
    "OrderStatsRead",
]

# Fin del archivo tradevault/modules/orders/schemas.py
