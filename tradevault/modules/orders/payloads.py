# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/payloads.py

Variantes tipadas de delivery_data (antes JSON libre).

    {"type": "link", "url": "...", "note": "..."}
    {"type": "file", "url": "...", "filename": "..."}
    {"type": "credentials", "username": "...", "instructions": "..."}
    {"type": "message", "message": "..."}
    {"type": "other", "data": {...}}   # compatibilidad hacia adelante

Autor: TradeVault
Fecha: 2026-10-10
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from tradevault.errors import ValidationFailed


class _DeliveryBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    note: Optional[str] = Field(default=None, max_length=2000)


class LinkDelivery(_DeliveryBase):
    type: Literal["link"] = "link"
    url: str = Field(min_length=1, max_length=2048)


class FileDelivery(_DeliveryBase):
    type: Literal["file"] = "file"
    url: str = Field(min_length=1, max_length=2048)
    filename: Optional[str] = Field(default=None, max_length=255)


class CredentialsDelivery(_DeliveryBase):
    type: Literal["credentials"] = "credentials"
    username: str = Field(min_length=1, max_length=255)
    instructions: Optional[str] = Field(default=None, max_length=4000)


class MessageDelivery(_DeliveryBase):
    type: Literal["message"] = "message"
    message: str = Field(min_length=1, max_length=8000)


class OpaqueDelivery(BaseModel):
    type: Literal["other"] = "other"
    data: dict[str, Any] = Field(default_factory=dict)


DeliveryPayload = Annotated[
    Union[LinkDelivery, FileDelivery, CredentialsDelivery, MessageDelivery, OpaqueDelivery],
    Field(discriminator="type"),
]

_delivery_adapter: TypeAdapter[DeliveryPayload] = TypeAdapter(DeliveryPayload)


def parse_delivery(raw: Any) -> DeliveryPayload:
    """Valida un dict crudo; un tipo desconocido cae en la variante opaca."""
    if isinstance(raw, BaseModel):
        return raw  # type: ignore[return-value]
    if isinstance(raw, dict) and raw.get("type") not in {"link", "file", "credentials", "message", "other"}:
        return OpaqueDelivery(data=dict(raw))
    try:
        return _delivery_adapter.validate_python(raw)
    except ValidationError as exc:
        raise ValidationFailed("Invalid delivery payload", errors=exc.errors(include_url=False)) from exc


__all__ = [
    "DeliveryPayload",
    "LinkDelivery",
    "FileDelivery",
    "CredentialsDelivery",
    "MessageDelivery",
    "OpaqueDelivery",
    "parse_delivery",
]

# Fin del archivo tradevault/modules/orders/payloads.py
