# -*- coding: utf-8 -*-
"""
tradevault/modules/disputes/evidence.py

Variantes tipadas de evidencia de disputa.

    {"type": "screenshot", "url": "...", "uploaded_by": "..."}
    {"type": "document", "url": "...", "filename": "...", "uploaded_by": "..."}
    {"type": "link", "url": "...", "uploaded_by": "..."}
    {"type": "other", "data": {...}, "uploaded_by": "..."}

Autor: TradeVault
Fecha: 2026-10-12
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from tradevault.errors import ValidationFailed
from tradevault.shared.utils.datetime_helpers import utcnow


class _EvidenceBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    uploaded_by: str = Field(min_length=1, max_length=64)
    uploaded_at: datetime = Field(default_factory=utcnow)
    description: Optional[str] = Field(default=None, max_length=2000)


class ScreenshotEvidence(_EvidenceBase):
    type: Literal["screenshot"] = "screenshot"
    url: str = Field(min_length=1, max_length=2048)


class DocumentEvidence(_EvidenceBase):
    type: Literal["document"] = "document"
    url: str = Field(min_length=1, max_length=2048)
    filename: Optional[str] = Field(default=None, max_length=255)


class LinkEvidence(_EvidenceBase):
    type: Literal["link"] = "link"
    url: str = Field(min_length=1, max_length=2048)


class OpaqueEvidence(_EvidenceBase):
    model_config = ConfigDict(extra="ignore")

    type: Literal["other"] = "other"
    data: dict[str, Any] = Field(default_factory=dict)


Evidence = Annotated[
    Union[ScreenshotEvidence, DocumentEvidence, LinkEvidence, OpaqueEvidence],
    Field(discriminator="type"),
]

_KNOWN_TYPES = {"screenshot", "document", "link", "other"}
_evidence_adapter: TypeAdapter[Evidence] = TypeAdapter(Evidence)


def parse_evidence(raw: Any, *, uploaded_by: str) -> Evidence:
    """
    Valida una evidencia cruda y sella uploaded_by con el actor real.
    Un tipo desconocido se conserva como variante opaca.
    """
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    raw = dict(raw)
    raw["uploaded_by"] = uploaded_by
    if raw.get("type") not in _KNOWN_TYPES:
        return OpaqueEvidence(
            uploaded_by=uploaded_by,
            data={k: v for k, v in raw.items() if k != "uploaded_by"},
        )
    try:
        return _evidence_adapter.validate_python(raw)
    except ValidationError as exc:
        raise ValidationFailed("Invalid evidence item", errors=exc.errors(include_url=False)) from exc


__all__ = [
    "Evidence",
    "ScreenshotEvidence",
    "DocumentEvidence",
    "LinkEvidence",
    "OpaqueEvidence",
    "parse_evidence",
]

# Fin del archivo tradevault/modules/disputes/evidence.py
