# -*- coding: utf-8 -*-
"""
tradevault/shared/config/settings_escrow.py

Configuración del motor de escrow, órdenes y disputas.

Descripción:
    Centraliza comisiones (en basis points), plazos de disputa y de
    revisión del comprador, TTL de órdenes pendientes y parámetros de
    los sweeps periódicos. Todas las variables usan prefijo ESCROW_.

Autor: TradeVault
Fecha: 2026-10-05
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EscrowSettings(BaseSettings):
    """Configuración del ciclo de vida orden/escrow/disputa."""

    # =========================================================================
    # COMISIONES (basis points: 1000 = 10 %)
    # =========================================================================

    buyer_fee_bps: int = Field(
        default=1000,
        ge=0,
        le=10000,
        description="Comisión cobrada al comprador sobre el precio",
    )

    seller_fee_bps: int = Field(
        default=1000,
        ge=0,
        le=10000,
        description="Comisión retenida al vendedor sobre el precio",
    )

    currency: str = Field(
        default="NGN",
        min_length=3,
        max_length=3,
        description="Moneda de las wallets (montos en unidades mínimas)",
    )

    # =========================================================================
    # PLAZOS
    # =========================================================================

    dispute_response_hours: int = Field(
        default=48,
        gt=0,
        description="Horas que tiene el vendedor para responder una disputa",
    )

    buyer_review_hours: int = Field(
        default=72,
        gt=0,
        description="Horas de revisión del comprador antes de autocompletar",
    )

    default_delivery_days: int = Field(
        default=3,
        gt=0,
        description="Días de entrega si la orden no especifica otro plazo",
    )

    pending_order_ttl_minutes: int = Field(
        default=60,
        gt=0,
        description="Minutos antes de cancelar por timeout una orden sin pagar",
    )

    # =========================================================================
    # SWEEPS
    # =========================================================================

    sweep_interval_seconds: int = Field(default=60, gt=0)
    sweep_lock_ttl_seconds: int = Field(default=55, gt=0)
    sweep_batch_size: int = Field(default=100, gt=0)

    # =========================================================================
    # WALLETS
    # =========================================================================

    platform_user_id: str = Field(
        default="platform",
        description="user_id de la wallet que acumula comisiones de la plataforma",
    )

    min_withdrawal_amount: int = Field(default=1000, ge=0)

    def validate_coherence(self) -> None:
        """El lease del sweep debe expirar antes del siguiente tick."""
        if self.sweep_lock_ttl_seconds > self.sweep_interval_seconds:
            raise ValueError(
                "ESCROW_SWEEP_LOCK_TTL_SECONDS no puede ser mayor a ESCROW_SWEEP_INTERVAL_SECONDS"
            )

    model_config = SettingsConfigDict(
        env_prefix="ESCROW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EscrowSettings"]

# Fin del archivo tradevault/shared/config/settings_escrow.py
