# -*- coding: utf-8 -*-
"""
tradevault/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- as_str_enum: helper para mapear enums Python a columnas VARCHAR + CHECK
  (portable entre PostgreSQL y SQLite)
- TimestampMixin: created_at / updated_at en UTC

Autor: TradeVault
Fecha: 2026-10-05
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Type

from sqlalchemy import BigInteger, DateTime, Integer, MetaData
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from tradevault.shared.utils.datetime_helpers import utcnow

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# BIGINT en PostgreSQL; INTEGER en SQLite (solo INTEGER PRIMARY KEY autoincrementa)
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM de TradeVault.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimestampMixin:
    """created_at / updated_at gestionados desde Python (UTC)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


# ===== HELPER GENÉRICO PARA ENUMS =====
def as_str_enum(enum_cls: Type[Enum], name: str | None = None) -> SQLEnum:
    """
    Devuelve un tipo Enum de SQLAlchemy almacenado como VARCHAR.

    Uso típico:

        from tradevault.shared.database.base import Base, as_str_enum
        from .enums import OrderStatus

        class Order(Base):
            status: Mapped[OrderStatus] = mapped_column(
                as_str_enum(OrderStatus, name="order_status"),
                nullable=False,
            )

    - native_enum=False: no depende de tipos ENUM del motor, de modo que el
      mismo esquema corre sobre PostgreSQL y sobre SQLite en tests.
    - Persiste `.value` del enum (no el nombre del miembro).
    """
    enum_name = name or getattr(enum_cls, "__db_enum_name__", enum_cls.__name__.lower())

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    return SQLEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        create_constraint=True,
        length=32,
        values_callable=_values,
        validate_strings=True,
    )


__all__ = ["Base", "BigIntPK", "NAMING_CONVENTION", "TimestampMixin", "as_str_enum"]

# Fin del archivo tradevault/shared/database/base.py
