# -*- coding: utf-8 -*-
"""
app/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- IdType: BIGINT autoincremental en PostgreSQL, INTEGER en SQLite (rowid)
- as_db_enum: helper para mapear enums Python a columnas ENUM
- utcnow: reloj UTC con microsegundos para created_at/updated_at

Autor: CodeMarket
Fecha: 2026-10-05
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Type

from sqlalchemy import BigInteger, Integer, MetaData
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# SQLite solo autoincrementa "INTEGER PRIMARY KEY"
IdType = BigInteger().with_variant(Integer, "sqlite")


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM de CodeMarket.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ===== HELPER GENÉRICO PARA ENUMS =====
def as_db_enum(enum_cls: Type[Enum], name: str | None = None) -> SAEnum:
    """
    Devuelve un tipo Enum de SQLAlchemy que persiste los *valores* del Enum.

    Uso típico:

        from app.shared.database.base import Base, as_db_enum
        from .enums import OrderStatus

        class Order(Base):
            status: Mapped[OrderStatus] = mapped_column(
                as_db_enum(OrderStatus, name="order_status_enum"),
                nullable=False,
            )

    - En PostgreSQL se crea como tipo ENUM nativo junto con las tablas.
    - En SQLite queda como VARCHAR + CHECK.
    - Si no se pasa `name`, usa `__db_enum_name__` del enum o el nombre
      de la clase en minúsculas.
    """
    enum_name = name or getattr(enum_cls, "__db_enum_name__", enum_cls.__name__.lower())

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    return SAEnum(
        enum_cls,
        name=enum_name,
        values_callable=_values,
        validate_strings=True,
    )


__all__ = ["Base", "NAMING_CONVENTION", "IdType", "as_db_enum", "utcnow"]

# Fin del archivo app/shared/database/base.py
