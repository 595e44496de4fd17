# -*- coding: utf-8 -*-
"""
app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: CodeMarket
Fecha: 2026-10-05
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, IdType, as_db_enum, utcnow
from .database import (
    build_engine,
    build_session_factory,
    get_session_factory,
    transaction_scope,
    check_database_health,
)
from .errors import StorageError

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "IdType",
    "as_db_enum",
    "utcnow",
    "build_engine",
    "build_session_factory",
    "get_session_factory",
    "transaction_scope",
    "check_database_health",
    "StorageError",
]

# Fin del archivo app/shared/database/__init__.py
