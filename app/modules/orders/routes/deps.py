# -*- coding: utf-8 -*-
"""
app/modules/orders/routes/deps.py

Construcción de servicios de órdenes por request.

El catálogo (cliente httpx) vive en app.state y lo crea el lifespan.

Autor: CodeMarket
Fecha: 2026-10-10
"""

from __future__ import annotations

import uuid

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.auth_context import get_current_user_id
from app.shared.config import get_settings
from app.shared.database import get_session_factory
from app.shared.utils.http_exceptions import ServiceUnavailableException
from app.modules.credits.routes.deps import get_ledger_service
from app.modules.credits.services import LedgerService
from app.modules.orders.catalog import ProjectCatalog
from app.modules.orders.services import OrderQueryService, OrderService


def get_project_catalog(request: Request) -> ProjectCatalog:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise ServiceUnavailableException(
            detail="Project catalog is not configured",
            error_code="catalog_unavailable",
        )
    return catalog


def get_order_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    ledger: LedgerService = Depends(get_ledger_service),
    catalog: ProjectCatalog = Depends(get_project_catalog),
) -> OrderService:
    return OrderService(
        session_factory,
        ledger,
        catalog,
        order_number_max_attempts=get_settings().order_number_max_attempts,
    )


def get_order_query_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> OrderQueryService:
    return OrderQueryService(session_factory)


def is_admin_user(user_id: uuid.UUID = Depends(get_current_user_id)) -> bool:
    return user_id in get_settings().admin_user_ids


__all__ = [
    "get_project_catalog",
    "get_order_service",
    "get_order_query_service",
    "is_admin_user",
]
# Fin del archivo app/modules/orders/routes/deps.py
