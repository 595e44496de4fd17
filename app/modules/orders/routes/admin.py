# -*- coding: utf-8 -*-
"""
app/modules/orders/routes/admin.py

Rutas administrativas de órdenes (requieren ADMIN_USER_IDS).

Endpoints:
- GET /admin/orders
- GET /admin/orders/stats

Autor: CodeMarket
Fecha: 2026-10-10
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.shared.auth_context import require_admin
from app.shared.utils.base_models import PageMeta
from app.modules.orders.enums import OrderStatus
from app.modules.orders.schemas import (
    OrderOut,
    OrderPage,
    OrderSortBy,
    PlatformOrderStatsOut,
    SortOrder,
)
from app.modules.orders.services import OrderQueryService
from .deps import get_order_query_service

router = APIRouter(
    prefix="/admin/orders",
    tags=["admin:orders"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=OrderPage)
async def list_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    buyer_id: Optional[uuid.UUID] = Query(None),
    seller_id: Optional[uuid.UUID] = Query(None),
    project_id: Optional[uuid.UUID] = Query(None),
    sort_by: OrderSortBy = Query("created_at"),
    sort_order: SortOrder = Query("desc"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    queries: OrderQueryService = Depends(get_order_query_service),
):
    items, total = await queries.list_orders(
        status=order_status,
        buyer_id=buyer_id,
        seller_id=seller_id,
        project_id=project_id,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return OrderPage(
        items=[OrderOut.model_validate(o) for o in items],
        meta=PageMeta.build(total=total, limit=limit, offset=offset),
    )


@router.get("/stats", response_model=PlatformOrderStatsOut)
async def get_platform_stats(
    queries: OrderQueryService = Depends(get_order_query_service),
):
    stats = await queries.get_platform_order_stats()
    return PlatformOrderStatsOut.model_validate(stats)


__all__ = ["router"]
# Fin del archivo app/modules/orders/routes/admin.py
