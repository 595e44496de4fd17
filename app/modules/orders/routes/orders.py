# -*- coding: utf-8 -*-
"""
app/modules/orders/routes/orders.py

Rutas de órdenes del usuario autenticado.

Endpoints:
- POST /orders
- GET  /orders/purchases
- GET  /orders/purchased/{project_id}
- GET  /orders/sales
- GET  /orders/sales/stats
- GET  /orders/{order_id}
- POST /orders/{order_id}/complete
- POST /orders/{order_id}/cancel
- POST /orders/{order_id}/downloads
- GET  /orders/{order_id}/downloads

Las rutas estáticas se declaran antes de /{order_id}.

Autor: CodeMarket
Fecha: 2026-10-10
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from app.shared.auth_context import get_current_user_id
from app.shared.utils.base_models import PageMeta
from app.modules.credits.errors import LedgerError
from app.modules.orders.enums import OrderStatus
from app.modules.orders.errors import OrderError
from app.modules.orders.schemas import (
    CancelOrderIn,
    CreateOrderIn,
    OrderDownloadOut,
    OrderOut,
    OrderPage,
    PurchasedOut,
    PurchaseHistoryItem,
    PurchaseHistoryPage,
    RecordDownloadIn,
    SellerSalesStatsOut,
)
from app.modules.orders.services import OrderQueryService, OrderService
from .deps import get_order_query_service, get_order_service, is_admin_user
from .http_errors import order_http_error

router = APIRouter(
    prefix="/orders",
    tags=["orders"],
)


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: CreateOrderIn,
    user_id: uuid.UUID = Depends(get_current_user_id),
    orders: OrderService = Depends(get_order_service),
):
    try:
        order = await orders.create_order(
            user_id,
            payload.project_id,
            payload.payment_method,
            buyer_note=payload.buyer_note,
        )
    except (OrderError, LedgerError) as e:
        raise order_http_error(e)
    return OrderOut.model_validate(order)


@router.get("/purchases", response_model=PurchaseHistoryPage)
async def list_purchases(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: uuid.UUID = Depends(get_current_user_id),
    queries: OrderQueryService = Depends(get_order_query_service),
):
    entries, total = await queries.get_user_purchase_history(user_id, limit=limit, offset=offset)
    return PurchaseHistoryPage(
        items=[
            PurchaseHistoryItem(
                order=OrderOut.model_validate(entry.order),
                download_count=entry.download_count,
                last_download_at=entry.last_download_at,
            )
            for entry in entries
        ],
        meta=PageMeta.build(total=total, limit=limit, offset=offset),
    )


@router.get("/purchased/{project_id}", response_model=PurchasedOut)
async def check_purchased(
    project_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    queries: OrderQueryService = Depends(get_order_query_service),
):
    purchased = await queries.check_user_purchased(user_id, project_id)
    return PurchasedOut(project_id=project_id, purchased=purchased)


@router.get("/sales", response_model=OrderPage)
async def list_sales(
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: uuid.UUID = Depends(get_current_user_id),
    queries: OrderQueryService = Depends(get_order_query_service),
):
    """Órdenes donde el usuario es el vendedor."""
    items, total = await queries.get_seller_orders(user_id, status=order_status, limit=limit, offset=offset)
    return OrderPage(
        items=[OrderOut.model_validate(o) for o in items],
        meta=PageMeta.build(total=total, limit=limit, offset=offset),
    )


@router.get("/sales/stats", response_model=SellerSalesStatsOut)
async def get_sales_stats(
    user_id: uuid.UUID = Depends(get_current_user_id),
    queries: OrderQueryService = Depends(get_order_query_service),
):
    stats = await queries.get_seller_sales_stats(user_id)
    return SellerSalesStatsOut.model_validate(stats)


@router.get("/{order_id}", response_model=OrderOut)
async def get_order(
    order_id: int,
    user_id: uuid.UUID = Depends(get_current_user_id),
    is_admin: bool = Depends(is_admin_user),
    orders: OrderService = Depends(get_order_service),
):
    try:
        order = await orders.get_order(order_id, viewer_id=user_id, is_admin=is_admin)
    except OrderError as e:
        raise order_http_error(e)
    return OrderOut.model_validate(order)


@router.post("/{order_id}/complete", response_model=OrderOut)
async def complete_order(
    order_id: int,
    user_id: uuid.UUID = Depends(get_current_user_id),
    orders: OrderService = Depends(get_order_service),
):
    """
    Liquida la orden con créditos.

    Con saldo insuficiente responde 402 y la orden queda cancelada.
    """
    try:
        order = await orders.complete_credits_order(order_id, actor_id=user_id)
    except (OrderError, LedgerError) as e:
        raise order_http_error(e)
    return OrderOut.model_validate(order)


@router.post("/{order_id}/cancel", response_model=OrderOut)
async def cancel_order(
    order_id: int,
    payload: Optional[CancelOrderIn] = None,
    user_id: uuid.UUID = Depends(get_current_user_id),
    is_admin: bool = Depends(is_admin_user),
    orders: OrderService = Depends(get_order_service),
):
    try:
        order = await orders.cancel_order(
            order_id,
            payload.reason if payload else None,
            actor_id=user_id,
            is_admin=is_admin,
        )
    except (OrderError, LedgerError) as e:
        raise order_http_error(e)
    return OrderOut.model_validate(order)


@router.post(
    "/{order_id}/downloads",
    response_model=OrderDownloadOut,
    status_code=status.HTTP_201_CREATED,
)
async def record_download(
    order_id: int,
    payload: RecordDownloadIn,
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    orders: OrderService = Depends(get_order_service),
):
    try:
        download = await orders.record_download(
            order_id,
            user_id,
            payload.file_url,
            payload.file_name,
            file_size=payload.file_size,
            download_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except OrderError as e:
        raise order_http_error(e)
    return OrderDownloadOut.model_validate(download)


@router.get("/{order_id}/downloads", response_model=list[OrderDownloadOut])
async def list_downloads(
    order_id: int,
    user_id: uuid.UUID = Depends(get_current_user_id),
    is_admin: bool = Depends(is_admin_user),
    queries: OrderQueryService = Depends(get_order_query_service),
):
    try:
        downloads = await queries.get_order_downloads(order_id, viewer_id=user_id, is_admin=is_admin)
    except OrderError as e:
        raise order_http_error(e)
    return [OrderDownloadOut.model_validate(d) for d in downloads]


__all__ = ["router"]
# Fin del archivo app/modules/orders/routes/orders.py
