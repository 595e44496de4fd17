# -*- coding: utf-8 -*-
"""
app/modules/orders/schemas.py

Esquemas de entrada/salida de las rutas de órdenes.

Autor: CodeMarket
Fecha: 2026-10-10
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.shared.utils.base_models import ORMModel, PageMeta
from .enums import OrderStatus, PaymentMethod


class CreateOrderIn(BaseModel):
    project_id: uuid.UUID
    payment_method: PaymentMethod = PaymentMethod.CREDITS
    buyer_note: Optional[str] = Field(default=None, max_length=1000)


class CancelOrderIn(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class RecordDownloadIn(BaseModel):
    file_url: str = Field(min_length=1, max_length=2048)
    file_name: str = Field(min_length=1, max_length=255)
    file_size: Optional[int] = Field(default=None, ge=0)


class OrderOut(ORMModel):
    id: int
    order_number: str
    buyer_id: uuid.UUID
    seller_id: uuid.UUID
    project_id: uuid.UUID
    original_price: int
    discount_amount: int
    final_amount: int
    payment_method: PaymentMethod
    status: OrderStatus
    payment_transaction_id: Optional[int] = None
    buyer_note: Optional[str] = None
    seller_note: Optional[str] = None
    admin_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    paid_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


class OrderPage(BaseModel):
    items: list[OrderOut]
    meta: PageMeta


class OrderDownloadOut(ORMModel):
    id: int
    order_id: int
    user_id: uuid.UUID
    file_url: str
    file_name: str
    file_size: Optional[int] = None
    download_ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class PurchaseHistoryItem(BaseModel):
    order: OrderOut
    download_count: int = Field(ge=0)
    last_download_at: Optional[datetime] = None


class PurchaseHistoryPage(BaseModel):
    items: list[PurchaseHistoryItem]
    meta: PageMeta


class PurchasedOut(BaseModel):
    project_id: uuid.UUID
    purchased: bool


class SellerSalesStatsOut(ORMModel):
    seller_id: uuid.UUID
    total_orders: int
    completed_orders: int
    pending_orders: int
    processing_orders: int
    cancelled_orders: int
    total_revenue: int
    avg_order_value: float
    first_sale_at: Optional[datetime] = None
    last_sale_at: Optional[datetime] = None


class PlatformOrderStatsOut(ORMModel):
    total_orders: int
    completed_orders: int
    pending_orders: int
    cancelled_orders: int
    total_revenue: int
    today_orders: int
    today_revenue: int


OrderSortBy = Literal["created_at", "completed_at", "final_amount", "order_number"]
SortOrder = Literal["asc", "desc"]


__all__ = [
    "CreateOrderIn",
    "CancelOrderIn",
    "RecordDownloadIn",
    "OrderOut",
    "OrderPage",
    "OrderDownloadOut",
    "PurchaseHistoryItem",
    "PurchaseHistoryPage",
    "PurchasedOut",
    "SellerSalesStatsOut",
    "PlatformOrderStatsOut",
    "OrderSortBy",
    "SortOrder",
]
# Fin del archivo app/modules/orders/schemas.py
