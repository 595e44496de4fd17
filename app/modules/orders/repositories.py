# -*- coding: utf-8 -*-
"""
app/modules/orders/repositories.py

Repositorios para órdenes y descargas.

Autor: CodeMarket
Fecha: 2026-10-09
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .enums import OrderStatus
from .models import Order, OrderDownload

logger = logging.getLogger(__name__)

# Columnas permitidas para ordenar listados administrativos
ORDER_SORT_COLUMNS = {
    "created_at": Order.created_at,
    "completed_at": Order.completed_at,
    "final_amount": Order.final_amount,
    "order_number": Order.order_number,
}


class OrderRepository:
    """Acceso a orders."""

    async def get_by_id(
        self,
        session: AsyncSession,
        order_id: int,
        *,
        for_update: bool = False,
    ) -> Optional[Order]:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_order_number(self, session: AsyncSession, order_number: str) -> bool:
        result = await session.execute(
            select(Order.id).where(Order.order_number == order_number).limit(1)
        )
        return result.first() is not None

    async def has_completed_order(
        self,
        session: AsyncSession,
        buyer_id: uuid.UUID,
        project_id: uuid.UUID,
    ) -> bool:
        result = await session.execute(
            select(Order.id)
            .where(
                Order.buyer_id == buyer_id,
                Order.project_id == project_id,
                Order.status == OrderStatus.COMPLETED,
            )
            .limit(1)
        )
        return result.first() is not None

    async def create(self, session: AsyncSession, **fields: Any) -> Order:
        order = Order(**fields)
        session.add(order)
        await session.flush()
        return order

    async def list_purchases_with_downloads(
        self,
        session: AsyncSession,
        buyer_id: uuid.UUID,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[tuple[Order, int, Optional[datetime]]], int]:
        """
        Órdenes completadas del comprador con conteo y última descarga.

        Returns:
            ([(order, download_count, last_download_at)], total)
        """
        downloads = (
            select(
                OrderDownload.order_id.label("order_id"),
                func.count(OrderDownload.id).label("download_count"),
                func.max(OrderDownload.created_at).label("last_download_at"),
            )
            .group_by(OrderDownload.order_id)
            .subquery()
        )
        base_filter = (
            Order.buyer_id == buyer_id,
            Order.status == OrderStatus.COMPLETED,
        )
        total = await session.scalar(select(func.count(Order.id)).where(*base_filter))

        stmt = (
            select(
                Order,
                func.coalesce(downloads.c.download_count, 0),
                downloads.c.last_download_at,
            )
            .outerjoin(downloads, downloads.c.order_id == Order.id)
            .where(*base_filter)
            .order_by(Order.completed_at.desc(), Order.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await session.execute(stmt)
        rows = [(order, int(count or 0), last) for order, count, last in result.all()]
        return rows, int(total or 0)

    async def seller_stats(self, session: AsyncSession, seller_id: uuid.UUID) -> dict[str, Any]:
        is_completed = Order.status == OrderStatus.COMPLETED
        stmt = select(
            func.count(Order.id).label("total_orders"),
            func.sum(case((is_completed, 1), else_=0)).label("completed_orders"),
            func.sum(case((Order.status == OrderStatus.PENDING, 1), else_=0)).label("pending_orders"),
            func.sum(case((Order.status == OrderStatus.PROCESSING, 1), else_=0)).label("processing_orders"),
            func.sum(case((Order.status == OrderStatus.CANCELLED, 1), else_=0)).label("cancelled_orders"),
            func.sum(case((is_completed, Order.final_amount), else_=0)).label("total_revenue"),
            func.avg(case((is_completed, Order.final_amount), else_=None)).label("avg_order_value"),
            func.min(case((is_completed, Order.completed_at), else_=None)).label("first_sale_at"),
            func.max(case((is_completed, Order.completed_at), else_=None)).label("last_sale_at"),
        ).where(Order.seller_id == seller_id)
        result = await session.execute(stmt)
        return dict(result.one()._mapping)

    async def list_filtered(
        self,
        session: AsyncSession,
        *,
        status: Optional[OrderStatus] = None,
        buyer_id: Optional[uuid.UUID] = None,
        seller_id: Optional[uuid.UUID] = None,
        project_id: Optional[uuid.UUID] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[Order], int]:
        if sort_by not in ORDER_SORT_COLUMNS:
            raise ValueError(f"Unsupported sort column: {sort_by}")
        if sort_order not in ("asc", "desc"):
            raise ValueError(f"Unsupported sort order: {sort_order}")

        filters = []
        if status is not None:
            filters.append(Order.status == OrderStatus(status))
        if buyer_id is not None:
            filters.append(Order.buyer_id == buyer_id)
        if seller_id is not None:
            filters.append(Order.seller_id == seller_id)
        if project_id is not None:
            filters.append(Order.project_id == project_id)

        total = await session.scalar(select(func.count(Order.id)).where(*filters))

        column = ORDER_SORT_COLUMNS[sort_by]
        ordering = column.asc() if sort_order == "asc" else column.desc()
        tiebreak = Order.id.asc() if sort_order == "asc" else Order.id.desc()
        stmt = (
            select(Order)
            .where(*filters)
            .order_by(ordering, tiebreak)
            .limit(limit)
            .offset(offset)
        )
        result = await session.execute(stmt)
        return result.scalars().all(), int(total or 0)

    async def platform_stats(self, session: AsyncSession, *, since: datetime) -> dict[str, Any]:
        """Totales de la plataforma y cifras desde `since` (inicio del día)."""
        is_completed = Order.status == OrderStatus.COMPLETED
        is_open = Order.status.in_([OrderStatus.PENDING, OrderStatus.PROCESSING])
        completed_since = is_completed & (Order.completed_at >= since)
        stmt = select(
            func.count(Order.id).label("total_orders"),
            func.sum(case((is_completed, 1), else_=0)).label("completed_orders"),
            func.sum(case((is_open, 1), else_=0)).label("pending_orders"),
            func.sum(case((Order.status == OrderStatus.CANCELLED, 1), else_=0)).label("cancelled_orders"),
            func.sum(case((is_completed, Order.final_amount), else_=0)).label("total_revenue"),
            func.sum(case((Order.created_at >= since, 1), else_=0)).label("today_orders"),
            func.sum(case((completed_since, Order.final_amount), else_=0)).label("today_revenue"),
        )
        result = await session.execute(stmt)
        return dict(result.one()._mapping)


class OrderDownloadRepository:
    """Acceso a order_downloads (append-only)."""

    async def create(self, session: AsyncSession, **fields: Any) -> OrderDownload:
        download = OrderDownload(**fields)
        session.add(download)
        await session.flush()
        return download

    async def list_by_order(self, session: AsyncSession, order_id: int) -> Sequence[OrderDownload]:
        result = await session.execute(
            select(OrderDownload)
            .where(OrderDownload.order_id == order_id)
            .order_by(OrderDownload.id.desc())
        )
        return result.scalars().all()


__all__ = ["OrderRepository", "OrderDownloadRepository", "ORDER_SORT_COLUMNS"]
# Fin del archivo app/modules/orders/repositories.py
