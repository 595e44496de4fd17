# -*- coding: utf-8 -*-
"""
app/modules/orders/models.py

Modelos ORM de órdenes y descargas.

Tablas:
- orders: una fila por intento de compra; nunca se borra (registro financiero)
- order_downloads: log append-only de descargas de órdenes completadas

Autor: CodeMarket
Fecha: 2026-10-09
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, IdType, as_db_enum, utcnow
from .enums import OrderStatus, PaymentMethod


class Order(Base):
    """
    Orden de compra de un proyecto.

    Tabla: orders

    Constraints:
    - uq_orders_order_number: UNIQUE(order_number)
    - ck_orders_final_amount_matches: final_amount = original_price - discount_amount
    - ck_orders_amounts_non_negative
    - ck_orders_buyer_not_seller: buyer_id <> seller_id
    - uq_orders_buyer_project_completed: UNIQUE(buyer_id, project_id)
      WHERE status = 'completed' (respaldo de la verificación de recompra)
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    buyer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    seller_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    original_price: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    final_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    payment_method: Mapped[PaymentMethod] = mapped_column(
        as_db_enum(PaymentMethod),
        nullable=False,
    )
    status: Mapped[OrderStatus] = mapped_column(
        as_db_enum(OrderStatus),
        nullable=False,
        default=OrderStatus.PENDING,
    )

    # id de la CreditTransaction que liquidó la orden
    payment_transaction_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    buyer_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    seller_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    admin_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "final_amount = original_price - discount_amount",
            name="final_amount_matches",
        ),
        CheckConstraint(
            "original_price >= 0 AND discount_amount >= 0 AND final_amount >= 0",
            name="amounts_non_negative",
        ),
        CheckConstraint("buyer_id <> seller_id", name="buyer_not_seller"),
        Index(
            "uq_orders_buyer_project_completed",
            "buyer_id",
            "project_id",
            unique=True,
            postgresql_where=text("status = 'completed'"),
            sqlite_where=text("status = 'completed'"),
        ),
        Index("ix_orders_status_created", "status", "created_at"),
    )

    def append_admin_note(self, note: str) -> None:
        self.admin_note = f"{self.admin_note}\n{note}" if self.admin_note else note

    def __repr__(self) -> str:
        return (
            f"<Order id={self.id} number={self.order_number} buyer={self.buyer_id} "
            f"project={self.project_id} amount={self.final_amount} status={self.status}>"
        )


class OrderDownload(Base):
    """
    Descarga de archivos de una orden completada.

    Tabla: order_downloads (append-only)
    """

    __tablename__ = "order_downloads"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    order_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("orders.id"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    download_ip: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("ix_order_downloads_order_id_id", "order_id", "id"),
    )

    def __repr__(self) -> str:
        return f"<OrderDownload id={self.id} order={self.order_id} user={self.user_id} file={self.file_name}>"


__all__ = ["Order", "OrderDownload"]
# Fin del archivo app/modules/orders/models.py
