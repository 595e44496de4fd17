# -*- coding: utf-8 -*-
"""
app/modules/orders/services.py

Motor de órdenes y consultas.

- OrderService: máquina de estados de la orden (crear, liquidar con
  créditos, cancelar) y registro de descargas.
- OrderQueryService: historial de compras, estadísticas de ventas,
  listados administrativos.

Reglas:
- Cada operación mutante es una transacción; la liquidación debita el
  ledger dentro de la misma transacción que completa la orden.
- La fila de credit_accounts del comprador serializa sus compras: crear y
  liquidar órdenes toman su lock antes de validar recompra.
- Ninguna transición sale de un estado terminal.

Autor: CodeMarket
Fecha: 2026-10-10
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.database import transaction_scope
from app.shared.database.base import utcnow
from app.modules.credits.enums import CreditTransactionType
from app.modules.credits.errors import ConfigNotFound, InsufficientBalance, InvalidAmount
from app.modules.credits.references import LedgerReference
from app.modules.credits.services import MIN_PURCHASE_AMOUNT, LedgerService
from .catalog import ProjectCatalog
from .enums import CANCELLABLE_STATUSES, OrderStatus, PaymentMethod
from .errors import (
    AlreadyPurchased,
    InvalidStateTransition,
    OrderNotFound,
    PermissionDenied,
    ProjectNotFound,
    SelfPurchaseForbidden,
)
from .models import Order, OrderDownload
from .order_numbers import allocate_order_number
from .repositories import OrderDownloadRepository, OrderRepository

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "cancelled by user"
DEFAULT_MIN_PURCHASE_AMOUNT = 1


class OrderService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ledger: LedgerService,
        catalog: ProjectCatalog,
        *,
        order_repo: Optional[OrderRepository] = None,
        download_repo: Optional[OrderDownloadRepository] = None,
        order_number_max_attempts: int = 10,
    ):
        self.session_factory = session_factory
        self.ledger = ledger
        self.catalog = catalog
        self.order_repo = order_repo or OrderRepository()
        self.download_repo = download_repo or OrderDownloadRepository()
        self.order_number_max_attempts = order_number_max_attempts

    # ------------------------------------------------------------------
    # Creación
    # ------------------------------------------------------------------
    async def create_order(
        self,
        buyer_id: uuid.UUID,
        project_id: uuid.UUID,
        payment_method: PaymentMethod = PaymentMethod.CREDITS,
        *,
        buyer_note: Optional[str] = None,
    ) -> Order:
        """
        Crea una orden para (comprador, proyecto).

        Con créditos la orden nace en processing (lista para liquidar);
        con pasarelas externas nace en pending.

        Raises:
            ProjectNotFound: no existe o no está approved
            SelfPurchaseForbidden: el comprador es el vendedor
            InvalidAmount: precio por debajo de min_purchase_amount (créditos)
            AlreadyPurchased: ya existe una orden completada del par
            InsufficientBalance: saldo < precio (solo créditos)
            CatalogUnavailableError / StorageError
        """
        method = PaymentMethod(payment_method)

        project = await self.catalog.get_project(project_id)
        if project is None or not project.is_purchasable:
            raise ProjectNotFound(project_id)
        if buyer_id == project.seller_id:
            raise SelfPurchaseForbidden()

        if method is PaymentMethod.CREDITS:
            minimum = await self._min_purchase_amount()
            if project.price < minimum:
                raise InvalidAmount(
                    project.price,
                    f"Project price {project.price} is below the minimum purchase amount {minimum}",
                )

        async with transaction_scope(self.session_factory) as db:
            # Lock de la cuenta del comprador: serializa sus compras
            account = await self.ledger.get_or_create_account(buyer_id, session=db)

            if await self.order_repo.has_completed_order(db, buyer_id, project_id):
                raise AlreadyPurchased(buyer_id, project_id)

            if method is PaymentMethod.CREDITS and account.available_credits < project.price:
                raise InsufficientBalance(
                    available=account.available_credits,
                    required=project.price,
                )

            order_number = await allocate_order_number(
                lambda candidate: self.order_repo.exists_order_number(db, candidate),
                max_attempts=self.order_number_max_attempts,
            )

            now = utcnow()
            order = await self.order_repo.create(
                db,
                order_number=order_number,
                buyer_id=buyer_id,
                seller_id=project.seller_id,
                project_id=project_id,
                original_price=project.price,
                discount_amount=0,
                final_amount=project.price,
                payment_method=method,
                status=OrderStatus.PROCESSING if method is PaymentMethod.CREDITS else OrderStatus.PENDING,
                buyer_note=buyer_note,
                created_at=now,
                updated_at=now,
            )

        logger.info(
            "Order created: id=%s number=%s buyer=%s project=%s amount=%d method=%s status=%s",
            order.id, order.order_number, buyer_id, project_id,
            order.final_amount, method.value, order.status.value,
        )
        return order

    async def _min_purchase_amount(self) -> int:
        try:
            value = await self.ledger.get_config(MIN_PURCHASE_AMOUNT)
        except ConfigNotFound:
            logger.debug("min_purchase_amount not configured; using %d", DEFAULT_MIN_PURCHASE_AMOUNT)
            value = DEFAULT_MIN_PURCHASE_AMOUNT
        # Un proyecto de precio 0 nunca se paga con créditos
        return max(value, 1)

    # ------------------------------------------------------------------
    # Liquidación
    # ------------------------------------------------------------------
    async def complete_credits_order(
        self,
        order_id: int,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Order:
        """
        Liquida una orden processing pagada con créditos.

        Débito del ledger y paso a completed ocurren en la misma
        transacción. Si la liquidación no procede por saldo insuficiente o
        por una compra ya completada del mismo proyecto, la orden queda
        cancelled con el motivo en admin_note y se lanza el error.

        Raises:
            OrderNotFound
            PermissionDenied: el actor no es el comprador
            InvalidStateTransition: no está en processing o no es de créditos
            InsufficientBalance: la orden quedó cancelled
            AlreadyPurchased: la orden quedó cancelled
        """
        failure: Optional[Exception] = None

        async with transaction_scope(self.session_factory) as db:
            order = await self._get_for_update(db, order_id)
            if actor_id is not None and actor_id != order.buyer_id:
                raise PermissionDenied("Only the buyer can pay this order")
            if order.payment_method is not PaymentMethod.CREDITS:
                raise InvalidStateTransition(
                    order.id, order.status, "complete",
                    message=f"Order {order.id} is not paid with credits",
                )
            if order.status is not OrderStatus.PROCESSING:
                raise InvalidStateTransition(order.id, order.status, "complete")

            # Un SAVEPOINT revertido expira la instancia; no leer atributos después
            buyer_id, project_id = order.buyer_id, order.project_id
            if await self.order_repo.has_completed_order(db, buyer_id, project_id):
                failure = AlreadyPurchased(buyer_id, project_id)
            else:
                try:
                    async with db.begin_nested():
                        tx_id = await self.ledger.spend(
                            order.buyer_id,
                            order.final_amount,
                            CreditTransactionType.SPEND_PURCHASE,
                            f"Purchase {order.order_number}",
                            reference=LedgerReference.order(order.id),
                            created_by=order.buyer_id,
                            idempotency_key=f"order:{order.id}:settle",
                            session=db,
                        )
                        now = utcnow()
                        order.status = OrderStatus.COMPLETED
                        order.payment_transaction_id = tx_id
                        order.paid_at = now
                        order.completed_at = now
                        order.updated_at = now
                        await db.flush()
                except InsufficientBalance as e:
                    failure = e
                except IntegrityError:
                    # UNIQUE(buyer_id, project_id) WHERE completed: otra orden ganó
                    failure = AlreadyPurchased(buyer_id, project_id)

            if failure is not None:
                # recargar tras el SAVEPOINT revertido
                order = await self._get_for_update(db, order_id)
                self._mark_cancelled(order, self._settlement_failure_reason(failure))
                await db.flush()

        if failure is not None:
            logger.info(
                "Order settlement failed: id=%s buyer=%s reason=%s",
                order.id, order.buyer_id, type(failure).__name__,
            )
            raise failure

        logger.info(
            "Order completed: id=%s number=%s buyer=%s amount=%d tx=%s",
            order.id, order.order_number, order.buyer_id,
            order.final_amount, order.payment_transaction_id,
        )
        return order

    @staticmethod
    def _settlement_failure_reason(failure: Exception) -> str:
        if isinstance(failure, InsufficientBalance):
            return (
                "insufficient balance at settlement "
                f"(available={failure.available}, required={failure.required})"
            )
        return "project already purchased by buyer"

    # ------------------------------------------------------------------
    # Cancelación
    # ------------------------------------------------------------------
    async def cancel_order(
        self,
        order_id: int,
        reason: Optional[str] = None,
        *,
        actor_id: Optional[uuid.UUID] = None,
        is_admin: bool = False,
    ) -> Order:
        """
        Cancela una orden pending/processing.

        Si existe un débito de compra de esta orden sin su reembolso
        (no debería ocurrir bajo processing→completed), se abona un
        refund_purchase por el monto exacto en la misma transacción.

        Raises:
            OrderNotFound
            PermissionDenied: el actor no es el comprador ni admin
            InvalidStateTransition: la orden está en un estado terminal
        """
        refunded = 0
        async with transaction_scope(self.session_factory) as db:
            order = await self._get_for_update(db, order_id)
            if actor_id is not None and not is_admin and actor_id != order.buyer_id:
                raise PermissionDenied("Only the buyer or an administrator can cancel this order")
            if order.status not in CANCELLABLE_STATUSES:
                raise InvalidStateTransition(order.id, order.status, "cancel")

            refunded = await self._refund_outstanding(db, order, actor_id)
            self._mark_cancelled(order, reason or DEFAULT_CANCEL_REASON)
            await db.flush()

        logger.info(
            "Order cancelled: id=%s number=%s by=%s refunded=%d",
            order.id, order.order_number, actor_id, refunded,
        )
        return order

    async def _refund_outstanding(
        self,
        db: AsyncSession,
        order: Order,
        actor_id: Optional[uuid.UUID],
    ) -> int:
        reference = LedgerReference.order(order.id)
        movements = await self.ledger.find_by_reference(order.buyer_id, reference, session=db)
        spent = -sum(
            tx.amount for tx in movements
            if tx.transaction_type is CreditTransactionType.SPEND_PURCHASE
        )
        refunded = sum(
            tx.amount for tx in movements
            if tx.transaction_type is CreditTransactionType.REFUND_PURCHASE
        )
        outstanding = spent - refunded
        if outstanding <= 0:
            return 0

        logger.warning(
            "Refunding credits spent on non-completed order: id=%s buyer=%s amount=%d",
            order.id, order.buyer_id, outstanding,
        )
        await self.ledger.earn(
            order.buyer_id,
            outstanding,
            CreditTransactionType.REFUND_PURCHASE,
            f"Refund {order.order_number}",
            reference=reference,
            created_by=actor_id,
            idempotency_key=f"order:{order.id}:refund",
            session=db,
        )
        return outstanding

    @staticmethod
    def _mark_cancelled(order: Order, reason: str) -> None:
        now = utcnow()
        order.status = OrderStatus.CANCELLED
        order.cancelled_at = now
        order.updated_at = now
        order.append_admin_note(f"Cancel reason: {reason}")

    # ------------------------------------------------------------------
    # Descargas / lectura
    # ------------------------------------------------------------------
    async def record_download(
        self,
        order_id: int,
        user_id: uuid.UUID,
        file_url: str,
        file_name: str,
        *,
        file_size: Optional[int] = None,
        download_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> OrderDownload:
        """
        Registra una descarga. Solo el comprador de una orden completed.

        Raises:
            OrderNotFound
            PermissionDenied
        """
        async with transaction_scope(self.session_factory) as db:
            order = await self.order_repo.get_by_id(db, order_id)
            if order is None:
                raise OrderNotFound(order_id)
            if order.buyer_id != user_id:
                raise PermissionDenied("Only the buyer can download this order")
            if order.status is not OrderStatus.COMPLETED:
                raise PermissionDenied("Downloads are available only for completed orders")

            download = await self.download_repo.create(
                db,
                order_id=order.id,
                user_id=user_id,
                file_url=file_url,
                file_name=file_name,
                file_size=file_size,
                download_ip=download_ip,
                user_agent=user_agent,
            )

        logger.info("Download recorded: order=%s user=%s file=%s", order_id, user_id, file_name)
        return download

    async def get_order(
        self,
        order_id: int,
        *,
        viewer_id: Optional[uuid.UUID] = None,
        is_admin: bool = False,
    ) -> Order:
        async with transaction_scope(self.session_factory) as db:
            order = await self.order_repo.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if viewer_id is not None and not is_admin and viewer_id not in (order.buyer_id, order.seller_id):
            raise PermissionDenied()
        return order

    async def _get_for_update(self, db: AsyncSession, order_id: int) -> Order:
        order = await self.order_repo.get_by_id(db, order_id, for_update=True)
        if order is None:
            raise OrderNotFound(order_id)
        return order


# ----------------------------------------------------------------------
# Consultas
# ----------------------------------------------------------------------
@dataclass
class PurchaseHistoryEntry:
    order: Order
    download_count: int
    last_download_at: Optional[datetime]


@dataclass
class SellerSalesStats:
    seller_id: uuid.UUID
    total_orders: int = 0
    completed_orders: int = 0
    pending_orders: int = 0
    processing_orders: int = 0
    cancelled_orders: int = 0
    total_revenue: int = 0
    avg_order_value: float = 0.0
    first_sale_at: Optional[datetime] = None
    last_sale_at: Optional[datetime] = None


@dataclass
class PlatformOrderStats:
    total_orders: int = 0
    completed_orders: int = 0
    pending_orders: int = 0
    cancelled_orders: int = 0
    total_revenue: int = 0
    today_orders: int = 0
    today_revenue: int = 0


class OrderQueryService:
    """Lecturas sobre órdenes; no modifica estado."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        order_repo: Optional[OrderRepository] = None,
        download_repo: Optional[OrderDownloadRepository] = None,
    ):
        self.session_factory = session_factory
        self.order_repo = order_repo or OrderRepository()
        self.download_repo = download_repo or OrderDownloadRepository()

    async def get_user_purchase_history(
        self,
        user_id: uuid.UUID,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[PurchaseHistoryEntry], int]:
        """Órdenes completadas del usuario (más reciente primero) + total."""
        async with transaction_scope(self.session_factory) as db:
            rows, total = await self.order_repo.list_purchases_with_downloads(
                db, user_id, limit=limit, offset=offset
            )
        entries = [
            PurchaseHistoryEntry(order=order, download_count=count, last_download_at=last)
            for order, count, last in rows
        ]
        return entries, total

    async def get_seller_sales_stats(self, seller_id: uuid.UUID) -> SellerSalesStats:
        async with transaction_scope(self.session_factory) as db:
            row = await self.order_repo.seller_stats(db, seller_id)
        return SellerSalesStats(
            seller_id=seller_id,
            total_orders=int(row["total_orders"] or 0),
            completed_orders=int(row["completed_orders"] or 0),
            pending_orders=int(row["pending_orders"] or 0),
            processing_orders=int(row["processing_orders"] or 0),
            cancelled_orders=int(row["cancelled_orders"] or 0),
            total_revenue=int(row["total_revenue"] or 0),
            avg_order_value=round(float(row["avg_order_value"] or 0), 2),
            first_sale_at=row["first_sale_at"],
            last_sale_at=row["last_sale_at"],
        )

    async def check_user_purchased(self, user_id: uuid.UUID, project_id: uuid.UUID) -> bool:
        async with transaction_scope(self.session_factory) as db:
            return await self.order_repo.has_completed_order(db, user_id, project_id)

    async def get_order_downloads(
        self,
        order_id: int,
        *,
        viewer_id: Optional[uuid.UUID] = None,
        is_admin: bool = False,
    ) -> Sequence[OrderDownload]:
        """Descargas de la orden, más reciente primero (comprador o admin)."""
        async with transaction_scope(self.session_factory) as db:
            order = await self.order_repo.get_by_id(db, order_id)
            if order is None:
                raise OrderNotFound(order_id)
            if viewer_id is not None and not is_admin and viewer_id != order.buyer_id:
                raise PermissionDenied()
            return await self.download_repo.list_by_order(db, order_id)

    async def get_seller_orders(
        self,
        seller_id: uuid.UUID,
        status: Optional[OrderStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[Order], int]:
        async with transaction_scope(self.session_factory) as db:
            return await self.order_repo.list_filtered(
                db, seller_id=seller_id, status=status, limit=limit, offset=offset
            )

    async def list_orders(
        self,
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
        async with transaction_scope(self.session_factory) as db:
            return await self.order_repo.list_filtered(
                db,
                status=status,
                buyer_id=buyer_id,
                seller_id=seller_id,
                project_id=project_id,
                sort_by=sort_by,
                sort_order=sort_order,
                limit=limit,
                offset=offset,
            )

    async def get_platform_order_stats(self, now: Optional[datetime] = None) -> PlatformOrderStats:
        now = now or datetime.now(timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        async with transaction_scope(self.session_factory) as db:
            row = await self.order_repo.platform_stats(db, since=start_of_day)
        return PlatformOrderStats(
            total_orders=int(row["total_orders"] or 0),
            completed_orders=int(row["completed_orders"] or 0),
            pending_orders=int(row["pending_orders"] or 0),
            cancelled_orders=int(row["cancelled_orders"] or 0),
            total_revenue=int(row["total_revenue"] or 0),
            today_orders=int(row["today_orders"] or 0),
            today_revenue=int(row["today_revenue"] or 0),
        )


__all__ = [
    "OrderService",
    "OrderQueryService",
    "PurchaseHistoryEntry",
    "SellerSalesStats",
    "PlatformOrderStats",
    "DEFAULT_CANCEL_REASON",
]
# Fin del archivo app/modules/orders/services.py
