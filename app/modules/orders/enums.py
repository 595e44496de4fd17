# -*- coding: utf-8 -*-
"""
app/modules/orders/enums.py

Enums para órdenes de compra.

Autor: CodeMarket
Fecha: 2026-10-09
"""

from enum import Enum


class OrderStatus(str, Enum):
    """
    Estado de una orden.

    pending ──► processing ──► completed
       │            │
       └────────────┴──► cancelled

    refunded existe como estado terminal pero ninguna operación lo asigna.
    """
    __db_enum_name__ = "order_status_enum"

    PENDING = "pending"        # Espera confirmación de un pago externo
    PROCESSING = "processing"  # Pago con créditos listo para liquidar
    COMPLETED = "completed"    # Liquidada (terminal)
    CANCELLED = "cancelled"    # Cancelada (terminal)
    REFUNDED = "refunded"      # Revertida tras completarse (terminal)

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})

CANCELLABLE_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
})


class PaymentMethod(str, Enum):
    __db_enum_name__ = "payment_method_enum"

    CREDITS = "credits"
    ALIPAY = "alipay"
    WECHAT = "wechat"
    STRIPE = "stripe"
    PAYPAL = "paypal"


__all__ = [
    "OrderStatus",
    "PaymentMethod",
    "TERMINAL_STATUSES",
    "CANCELLABLE_STATUSES",
]
