# -*- coding: utf-8 -*-
"""
app/modules/orders/errors.py

Excepciones de dominio del motor de órdenes.

InsufficientBalance e InvalidAmount provienen del ledger
(app.modules.credits.errors) y se propagan sin envolver.

Autor: CodeMarket
Fecha: 2026-10-09
"""

from __future__ import annotations

from typing import Any, Optional


class OrderError(Exception):
    """Error base del motor de órdenes."""

    def __init__(self, message: str = "Order operation rejected"):
        self.message = message
        super().__init__(message)


class ProjectNotFound(OrderError):
    """El proyecto no existe o no está publicado (approved)."""

    def __init__(self, project_id: Any):
        self.project_id = project_id
        super().__init__(f"Project not found or not available for purchase: {project_id}")


class SelfPurchaseForbidden(OrderError):
    def __init__(self, message: str = "Sellers cannot purchase their own project"):
        super().__init__(message)


class AlreadyPurchased(OrderError):
    """El comprador ya tiene una orden completada para el proyecto."""

    def __init__(self, buyer_id: Any, project_id: Any):
        self.buyer_id = buyer_id
        self.project_id = project_id
        super().__init__(f"Project {project_id} already purchased by {buyer_id}")


class OrderNotFound(OrderError):
    def __init__(self, order_id: Any):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class PermissionDenied(OrderError):
    def __init__(self, message: str = "Not allowed to access this order"):
        super().__init__(message)


class InvalidStateTransition(OrderError):
    """La operación no está permitida desde el estado actual de la orden."""

    def __init__(self, order_id: Any, current: Any, action: str, message: Optional[str] = None):
        self.order_id = order_id
        self.current = current
        self.action = action
        current_value = getattr(current, "value", current)
        super().__init__(message or f"Cannot {action} order {order_id} in status {current_value}")


class CatalogUnavailableError(OrderError):
    """El servicio de catálogo no respondió o respondió con error."""

    def __init__(self, message: str = "Project catalog unavailable"):
        super().__init__(message)


__all__ = [
    "OrderError",
    "ProjectNotFound",
    "SelfPurchaseForbidden",
    "AlreadyPurchased",
    "OrderNotFound",
    "PermissionDenied",
    "InvalidStateTransition",
    "CatalogUnavailableError",
]
# Fin del archivo app/modules/orders/errors.py
