# -*- coding: utf-8 -*-
"""
app/modules/orders/__init__.py

Motor de órdenes: máquina de estados, descargas, consultas y cliente
del catálogo de proyectos.

Autor: CodeMarket
Fecha: 2026-10-09
"""

from .models import Order, OrderDownload
from .enums import OrderStatus, PaymentMethod
from .errors import (
    OrderError,
    ProjectNotFound,
    SelfPurchaseForbidden,
    AlreadyPurchased,
    OrderNotFound,
    PermissionDenied,
    InvalidStateTransition,
    CatalogUnavailableError,
)
from .catalog import ProjectInfo, ProjectCatalog, HttpProjectCatalog
from .order_numbers import generate_order_number, allocate_order_number
from .repositories import OrderRepository, OrderDownloadRepository
from .services import (
    OrderService,
    OrderQueryService,
    PurchaseHistoryEntry,
    SellerSalesStats,
    PlatformOrderStats,
)

__all__ = [
    # Models
    "Order",
    "OrderDownload",
    # Enums
    "OrderStatus",
    "PaymentMethod",
    # Errors
    "OrderError",
    "ProjectNotFound",
    "SelfPurchaseForbidden",
    "AlreadyPurchased",
    "OrderNotFound",
    "PermissionDenied",
    "InvalidStateTransition",
    "CatalogUnavailableError",
    # Catalog
    "ProjectInfo",
    "ProjectCatalog",
    "HttpProjectCatalog",
    # Order numbers
    "generate_order_number",
    "allocate_order_number",
    # Repositories
    "OrderRepository",
    "OrderDownloadRepository",
    # Services
    "OrderService",
    "OrderQueryService",
    "PurchaseHistoryEntry",
    "SellerSalesStats",
    "PlatformOrderStats",
]
