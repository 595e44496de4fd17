# -*- coding: utf-8 -*-
"""
app/modules/orders/routes/__init__.py

Routers de órdenes.
"""

from .orders import router as orders_router
from .admin import router as orders_admin_router

__all__ = ["orders_router", "orders_admin_router"]
