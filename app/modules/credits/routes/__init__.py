# -*- coding: utf-8 -*-
"""
app/modules/credits/routes/__init__.py

Routers del ledger de créditos.
"""

from .credits import router as credits_router
from .admin import router as credits_admin_router

__all__ = ["credits_router", "credits_admin_router"]
