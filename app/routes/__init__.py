# -*- coding: utf-8 -*-
"""
app/routes/__init__.py

Ensamblador principal de ruteadores de la API de CodeMarket.

Responsabilidades:
- Incluir el router de health (/health) sin prefijo.
- Montar los routers de créditos y órdenes bajo /api.

Autor: CodeMarket
Fecha: 2026-10-11
"""

from fastapi import APIRouter

from app.modules.credits.routes import credits_admin_router, credits_router
from app.modules.orders.routes import orders_admin_router, orders_router
from .health_routes import router as health_router

api = APIRouter(prefix="/api")
api.include_router(credits_router)
api.include_router(credits_admin_router)
api.include_router(orders_router)
api.include_router(orders_admin_router)

router = APIRouter()

# Health check sin prefijo adicional
router.include_router(health_router)
router.include_router(api)

__all__ = ["router"]

# Fin del archivo app/routes/__init__.py
