# -*- coding: utf-8 -*-
"""
app/routes/health_routes.py

Endpoint básico de health check del backend de CodeMarket.

Autor: CodeMarket
Fecha: 2026-10-11
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.shared.config import get_settings
from app.shared.database import check_database_health

router = APIRouter()


@router.get(
    "/health",
    summary="Health check del backend",
    description=(
        "Devuelve el estado básico del backend, incluyendo "
        "verificación simple de conectividad a la base de datos."
    ),
)
async def health_check(request: Request) -> dict:
    settings = get_settings()

    engine = getattr(request.app.state, "engine", None)
    db_ok = engine is not None and await check_database_health(engine, timeout_s=2.0)

    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.python_env,
        "database": {
            "reachable": db_ok,
        },
        "service": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
    }

# Fin del archivo app/routes/health_routes.py
