# -*- coding: utf-8 -*-
"""
app/main.py

Punto de entrada principal del backend de CodeMarket.

Ajustes clave:
- Configuración vía app.shared.config (pydantic-settings por PYTHON_ENV).
- Ciclo de vida: engine + session factory + cliente del catálogo en
  app.state; siembra de credit_configs por defecto; cierre ordenado.
- StorageError se traduce a 503 en un handler global; el resto de errores
  de dominio los traduce cada router.
- Health principal /health en el paquete app.routes.

Autor: CodeMarket
Fecha: 2026-10-11
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Cargar .env ANTES de instanciar settings
# En DEV: override=True para que .env mande sobre variables del entorno
# En PROD: override=False para respetar variables del entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_PYTHON_ENV = os.getenv("PYTHON_ENV", "development").strip().strip('"').strip("'").lower()
load_dotenv(dotenv_path=_ENV_PATH, override=_PYTHON_ENV == "development")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.shared.config import BaseAppSettings, get_settings, setup_logging
from app.shared.database import Base, StorageError, build_engine, build_session_factory
from app.shared.middleware import (
    JSONExceptionMiddleware,
    RequestLoggingMiddleware,
    storage_error_handler,
)
from app.modules.credits import CreditAdminService, LedgerService
from app.modules.orders import HttpProjectCatalog
from app.routes import router as root_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ────────── STARTUP ──────────
    settings: BaseAppSettings = app.state.settings

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    app.state.engine = engine
    app.state.session_factory = session_factory

    # En dev/test el esquema se crea al arrancar; en prod lo gestionan migraciones
    if not settings.is_prod:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    token = settings.catalog_service_token
    catalog = HttpProjectCatalog(
        settings.catalog_api_url,
        timeout_s=settings.catalog_timeout_s,
        service_token=token.get_secret_value() if token else None,
    )
    app.state.catalog = catalog

    try:
        admin = CreditAdminService(session_factory, LedgerService(session_factory))
        await admin.ensure_default_configs()
    except StorageError as e:
        logger.warning("Default credit configs not seeded: %s", e)

    logger.info("%s backend started (env=%s)", settings.app_name, settings.python_env)
    try:
        yield
    finally:
        # ────────── SHUTDOWN ──────────
        logger.info("Shutting down %s backend", settings.app_name)
        await catalog.aclose()
        await engine.dispose()


openapi_tags = [
    {"name": "credits", "description": "Saldo, historial y check-in diario"},
    {"name": "admin:credits", "description": "Configuración y ajustes del ledger"},
    {"name": "orders", "description": "Compra, liquidación, cancelación y descargas"},
    {"name": "admin:orders", "description": "Listado y estadísticas de órdenes"},
]


def _configure_cors(app_instance: FastAPI, settings: BaseAppSettings) -> None:
    origins = settings.get_cors_origins()
    # "*" con allow_credentials=True es inválido en navegadores
    wildcard = origins == ["*"]
    if wildcard and settings.is_prod:
        logger.error("Refusing wildcard CORS in production; cross-origin requests will be blocked")
        return
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=600,
    )
    logger.info("CORS enabled for origins=%s", origins)


def create_app(settings: Optional[BaseAppSettings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Ledger de créditos y motor de órdenes de CodeMarket",
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings

    # El orden real de ejecución de middlewares es inverso al registro:
    # CORS se registra al final para ejecutarse primero
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(JSONExceptionMiddleware)
    _configure_cors(app, settings)

    app.add_exception_handler(StorageError, storage_error_handler)
    app.include_router(root_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("app.main:app", host=_settings.app_host, port=_settings.app_port)

# Fin del archivo app/main.py
