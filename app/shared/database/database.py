# -*- coding: utf-8 -*-
"""
app/shared/database/database.py

SQLAlchemy 2.0 async (asyncpg en PostgreSQL, aiosqlite en pruebas).

Provee:
- build_engine(settings | url)     → AsyncEngine configurado
- build_session_factory(engine)    → async_sessionmaker
- get_session_factory              → dependencia FastAPI (app.state)
- transaction_scope()              → una operación = una transacción
- check_database_health()

No existe un engine global: lo crea el lifespan de la app (o el test)
y los servicios reciben la fábrica de sesiones por constructor.

Notas:
- En PostgreSQL el statement_timeout se fija por conexión vía
  server_settings de asyncpg.
- En SQLite se emite BEGIN IMMEDIATE al iniciar cada transacción; así
  los escritores se serializan y los SAVEPOINT funcionan con pysqlite.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.shared.config.settings_base import BaseAppSettings
from app.shared.database.errors import StorageError

logger = logging.getLogger(__name__)


def _enable_sqlite_immediate_transactions(engine: AsyncEngine, busy_timeout_ms: int) -> None:
    """
    Toma control del BEGIN de pysqlite (receta documentada de SQLAlchemy).

    pysqlite difiere el BEGIN hasta el primer DML, lo que rompe SAVEPOINT y
    deja que dos escritores lean el mismo saldo. Con BEGIN IMMEDIATE el
    lock de escritura se toma al abrir la transacción.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(
    settings: Optional[BaseAppSettings] = None,
    *,
    url: Optional[str] = None,
    echo: Optional[bool] = None,
) -> AsyncEngine:
    """
    Crea el AsyncEngine a partir de settings o de una URL explícita.

    Args:
        settings: Configuración de la app (usa database_url y timeouts)
        url: URL explícita; tiene prioridad sobre settings.database_url
        echo: Fuerza el echo de SQL (por defecto settings.db_echo_sql)
    """
    dsn = url or (settings.database_url if settings is not None else None)
    if not dsn:
        raise ValueError("build_engine requires settings or url")

    echo_sql = bool(echo if echo is not None else (settings.db_echo_sql if settings else False))
    connect_timeout = settings.db_connect_timeout_s if settings else 5.0
    command_timeout = settings.db_command_timeout_s if settings else 10.0
    statement_timeout_ms = settings.db_statement_timeout_ms if settings else 5000

    if dsn.startswith("sqlite"):
        engine = create_async_engine(
            dsn,
            poolclass=NullPool,
            echo=echo_sql,
            connect_args={"timeout": max(connect_timeout, 30.0)},
        )
        _enable_sqlite_immediate_transactions(engine, busy_timeout_ms=30_000)
        logger.info("Database engine ready: dialect=sqlite echo=%s", echo_sql)
        return engine

    connect_args: dict[str, Any] = {
        # Timeouts a nivel de conexión/consulta (asyncpg)
        "timeout": connect_timeout,
        "command_timeout": command_timeout,
        "server_settings": {"statement_timeout": str(statement_timeout_ms)},
    }
    engine = create_async_engine(
        dsn,
        pool_pre_ping=True,
        echo=echo_sql,
        connect_args=connect_args,
    )
    logger.info(
        "Database engine ready: dialect=%s echo=%s statement_timeout_ms=%s",
        engine.dialect.name, echo_sql, statement_timeout_ms,
    )
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


# ── Dependencia FastAPI
def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Devuelve la fábrica de sesiones registrada por el lifespan en app.state."""
    factory = getattr(request.app.state, "session_factory", None)
    if factory is None:
        raise StorageError("Database is not initialised")
    return factory


# ── Unidad de trabajo
@asynccontextmanager
async def transaction_scope(
    session_factory: async_sessionmaker[AsyncSession],
    session: Optional[AsyncSession] = None,
) -> AsyncIterator[AsyncSession]:
    """
    Abre una transacción para una operación de servicio.

    - Si se recibe `session`, la operación se une a la transacción del
      llamador: no hace commit ni rollback, eso le toca a quien la abrió.
    - Si no, abre sesión + transacción; commit al salir sin error, rollback
      si algo se propaga. Los SQLAlchemyError se traducen a StorageError.
    """
    if session is not None:
        yield session
        return

    async with session_factory() as new_session:
        try:
            async with new_session.begin():
                yield new_session
        except SQLAlchemyError as exc:
            logger.error("Transaction rolled back: %s: %s", type(exc).__name__, exc)
            raise StorageError(f"Storage operation failed: {type(exc).__name__}", cause=exc) from exc


# ── Health check
async def check_database_health(engine: AsyncEngine, timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
    """
    Verifica conectividad a la base de datos.

    Args:
        engine: Engine a verificar
        timeout_s: Tiempo máximo de espera en segundos
        sql: Query SQL a ejecutar (default: "SELECT 1")

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with engine.connect() as conn:
                await conn.execute(text(sql))
        return True
    except (SQLAlchemyError, OSError, TimeoutError) as exc:
        logger.warning("Database health check failed: %s", exc)
        return False


__all__ = [
    "build_engine",
    "build_session_factory",
    "get_session_factory",
    "transaction_scope",
    "check_database_health",
]
# Fin del archivo app/shared/database/database.py
