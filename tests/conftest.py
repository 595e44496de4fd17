# tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para CodeMarket.

- Fuerza PYTHON_ENV=test antes de importar la app (settings cacheados).
- Cada test usa una base SQLite en archivo temporal vía aiosqlite; el
  engine emite BEGIN IMMEDIATE, así que las sesiones concurrentes se
  serializan como lo harían los locks de fila en PostgreSQL.
- Catálogo de proyectos en memoria (FakeCatalog) en lugar del cliente httpx.
- Cliente httpx con ASGITransport; app.state se arma a mano (sin lifespan).
"""

import os
import uuid
from typing import Optional

import pytest

# ============================================================
# Entorno de pruebas (antes de cualquier import de app.*)
# ============================================================
ADMIN_ID = uuid.UUID("00000000-0000-4000-8000-0000000000ad")

os.environ["PYTHON_ENV"] = "test"
os.environ["ALLOW_DEMO_USER"] = "false"
os.environ["ADMIN_USER_IDS"] = str(ADMIN_ID)
os.environ.setdefault("LOG_LEVEL", "WARNING")

from httpx import AsyncClient, ASGITransport

from app.shared.config import get_settings
from app.shared.database import Base, build_engine, build_session_factory
from app.modules.credits import (
    CreditAdminService,
    CreditRewardsService,
    LedgerService,
)
from app.modules.orders import (
    OrderQueryService,
    OrderService,
    ProjectInfo,
)


class FakeCatalog:
    """Catálogo en memoria: project_id -> ProjectInfo."""

    def __init__(self):
        self.projects: dict[uuid.UUID, ProjectInfo] = {}

    def add(
        self,
        seller_id: uuid.UUID,
        price: int,
        status: str = "approved",
        title: Optional[str] = None,
    ) -> ProjectInfo:
        project = ProjectInfo(
            id=uuid.uuid4(),
            seller_id=seller_id,
            price=price,
            status=status,
            title=title or "Demo project",
        )
        self.projects[project.id] = project
        return project

    async def get_project(self, project_id: uuid.UUID) -> Optional[ProjectInfo]:
        return self.projects.get(project_id)

    async def aclose(self) -> None:
        return None


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def engine(tmp_path):
    db_path = tmp_path / "codemarket_test.db"
    eng = build_engine(url=f"sqlite+aiosqlite:///{db_path}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def ledger(session_factory):
    return LedgerService(session_factory)


@pytest.fixture
def rewards(ledger):
    return CreditRewardsService(ledger)


@pytest.fixture
def credit_admin(session_factory, ledger):
    return CreditAdminService(session_factory, ledger)


@pytest.fixture
async def seeded_configs(credit_admin):
    """Siembra los credit_configs por defecto."""
    await credit_admin.ensure_default_configs()
    return credit_admin


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def order_service(session_factory, ledger, catalog):
    return OrderService(session_factory, ledger, catalog)


@pytest.fixture
def order_queries(session_factory):
    return OrderQueryService(session_factory)


@pytest.fixture
def buyer_id():
    return uuid.uuid4()


@pytest.fixture
def seller_id():
    return uuid.uuid4()


@pytest.fixture
def admin_id():
    return ADMIN_ID


@pytest.fixture
def app(engine, session_factory, catalog):
    from app.main import create_app

    fastapi_app = create_app(get_settings())
    fastapi_app.state.engine = engine
    fastapi_app.state.session_factory = session_factory
    fastapi_app.state.catalog = catalog
    return fastapi_app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
