# tests/shared/test_settings.py
# -*- coding: utf-8 -*-
"""
Tests de configuración: selección por PYTHON_ENV, URL de base de datos y
validaciones de seguridad.
"""

import uuid

import pytest

from app.shared.config import get_settings
from app.shared.config.settings_base import BaseAppSettings


def test_test_env_selected():
    settings = get_settings()
    assert settings.is_test
    assert settings.order_number_max_attempts == 10


def test_admin_user_ids_csv_and_json():
    a, b = uuid.uuid4(), uuid.uuid4()
    csv = BaseAppSettings(ADMIN_USER_IDS=f"{a}, {b}")
    assert csv.admin_user_ids == [a, b]
    as_json = BaseAppSettings(ADMIN_USER_IDS=f'["{a}"]')
    assert as_json.admin_user_ids == [a]
    assert BaseAppSettings(ADMIN_USER_IDS="").admin_user_ids == []


def test_database_url_from_components():
    settings = BaseAppSettings(DB_USER="u", DB_PASSWORD="p@ss", DB_HOST="db", DB_PORT=5433, DB_NAME="cm", DB_SSL="disable")
    assert settings.database_url == "postgresql+asyncpg://u:p%40ss@db:5433/cm?ssl=disable"


def test_database_url_normalized():
    settings = BaseAppSettings(DB_URL="postgres://u:p@db/cm", DB_SSL="require")
    assert settings.database_url == "postgresql+asyncpg://u:p@db/cm?ssl=require"


def test_sqlite_url_passthrough():
    settings = BaseAppSettings(DB_URL="sqlite+aiosqlite:///./local.db")
    assert settings.database_url == "sqlite+aiosqlite:///./local.db"


def test_cors_origins():
    settings = BaseAppSettings(CORS_ORIGINS='https://a.example, "https://b.example"')
    assert settings.get_cors_origins() == ["https://a.example", "https://b.example"]
    assert BaseAppSettings(CORS_ORIGINS="*").get_cors_origins() == ["*"]


def test_production_rejects_demo_user(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    monkeypatch.setenv("ALLOW_DEMO_USER", "true")
    get_settings.cache_clear()
    with pytest.raises(ValueError):
        get_settings()


def test_production_requires_ssl(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    monkeypatch.setenv("DB_SSL", "prefer")
    get_settings.cache_clear()
    with pytest.raises(ValueError):
        get_settings()
