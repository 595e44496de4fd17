# -*- coding: utf-8 -*-
"""
app/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Busca ser determinista: logging moderado, base de datos aislada
(SQLite en archivo temporal por defecto) y auth stub habilitado.

Autor: CodeMarket
Fecha: 2026-10-05
"""

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class EnvTestingSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: str = "test"

    # --- Logging en test: menos ruido ---
    log_level: str = "WARNING"
    log_format: str = "pretty"

    # --- Base de datos: usar DB separada para pruebas ---
    db_name: str = "codemarket_test"
    db_ssl: str = "disable"

    # --- Catálogo: los tests inyectan un catálogo falso ---
    catalog_api_url: str = "http://catalog.test/api"

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo app/shared/config/settings_testing.py
