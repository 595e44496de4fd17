# -*- coding: utf-8 -*-
"""
app/shared/config/settings_base.py

Base de configuración (Pydantic v2) para CodeMarket.
- Esta clase NO instancia singletons ni resuelve .env; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.

Los montos de bonos del ledger (register_bonus, upload_bonus, ...) NO viven
aquí: son configuración de negocio en la tabla credit_configs.

Autor: CodeMarket
Fecha: 2026-10-05
"""

from typing import Literal, Optional, Any
from uuid import UUID

from pydantic import Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="CodeMarket", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="codemarket", validation_alias="DB_NAME")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_ssl: Literal["disable", "prefer", "require"] = Field(default="prefer", validation_alias="DB_SSL")
    db_url: Optional[str] = Field(default=None, validation_alias="DB_URL")

    # Timeouts del store: el motor no impone timeouts propios sobre el ledger
    db_connect_timeout_s: float = Field(default=5.0, validation_alias="DB_CONNECT_TIMEOUT_S")
    db_command_timeout_s: float = Field(default=10.0, validation_alias="DB_COMMAND_TIMEOUT_S")
    db_statement_timeout_ms: int = Field(default=5000, validation_alias="DB_STATEMENT_TIMEOUT_MS")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        Genera la URL de conexión completa para SQLAlchemy + asyncpg.
        Prioriza DB_URL si existe, sino construye desde componentes individuales.
        """
        from urllib.parse import quote_plus

        # Si se provee DB_URL completa, úsala (normaliza el esquema)
        if self.db_url:
            url = self.db_url
            if url.startswith("sqlite"):
                return url
            url = (
                url.replace("postgres://", "postgresql+asyncpg://")
                   .replace("postgresql://", "postgresql+asyncpg://")
            )
            if "ssl=" not in url and self.db_ssl:
                sep = "&" if "?" in url else "?"
                url = f"{url}{sep}ssl={self.db_ssl}"
            return url

        # Construye desde componentes (con password escapado)
        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{self.db_user}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}?ssl={self.db_ssl}"
        )

    # =========================
    # Catálogo de proyectos (colaborador externo)
    # =========================
    catalog_api_url: str = Field(default="http://localhost:8001/api", validation_alias="CATALOG_API_URL")
    catalog_timeout_s: float = Field(default=5.0, validation_alias="CATALOG_TIMEOUT_S")
    catalog_service_token: Optional[SecretStr] = Field(default=None, validation_alias="CATALOG_SERVICE_TOKEN")

    # =========================
    # Órdenes
    # =========================
    order_number_max_attempts: int = Field(default=10, ge=1, validation_alias="ORDER_NUMBER_MAX_ATTEMPTS")

    # =========================
    # Auth (stub del proveedor de identidad)
    # =========================
    allow_demo_user: bool = Field(default=False, validation_alias="ALLOW_DEMO_USER")
    demo_user_id: UUID = Field(
        default=UUID("00000000-0000-4000-8000-000000000001"),
        validation_alias="DEMO_USER_ID",
    )
    admin_user_ids: Any = Field(default_factory=list, validation_alias="ADMIN_USER_IDS")

    # =========================
    # CORS / Frontend
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # Paginación
    page_size_default: int = Field(20, validation_alias="DEFAULT_PAGE_SIZE")
    page_size_max: int = Field(100, validation_alias="MAX_PAGE_SIZE")

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "pretty", "plain"] = Field(default="pretty", validation_alias="LOG_FORMAT")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    # ===== Normalizador de admin_user_ids (lista JSON o separada por comas) =====
    @field_validator("admin_user_ids", mode="before")
    @classmethod
    def _normalize_admin_user_ids(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            s = v.strip()
            if s in ("", "[]"):
                return []
            if s.startswith("[") and s.endswith("]"):
                import json
                v = json.loads(s)
            else:
                v = [x.strip() for x in s.split(",") if x.strip()]
        return [x if isinstance(x, UUID) else UUID(str(x)) for x in v]

    # ===== Utilidad para normalizar CORS =====
    def get_cors_origins(self) -> list[str]:
        """Convierte allowed_origins en lista procesable para CORS middleware."""
        if not self.allowed_origins or self.allowed_origins == "*":
            return ["*"]
        # Parsea lista separada por comas, limpia comillas
        return [o.strip().strip('"').strip("'") for o in self.allowed_origins.split(",") if o.strip()]

    def _security_checks(self) -> None:
        """
        Validaciones mínimas de seguridad y coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        if self.is_prod:
            # SSL requerido en prod
            if self.db_ssl != "require":
                raise ValueError("DB_SSL debe ser 'require' en producción")
            if self.allow_demo_user:
                raise ValueError("ALLOW_DEMO_USER no está permitido en producción")

        if self.is_dev and not self.admin_user_ids:
            logger.info("ADMIN_USER_IDS is empty - admin routes will reject every caller")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName"]
# Fin del archivo app/shared/config/settings_base.py
