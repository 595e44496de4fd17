# -*- coding: utf-8 -*-
"""
app/shared/config/__init__.py

Punto único de acceso a la configuración:
    from app.shared.config import get_settings

No inicializa settings en import-time para evitar efectos colaterales
durante la recolección de tests.
"""

from .config_loader import get_settings
from .logging_config import setup_logging
from .settings_base import BaseAppSettings

__all__ = ["get_settings", "setup_logging", "BaseAppSettings"]
# Fin del archivo app/shared/config/__init__.py
