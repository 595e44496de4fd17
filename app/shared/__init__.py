# app/shared/__init__.py
"""
Código compartido entre módulos: configuración, base de datos,
middlewares, autenticación y utilidades HTTP.

Expone un único import estable para configuración:
    from app.shared import get_settings
"""

from app.shared.config.config_loader import get_settings

__all__ = ["get_settings"]
# fin del archivo
