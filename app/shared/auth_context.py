# -*- coding: utf-8 -*-
"""
app/shared/auth_context.py

Stub de autenticación FAIL-CLOSED.

El motor de créditos/órdenes nunca autentica por sí mismo: recibe el
user_id del proveedor de identidad. Mientras ese proveedor no esté
integrado, esta dependencia lo sustituye.

REGLAS DE SEGURIDAD:
- En producción (PYTHON_ENV=production):
  → Siempre 401. ALLOW_DEMO_USER se ignora.

- En desarrollo/test:
  → ALLOW_DEMO_USER=true → devuelve DEMO_USER_ID
  → "Authorization: Bearer <uuid>" → ese UUID es el user_id

Administradores: user_id presente en ADMIN_USER_IDS.

Autor: CodeMarket
Fecha: 2026-10-08
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import Depends, Header

from app.shared.config import get_settings
from app.shared.utils.http_exceptions import ForbiddenException, UnauthorizedException

logger = logging.getLogger(__name__)


async def get_current_user_id(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> uuid.UUID:
    """
    Dependencia de autenticación (FAIL-CLOSED).

    PRODUCCIÓN:
    - Siempre 401; requiere integrar validación real de tokens.

    DESARROLLO/TEST:
    - Si ALLOW_DEMO_USER=true: retorna DEMO_USER_ID
    - Si hay Bearer <uuid>: retorna ese UUID
    - Sin auth o token inválido: 401
    """
    settings = get_settings()

    # === PRODUCCIÓN: FAIL-CLOSED ===
    if settings.is_prod:
        raise UnauthorizedException(
            detail="Authentication not configured for production",
        )

    # === DESARROLLO/TEST ===
    if settings.allow_demo_user:
        return settings.demo_user_id

    if not authorization:
        raise UnauthorizedException(detail="Authorization header is required")

    if not authorization.startswith("Bearer "):
        raise UnauthorizedException(detail="Authorization header must be 'Bearer <token>'")

    token = authorization[7:].strip()
    try:
        return uuid.UUID(token)
    except ValueError:
        logger.warning("Rejected bearer token with invalid user id format")
        raise UnauthorizedException(detail="Invalid or expired token")


async def require_admin(
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> uuid.UUID:
    """Permite el paso solo a usuarios listados en ADMIN_USER_IDS."""
    if user_id not in get_settings().admin_user_ids:
        logger.warning("Admin access denied for user=%s", user_id)
        raise ForbiddenException(detail="Administrator privileges required")
    return user_id


__all__ = ["get_current_user_id", "require_admin"]
# Fin del archivo app/shared/auth_context.py
