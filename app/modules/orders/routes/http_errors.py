# -*- coding: utf-8 -*-
"""
app/modules/orders/routes/http_errors.py

Traducción de errores de órdenes (y del ledger) a respuestas HTTP.

Autor: CodeMarket
Fecha: 2026-10-10
"""

from __future__ import annotations

from typing import Union

from fastapi import HTTPException

from app.shared.utils.http_exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ServiceUnavailableException,
)
from app.modules.credits.errors import LedgerError
from app.modules.credits.routes.http_errors import ledger_http_error
from app.modules.orders.errors import (
    AlreadyPurchased,
    CatalogUnavailableError,
    InvalidStateTransition,
    OrderError,
    OrderNotFound,
    PermissionDenied,
    ProjectNotFound,
    SelfPurchaseForbidden,
)


def order_http_error(exc: Union[OrderError, LedgerError]) -> HTTPException:
    if isinstance(exc, LedgerError):
        return ledger_http_error(exc)
    if isinstance(exc, (ProjectNotFound, OrderNotFound)):
        code = "project_not_found" if isinstance(exc, ProjectNotFound) else "order_not_found"
        return NotFoundException(detail=exc.message, error_code=code)
    if isinstance(exc, SelfPurchaseForbidden):
        return ForbiddenException(detail=exc.message, error_code="self_purchase_forbidden")
    if isinstance(exc, PermissionDenied):
        return ForbiddenException(detail=exc.message, error_code="permission_denied")
    if isinstance(exc, AlreadyPurchased):
        return ConflictException(detail=exc.message, error_code="already_purchased")
    if isinstance(exc, InvalidStateTransition):
        return ConflictException(detail=exc.message, error_code="invalid_state_transition")
    if isinstance(exc, CatalogUnavailableError):
        return ServiceUnavailableException(detail=exc.message, error_code="catalog_unavailable")
    return BadRequestException(detail=exc.message)


__all__ = ["order_http_error"]
# Fin del archivo app/modules/orders/routes/http_errors.py
