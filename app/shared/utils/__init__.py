# -*- coding: utf-8 -*-
"""
app/shared/utils/__init__.py

Exportación de utilidades comunes.

Autor: CodeMarket
Fecha: 2026-10-06
"""

from .base_models import ORMModel, PageMeta, Field
from .http_exceptions import (
    BadRequestException,
    UnauthorizedException,
    PaymentRequiredException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    ServiceUnavailableException,
)

__all__ = [
    # Base models
    "ORMModel",
    "PageMeta",
    "Field",

    # HTTP Exceptions
    "BadRequestException",
    "UnauthorizedException",
    "PaymentRequiredException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "ServiceUnavailableException",
]
# Fin del archivo app/shared/utils/__init__.py
