# -*- coding: utf-8 -*-
"""
app/modules/credits/routes/http_errors.py

Traducción de errores del ledger a respuestas HTTP.

Autor: CodeMarket
Fecha: 2026-10-08
"""

from __future__ import annotations

from fastapi import HTTPException

from app.shared.utils.http_exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
    PaymentRequiredException,
)
from app.modules.credits.errors import (
    ConfigNotFound,
    InsufficientBalance,
    InvalidAmount,
    LedgerError,
    ReferralAlreadyGranted,
)


def ledger_http_error(exc: LedgerError) -> HTTPException:
    if isinstance(exc, InsufficientBalance):
        # Mensaje accionable y distinto de un fallo genérico
        return PaymentRequiredException(
            detail=(
                f"Not enough credits: {exc.available} available, "
                f"{exc.required} required"
            ),
        )
    if isinstance(exc, InvalidAmount):
        return BadRequestException(detail=exc.message, error_code="invalid_amount")
    if isinstance(exc, ConfigNotFound):
        return NotFoundException(detail=exc.message, error_code="config_not_found")
    if isinstance(exc, ReferralAlreadyGranted):
        return ConflictException(detail=exc.message, error_code="referral_already_granted")
    return BadRequestException(detail=exc.message)


__all__ = ["ledger_http_error"]
# Fin del archivo app/modules/credits/routes/http_errors.py
