# -*- coding: utf-8 -*-
"""
app/modules/credits/errors.py

Excepciones de dominio del ledger de créditos.

Los servicios lanzan estas excepciones; las rutas HTTP las traducen a
códigos de estado. Ninguna de ellas implica un cambio aplicado: cuando
se lanzan, la transacción de la operación ya fue revertida.

Autor: CodeMarket
Fecha: 2026-10-06
"""

from __future__ import annotations

from typing import Optional


class LedgerError(Exception):
    """Error base del ledger de créditos."""

    def __init__(self, message: str = "Ledger operation rejected"):
        self.message = message
        super().__init__(message)


class InvalidAmount(LedgerError):
    """Monto no positivo (o no entero) para earn/spend o ajuste."""

    def __init__(self, amount: object = None, message: Optional[str] = None):
        self.amount = amount
        super().__init__(message or f"Invalid credit amount: {amount!r}")


class InsufficientBalance(LedgerError):
    """El cargo excede los créditos disponibles del usuario."""

    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient credits: available={available}, required={required}"
        )


class ReferralAlreadyGranted(LedgerError):
    """El usuario referido ya generó un bono para otro referente."""

    def __init__(self, referred_user_id: object, referrer_id: object):
        self.referred_user_id = referred_user_id
        self.referrer_id = referrer_id
        super().__init__(
            f"Referral bonus for {referred_user_id} already granted to {referrer_id}"
        )


class ConfigNotFound(LedgerError):
    """La clave de configuración no existe o está inactiva."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Credit config not found or inactive: {key}")


__all__ = [
    "LedgerError",
    "InvalidAmount",
    "InsufficientBalance",
    "ConfigNotFound",
    "ReferralAlreadyGranted",
]
# Fin del archivo app/modules/credits/errors.py
