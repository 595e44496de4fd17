# -*- coding: utf-8 -*-
"""
app/modules/credits/schemas.py

Esquemas de entrada/salida de las rutas de créditos.

Autor: CodeMarket
Fecha: 2026-10-08
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.shared.utils.base_models import ORMModel, PageMeta
from .enums import CreditTransactionType, ReferenceKind


class CreditBalanceOut(ORMModel):
    """
    Saldo del usuario.

    NOTA: frozen_credits se reporta pero ninguna operación lo modifica.
    """

    user_id: uuid.UUID
    total_credits: int = Field(ge=0, description="Créditos acumulados netos.")
    available_credits: int = Field(ge=0, description="Créditos gastables ahora.")
    frozen_credits: int = Field(ge=0, description="Créditos retenidos.")


class CreditTransactionOut(ORMModel):
    id: int
    user_id: uuid.UUID
    transaction_type: CreditTransactionType
    amount: int
    balance_before: int
    balance_after: int
    description: Optional[str] = None
    reference_type: Optional[ReferenceKind] = None
    reference_id: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    created_at: datetime


class CreditTransactionPage(BaseModel):
    items: list[CreditTransactionOut]
    meta: PageMeta


class DailyCheckinOut(BaseModel):
    transaction_id: int
    amount: int
    already_claimed: bool
    checkin_date: date


class CreditConfigOut(ORMModel):
    config_key: str
    config_value: int
    description: Optional[str] = None
    is_active: bool
    updated_at: datetime


class CreditConfigsUpdate(BaseModel):
    values: dict[str, int] = Field(
        min_length=1,
        description="Mapa config_key -> nuevo valor entero (>= 0).",
    )


class AdminAdjustIn(BaseModel):
    user_id: uuid.UUID
    delta: int = Field(description="Positivo abona, negativo carga.")
    reason: str = Field(min_length=1, max_length=500)


class AdminAdjustOut(BaseModel):
    transaction_id: int
    user_id: uuid.UUID
    delta: int
    available_credits: int


__all__ = [
    "CreditBalanceOut",
    "CreditTransactionOut",
    "CreditTransactionPage",
    "DailyCheckinOut",
    "CreditConfigOut",
    "CreditConfigsUpdate",
    "AdminAdjustIn",
    "AdminAdjustOut",
]
# Fin del archivo app/modules/credits/schemas.py
