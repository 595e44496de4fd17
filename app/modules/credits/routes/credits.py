# -*- coding: utf-8 -*-
"""
app/modules/credits/routes/credits.py

Rutas de créditos del usuario autenticado.

Endpoints:
- GET  /credits/balance
- GET  /credits/transactions
- POST /credits/daily-checkin

Autor: CodeMarket
Fecha: 2026-10-08
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.shared.auth_context import get_current_user_id
from app.shared.utils.base_models import PageMeta
from app.modules.credits.enums import CreditTransactionType
from app.modules.credits.errors import LedgerError
from app.modules.credits.schemas import (
    CreditBalanceOut,
    CreditTransactionOut,
    CreditTransactionPage,
    DailyCheckinOut,
)
from app.modules.credits.services import CreditRewardsService, LedgerService
from .deps import get_ledger_service, get_rewards_service
from .http_errors import ledger_http_error

router = APIRouter(
    prefix="/credits",
    tags=["credits"],
)


@router.get("/balance", response_model=CreditBalanceOut)
async def get_balance(
    user_id: uuid.UUID = Depends(get_current_user_id),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Saldo del usuario (ceros si todavía no tiene cuenta)."""
    account = await ledger.get_account(user_id)
    return CreditBalanceOut.model_validate(account)


@router.get("/transactions", response_model=CreditTransactionPage)
async def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    transaction_type: Optional[CreditTransactionType] = Query(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    ledger: LedgerService = Depends(get_ledger_service),
):
    items, total = await ledger.get_history(
        user_id,
        page=page,
        limit=limit,
        transaction_type=transaction_type,
    )
    return CreditTransactionPage(
        items=[CreditTransactionOut.model_validate(tx) for tx in items],
        meta=PageMeta.build(total=total, limit=limit, offset=(page - 1) * limit),
    )


@router.post("/daily-checkin", response_model=DailyCheckinOut)
async def daily_checkin(
    user_id: uuid.UUID = Depends(get_current_user_id),
    rewards: CreditRewardsService = Depends(get_rewards_service),
):
    """Check-in diario; repetirlo el mismo día no vuelve a abonar."""
    try:
        result = await rewards.daily_checkin(user_id)
    except LedgerError as e:
        raise ledger_http_error(e)
    return DailyCheckinOut(
        transaction_id=result.transaction_id,
        amount=result.amount,
        already_claimed=result.already_claimed,
        checkin_date=result.checkin_date,
    )


__all__ = ["router"]
# Fin del archivo app/modules/credits/routes/credits.py
