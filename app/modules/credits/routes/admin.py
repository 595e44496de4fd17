# -*- coding: utf-8 -*-
"""
app/modules/credits/routes/admin.py

Rutas administrativas del ledger (requieren ADMIN_USER_IDS).

Endpoints:
- GET  /admin/credits/configs
- PUT  /admin/credits/configs
- POST /admin/credits/adjust
- GET  /admin/credits/operations

Autor: CodeMarket
Fecha: 2026-10-08
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from app.shared.auth_context import require_admin
from app.shared.utils.base_models import PageMeta
from app.modules.credits.admin_service import CreditAdminService
from app.modules.credits.errors import LedgerError
from app.modules.credits.schemas import (
    AdminAdjustIn,
    AdminAdjustOut,
    CreditConfigOut,
    CreditConfigsUpdate,
    CreditTransactionOut,
    CreditTransactionPage,
)
from app.modules.credits.services import LedgerService
from .deps import get_credit_admin_service, get_ledger_service
from .http_errors import ledger_http_error

router = APIRouter(
    prefix="/admin/credits",
    tags=["admin:credits"],
)


@router.get("/configs", response_model=list[CreditConfigOut])
async def list_configs(
    _admin_id: uuid.UUID = Depends(require_admin),
    admin_service: CreditAdminService = Depends(get_credit_admin_service),
):
    configs = await admin_service.list_configs()
    return [CreditConfigOut.model_validate(c) for c in configs]


@router.put("/configs", response_model=list[CreditConfigOut])
async def update_configs(
    payload: CreditConfigsUpdate,
    admin_id: uuid.UUID = Depends(require_admin),
    admin_service: CreditAdminService = Depends(get_credit_admin_service),
):
    """Actualiza varias claves de forma atómica."""
    try:
        configs = await admin_service.update_configs(payload.values, updated_by=admin_id)
    except LedgerError as e:
        raise ledger_http_error(e)
    return [CreditConfigOut.model_validate(c) for c in configs]


@router.post("/adjust", response_model=AdminAdjustOut)
async def adjust_balance(
    payload: AdminAdjustIn,
    admin_id: uuid.UUID = Depends(require_admin),
    admin_service: CreditAdminService = Depends(get_credit_admin_service),
    ledger: LedgerService = Depends(get_ledger_service),
):
    try:
        tx_id = await admin_service.adjust_balance(
            admin_id,
            payload.user_id,
            payload.delta,
            payload.reason,
        )
    except LedgerError as e:
        raise ledger_http_error(e)

    account = await ledger.get_account(payload.user_id)
    return AdminAdjustOut(
        transaction_id=tx_id,
        user_id=payload.user_id,
        delta=payload.delta,
        available_credits=account.available_credits,
    )


@router.get("/operations", response_model=CreditTransactionPage)
async def list_operations(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    _admin_id: uuid.UUID = Depends(require_admin),
    admin_service: CreditAdminService = Depends(get_credit_admin_service),
):
    items, total = await admin_service.list_admin_operations(limit=limit, offset=offset)
    return CreditTransactionPage(
        items=[CreditTransactionOut.model_validate(tx) for tx in items],
        meta=PageMeta.build(total=total, limit=limit, offset=offset),
    )


__all__ = ["router"]
# Fin del archivo app/modules/credits/routes/admin.py
