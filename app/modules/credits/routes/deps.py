# -*- coding: utf-8 -*-
"""
app/modules/credits/routes/deps.py

Construcción de servicios del ledger por request.

Los servicios son baratos de construir: solo guardan la fábrica de
sesiones registrada por el lifespan en app.state.

Autor: CodeMarket
Fecha: 2026-10-08
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.database import get_session_factory
from app.modules.credits.admin_service import CreditAdminService
from app.modules.credits.services import CreditRewardsService, LedgerService


def get_ledger_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> LedgerService:
    return LedgerService(session_factory)


def get_rewards_service(
    ledger: LedgerService = Depends(get_ledger_service),
) -> CreditRewardsService:
    return CreditRewardsService(ledger)


def get_credit_admin_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    ledger: LedgerService = Depends(get_ledger_service),
) -> CreditAdminService:
    return CreditAdminService(session_factory, ledger)


__all__ = ["get_ledger_service", "get_rewards_service", "get_credit_admin_service"]
# Fin del archivo app/modules/credits/routes/deps.py
