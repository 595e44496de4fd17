# -*- coding: utf-8 -*-
"""
app/modules/credits/admin_service.py

Operaciones administrativas sobre el ledger:
- ajustes manuales de saldo (siempre vía earn/spend, tipo admin_adjust)
- consulta de ajustes realizados
- lectura/actualización de credit_configs y siembra de valores por defecto

Autor: CodeMarket
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
import uuid
from typing import Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.database import transaction_scope
from app.shared.database.base import utcnow
from .enums import CreditTransactionType
from .errors import ConfigNotFound, InvalidAmount
from .models import CreditConfig, CreditTransaction
from .references import LedgerReference
from .repositories import CreditConfigRepository, CreditTransactionRepository
from .services import LedgerService

logger = logging.getLogger(__name__)


# key -> (valor, descripción)
DEFAULT_CREDIT_CONFIGS: dict[str, tuple[int, str]] = {
    "register_bonus": (100, "Credits granted on registration"),
    "upload_bonus": (50, "Credits granted when a project is approved"),
    "docker_multiplier": (2, "Upload bonus multiplier for dockerized projects"),
    "review_bonus": (10, "Credits granted for a published review"),
    "daily_signin_bonus": (5, "Credits granted by the daily check-in"),
    "referral_bonus": (200, "Credits granted to the referrer"),
    "min_purchase_amount": (1, "Minimum project price payable with credits"),
    "max_daily_earn": (500, "Maximum credits a user may earn per day"),
}


class CreditAdminService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ledger: LedgerService,
        tx_repo: Optional[CreditTransactionRepository] = None,
        config_repo: Optional[CreditConfigRepository] = None,
    ):
        self.session_factory = session_factory
        self.ledger = ledger
        self.tx_repo = tx_repo or CreditTransactionRepository()
        self.config_repo = config_repo or CreditConfigRepository()

    async def adjust_balance(
        self,
        admin_id: uuid.UUID,
        user_id: uuid.UUID,
        delta: int,
        reason: str,
    ) -> int:
        """
        Ajuste manual: delta > 0 abona, delta < 0 carga |delta|.

        Raises:
            InvalidAmount: delta == 0
            InsufficientBalance: el cargo excede el saldo disponible
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise InvalidAmount(delta, "Adjustment delta must be a non-zero integer")

        description = f"Admin adjustment: {reason}"
        reference = LedgerReference.admin(admin_id)
        if delta > 0:
            tx_id = await self.ledger.earn(
                user_id,
                delta,
                CreditTransactionType.ADMIN_ADJUST,
                description,
                reference=reference,
                created_by=admin_id,
            )
        else:
            tx_id = await self.ledger.spend(
                user_id,
                -delta,
                CreditTransactionType.ADMIN_ADJUST,
                description,
                reference=reference,
                created_by=admin_id,
            )

        logger.info(
            "Admin credit adjustment: admin=%s user=%s delta=%+d tx=%s",
            admin_id, user_id, delta, tx_id,
        )
        return tx_id

    async def list_admin_operations(
        self,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[CreditTransaction], int]:
        async with transaction_scope(self.session_factory) as db:
            return await self.tx_repo.list_by_type(
                db,
                CreditTransactionType.ADMIN_ADJUST,
                limit=limit,
                offset=offset,
            )

    async def list_configs(self) -> Sequence[CreditConfig]:
        async with transaction_scope(self.session_factory) as db:
            return await self.config_repo.list_all(db, only_active=True)

    async def update_configs(
        self,
        values: Mapping[str, int],
        *,
        updated_by: Optional[uuid.UUID] = None,
    ) -> Sequence[CreditConfig]:
        """
        Actualiza varias claves en una sola transacción: o se aplican
        todas o ninguna.

        Raises:
            ConfigNotFound: alguna clave no existe
            InvalidAmount: algún valor no es un entero >= 0
        """
        for key, value in values.items():
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidAmount(value, f"Config value for {key} must be an integer >= 0")

        async with transaction_scope(self.session_factory) as db:
            updated = []
            for key in sorted(values):
                config = await self.config_repo.get_by_key(db, key, for_update=True)
                if config is None:
                    raise ConfigNotFound(key)
                config.config_value = values[key]
                config.updated_by = updated_by
                config.updated_at = utcnow()
                updated.append(config)
            await db.flush()

        logger.info("Credit configs updated by=%s values=%s", updated_by, dict(values))
        return updated

    async def ensure_default_configs(self) -> int:
        """
        Siembra las claves por defecto que falten (no pisa valores
        existentes).

        Returns:
            número de claves insertadas
        """
        inserted = 0
        async with transaction_scope(self.session_factory) as db:
            for key, (value, description) in DEFAULT_CREDIT_CONFIGS.items():
                if await self.config_repo.create_if_missing(
                    db,
                    config_key=key,
                    config_value=value,
                    description=description,
                ):
                    inserted += 1
        if inserted:
            logger.info("Seeded %d default credit configs", inserted)
        return inserted


__all__ = ["CreditAdminService", "DEFAULT_CREDIT_CONFIGS"]
# Fin del archivo app/modules/credits/admin_service.py
