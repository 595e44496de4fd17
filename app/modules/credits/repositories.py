# -*- coding: utf-8 -*-
"""
app/modules/credits/repositories.py

Repositorios para el ledger de créditos.

Todos los métodos reciben la sesión del llamador y solo hacen flush;
commit/rollback pertenecen a la unidad de trabajo del servicio.

Autor: CodeMarket
Fecha: 2026-10-06
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.base import utcnow
from .enums import CreditTransactionType
from .models import CreditAccount, CreditConfig, CreditTransaction
from .references import LedgerReference

logger = logging.getLogger(__name__)


class CreditAccountRepository:
    """Acceso a credit_accounts."""

    async def get_by_user_id(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Optional[CreditAccount]:
        """
        Obtiene la cuenta de un usuario.

        Siempre refresca la instancia del identity map: los saldos se
        modifican con UPDATE directos y la copia en memoria puede estar
        atrasada.
        """
        stmt = (
            select(CreditAccount)
            .where(CreditAccount.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
    ) -> tuple[CreditAccount, bool]:
        """
        Obtiene o crea la cuenta del usuario (saldos en cero).

        Usa SAVEPOINT para manejar la creación concurrente sin invalidar
        la transacción principal.

        Returns:
            Tuple (account, created: bool)
        """
        account = await self.get_by_user_id(session, user_id, for_update=True)
        if account:
            return account, False

        try:
            async with session.begin_nested():
                account = CreditAccount(
                    user_id=user_id,
                    total_credits=0,
                    available_credits=0,
                    frozen_credits=0,
                )
                session.add(account)
                await session.flush()
            logger.info("Credit account created for user %s", user_id)
            return account, True
        except IntegrityError:
            # SAVEPOINT revertido; otra transacción creó la cuenta
            pass

        logger.debug("Credit account already exists for user %s (concurrent create)", user_id)
        account = await self.get_by_user_id(session, user_id, for_update=True)
        if account:
            return account, False

        raise RuntimeError(f"Failed to get or create credit account for user {user_id}")

    async def credit(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        amount: int,
    ) -> Optional[int]:
        """
        Suma `amount` a total y available en un solo UPDATE.

        Returns:
            available_credits resultante, o None si la cuenta no existe.
        """
        stmt = (
            update(CreditAccount)
            .where(CreditAccount.user_id == user_id)
            .values(
                total_credits=CreditAccount.total_credits + amount,
                available_credits=CreditAccount.available_credits + amount,
                updated_at=utcnow(),
            )
            .returning(CreditAccount.available_credits)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def debit(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        amount: int,
    ) -> Optional[int]:
        """
        Resta `amount` de total y available solo si available >= amount.

        Chequeo y escritura ocurren en la misma sentencia, bajo el lock de
        fila que toma el UPDATE: dos cargos concurrentes no pueden validar
        contra el mismo saldo.

        Returns:
            available_credits resultante, o None si no hubo fila afectada
            (cuenta inexistente o saldo insuficiente).
        """
        stmt = (
            update(CreditAccount)
            .where(
                CreditAccount.user_id == user_id,
                CreditAccount.available_credits >= amount,
            )
            .values(
                total_credits=CreditAccount.total_credits - amount,
                available_credits=CreditAccount.available_credits - amount,
                updated_at=utcnow(),
            )
            .returning(CreditAccount.available_credits)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


class CreditTransactionRepository:
    """Acceso al log append-only credit_transactions."""

    async def create(
        self,
        session: AsyncSession,
        *,
        user_id: uuid.UUID,
        transaction_type: CreditTransactionType,
        amount: int,
        balance_before: int,
        balance_after: int,
        description: Optional[str] = None,
        reference: Optional[LedgerReference] = None,
        created_by: Optional[uuid.UUID] = None,
        idempotency_key: Optional[str] = None,
    ) -> CreditTransaction:
        """
        Inserta un movimiento en el ledger.

        Validaciones:
        - amount != 0
        - balance_after == balance_before + amount
        """
        if amount == 0:
            raise ValueError("amount cannot be zero")
        if balance_after != balance_before + amount:
            raise ValueError("balance_after must equal balance_before + amount")

        tx = CreditTransaction(
            user_id=user_id,
            transaction_type=CreditTransactionType(transaction_type),
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            description=description,
            reference_type=reference.kind if reference else None,
            reference_id=reference.id if reference else None,
            created_by=created_by,
            idempotency_key=idempotency_key,
        )
        session.add(tx)
        await session.flush()

        logger.debug(
            "CreditTransaction created: id=%s user=%s amount=%+d before=%d after=%d type=%s",
            tx.id, user_id, amount, balance_before, balance_after, tx.transaction_type.value,
        )
        return tx

    async def get_by_idempotency_key(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        idempotency_key: str,
    ) -> Optional[CreditTransaction]:
        stmt = select(CreditTransaction).where(
            CreditTransaction.user_id == user_id,
            CreditTransaction.idempotency_key == idempotency_key,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        *,
        limit: int = 20,
        offset: int = 0,
        transaction_type: Optional[CreditTransactionType] = None,
    ) -> Sequence[CreditTransaction]:
        """Historial del usuario, más reciente primero (id desc = orden de commit)."""
        stmt = select(CreditTransaction).where(CreditTransaction.user_id == user_id)
        if transaction_type is not None:
            stmt = stmt.where(CreditTransaction.transaction_type == CreditTransactionType(transaction_type))
        stmt = stmt.order_by(CreditTransaction.id.desc()).limit(limit).offset(offset)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_user(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        *,
        transaction_type: Optional[CreditTransactionType] = None,
    ) -> int:
        stmt = select(func.count(CreditTransaction.id)).where(CreditTransaction.user_id == user_id)
        if transaction_type is not None:
            stmt = stmt.where(CreditTransaction.transaction_type == CreditTransactionType(transaction_type))
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def list_by_reference(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        reference: LedgerReference,
        *,
        transaction_type: Optional[CreditTransactionType] = None,
    ) -> Sequence[CreditTransaction]:
        """Movimientos de un usuario que apuntan a la misma entidad."""
        stmt = select(CreditTransaction).where(
            CreditTransaction.user_id == user_id,
            CreditTransaction.reference_type == reference.kind,
            CreditTransaction.reference_id == reference.id,
        )
        if transaction_type is not None:
            stmt = stmt.where(CreditTransaction.transaction_type == CreditTransactionType(transaction_type))
        stmt = stmt.order_by(CreditTransaction.id.asc())
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_first_by_reference(
        self,
        session: AsyncSession,
        reference: LedgerReference,
        transaction_type: CreditTransactionType,
    ) -> Optional[CreditTransaction]:
        """Primer movimiento de cualquier usuario que apunta a la entidad."""
        stmt = (
            select(CreditTransaction)
            .where(
                CreditTransaction.reference_type == reference.kind,
                CreditTransaction.reference_id == reference.id,
                CreditTransaction.transaction_type == CreditTransactionType(transaction_type),
            )
            .order_by(CreditTransaction.id.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_type(
        self,
        session: AsyncSession,
        transaction_type: CreditTransactionType,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[CreditTransaction], int]:
        """Movimientos de todos los usuarios de un tipo (más reciente primero) + total."""
        tx_type = CreditTransactionType(transaction_type)
        total = await session.scalar(
            select(func.count(CreditTransaction.id)).where(CreditTransaction.transaction_type == tx_type)
        )
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.transaction_type == tx_type)
            .order_by(CreditTransaction.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await session.execute(stmt)
        return result.scalars().all(), int(total or 0)


class CreditConfigRepository:
    """Acceso a credit_configs."""

    async def get_by_key(
        self,
        session: AsyncSession,
        config_key: str,
        *,
        for_update: bool = False,
    ) -> Optional[CreditConfig]:
        stmt = select(CreditConfig).where(CreditConfig.config_key == config_key)
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active(self, session: AsyncSession, config_key: str) -> Optional[CreditConfig]:
        stmt = select(CreditConfig).where(
            CreditConfig.config_key == config_key,
            CreditConfig.is_active.is_(True),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, session: AsyncSession, *, only_active: bool = True) -> Sequence[CreditConfig]:
        stmt = select(CreditConfig)
        if only_active:
            stmt = stmt.where(CreditConfig.is_active.is_(True))
        stmt = stmt.order_by(CreditConfig.config_key.asc())
        result = await session.execute(stmt)
        return result.scalars().all()

    async def create_if_missing(
        self,
        session: AsyncSession,
        *,
        config_key: str,
        config_value: int,
        description: Optional[str] = None,
    ) -> bool:
        """
        Inserta la clave si no existe (SAVEPOINT ante creación concurrente).

        Returns:
            True si se insertó.
        """
        if await self.get_by_key(session, config_key) is not None:
            return False
        config = CreditConfig(
            config_key=config_key,
            config_value=config_value,
            description=description,
            is_active=True,
        )
        try:
            async with session.begin_nested():
                session.add(config)
                await session.flush()
        except IntegrityError:
            # SAVEPOINT revertido; la clave fue creada en paralelo
            return False
        return True


__all__ = [
    "CreditAccountRepository",
    "CreditTransactionRepository",
    "CreditConfigRepository",
]
# Fin del archivo app/modules/credits/repositories.py
