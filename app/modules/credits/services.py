# -*- coding: utf-8 -*-
"""
app/modules/credits/services.py

Servicios del ledger de créditos.

Provee lógica de negocio para:
- LedgerService: earn/spend atómicos, cuentas, historial y configuración
- CreditRewardsService: bonos (registro, subida, reseña, referido, check-in)

Cada operación mutante es una única transacción (transaction_scope). Un
llamador que ya tiene una transacción abierta (p.ej. el motor de órdenes)
puede pasar `session=` para que el movimiento forme parte de ella.

Autor: CodeMarket
Fecha: 2026-10-06
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.database import StorageError, transaction_scope
from .enums import CreditTransactionType, EARN_TYPES, SPEND_TYPES
from .errors import ConfigNotFound, InsufficientBalance, InvalidAmount, ReferralAlreadyGranted
from .models import CreditAccount, CreditTransaction
from .references import LedgerReference
from .repositories import (
    CreditAccountRepository,
    CreditConfigRepository,
    CreditTransactionRepository,
)

logger = logging.getLogger(__name__)

# Claves de configuración usadas por los bonos
REGISTER_BONUS = "register_bonus"
UPLOAD_BONUS = "upload_bonus"
DOCKER_MULTIPLIER = "docker_multiplier"
REVIEW_BONUS = "review_bonus"
DAILY_SIGNIN_BONUS = "daily_signin_bonus"
REFERRAL_BONUS = "referral_bonus"
MIN_PURCHASE_AMOUNT = "min_purchase_amount"

MAX_HISTORY_LIMIT = 100


def _validate_amount(amount: object) -> int:
    # bool es subclase de int; no es un monto
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount(amount)
    return amount


class LedgerService:
    """
    Motor del ledger: única vía para modificar saldos.

    Invariantes:
    - available_credits >= 0 (CHECK + UPDATE condicional)
    - por usuario, balance_after(n) == balance_before(n+1); el id de la
      transacción sigue el orden de commit porque se inserta mientras se
      sostiene el lock de la fila de la cuenta
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        account_repo: Optional[CreditAccountRepository] = None,
        tx_repo: Optional[CreditTransactionRepository] = None,
        config_repo: Optional[CreditConfigRepository] = None,
    ):
        self.session_factory = session_factory
        self.account_repo = account_repo or CreditAccountRepository()
        self.tx_repo = tx_repo or CreditTransactionRepository()
        self.config_repo = config_repo or CreditConfigRepository()

    # ------------------------------------------------------------------
    # Cuentas
    # ------------------------------------------------------------------
    async def get_or_create_account(
        self,
        user_id: uuid.UUID,
        *,
        session: Optional[AsyncSession] = None,
    ) -> CreditAccount:
        """Devuelve la cuenta del usuario, creándola con saldos en cero si no existe."""
        async with transaction_scope(self.session_factory, session) as db:
            account, _ = await self.account_repo.get_or_create(db, user_id)
            return account

    async def get_account(self, user_id: uuid.UUID) -> CreditAccount:
        """
        Lectura sin efectos: si el usuario no tiene cuenta devuelve una
        instancia transitoria (no persistida) con saldos en cero.
        """
        async with transaction_scope(self.session_factory) as db:
            account = await self.account_repo.get_by_user_id(db, user_id)
        if account is None:
            return CreditAccount(
                user_id=user_id,
                total_credits=0,
                available_credits=0,
                frozen_credits=0,
            )
        return account

    async def has_sufficient_balance(self, user_id: uuid.UUID, amount: int) -> bool:
        amount = _validate_amount(amount)
        account = await self.get_account(user_id)
        return account.available_credits >= amount

    # ------------------------------------------------------------------
    # Movimientos
    # ------------------------------------------------------------------
    async def earn(
        self,
        user_id: uuid.UUID,
        amount: int,
        transaction_type: CreditTransactionType,
        description: Optional[str] = None,
        *,
        reference: Optional[LedgerReference] = None,
        created_by: Optional[uuid.UUID] = None,
        idempotency_key: Optional[str] = None,
        session: Optional[AsyncSession] = None,
    ) -> int:
        """
        Abona créditos: total += amount, available += amount.

        Cuenta y transacción se escriben en la misma transacción de base
        de datos. Con `idempotency_key`, una repetición para el mismo
        usuario devuelve el id original sin volver a abonar.

        Returns:
            id de la CreditTransaction

        Raises:
            InvalidAmount: amount <= 0
            StorageError: fallo del store (sin cambios aplicados)
        """
        tx_id, _ = await self._earn(
            user_id, amount, transaction_type, description,
            reference=reference, created_by=created_by,
            idempotency_key=idempotency_key, session=session,
        )
        return tx_id

    async def earn_once(
        self,
        user_id: uuid.UUID,
        amount: int,
        transaction_type: CreditTransactionType,
        description: Optional[str] = None,
        *,
        idempotency_key: str,
        reference: Optional[LedgerReference] = None,
        created_by: Optional[uuid.UUID] = None,
    ) -> tuple[int, bool]:
        """
        Como earn, pero informa si el abono es nuevo.

        Returns:
            (id de la CreditTransaction, False si la clave ya existía)
        """
        return await self._earn(
            user_id, amount, transaction_type, description,
            reference=reference, created_by=created_by,
            idempotency_key=idempotency_key,
        )

    async def _earn(
        self,
        user_id: uuid.UUID,
        amount: int,
        transaction_type: CreditTransactionType,
        description: Optional[str],
        *,
        reference: Optional[LedgerReference],
        created_by: Optional[uuid.UUID],
        idempotency_key: Optional[str],
        session: Optional[AsyncSession] = None,
    ) -> tuple[int, bool]:
        amount = _validate_amount(amount)
        tx_type = CreditTransactionType(transaction_type)
        if tx_type not in EARN_TYPES:
            raise ValueError(f"{tx_type.value} is not a credit transaction type")

        async with transaction_scope(self.session_factory, session) as db:
            if idempotency_key:
                existing = await self._find_replay(db, user_id, idempotency_key)
                if existing is not None:
                    return existing, False

            async def _apply() -> CreditTransaction:
                await self.account_repo.get_or_create(db, user_id)
                balance_after = await self.account_repo.credit(db, user_id, amount)
                return await self.tx_repo.create(
                    db,
                    user_id=user_id,
                    transaction_type=tx_type,
                    amount=amount,
                    balance_before=balance_after - amount,
                    balance_after=balance_after,
                    description=description,
                    reference=reference,
                    created_by=created_by,
                    idempotency_key=idempotency_key,
                )

            tx = await self._run_once(db, user_id, idempotency_key, _apply)
            if isinstance(tx, int):
                return tx, False

        logger.info(
            "Credits earned: user=%s amount=%+d balance=%d type=%s tx=%s",
            user_id, amount, tx.balance_after, tx_type.value, tx.id,
        )
        return tx.id, True

    async def spend(
        self,
        user_id: uuid.UUID,
        amount: int,
        transaction_type: CreditTransactionType,
        description: Optional[str] = None,
        *,
        reference: Optional[LedgerReference] = None,
        created_by: Optional[uuid.UUID] = None,
        idempotency_key: Optional[str] = None,
        session: Optional[AsyncSession] = None,
    ) -> int:
        """
        Carga créditos: total -= amount, available -= amount.

        El chequeo de saldo y el descuento son un solo UPDATE condicional;
        cero filas afectadas significa saldo insuficiente y no se escribe
        nada.

        Returns:
            id de la CreditTransaction

        Raises:
            InvalidAmount: amount <= 0
            InsufficientBalance: available_credits < amount
            StorageError: fallo del store (sin cambios aplicados)
        """
        amount = _validate_amount(amount)
        tx_type = CreditTransactionType(transaction_type)
        if tx_type not in SPEND_TYPES:
            raise ValueError(f"{tx_type.value} is not a debit transaction type")

        async with transaction_scope(self.session_factory, session) as db:
            if idempotency_key:
                existing = await self._find_replay(db, user_id, idempotency_key)
                if existing is not None:
                    return existing

            async def _apply() -> CreditTransaction:
                balance_after = await self.account_repo.debit(db, user_id, amount)
                if balance_after is None:
                    account = await self.account_repo.get_by_user_id(db, user_id)
                    available = account.available_credits if account else 0
                    logger.info(
                        "Spend rejected: user=%s available=%d required=%d type=%s",
                        user_id, available, amount, tx_type.value,
                    )
                    raise InsufficientBalance(available=available, required=amount)
                return await self.tx_repo.create(
                    db,
                    user_id=user_id,
                    transaction_type=tx_type,
                    amount=-amount,
                    balance_before=balance_after + amount,
                    balance_after=balance_after,
                    description=description,
                    reference=reference,
                    created_by=created_by,
                    idempotency_key=idempotency_key,
                )

            tx = await self._run_once(db, user_id, idempotency_key, _apply)
            if isinstance(tx, int):
                return tx

        logger.info(
            "Credits spent: user=%s amount=%+d balance=%d type=%s tx=%s",
            user_id, -amount, tx.balance_after, tx_type.value, tx.id,
        )
        return tx.id

    async def _find_replay(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        idempotency_key: str,
    ) -> Optional[int]:
        existing = await self.tx_repo.get_by_idempotency_key(db, user_id, idempotency_key)
        if existing is None:
            return None
        logger.info(
            "Idempotent ledger replay: user=%s key=%s tx=%s",
            user_id, idempotency_key, existing.id,
        )
        return existing.id

    async def _run_once(self, db, user_id, idempotency_key, apply):
        """
        Ejecuta el movimiento. Con clave de idempotencia se aísla en un
        SAVEPOINT: si otra transacción insertó la misma clave en paralelo,
        se revierte el movimiento propio y se devuelve el id existente.
        """
        if not idempotency_key:
            return await apply()

        try:
            async with db.begin_nested():
                return await apply()
        except IntegrityError:
            existing = await self.tx_repo.get_by_idempotency_key(db, user_id, idempotency_key)
            if existing is None:
                raise
            logger.info(
                "Idempotent ledger replay (concurrent): user=%s key=%s tx=%s",
                user_id, idempotency_key, existing.id,
            )
            return existing.id

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    async def get_history(
        self,
        user_id: uuid.UUID,
        page: int = 1,
        limit: int = 20,
        transaction_type: Optional[CreditTransactionType] = None,
    ) -> tuple[Sequence[CreditTransaction], int]:
        """
        Historial del usuario, más reciente primero.

        Args:
            page: página 1-based
            limit: tamaño de página (1..100)

        Returns:
            (transacciones de la página, total de transacciones del filtro)
        """
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_HISTORY_LIMIT)
        async with transaction_scope(self.session_factory) as db:
            items = await self.tx_repo.list_by_user(
                db,
                user_id,
                limit=limit,
                offset=(page - 1) * limit,
                transaction_type=transaction_type,
            )
            total = await self.tx_repo.count_by_user(db, user_id, transaction_type=transaction_type)
        return items, total

    async def get_transaction_by_key(
        self,
        user_id: uuid.UUID,
        idempotency_key: str,
    ) -> Optional[CreditTransaction]:
        async with transaction_scope(self.session_factory) as db:
            return await self.tx_repo.get_by_idempotency_key(db, user_id, idempotency_key)

    async def find_by_reference(
        self,
        user_id: uuid.UUID,
        reference: LedgerReference,
        *,
        transaction_type: Optional[CreditTransactionType] = None,
        session: Optional[AsyncSession] = None,
    ) -> Sequence[CreditTransaction]:
        async with transaction_scope(self.session_factory, session) as db:
            return await self.tx_repo.list_by_reference(
                db, user_id, reference, transaction_type=transaction_type
            )

    async def find_first_by_reference(
        self,
        reference: LedgerReference,
        transaction_type: CreditTransactionType,
    ) -> Optional[CreditTransaction]:
        async with transaction_scope(self.session_factory) as db:
            return await self.tx_repo.get_first_by_reference(db, reference, transaction_type)

    async def get_config(self, key: str, *, session: Optional[AsyncSession] = None) -> int:
        """
        Valor entero de una clave activa de credit_configs.

        Raises:
            ConfigNotFound: la clave no existe o está inactiva
        """
        async with transaction_scope(self.session_factory, session) as db:
            config = await self.config_repo.get_active(db, key)
        if config is None:
            raise ConfigNotFound(key)
        return config.config_value


@dataclass
class DailyCheckinResult:
    """Resultado del check-in diario."""
    transaction_id: int
    amount: int
    already_claimed: bool
    checkin_date: date


class CreditRewardsService:
    """
    Política de bonos sobre LedgerService.

    Cada bono es idempotente por su clave natural (usuario, proyecto,
    referido o día), de modo que reintentar un flujo nunca abona dos veces.
    """

    def __init__(self, ledger: LedgerService):
        self.ledger = ledger

    async def grant_registration_bonus(self, user_id: uuid.UUID) -> Optional[int]:
        """
        Abona register_bonus a un usuario recién registrado.

        Nunca propaga errores: el registro del usuario no debe fallar por
        un bono. Los fallos quedan en el log.

        Returns:
            id de la transacción, o None si no se abonó
        """
        try:
            amount = await self.ledger.get_config(REGISTER_BONUS)
            if amount <= 0:
                logger.info("Registration bonus disabled (register_bonus=%s)", amount)
                return None
            return await self.ledger.earn(
                user_id,
                amount,
                CreditTransactionType.EARN_REGISTER,
                "Registration bonus",
                reference=LedgerReference.system(),
                idempotency_key=f"register:{user_id}",
            )
        except Exception:
            logger.exception("Registration bonus failed for user=%s", user_id)
            return None

    async def grant_upload_bonus(
        self,
        user_id: uuid.UUID,
        project_id: uuid.UUID,
        is_dockerized: bool = False,
    ) -> int:
        """
        Abona upload_bonus al vendedor cuando su proyecto es aprobado.
        Con Docker se multiplica por docker_multiplier (tipo earn_docker).

        Los errores se propagan al flujo de revisión que lo invocó.
        """
        amount = await self.ledger.get_config(UPLOAD_BONUS)
        tx_type = CreditTransactionType.EARN_UPLOAD
        description = "Project approved bonus"
        if is_dockerized:
            multiplier = await self.ledger.get_config(DOCKER_MULTIPLIER)
            amount = amount * multiplier
            tx_type = CreditTransactionType.EARN_DOCKER
            description = "Project approved bonus (Docker)"

        return await self.ledger.earn(
            user_id,
            amount,
            tx_type,
            description,
            reference=LedgerReference.project(project_id),
            idempotency_key=f"upload:{project_id}",
        )

    async def grant_review_bonus(self, user_id: uuid.UUID, project_id: uuid.UUID) -> int:
        amount = await self.ledger.get_config(REVIEW_BONUS)
        return await self.ledger.earn(
            user_id,
            amount,
            CreditTransactionType.EARN_REVIEW,
            "Review bonus",
            reference=LedgerReference.project(project_id),
            idempotency_key=f"review:{project_id}",
        )

    async def grant_referral_bonus(self, referrer_id: uuid.UUID, referred_user_id: uuid.UUID) -> int:
        """
        Abona referral_bonus al referente. Cada usuario referido genera un
        solo bono en todo el ledger (índice único parcial), aunque lleguen
        varios referentes.

        Raises:
            ReferralAlreadyGranted: el bono ya se abonó a otro referente
        """
        if referrer_id == referred_user_id:
            raise ValueError("a user cannot refer themselves")
        reference = LedgerReference.user(referred_user_id)

        granted = await self._granted_referral(referrer_id, reference)
        if granted is not None:
            return granted

        amount = await self.ledger.get_config(REFERRAL_BONUS)
        try:
            return await self.ledger.earn(
                referrer_id,
                amount,
                CreditTransactionType.EARN_REFERRAL,
                "Referral bonus",
                reference=reference,
                idempotency_key=f"referral:{referred_user_id}",
            )
        except StorageError as e:
            if not isinstance(e.cause, IntegrityError):
                raise
            # otro referente ganó la carrera por el mismo referido
            granted = await self._granted_referral(referrer_id, reference)
            if granted is None:
                raise
            return granted

    async def _granted_referral(
        self,
        referrer_id: uuid.UUID,
        reference: LedgerReference,
    ) -> Optional[int]:
        existing = await self.ledger.find_first_by_reference(
            reference, CreditTransactionType.EARN_REFERRAL
        )
        if existing is None:
            return None
        if existing.user_id != referrer_id:
            raise ReferralAlreadyGranted(reference.id, existing.user_id)
        return existing.id

    async def daily_checkin(
        self,
        user_id: uuid.UUID,
        today: Optional[date] = None,
    ) -> DailyCheckinResult:
        """Abona daily_signin_bonus como máximo una vez por día UTC."""
        day = today or datetime.now(timezone.utc).date()
        key = f"daily:{day.isoformat()}"

        existing = await self.ledger.get_transaction_by_key(user_id, key)
        if existing is not None:
            return DailyCheckinResult(
                transaction_id=existing.id,
                amount=existing.amount,
                already_claimed=True,
                checkin_date=day,
            )

        amount = await self.ledger.get_config(DAILY_SIGNIN_BONUS)
        tx_id, created = await self.ledger.earn_once(
            user_id,
            amount,
            CreditTransactionType.EARN_DAILY,
            f"Daily check-in {day.isoformat()}",
            reference=LedgerReference.system(),
            idempotency_key=key,
        )
        if not created:
            # otro check-in concurrente abonó primero
            existing = await self.ledger.get_transaction_by_key(user_id, key)
            amount = existing.amount
        return DailyCheckinResult(
            transaction_id=tx_id,
            amount=amount,
            already_claimed=not created,
            checkin_date=day,
        )


__all__ = [
    "LedgerService",
    "CreditRewardsService",
    "DailyCheckinResult",
    "REGISTER_BONUS",
    "UPLOAD_BONUS",
    "DOCKER_MULTIPLIER",
    "REVIEW_BONUS",
    "DAILY_SIGNIN_BONUS",
    "REFERRAL_BONUS",
    "MIN_PURCHASE_AMOUNT",
]
# Fin del archivo app/modules/credits/services.py
