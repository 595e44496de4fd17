# tests/modules/credits/test_ledger_service.py
# -*- coding: utf-8 -*-
"""
Tests de LedgerService contra SQLite real:
- earn/spend y saldos resultantes
- rechazo sin efectos (monto inválido, saldo insuficiente)
- cadena balance_before/balance_after por usuario
- concurrencia (spends en paralelo, creación de cuenta en paralelo)
- idempotencia por clave
"""

import asyncio
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.modules.credits.enums import CreditTransactionType
from app.modules.credits.errors import ConfigNotFound, InsufficientBalance, InvalidAmount
from app.modules.credits.models import CreditAccount, CreditTransaction
from app.modules.credits.references import LedgerReference
from app.modules.credits.repositories import CreditTransactionRepository
from app.modules.credits.services import LedgerService
from app.shared.database import StorageError


async def _count(session_factory, model, user_id) -> int:
    async with session_factory() as db:
        return await db.scalar(select(func.count()).select_from(model).where(model.user_id == user_id))


class TestEarnAndSpend:
    async def test_earn_then_spend(self, ledger, buyer_id):
        """earn 500 + spend 200 → available 300 y dos movimientos."""
        await ledger.earn(buyer_id, 500, CreditTransactionType.EARN_REGISTER, "Registration bonus")
        await ledger.spend(buyer_id, 200, CreditTransactionType.SPEND_FEATURE, "Feature project")

        account = await ledger.get_account(buyer_id)
        assert account.available_credits == 300
        assert account.total_credits == 300
        assert account.frozen_credits == 0

        items, total = await ledger.get_history(buyer_id)
        assert total == 2
        newest = items[0]
        assert newest.amount == -200
        assert newest.balance_before == 500
        assert newest.balance_after == 300
        assert newest.transaction_type == CreditTransactionType.SPEND_FEATURE

    async def test_earn_creates_account(self, ledger, session_factory, buyer_id):
        tx_id = await ledger.earn(buyer_id, 10, CreditTransactionType.EARN_DAILY)
        assert isinstance(tx_id, int)
        assert await _count(session_factory, CreditAccount, buyer_id) == 1

    async def test_spend_insufficient_balance_has_no_effect(self, ledger, session_factory, buyer_id):
        await ledger.earn(buyer_id, 50, CreditTransactionType.EARN_UPLOAD)

        with pytest.raises(InsufficientBalance) as exc_info:
            await ledger.spend(buyer_id, 100, CreditTransactionType.SPEND_PURCHASE)

        assert exc_info.value.available == 50
        assert exc_info.value.required == 100
        account = await ledger.get_account(buyer_id)
        assert account.available_credits == 50
        assert await _count(session_factory, CreditTransaction, buyer_id) == 1

    async def test_spend_without_account(self, ledger, session_factory, buyer_id):
        with pytest.raises(InsufficientBalance) as exc_info:
            await ledger.spend(buyer_id, 1, CreditTransactionType.SPEND_FEATURE)
        assert exc_info.value.available == 0
        assert await _count(session_factory, CreditAccount, buyer_id) == 0

    async def test_spend_exact_balance_reaches_zero(self, ledger, buyer_id):
        await ledger.earn(buyer_id, 30, CreditTransactionType.EARN_REVIEW)
        await ledger.spend(buyer_id, 30, CreditTransactionType.SPEND_FEATURE)
        assert (await ledger.get_account(buyer_id)).available_credits == 0

    @pytest.mark.parametrize("amount", [0, -5, 1.5, True, "10"])
    async def test_invalid_amount(self, ledger, session_factory, buyer_id, amount):
        with pytest.raises(InvalidAmount):
            await ledger.earn(buyer_id, amount, CreditTransactionType.EARN_DAILY)
        with pytest.raises(InvalidAmount):
            await ledger.spend(buyer_id, amount, CreditTransactionType.SPEND_FEATURE)
        assert await _count(session_factory, CreditTransaction, buyer_id) == 0

    async def test_wrong_direction_type_rejected(self, ledger, buyer_id):
        with pytest.raises(ValueError):
            await ledger.earn(buyer_id, 10, CreditTransactionType.SPEND_PURCHASE)
        with pytest.raises(ValueError):
            await ledger.spend(buyer_id, 10, CreditTransactionType.EARN_DAILY)

    async def test_reference_and_created_by_persisted(self, ledger, buyer_id, admin_id):
        ref = LedgerReference.admin(admin_id)
        await ledger.earn(
            buyer_id, 5, CreditTransactionType.ADMIN_ADJUST, "Admin adjustment: test",
            reference=ref, created_by=admin_id,
        )
        items, _ = await ledger.get_history(buyer_id)
        assert items[0].reference == ref
        assert items[0].created_by == admin_id

        found = await ledger.find_by_reference(buyer_id, ref)
        assert [tx.id for tx in found] == [items[0].id]


class TestBalanceChain:
    async def test_chain_is_continuous(self, ledger, buyer_id):
        """balance_after(n) == balance_before(n+1) en orden de id."""
        await ledger.earn(buyer_id, 100, CreditTransactionType.EARN_REGISTER)
        await ledger.spend(buyer_id, 30, CreditTransactionType.SPEND_FEATURE)
        await ledger.earn(buyer_id, 5, CreditTransactionType.EARN_DAILY)
        await ledger.spend(buyer_id, 75, CreditTransactionType.SPEND_PURCHASE)

        items, total = await ledger.get_history(buyer_id, limit=100)
        assert total == 4
        chronological = list(reversed(items))
        assert chronological[0].balance_before == 0
        for prev, nxt in zip(chronological, chronological[1:]):
            assert prev.balance_after == nxt.balance_before
        for tx in chronological:
            assert tx.balance_after == tx.balance_before + tx.amount
        assert chronological[-1].balance_after == (await ledger.get_account(buyer_id)).available_credits


class TestConcurrency:
    async def test_parallel_spends_never_overdraw(self, ledger, buyer_id):
        """100 créditos y 11 cargos de 10 en paralelo: 10 éxitos, 1 rechazo."""
        await ledger.earn(buyer_id, 100, CreditTransactionType.EARN_REGISTER)

        results = await asyncio.gather(
            *[ledger.spend(buyer_id, 10, CreditTransactionType.SPEND_FEATURE) for _ in range(11)],
            return_exceptions=True,
        )

        successes = [r for r in results if isinstance(r, int)]
        failures = [r for r in results if isinstance(r, InsufficientBalance)]
        assert len(successes) == 10
        assert len(failures) == 1
        assert (await ledger.get_account(buyer_id)).available_credits == 0

        items, _ = await ledger.get_history(buyer_id, limit=100)
        chronological = list(reversed(items))
        for prev, nxt in zip(chronological, chronological[1:]):
            assert prev.balance_after == nxt.balance_before

    async def test_parallel_account_creation(self, ledger, session_factory, buyer_id):
        accounts = await asyncio.gather(*[ledger.get_or_create_account(buyer_id) for _ in range(5)])
        assert len({a.id for a in accounts}) == 1
        assert await _count(session_factory, CreditAccount, buyer_id) == 1


class _FailingTransactionRepository(CreditTransactionRepository):
    async def create(self, session, **kwargs):
        raise OperationalError("INSERT INTO credit_transactions", {}, Exception("disk I/O error"))


class TestStoreFailure:
    async def test_failed_insert_leaves_account_untouched(self, ledger, session_factory, buyer_id):
        """El UPDATE de la cuenta se revierte si falla el INSERT del movimiento."""
        await ledger.earn(buyer_id, 100, CreditTransactionType.EARN_REGISTER)
        failing = LedgerService(session_factory, tx_repo=_FailingTransactionRepository())

        with pytest.raises(StorageError):
            await failing.earn(buyer_id, 50, CreditTransactionType.EARN_DAILY)
        with pytest.raises(StorageError):
            await failing.spend(buyer_id, 30, CreditTransactionType.SPEND_FEATURE)

        account = await ledger.get_account(buyer_id)
        assert account.available_credits == 100
        assert account.total_credits == 100
        assert await _count(session_factory, CreditTransaction, buyer_id) == 1


class TestIdempotency:
    async def test_repeated_key_returns_original(self, ledger, session_factory, buyer_id):
        first = await ledger.earn(
            buyer_id, 50, CreditTransactionType.EARN_UPLOAD, idempotency_key="upload:p1"
        )
        second = await ledger.earn(
            buyer_id, 50, CreditTransactionType.EARN_UPLOAD, idempotency_key="upload:p1"
        )
        assert first == second
        assert (await ledger.get_account(buyer_id)).available_credits == 50
        assert await _count(session_factory, CreditTransaction, buyer_id) == 1

    async def test_earn_once_reports_replay(self, ledger, buyer_id):
        first = await ledger.earn_once(
            buyer_id, 50, CreditTransactionType.EARN_UPLOAD, idempotency_key="upload:p2"
        )
        second = await ledger.earn_once(
            buyer_id, 50, CreditTransactionType.EARN_UPLOAD, idempotency_key="upload:p2"
        )
        assert first == (first[0], True)
        assert second == (first[0], False)

    async def test_parallel_repeated_key(self, ledger, buyer_id):
        await ledger.earn(buyer_id, 100, CreditTransactionType.EARN_REGISTER)
        results = await asyncio.gather(*[
            ledger.spend(buyer_id, 40, CreditTransactionType.SPEND_PURCHASE, idempotency_key="order:1:settle")
            for _ in range(3)
        ])
        assert len(set(results)) == 1
        assert (await ledger.get_account(buyer_id)).available_credits == 60

    async def test_same_key_different_users(self, ledger):
        a, b = uuid.uuid4(), uuid.uuid4()
        tx_a = await ledger.earn(a, 5, CreditTransactionType.EARN_DAILY, idempotency_key="daily:2026-10-01")
        tx_b = await ledger.earn(b, 5, CreditTransactionType.EARN_DAILY, idempotency_key="daily:2026-10-01")
        assert tx_a != tx_b

    async def test_get_transaction_by_key(self, ledger, buyer_id):
        tx_id = await ledger.earn(buyer_id, 5, CreditTransactionType.EARN_DAILY, idempotency_key="k1")
        tx = await ledger.get_transaction_by_key(buyer_id, "k1")
        assert tx is not None and tx.id == tx_id
        assert await ledger.get_transaction_by_key(buyer_id, "missing") is None


class TestQueries:
    async def test_get_account_without_row_is_zero(self, ledger, session_factory, buyer_id):
        account = await ledger.get_account(buyer_id)
        assert account.available_credits == 0
        assert account.total_credits == 0
        assert await _count(session_factory, CreditAccount, buyer_id) == 0

    async def test_has_sufficient_balance(self, ledger, buyer_id):
        await ledger.earn(buyer_id, 20, CreditTransactionType.EARN_REVIEW)
        assert await ledger.has_sufficient_balance(buyer_id, 20)
        assert not await ledger.has_sufficient_balance(buyer_id, 21)

    async def test_history_pagination(self, ledger, buyer_id):
        for _ in range(25):
            await ledger.earn(buyer_id, 1, CreditTransactionType.EARN_DAILY)

        page1, total = await ledger.get_history(buyer_id, page=1, limit=10)
        page3, _ = await ledger.get_history(buyer_id, page=3, limit=10)
        assert total == 25
        assert len(page1) == 10
        assert len(page3) == 5
        assert page1[0].id > page1[-1].id
        assert page1[0].balance_after == 25

        clamped, _ = await ledger.get_history(buyer_id, page=1, limit=500)
        assert len(clamped) == 25

    async def test_history_type_filter(self, ledger, buyer_id):
        await ledger.earn(buyer_id, 100, CreditTransactionType.EARN_REGISTER)
        await ledger.spend(buyer_id, 10, CreditTransactionType.SPEND_FEATURE)
        await ledger.spend(buyer_id, 10, CreditTransactionType.SPEND_FEATURE)

        items, total = await ledger.get_history(
            buyer_id, transaction_type=CreditTransactionType.SPEND_FEATURE
        )
        assert total == 2
        assert all(tx.transaction_type == CreditTransactionType.SPEND_FEATURE for tx in items)

    async def test_get_config(self, ledger, seeded_configs):
        assert await ledger.get_config("register_bonus") == 100
        with pytest.raises(ConfigNotFound):
            await ledger.get_config("does_not_exist")
