# tests/modules/credits/test_credit_models.py
# -*- coding: utf-8 -*-
"""
Estructura de las tablas del ledger: columnas, UNIQUE y CHECK.
"""

import uuid

import pytest
from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlalchemy.exc import IntegrityError

from app.modules.credits.enums import CreditTransactionType, ReferenceKind
from app.modules.credits.models import CreditAccount, CreditConfig, CreditTransaction
from app.modules.credits.references import LedgerReference


def _check_names(table) -> set[str]:
    return {c.name for c in table.constraints if isinstance(c, CheckConstraint)}


def test_credit_accounts_table():
    t = CreditAccount.__table__
    assert t.name == "credit_accounts"
    for col in ["id", "user_id", "total_credits", "available_credits", "frozen_credits", "created_at", "updated_at"]:
        assert col in t.c
    assert t.c.user_id.unique, "user_id debe ser UNIQUE"
    names = " ".join(_check_names(t))
    assert "available_non_negative" in names
    assert "frozen_non_negative" in names
    assert "total_balanced" in names


def test_credit_transactions_table():
    t = CreditTransaction.__table__
    assert t.name == "credit_transactions"
    for col in [
        "id", "user_id", "transaction_type", "amount", "balance_before", "balance_after",
        "description", "reference_type", "reference_id", "created_by", "idempotency_key", "created_at",
    ]:
        assert col in t.c
    names = " ".join(_check_names(t))
    assert "amount_nonzero" in names
    assert "balance_chain" in names
    assert any(
        isinstance(c, UniqueConstraint) and [col.name for col in c.columns] == ["user_id", "idempotency_key"]
        for c in t.constraints
    )


def test_credit_configs_table():
    t = CreditConfig.__table__
    assert t.name == "credit_configs"
    assert t.c.config_key.unique
    assert "value_non_negative" in " ".join(_check_names(t))


def test_transaction_reference_property():
    tx = CreditTransaction(
        user_id=uuid.uuid4(),
        transaction_type=CreditTransactionType.SPEND_PURCHASE,
        amount=-10,
        balance_before=10,
        balance_after=0,
        reference_type=ReferenceKind.ORDER,
        reference_id="42",
    )
    assert tx.reference == LedgerReference.order(42)


class TestLedgerReference:
    def test_system_has_no_id(self):
        ref = LedgerReference.system()
        assert ref.id is None
        assert str(ref) == "system"

    def test_system_with_id_rejected(self):
        with pytest.raises(ValueError):
            LedgerReference(ReferenceKind.SYSTEM, "1")

    def test_order_requires_id(self):
        with pytest.raises(ValueError):
            LedgerReference(ReferenceKind.ORDER, None)

    def test_str_and_from_columns(self):
        pid = uuid.uuid4()
        ref = LedgerReference.project(pid)
        assert str(ref) == f"project:{pid}"
        assert LedgerReference.from_columns(ref.kind, ref.id) == ref
        assert LedgerReference.from_columns(None, None) is None


class TestDatabaseConstraints:
    """Los CHECK se aplican también en SQLite."""

    async def test_negative_available_rejected(self, session_factory):
        async with session_factory() as db:
            db.add(CreditAccount(
                user_id=uuid.uuid4(),
                total_credits=0,
                available_credits=-1,
                frozen_credits=0,
            ))
            with pytest.raises(IntegrityError):
                await db.flush()
            await db.rollback()

    async def test_unbalanced_total_rejected(self, session_factory):
        async with session_factory() as db:
            db.add(CreditAccount(
                user_id=uuid.uuid4(),
                total_credits=10,
                available_credits=5,
                frozen_credits=0,
            ))
            with pytest.raises(IntegrityError):
                await db.flush()
            await db.rollback()

    async def test_second_referral_for_same_user_rejected(self, session_factory):
        referred = str(uuid.uuid4())
        async with session_factory() as db:
            for _ in range(2):
                db.add(CreditTransaction(
                    user_id=uuid.uuid4(),
                    transaction_type=CreditTransactionType.EARN_REFERRAL,
                    amount=200,
                    balance_before=0,
                    balance_after=200,
                    reference_type=ReferenceKind.USER,
                    reference_id=referred,
                ))
            with pytest.raises(IntegrityError):
                await db.flush()
            await db.rollback()

    async def test_broken_balance_chain_rejected(self, session_factory):
        async with session_factory() as db:
            db.add(CreditTransaction(
                user_id=uuid.uuid4(),
                transaction_type=CreditTransactionType.EARN_DAILY,
                amount=5,
                balance_before=0,
                balance_after=6,
            ))
            with pytest.raises(IntegrityError):
                await db.flush()
            await db.rollback()
