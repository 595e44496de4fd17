# tests/modules/credits/test_credit_rewards.py
# -*- coding: utf-8 -*-
"""
Tests de CreditRewardsService: montos desde credit_configs e
idempotencia por clave natural de cada bono.
"""

import asyncio
import logging
import uuid
from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.modules.credits.enums import CreditTransactionType
from app.modules.credits.errors import ConfigNotFound, ReferralAlreadyGranted
from app.modules.credits.references import LedgerReference
from app.modules.credits.services import CreditRewardsService


class TestRegistrationBonus:
    async def test_grants_configured_amount(self, rewards, ledger, seeded_configs, buyer_id):
        tx_id = await rewards.grant_registration_bonus(buyer_id)
        assert tx_id is not None

        account = await ledger.get_account(buyer_id)
        assert account.available_credits == 100
        items, _ = await ledger.get_history(buyer_id)
        assert items[0].transaction_type == CreditTransactionType.EARN_REGISTER

    async def test_is_idempotent(self, rewards, ledger, seeded_configs, buyer_id):
        first = await rewards.grant_registration_bonus(buyer_id)
        second = await rewards.grant_registration_bonus(buyer_id)
        assert first == second
        assert (await ledger.get_account(buyer_id)).available_credits == 100

    async def test_missing_config_is_swallowed(self, rewards, ledger, buyer_id, caplog):
        """Sin credit_configs el registro no falla: None + log."""
        with caplog.at_level(logging.ERROR):
            assert await rewards.grant_registration_bonus(buyer_id) is None
        assert "Registration bonus failed" in caplog.text
        assert (await ledger.get_account(buyer_id)).available_credits == 0

    async def test_ledger_failure_is_swallowed(self, buyer_id, caplog):
        ledger = AsyncMock()
        ledger.get_config.return_value = 100
        ledger.earn.side_effect = RuntimeError("store down")
        service = CreditRewardsService(ledger)

        with caplog.at_level(logging.ERROR):
            assert await service.grant_registration_bonus(buyer_id) is None
        assert "Registration bonus failed" in caplog.text

    async def test_zero_bonus_disables(self, rewards, credit_admin, seeded_configs, buyer_id):
        await credit_admin.update_configs({"register_bonus": 0})
        assert await rewards.grant_registration_bonus(buyer_id) is None


class TestUploadBonus:
    async def test_plain_project(self, rewards, ledger, seeded_configs, seller_id):
        project_id = uuid.uuid4()
        await rewards.grant_upload_bonus(seller_id, project_id)

        items, _ = await ledger.get_history(seller_id)
        assert items[0].amount == 50
        assert items[0].transaction_type == CreditTransactionType.EARN_UPLOAD
        assert items[0].reference_id == str(project_id)

    async def test_dockerized_project_uses_multiplier(self, rewards, ledger, seeded_configs, seller_id):
        await rewards.grant_upload_bonus(seller_id, uuid.uuid4(), is_dockerized=True)

        items, _ = await ledger.get_history(seller_id)
        assert items[0].amount == 100
        assert items[0].transaction_type == CreditTransactionType.EARN_DOCKER

    async def test_once_per_project(self, rewards, ledger, seeded_configs, seller_id):
        project_id = uuid.uuid4()
        await rewards.grant_upload_bonus(seller_id, project_id)
        await rewards.grant_upload_bonus(seller_id, project_id)
        assert (await ledger.get_account(seller_id)).available_credits == 50

    async def test_errors_propagate(self, rewards, seller_id):
        with pytest.raises(ConfigNotFound):
            await rewards.grant_upload_bonus(seller_id, uuid.uuid4())


class TestOtherBonuses:
    async def test_review_bonus(self, rewards, ledger, seeded_configs, buyer_id):
        await rewards.grant_review_bonus(buyer_id, uuid.uuid4())
        items, _ = await ledger.get_history(buyer_id)
        assert items[0].amount == 10
        assert items[0].transaction_type == CreditTransactionType.EARN_REVIEW

    async def test_referral_bonus(self, rewards, ledger, seeded_configs, buyer_id):
        referred = uuid.uuid4()
        await rewards.grant_referral_bonus(buyer_id, referred)
        await rewards.grant_referral_bonus(buyer_id, referred)

        items, total = await ledger.get_history(buyer_id)
        assert total == 1
        assert items[0].amount == 200
        assert items[0].reference_id == str(referred)

    async def test_referral_bonus_once_per_referred_user(self, rewards, ledger, seeded_configs, buyer_id, seller_id):
        referred = uuid.uuid4()
        await rewards.grant_referral_bonus(buyer_id, referred)

        with pytest.raises(ReferralAlreadyGranted) as exc_info:
            await rewards.grant_referral_bonus(seller_id, referred)

        assert exc_info.value.referrer_id == buyer_id
        assert (await ledger.get_account(buyer_id)).available_credits == 200
        assert (await ledger.get_account(seller_id)).available_credits == 0

    async def test_concurrent_referrers_stopped_by_unique_index(
        self, rewards, ledger, seeded_configs, buyer_id, seller_id, monkeypatch
    ):
        """Si ambos referentes pasan el chequeo previo, el índice único decide."""
        referred = uuid.uuid4()
        await rewards.grant_referral_bonus(buyer_id, referred)
        granted = await ledger.find_first_by_reference(
            LedgerReference.user(referred), CreditTransactionType.EARN_REFERRAL
        )
        monkeypatch.setattr(
            ledger, "find_first_by_reference", AsyncMock(side_effect=[None, granted])
        )

        with pytest.raises(ReferralAlreadyGranted):
            await rewards.grant_referral_bonus(seller_id, referred)

        assert (await ledger.get_account(seller_id)).available_credits == 0
        assert (await ledger.get_account(buyer_id)).available_credits == 200

    async def test_self_referral_rejected(self, rewards, seeded_configs, buyer_id):
        with pytest.raises(ValueError):
            await rewards.grant_referral_bonus(buyer_id, buyer_id)


class TestDailyCheckin:
    async def test_once_per_day(self, rewards, ledger, seeded_configs, buyer_id):
        day = date(2026, 10, 1)
        first = await rewards.daily_checkin(buyer_id, today=day)
        second = await rewards.daily_checkin(buyer_id, today=day)

        assert first.already_claimed is False
        assert first.amount == 5
        assert second.already_claimed is True
        assert second.transaction_id == first.transaction_id
        assert (await ledger.get_account(buyer_id)).available_credits == 5

    async def test_next_day_grants_again(self, rewards, ledger, seeded_configs, buyer_id):
        await rewards.daily_checkin(buyer_id, today=date(2026, 10, 1))
        result = await rewards.daily_checkin(buyer_id, today=date(2026, 10, 2))
        assert result.already_claimed is False
        assert (await ledger.get_account(buyer_id)).available_credits == 10

    async def test_parallel_checkins_claim_once(self, rewards, ledger, seeded_configs, buyer_id):
        """Dos check-ins simultáneos: uno abona, el otro se informa como ya reclamado."""
        day = date(2026, 10, 1)
        results = await asyncio.gather(
            rewards.daily_checkin(buyer_id, today=day),
            rewards.daily_checkin(buyer_id, today=day),
        )

        assert sorted(r.already_claimed for r in results) == [False, True]
        assert results[0].transaction_id == results[1].transaction_id
        assert all(r.amount == 5 for r in results)
        assert (await ledger.get_account(buyer_id)).available_credits == 5
