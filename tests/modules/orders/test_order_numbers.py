# tests/modules/orders/test_order_numbers.py
# -*- coding: utf-8 -*-
"""
Tests de generación de números de orden.
"""

import asyncio
import random
import re
from datetime import datetime, timezone

import pytest

from app.modules.orders.order_numbers import allocate_order_number, generate_order_number
from app.shared.database import StorageError

ORDER_NUMBER_RE = re.compile(r"^EC\d{8}\d{8}$")


def test_format():
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    number = generate_order_number(now=now, rng=random.Random(7))
    assert ORDER_NUMBER_RE.match(number)
    assert number.startswith("EC20261019")
    assert len(number) == 18


def test_zero_padded():
    class _ZeroRandom(random.Random):
        def randrange(self, *args, **kwargs):
            return 42

    now = datetime(2026, 1, 2, tzinfo=timezone.utc)
    assert generate_order_number(now=now, rng=_ZeroRandom()) == "EC2026010200000042"


async def test_ten_thousand_allocations_are_unique():
    issued: set[str] = set()

    async def exists(candidate: str) -> bool:
        return candidate in issued

    async def allocate() -> str:
        number = await allocate_order_number(exists)
        issued.add(number)
        return number

    numbers = await asyncio.gather(*[allocate() for _ in range(10_000)])
    assert len(set(numbers)) == 10_000
    assert all(ORDER_NUMBER_RE.match(n) for n in numbers)


async def test_retries_on_collision():
    calls = []

    async def exists(candidate: str) -> bool:
        calls.append(candidate)
        return len(calls) < 3

    number = await allocate_order_number(exists, max_attempts=5)
    assert number == calls[-1]
    assert len(calls) == 3


async def test_exhaustion_raises_storage_error():
    calls = []

    async def exists(candidate: str) -> bool:
        calls.append(candidate)
        return True

    with pytest.raises(StorageError):
        await allocate_order_number(exists, max_attempts=4)
    assert len(calls) == 4
