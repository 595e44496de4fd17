# -*- coding: utf-8 -*-
"""
app/modules/orders/order_numbers.py

Generación de números de orden legibles: EC<YYYYMMDD><8 dígitos>.

La unicidad la garantiza el UNIQUE(order_number); aquí solo se evita
chocar con números existentes mediante reintentos acotados. Si todos los
intentos colisionan se lanza StorageError en lugar de iterar sin fin.

Autor: CodeMarket
Fecha: 2026-10-09
"""

from __future__ import annotations

import logging
import random
import secrets
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from app.shared.database.errors import StorageError

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "EC"
ORDER_NUMBER_DIGITS = 8

_system_random = secrets.SystemRandom()


def generate_order_number(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Un candidato: prefijo + fecha UTC + 8 dígitos aleatorios.

    >>> len(generate_order_number())
    18
    """
    now = now or datetime.now(timezone.utc)
    rng = rng or _system_random
    digits = rng.randrange(10 ** ORDER_NUMBER_DIGITS)
    return f"{ORDER_NUMBER_PREFIX}{now:%Y%m%d}{digits:0{ORDER_NUMBER_DIGITS}d}"


async def allocate_order_number(
    exists: Callable[[str], Awaitable[bool]],
    *,
    max_attempts: int = 10,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Devuelve un número que `exists` reporta como libre.

    Args:
        exists: consulta de existencia contra el store
        max_attempts: tope de candidatos a probar

    Raises:
        StorageError: si los max_attempts candidatos ya existían
    """
    for attempt in range(1, max_attempts + 1):
        candidate = generate_order_number(now=now, rng=rng)
        if not await exists(candidate):
            return candidate
        logger.warning("Order number collision: number=%s attempt=%d", candidate, attempt)

    logger.error("Order number generation exhausted after %d attempts", max_attempts)
    raise StorageError(f"Could not allocate a unique order number after {max_attempts} attempts")


__all__ = ["generate_order_number", "allocate_order_number", "ORDER_NUMBER_PREFIX"]
# Fin del archivo app/modules/orders/order_numbers.py
