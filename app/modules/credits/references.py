# -*- coding: utf-8 -*-
"""
app/modules/credits/references.py

Referencia tipada de un movimiento del ledger.

Cada transacción puede apuntar a la entidad que la originó (una orden,
un proyecto, un administrador, otro usuario) o al sistema. Se persiste
como el par (reference_type, reference_id), pero el código solo
construye referencias a través de los constructores de esta clase, de
modo que no existe una combinación inválida (p.ej. "order" sin id).

Uso:
    LedgerReference.order(42)
    LedgerReference.project(project_id)
    LedgerReference.system()

Autor: CodeMarket
Fecha: 2026-10-06
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from .enums import ReferenceKind

RefId = Union[int, str, UUID]


@dataclass(frozen=True)
class LedgerReference:
    kind: ReferenceKind
    id: Optional[str] = None

    def __post_init__(self) -> None:
        kind = ReferenceKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if kind is ReferenceKind.SYSTEM:
            if self.id is not None:
                raise ValueError("system references carry no id")
        elif not self.id:
            raise ValueError(f"{kind.value} references require an id")

    # ------------------------------------------------------------------
    # Constructores
    # ------------------------------------------------------------------
    @classmethod
    def order(cls, order_id: RefId) -> "LedgerReference":
        return cls(ReferenceKind.ORDER, str(order_id))

    @classmethod
    def project(cls, project_id: RefId) -> "LedgerReference":
        return cls(ReferenceKind.PROJECT, str(project_id))

    @classmethod
    def admin(cls, admin_id: RefId) -> "LedgerReference":
        return cls(ReferenceKind.ADMIN, str(admin_id))

    @classmethod
    def user(cls, user_id: RefId) -> "LedgerReference":
        return cls(ReferenceKind.USER, str(user_id))

    @classmethod
    def system(cls) -> "LedgerReference":
        return cls(ReferenceKind.SYSTEM)

    @classmethod
    def from_columns(
        cls,
        reference_type: Optional[ReferenceKind],
        reference_id: Optional[str],
    ) -> Optional["LedgerReference"]:
        """Reconstruye la referencia desde las columnas persistidas."""
        if reference_type is None:
            return None
        return cls(ReferenceKind(reference_type), reference_id)

    def __str__(self) -> str:
        if self.id is None:
            return self.kind.value
        return f"{self.kind.value}:{self.id}"


__all__ = ["LedgerReference"]
# Fin del archivo app/modules/credits/references.py
