# -*- coding: utf-8 -*-
"""
app/modules/credits/models.py

Modelos ORM para el ledger de créditos.

Tablas:
- credit_accounts: saldo por usuario (una fila por usuario, punto único
  de serialización de escrituras)
- credit_transactions: log append-only de movimientos
- credit_configs: parámetros de negocio (montos de bonos)

Autor: CodeMarket
Fecha: 2026-10-06
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, IdType, as_db_enum, utcnow
from .enums import CreditTransactionType, ReferenceKind
from .references import LedgerReference


class CreditAccount(Base):
    """
    Saldo de créditos del usuario.

    Tabla: credit_accounts

    Columnas:
    - id: BIGSERIAL PRIMARY KEY
    - user_id: UUID NOT NULL UNIQUE
    - total_credits: INTEGER NOT NULL DEFAULT 0
    - available_credits: INTEGER NOT NULL DEFAULT 0
    - frozen_credits: INTEGER NOT NULL DEFAULT 0 (reservado, sin escrituras)
    - created_at / updated_at: TIMESTAMPTZ

    Constraints:
    - ck_credit_accounts_total_non_negative
    - ck_credit_accounts_available_non_negative
    - ck_credit_accounts_frozen_non_negative
    - ck_credit_accounts_total_balanced: total = available + frozen

    Solo LedgerService modifica total_credits/available_credits.
    """

    __tablename__ = "credit_accounts"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, unique=True)

    total_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    frozen_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        CheckConstraint("total_credits >= 0", name="total_non_negative"),
        CheckConstraint("available_credits >= 0", name="available_non_negative"),
        CheckConstraint("frozen_credits >= 0", name="frozen_non_negative"),
        CheckConstraint(
            "total_credits = available_credits + frozen_credits",
            name="total_balanced",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<CreditAccount user={self.user_id} total={self.total_credits} "
            f"available={self.available_credits} frozen={self.frozen_credits}>"
        )


class CreditTransaction(Base):
    """
    Ledger inmutable de movimientos de créditos.

    Tabla: credit_transactions

    Columnas:
    - id: BIGSERIAL PRIMARY KEY (orden de commit por usuario)
    - user_id: UUID NOT NULL
    - transaction_type: credit_transaction_type_enum NOT NULL
    - amount: INTEGER NOT NULL (+abono / -cargo)
    - balance_before / balance_after: snapshots de available_credits
    - description: TEXT
    - reference_type / reference_id: origen del movimiento (LedgerReference)
    - created_by: UUID del actor (NULL = sistema)
    - idempotency_key: TEXT (nullable)
    - created_at: TIMESTAMPTZ NOT NULL

    Constraints:
    - ck_credit_transactions_amount_nonzero: amount <> 0
    - ck_credit_transactions_balance_chain: balance_after = balance_before + amount
    - uq_credit_transactions_user_idem: UNIQUE(user_id, idempotency_key)
    - uq_credit_transactions_referral: UNIQUE(reference_id) WHERE earn_referral

    Las filas nunca se actualizan ni se borran.
    """

    __tablename__ = "credit_transactions"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    transaction_type: Mapped[CreditTransactionType] = mapped_column(
        as_db_enum(CreditTransactionType),
        nullable=False,
    )

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_before: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    reference_type: Mapped[Optional[ReferenceKind]] = mapped_column(
        as_db_enum(ReferenceKind),
        nullable=True,
    )
    reference_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    idempotency_key: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        CheckConstraint("amount <> 0", name="amount_nonzero"),
        CheckConstraint("balance_after = balance_before + amount", name="balance_chain"),
        UniqueConstraint("user_id", "idempotency_key", name="uq_credit_transactions_user_idem"),
        Index("ix_credit_transactions_user_id_id", "user_id", "id"),
        Index("ix_credit_transactions_reference", "reference_type", "reference_id"),
        # Un bono de referido por usuario referido, sin importar el referente
        Index(
            "uq_credit_transactions_referral",
            "reference_id",
            unique=True,
            postgresql_where=text("transaction_type = 'earn_referral'"),
            sqlite_where=text("transaction_type = 'earn_referral'"),
        ),
        Index("ix_credit_transactions_type_created", "transaction_type", "created_at"),
    )

    @property
    def reference(self) -> Optional[LedgerReference]:
        return LedgerReference.from_columns(self.reference_type, self.reference_id)

    def __repr__(self) -> str:
        return (
            f"<CreditTransaction id={self.id} user={self.user_id} "
            f"type={self.transaction_type} amount={self.amount:+d} after={self.balance_after}>"
        )


class CreditConfig(Base):
    """
    Parámetro de negocio del ledger (p.ej. register_bonus = 100).

    Tabla: credit_configs
    """

    __tablename__ = "credit_configs"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)

    config_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    config_value: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        CheckConstraint("config_value >= 0", name="value_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<CreditConfig {self.config_key}={self.config_value} active={self.is_active}>"


__all__ = [
    "CreditAccount",
    "CreditTransaction",
    "CreditConfig",
]
# Fin del archivo app/modules/credits/models.py
