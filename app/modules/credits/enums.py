# -*- coding: utf-8 -*-
"""
app/modules/credits/enums.py

Enums para el ledger de créditos.

Autor: CodeMarket
Fecha: 2026-10-06
"""

from enum import Enum


class CreditTransactionType(str, Enum):
    """
    Tipo de movimiento en el ledger.

    Persistido como credit_transaction_type_enum.
    """
    __db_enum_name__ = "credit_transaction_type_enum"

    EARN_REGISTER = "earn_register"      # Bono de registro
    EARN_UPLOAD = "earn_upload"          # Proyecto aprobado
    EARN_REVIEW = "earn_review"          # Reseña publicada
    EARN_REFERRAL = "earn_referral"      # Usuario referido
    EARN_DAILY = "earn_daily"            # Check-in diario
    EARN_DOCKER = "earn_docker"          # Proyecto aprobado con Docker
    SPEND_PURCHASE = "spend_purchase"    # Compra de proyecto
    SPEND_FEATURE = "spend_feature"      # Destacar proyecto
    REFUND_PURCHASE = "refund_purchase"  # Compensación de una compra
    ADMIN_ADJUST = "admin_adjust"        # Ajuste manual (+/-)


# Tipos válidos por dirección; admin_adjust puede ir en ambas
EARN_TYPES = frozenset({
    CreditTransactionType.EARN_REGISTER,
    CreditTransactionType.EARN_UPLOAD,
    CreditTransactionType.EARN_REVIEW,
    CreditTransactionType.EARN_REFERRAL,
    CreditTransactionType.EARN_DAILY,
    CreditTransactionType.EARN_DOCKER,
    CreditTransactionType.REFUND_PURCHASE,
    CreditTransactionType.ADMIN_ADJUST,
})

SPEND_TYPES = frozenset({
    CreditTransactionType.SPEND_PURCHASE,
    CreditTransactionType.SPEND_FEATURE,
    CreditTransactionType.ADMIN_ADJUST,
})


class ReferenceKind(str, Enum):
    """Entidad que originó un movimiento del ledger."""
    __db_enum_name__ = "credit_reference_kind_enum"

    PROJECT = "project"
    ORDER = "order"
    SYSTEM = "system"
    ADMIN = "admin"
    USER = "user"


__all__ = [
    "CreditTransactionType",
    "EARN_TYPES",
    "SPEND_TYPES",
    "ReferenceKind",
]
