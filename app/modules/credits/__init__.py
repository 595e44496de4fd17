# -*- coding: utf-8 -*-
"""
app/modules/credits/__init__.py

Ledger de créditos.

Contiene:
- Modelos ORM: CreditAccount, CreditTransaction, CreditConfig
- Repositorios: CreditAccountRepository, CreditTransactionRepository, CreditConfigRepository
- Servicios: LedgerService, CreditRewardsService, CreditAdminService
- Enums / errores / LedgerReference

Autor: CodeMarket
Fecha: 2026-10-06
"""

from .models import (
    CreditAccount,
    CreditTransaction,
    CreditConfig,
)
from .enums import (
    CreditTransactionType,
    ReferenceKind,
)
from .errors import (
    LedgerError,
    InvalidAmount,
    InsufficientBalance,
    ConfigNotFound,
    ReferralAlreadyGranted,
)
from .references import LedgerReference
from .repositories import (
    CreditAccountRepository,
    CreditTransactionRepository,
    CreditConfigRepository,
)
from .services import (
    LedgerService,
    CreditRewardsService,
    DailyCheckinResult,
)
from .admin_service import CreditAdminService, DEFAULT_CREDIT_CONFIGS

__all__ = [
    # Models
    "CreditAccount",
    "CreditTransaction",
    "CreditConfig",
    # Enums
    "CreditTransactionType",
    "ReferenceKind",
    # Errors
    "LedgerError",
    "InvalidAmount",
    "InsufficientBalance",
    "ConfigNotFound",
    "ReferralAlreadyGranted",
    # References
    "LedgerReference",
    # Repositories
    "CreditAccountRepository",
    "CreditTransactionRepository",
    "CreditConfigRepository",
    # Services
    "LedgerService",
    "CreditRewardsService",
    "DailyCheckinResult",
    "CreditAdminService",
    "DEFAULT_CREDIT_CONFIGS",
]
