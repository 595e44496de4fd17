# -*- coding: utf-8 -*-
"""
app/shared/database/errors.py

Excepción semántica para fallos del almacenamiento transaccional.

Cualquier SQLAlchemyError no previsto (conexión caída, deadlock, timeout
de statement) se traduce a StorageError dentro de transaction_scope; la
transacción ya fue revertida cuando el llamador la recibe.

Autor: CodeMarket
Fecha: 2026-10-05
"""

from __future__ import annotations

from typing import Optional


class StorageError(Exception):
    """El store transaccional falló; no se aplicó ningún cambio."""

    def __init__(self, message: str = "Storage operation failed", *, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


__all__ = ["StorageError"]
# Fin del archivo app/shared/database/errors.py
