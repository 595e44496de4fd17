# -*- coding: utf-8 -*-
"""
app/shared/utils/http_exceptions.py

Excepciones HTTP personalizadas para la API de CodeMarket.
Estandariza respuestas de error con códigos HTTP apropiados.

Cuando se indica `error_code`, el detail se vuelve estructurado:
    {"detail": "...", "error_code": "insufficient_balance"}
para que el cliente distinga fallos de negocio sin parsear mensajes.

Autor: CodeMarket
Fecha: 2026-10-06
"""

from fastapi import HTTPException, status
from typing import Any, Dict, Optional, Union


def _build_detail(detail: str, error_code: Optional[str]) -> Union[str, Dict[str, str]]:
    if error_code:
        return {"detail": detail, "error_code": error_code}
    return detail


class BadRequestException(HTTPException):
    """400 - Solicitud mal formada o parámetros inválidos"""
    def __init__(
        self,
        detail: str = "Solicitud inválida",
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_build_detail(detail, error_code),
            headers=headers
        )


class UnauthorizedException(HTTPException):
    """401 - Autenticación requerida o credenciales inválidas"""
    def __init__(
        self,
        detail: str = "No autorizado - credenciales inválidas o ausentes",
        headers: Optional[Dict[str, Any]] = None
    ):
        if headers is None:
            headers = {"WWW-Authenticate": "Bearer"}
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers=headers
        )


class PaymentRequiredException(HTTPException):
    """402 - Saldo de créditos insuficiente para la operación"""
    def __init__(
        self,
        detail: str = "Saldo insuficiente",
        error_code: Optional[str] = "insufficient_balance",
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=_build_detail(detail, error_code),
            headers=headers
        )


class ForbiddenException(HTTPException):
    """403 - Acceso prohibido - usuario autenticado pero sin permisos"""
    def __init__(
        self,
        detail: str = "Acceso prohibido - permisos insuficientes",
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=_build_detail(detail, error_code),
            headers=headers
        )


class NotFoundException(HTTPException):
    """404 - Recurso no encontrado"""
    def __init__(
        self,
        detail: str = "Recurso no encontrado",
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_build_detail(detail, error_code),
            headers=headers
        )


class ConflictException(HTTPException):
    """409 - Conflicto con el estado actual del recurso"""
    def __init__(
        self,
        detail: str = "Conflicto - el recurso ya existe o hay un conflicto de estado",
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=_build_detail(detail, error_code),
            headers=headers
        )


class ServiceUnavailableException(HTTPException):
    """503 - Dependencia (base de datos o catálogo) no disponible"""
    def __init__(
        self,
        detail: str = "Servicio no disponible temporalmente",
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=_build_detail(detail, error_code),
            headers=headers
        )


__all__ = [
    "BadRequestException",
    "UnauthorizedException",
    "PaymentRequiredException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "ServiceUnavailableException",
]
# Fin del archivo app/shared/utils/http_exceptions.py
