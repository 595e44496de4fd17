# -*- coding: utf-8 -*-
"""
app/shared/utils/base_models.py

Modelo base personalizado para Pydantic en el backend de CodeMarket.

Incluye:
- Modo de atributos activado para construir respuestas desde ORM
  (`from_attributes = True`)
- Eliminación automática de espacios en campos de texto
- PageMeta: metadatos de paginación comunes a todos los listados

Autor: CodeMarket
Fecha: 2026-10-08
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,             # reemplaza a orm_mode=True
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class PageMeta(BaseModel):
    """
    Metadatos de paginación para respuestas con listas.
    """

    total: int = Field(ge=0, description="Número total de registros.")
    limit: int = Field(ge=1, description="Límite de registros por página.")
    offset: int = Field(ge=0, description="Offset actual de la consulta.")
    page: int = Field(ge=1, description="Página actual (1-based).")
    pages: int = Field(ge=0, description="Número total de páginas.")

    @classmethod
    def build(cls, *, total: int, limit: int, offset: int) -> "PageMeta":
        return cls(
            total=total,
            limit=limit,
            offset=offset,
            page=offset // limit + 1,
            pages=(total + limit - 1) // limit,
        )


__all__ = ["ORMModel", "PageMeta", "Field"]
# Fin del archivo app/shared/utils/base_models.py
