# -*- coding: utf-8 -*-
"""
app/modules/orders/catalog.py

Colaborador externo: catálogo de proyectos.

El motor de órdenes solo necesita precio, vendedor y estado del proyecto.
ProjectCatalog es el contrato; HttpProjectCatalog lo implementa contra el
servicio de catálogo vía httpx.

Autor: CodeMarket
Fecha: 2026-10-09
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from .errors import CatalogUnavailableError

logger = logging.getLogger(__name__)

PURCHASABLE_STATUS = "approved"


@dataclass(frozen=True)
class ProjectInfo:
    id: uuid.UUID
    seller_id: uuid.UUID
    price: int
    status: str
    title: Optional[str] = None

    @property
    def is_purchasable(self) -> bool:
        return self.status == PURCHASABLE_STATUS


class ProjectCatalog(Protocol):
    async def get_project(self, project_id: uuid.UUID) -> Optional[ProjectInfo]:
        """Proyecto por id, o None si no existe."""
        ...


class HttpProjectCatalog:
    """
    Cliente del catálogo: GET {base_url}/projects/{id}

    - 200 → ProjectInfo
    - 404 → None
    - otro status / error de transporte / payload inválido → CatalogUnavailableError
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 5.0,
        service_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Accept": "application/json"}
        if service_token:
            headers["Authorization"] = f"Bearer {service_token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_s),
            headers=headers,
        )

    async def get_project(self, project_id: uuid.UUID) -> Optional[ProjectInfo]:
        try:
            response = await self._client.get(f"/projects/{project_id}")
        except httpx.HTTPError as e:
            logger.warning("Catalog request failed: project=%s error=%r", project_id, e)
            raise CatalogUnavailableError(f"Catalog request failed: {type(e).__name__}") from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            logger.warning(
                "Catalog unexpected status: project=%s status=%d", project_id, response.status_code
            )
            raise CatalogUnavailableError(f"Catalog returned HTTP {response.status_code}")

        try:
            data = response.json()
            return ProjectInfo(
                id=uuid.UUID(str(data["id"])),
                seller_id=uuid.UUID(str(data["seller_id"])),
                price=int(data["price"]),
                status=str(data["status"]),
                title=data.get("title"),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Catalog payload invalid: project=%s error=%r", project_id, e)
            raise CatalogUnavailableError("Catalog returned an invalid project payload") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["ProjectInfo", "ProjectCatalog", "HttpProjectCatalog", "PURCHASABLE_STATUS"]
# Fin del archivo app/modules/orders/catalog.py
