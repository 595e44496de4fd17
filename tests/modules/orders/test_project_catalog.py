# tests/modules/orders/test_project_catalog.py
# -*- coding: utf-8 -*-
"""
Tests de HttpProjectCatalog con httpx.MockTransport (sin red).
"""

import uuid

import httpx
import pytest

from app.modules.orders.catalog import HttpProjectCatalog
from app.modules.orders.errors import CatalogUnavailableError

BASE_URL = "http://catalog.test/api"


def _catalog(handler) -> HttpProjectCatalog:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return HttpProjectCatalog(BASE_URL, client=client)


async def test_get_project_ok():
    project_id = uuid.uuid4()
    seller_id = uuid.uuid4()
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(200, json={
            "id": str(project_id),
            "seller_id": str(seller_id),
            "price": 120,
            "status": "approved",
            "title": "FastAPI starter",
        })

    project = await _catalog(handler).get_project(project_id)

    assert seen["path"] == f"/api/projects/{project_id}"
    assert project.id == project_id
    assert project.seller_id == seller_id
    assert project.price == 120
    assert project.is_purchasable


async def test_not_approved_is_not_purchasable():
    def handler(request):
        return httpx.Response(200, json={
            "id": str(uuid.uuid4()),
            "seller_id": str(uuid.uuid4()),
            "price": 10,
            "status": "rejected",
        })

    project = await _catalog(handler).get_project(uuid.uuid4())
    assert project.title is None
    assert not project.is_purchasable


async def test_not_found_returns_none():
    project = await _catalog(lambda request: httpx.Response(404)).get_project(uuid.uuid4())
    assert project is None


async def test_server_error_raises():
    with pytest.raises(CatalogUnavailableError):
        await _catalog(lambda request: httpx.Response(502)).get_project(uuid.uuid4())


async def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CatalogUnavailableError):
        await _catalog(handler).get_project(uuid.uuid4())


async def test_invalid_payload_raises():
    with pytest.raises(CatalogUnavailableError):
        await _catalog(lambda request: httpx.Response(200, json={"id": "nope"})).get_project(uuid.uuid4())


async def test_service_token_header():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(404)

    catalog = HttpProjectCatalog(BASE_URL, service_token="s3cret")
    # Reemplaza el transporte del cliente propio para no salir a la red
    catalog._client._transport = httpx.MockTransport(handler)
    try:
        assert await catalog.get_project(uuid.uuid4()) is None
    finally:
        await catalog.aclose()
    assert seen["auth"] == "Bearer s3cret"
