# tests/modules/orders/test_order_routes.py
# -*- coding: utf-8 -*-
"""
Tests HTTP de /api/orders y /api/admin/orders (ASGITransport, SQLite).
"""

import uuid

from app.modules.credits.enums import CreditTransactionType


def _auth(user_id: uuid.UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}"}


async def _create(client, buyer_id, project_id, **extra):
    return await client.post(
        "/api/orders",
        json={"project_id": str(project_id), **extra},
        headers=_auth(buyer_id),
    )


class TestOrderFlow:
    async def test_create_complete_download(self, client, ledger, catalog, buyer_id, seller_id):
        await ledger.earn(buyer_id, 150, CreditTransactionType.EARN_REGISTER)
        project = catalog.add(seller_id, price=100)

        resp = await _create(client, buyer_id, project.id)
        assert resp.status_code == 201
        order = resp.json()
        assert order["status"] == "processing"

        resp = await client.post(f"/api/orders/{order['id']}/complete", headers=_auth(buyer_id))
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

        resp = await client.get(f"/api/orders/purchased/{project.id}", headers=_auth(buyer_id))
        assert resp.json() == {"project_id": str(project.id), "purchased": True}

        resp = await client.post(
            f"/api/orders/{order['id']}/downloads",
            json={"file_url": "https://cdn.example/p.zip", "file_name": "p.zip", "file_size": 10},
            headers={**_auth(buyer_id), "User-Agent": "pytest-agent"},
        )
        assert resp.status_code == 201
        assert resp.json()["user_agent"] == "pytest-agent"

        resp = await client.get(f"/api/orders/{order['id']}/downloads", headers=_auth(buyer_id))
        assert resp.status_code == 200
        assert len(resp.json()) == 1

        resp = await client.get("/api/orders/purchases", headers=_auth(buyer_id))
        body = resp.json()
        assert body["meta"]["total"] == 1
        assert body["items"][0]["download_count"] == 1

        resp = await client.get("/api/credits/balance", headers=_auth(buyer_id))
        assert resp.json()["available_credits"] == 50

    async def test_duplicate_purchase_conflict(self, client, ledger, catalog, buyer_id, seller_id):
        await ledger.earn(buyer_id, 500, CreditTransactionType.EARN_REGISTER)
        project = catalog.add(seller_id, price=100)
        order = (await _create(client, buyer_id, project.id)).json()
        await client.post(f"/api/orders/{order['id']}/complete", headers=_auth(buyer_id))

        resp = await _create(client, buyer_id, project.id)
        assert resp.status_code == 409
        assert resp.json()["detail"]["error_code"] == "already_purchased"

    async def test_error_mapping(self, client, ledger, catalog, buyer_id, seller_id):
        project = catalog.add(seller_id, price=100)

        resp = await _create(client, buyer_id, uuid.uuid4())
        assert resp.status_code == 404
        assert resp.json()["detail"]["error_code"] == "project_not_found"

        resp = await _create(client, seller_id, project.id)
        assert resp.status_code == 403
        assert resp.json()["detail"]["error_code"] == "self_purchase_forbidden"

        resp = await _create(client, buyer_id, project.id)
        assert resp.status_code == 402
        assert resp.json()["detail"]["error_code"] == "insufficient_balance"

        resp = await client.get("/api/orders/999999", headers=_auth(buyer_id))
        assert resp.status_code == 404
        assert resp.json()["detail"]["error_code"] == "order_not_found"

    async def test_settlement_failure_cancels(self, client, ledger, catalog, buyer_id, seller_id):
        await ledger.earn(buyer_id, 100, CreditTransactionType.EARN_REGISTER)
        project = catalog.add(seller_id, price=100)
        order = (await _create(client, buyer_id, project.id)).json()
        await ledger.spend(buyer_id, 60, CreditTransactionType.SPEND_FEATURE)

        resp = await client.post(f"/api/orders/{order['id']}/complete", headers=_auth(buyer_id))
        assert resp.status_code == 402

        resp = await client.get(f"/api/orders/{order['id']}", headers=_auth(buyer_id))
        assert resp.json()["status"] == "cancelled"

    async def test_cancel(self, client, ledger, catalog, buyer_id, seller_id):
        project = catalog.add(seller_id, price=10)
        order = (await _create(client, buyer_id, project.id, payment_method="stripe")).json()
        assert order["status"] == "pending"

        resp = await client.post(f"/api/orders/{order['id']}/cancel", json={"reason": "nope"}, headers=_auth(seller_id))
        assert resp.status_code == 403

        resp = await client.post(f"/api/orders/{order['id']}/cancel", json={"reason": "nope"}, headers=_auth(buyer_id))
        assert resp.status_code == 200
        assert resp.json()["admin_note"] == "Cancel reason: nope"

        resp = await client.post(f"/api/orders/{order['id']}/cancel", headers=_auth(buyer_id))
        assert resp.status_code == 409
        assert resp.json()["detail"]["error_code"] == "invalid_state_transition"

    async def test_sales_views(self, client, ledger, catalog, buyer_id, seller_id):
        await ledger.earn(buyer_id, 100, CreditTransactionType.EARN_REGISTER)
        project = catalog.add(seller_id, price=30)
        order = (await _create(client, buyer_id, project.id)).json()
        await client.post(f"/api/orders/{order['id']}/complete", headers=_auth(buyer_id))

        resp = await client.get("/api/orders/sales", params={"status": "completed"}, headers=_auth(seller_id))
        assert resp.status_code == 200
        assert resp.json()["meta"]["total"] == 1

        resp = await client.get("/api/orders/sales/stats", headers=_auth(seller_id))
        assert resp.status_code == 200
        stats = resp.json()
        assert stats["completed_orders"] == 1
        assert stats["total_revenue"] == 30

        resp = await client.get(f"/api/orders/{order['id']}", headers=_auth(uuid.uuid4()))
        assert resp.status_code == 403


class TestOrderAdminRoutes:
    async def test_requires_admin(self, client, buyer_id):
        resp = await client.get("/api/admin/orders", headers=_auth(buyer_id))
        assert resp.status_code == 403

    async def test_list_and_stats(self, client, ledger, catalog, buyer_id, seller_id, admin_id):
        await ledger.earn(buyer_id, 100, CreditTransactionType.EARN_REGISTER)
        project = catalog.add(seller_id, price=40)
        order = (await _create(client, buyer_id, project.id)).json()
        await client.post(f"/api/orders/{order['id']}/complete", headers=_auth(buyer_id))

        resp = await client.get(
            "/api/admin/orders",
            params={"buyer_id": str(buyer_id), "sort_by": "final_amount", "sort_order": "asc"},
            headers=_auth(admin_id),
        )
        assert resp.status_code == 200
        assert resp.json()["meta"]["total"] == 1

        resp = await client.get("/api/admin/orders", params={"sort_by": "buyer_note"}, headers=_auth(admin_id))
        assert resp.status_code == 422

        resp = await client.get("/api/admin/orders/stats", headers=_auth(admin_id))
        assert resp.status_code == 200
        assert resp.json()["total_revenue"] == 40


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["database"]["reachable"] is True
