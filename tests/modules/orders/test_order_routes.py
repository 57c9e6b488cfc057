# -*- coding: utf-8 -*-
"""
tests/modules/orders/test_order_routes.py

Rutas /orders sobre la app completa (lifespan real, SQLite temporal):
- Creación con montos calculados
- Flujo pay → processing → delivered → completed vía HTTP
- Forma JSON de errores de dominio y 401 sin identidad

Autor: TradeVault
Fecha: 2026-10-18
"""

import pytest

ORDER_BODY = {"seller_id": "seller-1", "listing_id": "listing-7", "price": 45000}


async def _deposit(client, headers, amount, reference):
    resp = await client.post(
        "/wallets/me/deposits",
        json={"amount": amount, "reference": reference},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _create(client, headers, body=None):
    resp = await client.post("/orders", json=body or ORDER_BODY, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _move(client, order_id, status, headers, **extra):
    return await client.post(
        f"/orders/{order_id}/transition",
        json={"status": status, **extra},
        headers=headers,
    )


# ============================================================================
# Creación y lectura
# ============================================================================

class TestCreateRoute:

    async def test_create_returns_amounts(self, client, headers_for, buyer):
        order = await _create(client, headers_for(buyer))

        assert order["status"] == "pending"
        assert order["buyer_id"] == "buyer-1"
        assert order["order_number"].startswith("ORD-")
        assert (order["price"], order["buyer_fee"], order["total_amount"]) == (45000, 4500, 49500)
        assert (order["seller_fee"], order["seller_receives"]) == (4500, 40500)

    async def test_schema_rejects_non_positive_price(self, client, headers_for, buyer):
        resp = await client.post("/orders", json={**ORDER_BODY, "price": 0}, headers=headers_for(buyer))
        assert resp.status_code == 422

    async def test_self_purchase_is_validation_error(self, client, headers_for, seller):
        resp = await client.post("/orders", json=ORDER_BODY, headers=headers_for(seller))

        assert resp.status_code == 422
        assert resp.json()["error_code"] == "validation_failed"

    async def test_missing_identity_is_401(self, client):
        resp = await client.post("/orders", json=ORDER_BODY)
        assert resp.status_code == 401

    async def test_outsider_cannot_read(self, client, headers_for, buyer, outsider):
        order = await _create(client, headers_for(buyer))

        resp = await client.get(f"/orders/{order['id']}", headers=headers_for(outsider))

        assert resp.status_code == 403
        assert resp.json()["error_code"] == "not_authorized"

    async def test_unknown_order_is_404(self, client, headers_for, buyer):
        resp = await client.get("/orders/does-not-exist", headers=headers_for(buyer))
        assert resp.status_code == 404


# ============================================================================
# Flujo completo
# ============================================================================

class TestLifecycleRoutes:

    async def test_happy_path_pays_out_seller(self, client, headers_for, buyer, seller):
        await _deposit(client, headers_for(buyer), 90000, "gw-happy")
        order = await _create(client, headers_for(buyer))

        resp = await _move(client, order["id"], "paid", headers_for(buyer))
        assert resp.status_code == 200, resp.text
        assert resp.json()["paid_at"] is not None

        assert (await _move(client, order["id"], "processing", headers_for(seller))).status_code == 200

        resp = await _move(
            client,
            order["id"],
            "delivered",
            headers_for(seller),
            delivery={"type": "link", "url": "https://files.example/x.zip"},
        )
        assert resp.status_code == 200
        assert resp.json()["auto_complete_at"] is not None

        resp = await _move(client, order["id"], "completed", headers_for(buyer))
        assert resp.status_code == 200
        assert resp.json()["buyer_confirmed"] is True

        wallet = (await client.get("/wallets/me", headers=headers_for(seller))).json()
        assert wallet["available_balance"] == 40500
        buyer_wallet = (await client.get("/wallets/me", headers=headers_for(buyer))).json()
        assert buyer_wallet["available_balance"] == 40500
        assert buyer_wallet["total_spent"] == 49500

    async def test_insufficient_funds(self, client, headers_for, buyer):
        order = await _create(client, headers_for(buyer))

        resp = await _move(client, order["id"], "paid", headers_for(buyer))

        assert resp.status_code == 422
        assert resp.json()["error_code"] == "insufficient_funds"

    async def test_invalid_edge_error_shape(self, client, headers_for, buyer, seller):
        order = await _create(client, headers_for(buyer))

        resp = await client.post(
            f"/orders/{order['id']}/transition",
            json={"status": "delivered", "delivery": {"type": "link", "url": "https://x"}},
            headers={**headers_for(seller), "X-Request-ID": "req-123"},
        )

        assert resp.status_code == 409
        body = resp.json()
        assert body == {
            "error_code": "invalid_transition",
            "detail": body["detail"],
            "retryable": False,
            "request_id": "req-123",
        }
        assert resp.headers["X-Request-ID"] == "req-123"

    async def test_terminal_order_rejects_changes(self, client, headers_for, buyer):
        order = await _create(client, headers_for(buyer))
        resp = await _move(client, order["id"], "cancelled", headers_for(buyer), reason="changed my mind")
        assert resp.json()["cancelled_by"] == "buyer"

        resp = await _move(client, order["id"], "paid", headers_for(buyer))

        assert resp.status_code == 409
        assert resp.json()["error_code"] == "already_terminal"

    async def test_unknown_status_value_is_422(self, client, headers_for, buyer):
        order = await _create(client, headers_for(buyer))
        resp = await _move(client, order["id"], "shipped", headers_for(buyer))
        assert resp.status_code == 422


# ============================================================================
# Listado y estadísticas
# ============================================================================

class TestQueryRoutes:

    async def test_list_is_scoped_to_actor(self, client, headers_for, buyer, outsider):
        await _create(client, headers_for(buyer))
        await _create(client, headers_for(buyer), {**ORDER_BODY, "listing_id": "listing-8"})

        mine = (await client.get("/orders", headers=headers_for(buyer))).json()
        theirs = (await client.get("/orders", headers=headers_for(outsider))).json()

        assert len(mine["items"]) == 2
        assert theirs["items"] == []

    @pytest.mark.parametrize("role,expected_total", [("buyer", 1), ("seller", 0)])
    async def test_stats_by_role(self, client, headers_for, buyer, role, expected_total):
        await _create(client, headers_for(buyer))

        resp = await client.get("/orders/stats", params={"role": role}, headers=headers_for(buyer))

        assert resp.status_code == 200
        assert resp.json()["total"] == expected_total


# Fin del archivo tests/modules/orders/test_order_routes.py
