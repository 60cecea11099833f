"""Integration tests for admin store endpoints."""

from decimal import Decimal

import pytest
from services.store_service.app.main import app
from tests.factories import address, create_product, make_admin_user, override_auth


async def _place_order(client, db_session, quantity=2, stock=10):
    product = await create_product(
        db_session, price=Decimal("20.00"), inventory_quantity=stock
    )
    await client.post(
        "/store/cart/items", json={"product_id": str(product.id), "quantity": quantity}
    )
    response = await client.post(
        "/store/orders",
        json={"shipping_address": address(), "payment_method": "paypal"},
    )
    assert response.status_code == 201, response.text
    return response.json(), product


# ---------------------------------------------------------------------------
# Access control
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_routes_require_admin(client):
    """Customers get 403 on admin routes."""
    response = await client.get("/admin/store/orders")
    assert response.status_code == 403

    response = await client.get("/admin/store/inventory/low-stock")
    assert response.status_code == 403


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_list_and_filter_orders(client, db_session):
    """GET /admin/store/orders — all orders with filters."""
    order, _ = await _place_order(client, db_session)

    with override_auth(app, make_admin_user()):
        response = await client.get("/admin/store/orders")
        assert response.status_code == 200
        assert response.json()["total"] == 1

        response = await client.get(
            "/admin/store/orders",
            params={"order_number": order["order_number"].lower()},
        )
        assert response.json()["items"][0]["id"] == order["id"]

        response = await client.get(
            "/admin/store/orders", params={"payment_status": "paid"}
        )
        assert response.json()["total"] == 0

        response = await client.get(f"/admin/store/orders/{order['id']}")
        assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_status_update_and_cancel(client, db_session):
    """PATCH /admin/store/orders/{id}/status — cancel gives stock back."""
    order, product = await _place_order(client, db_session, quantity=4)

    with override_auth(app, make_admin_user()):
        response = await client.patch(
            f"/admin/store/orders/{order['id']}/status",
            json={"status": "shipped", "tracking_number": "TRK-1"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["tracking_number"] == "TRK-1"

        response = await client.patch(
            f"/admin/store/orders/{order['id']}/status",
            json={"status": "cancelled", "note": "lost in transit"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    await db_session.refresh(product)
    assert product.inventory_quantity == 10


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_status_update_unknown_status(client, db_session):
    """PATCH /admin/store/orders/{id}/status — unknown status is a 400."""
    order, _ = await _place_order(client, db_session)

    with override_auth(app, make_admin_user()):
        response = await client.patch(
            f"/admin/store/orders/{order['id']}/status", json={"status": "lost"}
        )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_transition"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_callback(client, db_session):
    """POST /admin/store/orders/{id}/payment — failed then succeeded."""
    order, _ = await _place_order(client, db_session)

    with override_auth(app, make_admin_user()):
        response = await client.post(
            f"/admin/store/orders/{order['id']}/payment", json={"outcome": "failed"}
        )
        assert response.json()["payment_status"] == "failed"
        assert response.json()["status"] == "pending"

        response = await client.post(
            f"/admin/store/orders/{order['id']}/payment",
            json={"outcome": "succeeded", "payment_reference": "PP-77"},
        )
        assert response.json()["payment_status"] == "paid"
        assert response.json()["status"] == "confirmed"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_callback_for_cancelled_order(client, db_session):
    """POST /admin/store/orders/{id}/payment — a cancelled order stays cancelled."""
    order, product = await _place_order(client, db_session, quantity=3)

    with override_auth(app, make_admin_user()):
        response = await client.patch(
            f"/admin/store/orders/{order['id']}/status", json={"status": "cancelled"}
        )
        assert response.status_code == 200
        assert response.json()["inventory_released"] is True

        response = await client.post(
            f"/admin/store/orders/{order['id']}/payment",
            json={"outcome": "succeeded", "payment_reference": "PP-78"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_transition"

        response = await client.get(f"/admin/store/orders/{order['id']}")
        assert response.json()["status"] == "cancelled"
        assert response.json()["payment_status"] == "pending"

    await db_session.refresh(product)
    assert product.inventory_quantity == 10


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_adjust_inventory(client, db_session):
    """POST /admin/store/products/{id}/inventory — signed deltas."""
    product = await create_product(db_session, inventory_quantity=3)

    with override_auth(app, make_admin_user()):
        response = await client.post(
            f"/admin/store/products/{product.id}/inventory",
            json={"quantity": 7, "notes": "restock"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["inventory_quantity"] == 10

        response = await client.post(
            f"/admin/store/products/{product.id}/inventory", json={"quantity": -11}
        )
        assert response.status_code == 400

    await db_session.refresh(product)
    assert product.inventory_quantity == 10


@pytest.mark.asyncio
@pytest.mark.integration
async def test_low_stock_report(client, db_session):
    """GET /admin/store/inventory/low-stock — tracked products at threshold."""
    low = await create_product(db_session, inventory_quantity=1, low_stock_threshold=2)
    await create_product(db_session, inventory_quantity=50)
    await create_product(db_session, inventory_quantity=0, track_quantity=False)

    with override_auth(app, make_admin_user()):
        response = await client.get("/admin/store/inventory/low-stock")

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [str(low.id)]
