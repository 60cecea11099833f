"""Integration tests for store cart endpoints."""

from decimal import Decimal

import pytest
from services.store_service.app.main import app
from tests.factories import OTHER_CUSTOMER_ID, create_product, make_user, override_auth

# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_empty_cart(client):
    """GET /store/cart — first access creates an empty cart."""
    response = await client.get("/store/cart")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["items"] == []
    assert data["total_items"] == 0
    assert Decimal(data["total_amount"]) == Decimal("0")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cart_summary(client, db_session):
    """GET /store/cart/summary — counters only."""
    product = await create_product(db_session, price=Decimal("4.25"))
    await client.post(
        "/store/cart/items", json={"product_id": str(product.id), "quantity": 2}
    )

    response = await client.get("/store/cart/summary")

    assert response.status_code == 200
    data = response.json()
    assert data["total_items"] == 2
    assert Decimal(data["total_amount"]) == Decimal("8.50")
    assert data["item_count"] == 1


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_item_with_variants(client, db_session):
    """POST /store/cart/items — variant order does not split lines."""
    product = await create_product(db_session, price=Decimal("15.00"))
    variants = [{"name": "Size", "value": "M"}, {"name": "Color", "value": "Blue"}]

    await client.post(
        "/store/cart/items",
        json={"product_id": str(product.id), "quantity": 1, "selected_variants": variants},
    )
    response = await client.post(
        "/store/cart/items",
        json={
            "product_id": str(product.id),
            "quantity": 1,
            "selected_variants": list(reversed(variants)),
        },
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 2
    assert data["items"][0]["product"]["name"] == product.name
    assert Decimal(data["total_amount"]) == Decimal("30.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_item_insufficient_stock(client, db_session):
    """POST /store/cart/items — 409 with the available count."""
    product = await create_product(db_session, inventory_quantity=1)

    response = await client.post(
        "/store/cart/items", json={"product_id": str(product.id), "quantity": 2}
    )

    assert response.status_code == 409
    data = response.json()
    assert data["code"] == "insufficient_stock"
    assert data["available"] == 1

    cart = (await client.get("/store/cart")).json()
    assert cart["items"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_item_rejects_zero_quantity(client, db_session):
    """POST /store/cart/items — schema requires quantity >= 1."""
    product = await create_product(db_session)

    response = await client.post(
        "/store/cart/items", json={"product_id": str(product.id), "quantity": 0}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_and_remove_item(client, db_session):
    """PATCH /store/cart/items/{id} — quantity 0 removes the line."""
    product = await create_product(db_session, price=Decimal("2.00"))
    cart = (
        await client.post(
            "/store/cart/items", json={"product_id": str(product.id), "quantity": 1}
        )
    ).json()
    item_id = cart["items"][0]["id"]

    response = await client.patch(f"/store/cart/items/{item_id}", json={"quantity": 5})
    assert response.status_code == 200
    assert response.json()["total_items"] == 5

    response = await client.put(f"/store/cart/items/{item_id}", json={"quantity": 0})
    assert response.status_code == 200
    assert response.json()["items"] == []

    response = await client.delete(f"/store/cart/items/{item_id}")
    assert response.status_code == 404
    assert response.json()["code"] == "item_not_found"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_carts_are_per_user(client, db_session):
    """Another user's cart never sees this user's lines."""
    product = await create_product(db_session)
    await client.post(
        "/store/cart/items", json={"product_id": str(product.id), "quantity": 1}
    )

    with override_auth(app, make_user(OTHER_CUSTOMER_ID)):
        response = await client.get("/store/cart")

    assert response.json()["items"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_clear_cart(client, db_session):
    """DELETE /store/cart — empties every line."""
    product = await create_product(db_session)
    await client.post(
        "/store/cart/items", json={"product_id": str(product.id), "quantity": 3}
    )

    response = await client.delete("/store/cart")

    assert response.status_code == 200
    assert response.json()["items"] == []
    assert response.json()["total_items"] == 0
