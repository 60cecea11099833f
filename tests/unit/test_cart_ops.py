"""Unit tests for cart_ops: line identity, price snapshots, derived totals."""

import uuid
from decimal import Decimal

import pytest
from services.store_service.errors import (
    InsufficientStock,
    InvalidQuantity,
    ItemNotFound,
    ProductUnavailable,
)
from services.store_service.models import ProductStatus
from services.store_service.services.cart_ops import (
    add_item,
    cart_summary,
    clear_cart,
    get_cart,
    remove_item,
    update_item,
    variant_key,
)
from tests.factories import CUSTOMER_ID, create_product

SIZE_L = {"name": "Size", "value": "L"}
COLOR_RED = {"name": "Color", "value": "Red"}


def _assert_totals_consistent(cart):
    assert cart.total_items == sum(item.quantity for item in cart.items)
    assert cart.total_amount == sum(
        (item.price * item.quantity for item in cart.items), Decimal("0")
    )


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_variant_key_ignores_order():
    assert variant_key([SIZE_L, COLOR_RED]) == variant_key([COLOR_RED, SIZE_L])
    assert variant_key([]) == variant_key(None)
    assert variant_key([SIZE_L]) != variant_key([COLOR_RED])


# ---------------------------------------------------------------------------
# get_cart
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_cart_creates_empty_cart(db_session):
    cart = await get_cart(db_session, CUSTOMER_ID)

    assert cart.user_id == CUSTOMER_ID
    assert cart.items == []
    assert cart.total_items == 0
    assert cart.total_amount == Decimal("0")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_cart_drops_lines_for_inactive_products(db_session):
    keep = await create_product(db_session, price=Decimal("5.00"))
    gone = await create_product(db_session, price=Decimal("7.00"))
    await add_item(db_session, CUSTOMER_ID, keep.id, 1)
    await add_item(db_session, CUSTOMER_ID, gone.id, 2)

    gone.status = ProductStatus.INACTIVE
    await db_session.commit()

    cart = await get_cart(db_session, CUSTOMER_ID)

    assert [item.product_id for item in cart.items] == [keep.id]
    assert cart.total_items == 1
    assert cart.total_amount == Decimal("5.00")


# ---------------------------------------------------------------------------
# add_item
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_same_product_and_variants_merges_lines(db_session):
    product = await create_product(db_session, price=Decimal("12.50"))

    await add_item(db_session, CUSTOMER_ID, product.id, 1, [SIZE_L, COLOR_RED])
    cart = await add_item(db_session, CUSTOMER_ID, product.id, 2, [COLOR_RED, SIZE_L])

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3
    assert cart.total_items == 3
    assert cart.total_amount == Decimal("37.50")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_different_variants_creates_separate_lines(db_session):
    product = await create_product(db_session)

    await add_item(db_session, CUSTOMER_ID, product.id, 1, [SIZE_L])
    cart = await add_item(db_session, CUSTOMER_ID, product.id, 1, [COLOR_RED])

    assert len(cart.items) == 2
    _assert_totals_consistent(cart)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_beyond_stock_leaves_cart_unchanged(db_session):
    product = await create_product(db_session, inventory_quantity=3)
    await add_item(db_session, CUSTOMER_ID, product.id, 2)

    with pytest.raises(InsufficientStock) as exc_info:
        await add_item(db_session, CUSTOMER_ID, product.id, 2)

    assert exc_info.value.available == 3
    cart = await get_cart(db_session, CUSTOMER_ID)
    assert cart.items[0].quantity == 2
    assert cart.total_items == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_with_single_unit_left(db_session):
    product = await create_product(db_session, inventory_quantity=1)

    with pytest.raises(InsufficientStock) as exc_info:
        await add_item(db_session, CUSTOMER_ID, product.id, 2)

    assert exc_info.value.available == 1
    cart = await get_cart(db_session, CUSTOMER_ID)
    assert cart.items == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_inactive_or_missing_product(db_session):
    draft = await create_product(db_session, status=ProductStatus.DRAFT)

    with pytest.raises(ProductUnavailable):
        await add_item(db_session, CUSTOMER_ID, draft.id, 1)
    with pytest.raises(ProductUnavailable):
        await add_item(db_session, CUSTOMER_ID, uuid.uuid4(), 1)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_rejects_non_positive_quantity(db_session):
    product = await create_product(db_session)

    with pytest.raises(InvalidQuantity):
        await add_item(db_session, CUSTOMER_ID, product.id, 0)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_line_price_is_snapshot_until_touched(db_session):
    product = await create_product(db_session, price=Decimal("10.00"))
    await add_item(db_session, CUSTOMER_ID, product.id, 1)

    product.price = Decimal("14.00")
    await db_session.commit()

    cart = await get_cart(db_session, CUSTOMER_ID)
    assert cart.items[0].price == Decimal("10.00")

    # Incrementing the line picks up the current price
    cart = await add_item(db_session, CUSTOMER_ID, product.id, 1)
    assert cart.items[0].price == Decimal("14.00")
    assert cart.total_amount == Decimal("28.00")


# ---------------------------------------------------------------------------
# update_item / remove_item / clear_cart
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_item_sets_absolute_quantity(db_session):
    product = await create_product(db_session, price=Decimal("3.00"))
    cart = await add_item(db_session, CUSTOMER_ID, product.id, 1)

    cart = await update_item(db_session, CUSTOMER_ID, cart.items[0].id, 4)

    assert cart.items[0].quantity == 4
    assert cart.total_amount == Decimal("12.00")
    _assert_totals_consistent(cart)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_item_validates_stock_and_quantity(db_session):
    product = await create_product(db_session, inventory_quantity=2)
    cart = await add_item(db_session, CUSTOMER_ID, product.id, 1)
    item_id = cart.items[0].id

    with pytest.raises(InsufficientStock):
        await update_item(db_session, CUSTOMER_ID, item_id, 3)
    with pytest.raises(InvalidQuantity):
        await update_item(db_session, CUSTOMER_ID, item_id, 0)

    cart = await get_cart(db_session, CUSTOMER_ID)
    assert cart.items[0].quantity == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_unknown_item(db_session):
    with pytest.raises(ItemNotFound):
        await update_item(db_session, CUSTOMER_ID, uuid.uuid4(), 1)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_remove_item_recomputes_totals(db_session):
    first = await create_product(db_session, price=Decimal("2.00"))
    second = await create_product(db_session, price=Decimal("5.00"))
    await add_item(db_session, CUSTOMER_ID, first.id, 2)
    cart = await add_item(db_session, CUSTOMER_ID, second.id, 1)

    line_id = next(item.id for item in cart.items if item.product_id == first.id)
    cart = await remove_item(db_session, CUSTOMER_ID, line_id)

    assert len(cart.items) == 1
    assert cart.total_items == 1
    assert cart.total_amount == Decimal("5.00")

    with pytest.raises(ItemNotFound):
        await remove_item(db_session, CUSTOMER_ID, line_id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_clear_cart_zeroes_totals(db_session):
    product = await create_product(db_session)
    await add_item(db_session, CUSTOMER_ID, product.id, 3)

    cart = await clear_cart(db_session, CUSTOMER_ID)

    assert cart.items == []
    assert cart.total_items == 0
    assert cart.total_amount == Decimal("0")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cart_summary(db_session):
    assert await cart_summary(db_session, CUSTOMER_ID) == {
        "total_items": 0,
        "total_amount": Decimal("0"),
        "item_count": 0,
    }

    first = await create_product(db_session, price=Decimal("4.00"))
    second = await create_product(db_session, price=Decimal("1.50"))
    await add_item(db_session, CUSTOMER_ID, first.id, 2)
    await add_item(db_session, CUSTOMER_ID, second.id, 1)

    summary = await cart_summary(db_session, CUSTOMER_ID)
    assert summary["total_items"] == 3
    assert summary["total_amount"] == Decimal("9.50")
    assert summary["item_count"] == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cart_summary_skips_unavailable_lines(db_session):
    keep = await create_product(db_session, price=Decimal("4.00"))
    gone = await create_product(db_session, price=Decimal("6.00"))
    await add_item(db_session, CUSTOMER_ID, keep.id, 2)
    await add_item(db_session, CUSTOMER_ID, gone.id, 3)

    gone.status = ProductStatus.INACTIVE
    await db_session.commit()

    summary = await cart_summary(db_session, CUSTOMER_ID)
    assert summary == {
        "total_items": 2,
        "total_amount": Decimal("8.00"),
        "item_count": 1,
    }

    # Summary reads only; pruning is left to get_cart
    cart = await get_cart(db_session, CUSTOMER_ID)
    assert [item.product_id for item in cart.items] == [keep.id]

    gone_too = await create_product(db_session)
    await add_item(db_session, "customer-9", gone_too.id, 1)
    gone_too.status = ProductStatus.INACTIVE
    await db_session.commit()
    assert (await cart_summary(db_session, "customer-9"))["item_count"] == 0
