"""Cart store: per-user cart lines with price snapshots and derived totals."""

import uuid
from decimal import Decimal
from typing import Any, Iterable, Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_service.errors import (
    InvalidQuantity,
    ItemNotFound,
    ProductUnavailable,
)
from services.store_service.models import Cart, CartItem
from services.store_service.services.catalog import find_active_product
from services.store_service.services.inventory import ensure_available
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

TWO_PLACES = Decimal("0.01")


# ============================================================================
# PURE HELPERS
# ============================================================================


def normalize_variants(variants: Optional[Iterable[Any]]) -> list[dict[str, str]]:
    """Coerce variant selections (dicts or pydantic models) to plain dicts."""
    normalized = []
    for variant in variants or []:
        if hasattr(variant, "model_dump"):
            variant = variant.model_dump()
        normalized.append({"name": str(variant["name"]), "value": str(variant["value"])})
    return normalized


def variant_key(variants: Optional[Iterable[Any]]) -> tuple[tuple[str, str], ...]:
    """Order-insensitive identity of a variant selection."""
    pairs = {(v["name"], v["value"]) for v in normalize_variants(variants)}
    return tuple(sorted(pairs))


def compute_cart_totals(items: Iterable[CartItem]) -> tuple[int, Decimal]:
    """Return (total_items, total_amount) for the given lines."""
    total_items = 0
    total_amount = Decimal("0")
    for item in items:
        total_items += item.quantity
        total_amount += Decimal(item.price) * item.quantity
    return total_items, total_amount.quantize(TWO_PLACES)


def recalculate_cart(cart: Cart) -> Cart:
    """Refresh the derived totals from the current lines."""
    cart.total_items, cart.total_amount = compute_cart_totals(cart.items)
    cart.last_updated = utc_now()
    return cart


def find_line(
    cart: Cart, product_id: uuid.UUID, variants: Optional[Iterable[Any]]
) -> Optional[CartItem]:
    key = variant_key(variants)
    for item in cart.items:
        if item.product_id == product_id and variant_key(item.selected_variants) == key:
            return item
    return None


# ============================================================================
# PERSISTENCE
# ============================================================================


async def load_cart(db: AsyncSession, user_id: str) -> Optional[Cart]:
    query = (
        select(Cart)
        .where(Cart.user_id == user_id)
        .options(selectinload(Cart.items).selectinload(CartItem.product))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def _save(db: AsyncSession, cart: Cart) -> Cart:
    recalculate_cart(cart)
    await db.commit()
    return await load_cart(db, cart.user_id)


async def get_or_create_cart(db: AsyncSession, user_id: str) -> Cart:
    """Return the user's cart, creating an empty one on first access."""
    cart = await load_cart(db, user_id)
    if cart:
        return cart

    cart = Cart(user_id=user_id, total_items=0, total_amount=Decimal("0"), items=[])
    db.add(cart)
    try:
        await db.commit()
    except IntegrityError:
        # Another request created it first
        await db.rollback()
    return await load_cart(db, user_id)


# ============================================================================
# OPERATIONS
# ============================================================================


def _is_stale(item: CartItem) -> bool:
    return item.product is None or not item.product.is_purchasable


async def get_cart(db: AsyncSession, user_id: str) -> Cart:
    """Return the cart, dropping lines whose product is gone or no longer active."""
    cart = await get_or_create_cart(db, user_id)

    stale = [item for item in cart.items if _is_stale(item)]
    if not stale:
        return cart

    for item in stale:
        cart.items.remove(item)
    logger.info("Dropped %d unavailable line(s) from cart of %s", len(stale), user_id)
    return await _save(db, cart)


async def add_item(
    db: AsyncSession,
    user_id: str,
    product_id: uuid.UUID,
    quantity: int,
    variants: Optional[Iterable[Any]] = None,
) -> Cart:
    """Add ``quantity`` of a product/variant combination to the cart.

    An existing line with the same variant set is incremented; the combined
    quantity is validated against stock before anything is written.
    """
    if quantity < 1:
        raise InvalidQuantity(quantity)

    product = await find_active_product(db, product_id)
    if product is None:
        raise ProductUnavailable(product_id)

    ensure_available(product, quantity)

    cart = await get_or_create_cart(db, user_id)
    selected = normalize_variants(variants)
    existing = find_line(cart, product_id, selected)

    if existing:
        new_quantity = existing.quantity + quantity
        ensure_available(product, new_quantity)
        existing.quantity = new_quantity
        existing.price = product.price
    else:
        cart.items.append(
            CartItem(
                product_id=product.id,
                quantity=quantity,
                selected_variants=selected,
                price=product.price,
                added_at=utc_now(),
            )
        )

    return await _save(db, cart)


def _get_line(cart: Cart, item_id: uuid.UUID) -> CartItem:
    for item in cart.items:
        if item.id == item_id:
            return item
    raise ItemNotFound(item_id)


async def update_item(
    db: AsyncSession, user_id: str, item_id: uuid.UUID, quantity: int
) -> Cart:
    """Set an absolute quantity on a line and refresh its price snapshot."""
    if quantity < 1:
        raise InvalidQuantity(quantity)

    cart = await get_or_create_cart(db, user_id)
    item = _get_line(cart, item_id)

    product = await find_active_product(db, item.product_id)
    if product is None:
        raise ProductUnavailable(item.product_id)

    ensure_available(product, quantity)

    item.quantity = quantity
    item.price = product.price
    return await _save(db, cart)


async def remove_item(db: AsyncSession, user_id: str, item_id: uuid.UUID) -> Cart:
    cart = await get_or_create_cart(db, user_id)
    item = _get_line(cart, item_id)
    cart.items.remove(item)
    return await _save(db, cart)


async def clear_cart(db: AsyncSession, user_id: str) -> Cart:
    cart = await get_or_create_cart(db, user_id)
    cart.items.clear()
    return await _save(db, cart)


async def cart_summary(db: AsyncSession, user_id: str) -> dict[str, Any]:
    """Lightweight counters for header badges; never creates a cart.

    Lines whose product is gone or inactive are left out of the counts but
    not deleted; ``get_cart`` prunes them.
    """
    cart = await load_cart(db, user_id)
    live = [item for item in cart.items if not _is_stale(item)] if cart else []
    if not live:
        return {"total_items": 0, "total_amount": Decimal("0"), "item_count": 0}
    total_items, total_amount = compute_cart_totals(live)
    return {
        "total_items": total_items,
        "total_amount": total_amount,
        "item_count": len(live),
    }
