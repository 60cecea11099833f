"""Inventory ledger: atomic stock and sales-counter deltas on a product row.

Every write here is a single conditional UPDATE keyed by product id, so two
checkouts racing for the last unit cannot both succeed. Nothing is read into
Python and written back.
"""

import uuid
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_service.errors import InsufficientStock, ProductUnavailable
from services.store_service.models import Product
from sqlalchemy import case, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def available_quantity(product: Product) -> Optional[int]:
    """Units that can still be sold, or None when the product is not limited."""
    if not product.track_quantity or product.allow_backorder:
        return None
    return max(product.inventory_quantity, 0)


def ensure_available(product: Product, quantity: int) -> None:
    """Raise InsufficientStock if ``quantity`` exceeds what the product can cover.

    Read-only check used by the cart and by checkout validation; the binding
    check happens in ``reserve``.
    """
    available = available_quantity(product)
    if available is not None and quantity > available:
        raise InsufficientStock(product.id, available, quantity, name=product.name)


def _tracked_delta(delta):
    # Untracked products never have their stock touched
    return case(
        (Product.track_quantity.is_(True), Product.inventory_quantity + delta),
        else_=Product.inventory_quantity,
    )


async def reserve(
    db: AsyncSession,
    product_id: uuid.UUID,
    quantity: int,
    *,
    product_name: Optional[str] = None,
) -> int:
    """Decrement stock and bump the sales counter in one statement.

    Succeeds unconditionally for untracked or backorderable products.
    Returns the stock level after the update. Does not commit.
    """
    stmt = (
        update(Product)
        .where(
            Product.id == product_id,
            or_(
                Product.track_quantity.is_(False),
                Product.allow_backorder.is_(True),
                Product.inventory_quantity >= quantity,
            ),
        )
        .values(
            inventory_quantity=_tracked_delta(-quantity),
            sales_count=Product.sales_count + quantity,
            updated_at=utc_now(),
        )
        .returning(Product.inventory_quantity)
        .execution_options(synchronize_session="fetch")
    )
    result = await db.execute(stmt)
    row = result.first()
    if row is not None:
        return row[0]

    current = await db.execute(
        select(Product.inventory_quantity, Product.name).where(Product.id == product_id)
    )
    found = current.first()
    if found is None:
        raise ProductUnavailable(product_id, product_name)

    logger.warning(
        "Reservation refused for product %s: requested=%d available=%d",
        product_id,
        quantity,
        found.inventory_quantity,
    )
    raise InsufficientStock(
        product_id, found.inventory_quantity, quantity, name=product_name or found.name
    )


async def release(
    db: AsyncSession, product_id: uuid.UUID, quantity: int
) -> Optional[int]:
    """Give ``quantity`` units back and take them off the sales counter.

    Exact inverse of ``reserve``. Returns the new stock level, or None if the
    product no longer exists. Does not commit.
    """
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(
            inventory_quantity=_tracked_delta(quantity),
            sales_count=Product.sales_count - quantity,
            updated_at=utc_now(),
        )
        .returning(Product.inventory_quantity)
        .execution_options(synchronize_session="fetch")
    )
    result = await db.execute(stmt)
    row = result.first()
    if row is None:
        logger.warning("Release skipped, product %s not found", product_id)
        return None
    return row[0]


async def record_sale(
    db: AsyncSession, product_id: uuid.UUID, quantity: int
) -> Optional[int]:
    """Bump only the informational sales counter. Returns the new count."""
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(sales_count=Product.sales_count + quantity, updated_at=utc_now())
        .returning(Product.sales_count)
        .execution_options(synchronize_session="fetch")
    )
    result = await db.execute(stmt)
    row = result.first()
    return row[0] if row is not None else None


async def adjust_stock(
    db: AsyncSession, product_id: uuid.UUID, delta: int
) -> Optional[int]:
    """Apply a signed restock/correction delta to tracked stock.

    Refuses (returns None) when a negative delta would take stock below zero
    or the product is missing. Positive deltas always apply, so backordered
    (negative) stock can be topped up. Does not commit.
    """
    conditions = [Product.id == product_id]
    if delta < 0:
        conditions.append(Product.inventory_quantity + delta >= 0)

    stmt = (
        update(Product)
        .where(*conditions)
        .values(
            inventory_quantity=Product.inventory_quantity + delta,
            updated_at=utc_now(),
        )
        .returning(Product.inventory_quantity)
        .execution_options(synchronize_session="fetch")
    )
    result = await db.execute(stmt)
    row = result.first()
    return row[0] if row is not None else None
