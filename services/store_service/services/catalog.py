"""Product lookups the order core needs from the catalog."""

import uuid
from typing import Optional

from services.store_service.models import Product, ProductStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def find_product(db: AsyncSession, product_id: uuid.UUID) -> Optional[Product]:
    return await db.get(Product, product_id, populate_existing=True)


async def find_active_product(
    db: AsyncSession, product_id: uuid.UUID
) -> Optional[Product]:
    """Return the product only if it is currently purchasable."""
    product = await find_product(db, product_id)
    if product is None or not product.is_purchasable:
        return None
    return product


async def list_low_stock(db: AsyncSession) -> list[Product]:
    """Tracked products at or below their low-stock threshold, emptiest first."""
    query = (
        select(Product)
        .where(
            Product.track_quantity.is_(True),
            Product.inventory_quantity <= Product.low_stock_threshold,
            Product.status != ProductStatus.ARCHIVED,
        )
        .order_by(Product.inventory_quantity, Product.name)
    )
    result = await db.execute(query)
    return list(result.scalars().all())
