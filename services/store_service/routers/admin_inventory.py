"""Admin store inventory router."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.errors import ProductUnavailable
from services.store_service.schemas import (
    InventoryAdjustment,
    LowStockItem,
    ProductInventoryResponse,
)
from services.store_service.services import catalog, inventory
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])
logger = get_logger(__name__)


@router.post(
    "/products/{product_id}/inventory", response_model=ProductInventoryResponse
)
async def adjust_inventory(
    product_id: uuid.UUID,
    adjustment: InventoryAdjustment,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Restock or correct a product's on-hand quantity."""
    product = await catalog.find_product(db, product_id)
    if not product:
        raise ProductUnavailable(product_id)
    if adjustment.quantity == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Adjustment quantity must not be zero",
        )

    new_quantity = await inventory.adjust_stock(db, product_id, adjustment.quantity)
    if new_quantity is None:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Adjustment would result in negative inventory",
        )

    await db.commit()
    logger.info(
        "Inventory for %s adjusted by %d to %d by %s (%s)",
        product.name,
        adjustment.quantity,
        new_quantity,
        current_user.user_id,
        adjustment.notes or "no notes",
    )
    return await catalog.find_product(db, product_id)


@router.get("/inventory/low-stock", response_model=list[LowStockItem])
async def get_low_stock_items(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Tracked products at or below their low-stock threshold."""
    return await catalog.list_low_stock(db)
