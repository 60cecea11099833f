"""Store cart router: cart reads and line mutations."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.schemas import (
    CartItemCreate,
    CartItemUpdate,
    CartResponse,
    CartSummary,
)
from services.store_service.services import cart_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


@router.get("/cart", response_model=CartResponse)
async def get_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get current cart."""
    return await cart_ops.get_cart(db, current_user.user_id)


@router.get("/cart/summary", response_model=CartSummary)
async def get_cart_summary(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Item counters for the cart badge."""
    return await cart_ops.cart_summary(db, current_user.user_id)


@router.post("/cart/items", response_model=CartResponse)
async def add_to_cart(
    item_in: CartItemCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Add item to cart."""
    return await cart_ops.add_item(
        db,
        current_user.user_id,
        item_in.product_id,
        item_in.quantity,
        item_in.selected_variants,
    )


@router.patch("/cart/items/{item_id}", response_model=CartResponse)
@router.put("/cart/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: uuid.UUID,
    item_in: CartItemUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Set cart item quantity; zero or less removes the line."""
    if item_in.quantity <= 0:
        return await cart_ops.remove_item(db, current_user.user_id, item_id)
    return await cart_ops.update_item(
        db, current_user.user_id, item_id, item_in.quantity
    )


@router.delete("/cart/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(
    item_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove item from cart."""
    return await cart_ops.remove_item(db, current_user.user_id, item_id)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Empty the cart."""
    return await cart_ops.clear_cart(db, current_user.user_id)
