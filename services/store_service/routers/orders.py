"""Store orders router: checkout, order history, cancellation."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import OrderStatus
from services.store_service.routers._helpers import order_page
from services.store_service.schemas import (
    CancelOrderRequest,
    CheckoutRequest,
    OrderListResponse,
    OrderResponse,
    PaymentConfirmRequest,
)
from services.store_service.services import checkout, order_lifecycle
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post(
    "/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED
)
async def place_order(
    request: CheckoutRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Place an order from the current cart."""
    billing = request.billing_address.model_dump() if request.billing_address else None
    return await checkout.place_order(
        db,
        current_user,
        shipping_address=request.shipping_address.model_dump(),
        billing_address=billing,
        payment_method=request.payment_method,
        customer_notes=request.customer_notes,
    )


# ============================================================================
# ORDERS
# ============================================================================


@router.get("/orders", response_model=OrderListResponse)
async def list_my_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List the caller's orders, newest first."""
    orders, total = await order_lifecycle.list_orders(
        db,
        user_id=current_user.user_id,
        status=status_filter,
        page=page,
        page_size=page_size,
    )
    return order_page(orders, total, page, page_size)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get a single order (owner or admin)."""
    return await order_lifecycle.get_order_for_user(db, order_id, current_user)


@router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: uuid.UUID,
    request: CancelOrderRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Cancel an order that has not shipped yet."""
    return await order_lifecycle.cancel_order(
        db, order_id, current_user, request.cancellation_reason
    )


@router.post("/orders/{order_id}/payment/confirm", response_model=OrderResponse)
async def confirm_payment(
    order_id: uuid.UUID,
    request: PaymentConfirmRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Confirm a completed payment for the caller's order."""
    return await order_lifecycle.confirm_payment(
        db, order_id, current_user, request.payment_reference
    )
