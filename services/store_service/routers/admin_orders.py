"""Admin store orders router: search, status overrides, payment callbacks."""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import OrderStatus, PaymentStatus
from services.store_service.routers._helpers import order_page
from services.store_service.schemas import (
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    PaymentCallback,
)
from services.store_service.services import order_lifecycle
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])


@router.get("/orders", response_model=OrderListResponse)
async def list_all_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    order_number: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List all orders."""
    orders, total = await order_lifecycle.list_orders(
        db,
        status=status_filter,
        payment_status=payment_status,
        start_date=start_date,
        end_date=end_date,
        order_number=order_number,
        page=page,
        page_size=page_size,
    )
    return order_page(orders, total, page, page_size)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order_admin(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Get order detail (admin)."""
    return await order_lifecycle.get_order(db, order_id)


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    status_update: OrderStatusUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Move an order to any status. Cancelling gives stock back."""
    return await order_lifecycle.set_order_status(
        db,
        order_id,
        status_update.status,
        current_user,
        note=status_update.note,
        tracking_number=status_update.tracking_number,
    )


@router.post("/orders/{order_id}/payment", response_model=OrderResponse)
async def record_payment(
    order_id: uuid.UUID,
    callback: PaymentCallback,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Record the payment provider's verdict for an order."""
    return await order_lifecycle.record_payment(
        db,
        order_id,
        callback.outcome,
        payment_reference=callback.payment_reference,
        actor=current_user.user_id,
    )
