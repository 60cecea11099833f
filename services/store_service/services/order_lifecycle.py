"""Order lifecycle: reads, cancellation, admin status changes, payment callbacks."""

import uuid
from datetime import datetime
from typing import Optional, Union

from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_service.errors import (
    InvalidTransition,
    OrderNotFound,
    Unauthorized,
)
from services.store_service.models import (
    NON_CANCELLABLE_STATUSES,
    Order,
    OrderStatus,
    OrderStatusHistory,
    PaymentOutcome,
    PaymentStatus,
)
from services.store_service.services.checkout import load_order
from services.store_service.services.inventory import release
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


# ============================================================================
# READS
# ============================================================================


async def get_order(db: AsyncSession, order_id: uuid.UUID) -> Order:
    order = await load_order(db, order_id)
    if order is None:
        raise OrderNotFound(order_id)
    return order


async def get_order_for_user(
    db: AsyncSession, order_id: uuid.UUID, user: AuthUser
) -> Order:
    """Owners and admins may read an order; nobody else."""
    order = await get_order(db, order_id)
    if order.user_id != user.user_id and not user.is_admin:
        raise Unauthorized()
    return order


async def list_orders(
    db: AsyncSession,
    *,
    user_id: Optional[str] = None,
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    order_number: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Order], int]:
    """Filtered, newest-first page of orders plus the total match count."""
    query = select(Order)

    if user_id:
        query = query.where(Order.user_id == user_id)
    if status:
        query = query.where(Order.status == status)
    if payment_status:
        query = query.where(Order.payment_status == payment_status)
    if start_date:
        query = query.where(Order.created_at >= start_date)
    if end_date:
        query = query.where(Order.created_at <= end_date)
    if order_number:
        query = query.where(Order.order_number.ilike(f"%{order_number}%"))

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = (
        query.options(selectinload(Order.items), selectinload(Order.status_history))
        .order_by(Order.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(query)
    return list(result.scalars().all()), total


# ============================================================================
# TRANSITIONS
# ============================================================================


def _append_history(
    order: Order, status: OrderStatus, note: Optional[str], updated_by: Optional[str]
) -> None:
    order.status_history.append(
        OrderStatusHistory(
            status=status, note=note, updated_by=updated_by, timestamp=utc_now()
        )
    )


async def _release_order_stock(db: AsyncSession, order: Order) -> None:
    """Give every line's stock back, at most once per order.

    Reopening a cancelled order does not debit stock again, so a second
    cancellation must not release it again either.
    """
    if order.inventory_released:
        logger.info(
            "Stock for order %s was already released, skipping", order.order_number
        )
        return

    for item in order.items:
        await release(db, item.product_id, item.quantity)
    order.inventory_released = True
    logger.info(
        "Released stock for %d line(s) of order %s",
        len(order.items),
        order.order_number,
    )


def _mark_cancelled(order: Order, reason: Optional[str], actor: str) -> None:
    order.status = OrderStatus.CANCELLED
    order.cancellation_reason = reason
    order.cancelled_at = utc_now()
    order.cancelled_by = actor


async def cancel_order(
    db: AsyncSession,
    order_id: uuid.UUID,
    user: AuthUser,
    reason: Optional[str] = None,
) -> Order:
    """Owner-initiated cancellation; gives every line's stock back."""
    order = await get_order(db, order_id)

    if order.user_id != user.user_id:
        raise Unauthorized()

    if order.status in NON_CANCELLABLE_STATUSES:
        raise InvalidTransition(
            f"Order cannot be cancelled while {order.status.value}"
        )

    _mark_cancelled(order, reason, user.user_id)
    _append_history(order, OrderStatus.CANCELLED, reason, user.user_id)
    await _release_order_stock(db, order)

    await db.commit()
    logger.info("Order %s cancelled by owner %s", order.order_number, user.user_id)
    return await load_order(db, order.id)


def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidTransition(f"Invalid status: {value}")


async def set_order_status(
    db: AsyncSession,
    order_id: uuid.UUID,
    new_status: Union[str, OrderStatus],
    admin: AuthUser,
    *,
    note: Optional[str] = None,
    tracking_number: Optional[str] = None,
) -> Order:
    """Admin status override.

    Any known status may follow any other. Entering ``cancelled`` from a
    non-cancelled status releases stock exactly like an owner cancellation.
    """
    target = parse_status(new_status)
    order = await get_order(db, order_id)

    previous = order.status
    if target == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED:
        _mark_cancelled(order, note, admin.user_id)
        await _release_order_stock(db, order)
    else:
        order.status = target

    if tracking_number:
        order.tracking_number = tracking_number
    if target == OrderStatus.DELIVERED:
        order.actual_delivery_date = utc_now()

    _append_history(order, target, note, admin.user_id)

    await db.commit()
    logger.info(
        "Order %s status %s -> %s by %s",
        order.order_number,
        previous.value,
        target.value,
        admin.user_id,
    )
    return await load_order(db, order.id)


async def record_payment(
    db: AsyncSession,
    order_id: uuid.UUID,
    outcome: PaymentOutcome,
    *,
    payment_reference: Optional[str] = None,
    actor: Optional[str] = None,
) -> Order:
    """Apply a payment collaborator's verdict to an order.

    Success marks the order paid and confirmed; repeating it is a no-op.
    A cancelled order has already given its stock back and cannot be
    confirmed. Failure only flips the payment status.
    """
    order = await get_order(db, order_id)

    if outcome == PaymentOutcome.SUCCEEDED:
        if order.payment_status == PaymentStatus.PAID:
            # Already paid, idempotent return
            return order
        if order.status == OrderStatus.CANCELLED:
            raise InvalidTransition("Cannot confirm payment for a cancelled order")
        order.payment_status = PaymentStatus.PAID
        order.status = OrderStatus.CONFIRMED
        order.paid_at = utc_now()
        if payment_reference:
            order.payment_reference = payment_reference
        _append_history(
            order,
            OrderStatus.CONFIRMED,
            "Payment received and order confirmed",
            actor,
        )
    else:
        order.payment_status = PaymentStatus.FAILED
        if payment_reference:
            order.payment_reference = payment_reference

    await db.commit()
    logger.info(
        "Payment %s recorded for order %s", outcome.value, order.order_number
    )
    return await load_order(db, order.id)


async def confirm_payment(
    db: AsyncSession,
    order_id: uuid.UUID,
    user: AuthUser,
    payment_reference: str,
) -> Order:
    """Owner-side confirmation after the client finished paying."""
    order = await get_order(db, order_id)
    if order.user_id != user.user_id:
        raise Unauthorized()
    return await record_payment(
        db,
        order_id,
        PaymentOutcome.SUCCEEDED,
        payment_reference=payment_reference,
        actor=user.user_id,
    )
