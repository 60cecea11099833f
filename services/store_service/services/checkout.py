"""Order assembly: turn a validated cart into an order and debit stock."""

import random
import string
import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_date_stamp
from libs.common.emails.store import send_store_order_confirmation_email
from libs.common.logging import get_logger
from services.store_service.errors import EmptyCart, ProductUnavailable, StoreError
from services.store_service.models import (
    Order,
    OrderItem,
    OrderStatus,
    OrderStatusHistory,
    PaymentMethod,
    PaymentStatus,
)
from services.store_service.services.cart_ops import load_cart, recalculate_cart
from services.store_service.services.inventory import ensure_available, reserve
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

TWO_PLACES = Decimal("0.01")
ORDER_NUMBER_ATTEMPTS = 5


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax_amount: Decimal
    shipping_cost: Decimal
    total_amount: Decimal


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_order_totals(
    line_totals: Iterable[Decimal],
    *,
    tax_rate: Optional[Decimal] = None,
    free_shipping_threshold: Optional[Decimal] = None,
    flat_shipping_fee: Optional[Decimal] = None,
) -> OrderTotals:
    """Subtotal, tax, shipping and grand total for a set of line totals.

    Shipping is free only when the subtotal is strictly above the threshold.
    """
    settings = get_settings()
    tax_rate = settings.STORE_TAX_RATE if tax_rate is None else tax_rate
    threshold = (
        settings.STORE_FREE_SHIPPING_THRESHOLD
        if free_shipping_threshold is None
        else free_shipping_threshold
    )
    flat_fee = (
        settings.STORE_FLAT_SHIPPING_FEE if flat_shipping_fee is None else flat_shipping_fee
    )

    subtotal = _money(sum((Decimal(t) for t in line_totals), Decimal("0")))
    tax_amount = _money(subtotal * tax_rate)
    shipping_cost = _money(Decimal("0") if subtotal > threshold else flat_fee)
    total_amount = _money(subtotal + tax_amount + shipping_cost)
    return OrderTotals(subtotal, tax_amount, shipping_cost, total_amount)


def initial_statuses(method: PaymentMethod) -> tuple[OrderStatus, PaymentStatus]:
    """Cash on delivery goes straight to processing; everything else waits for payment."""
    if method == PaymentMethod.CASH_ON_DELIVERY:
        return OrderStatus.PROCESSING, PaymentStatus.PENDING
    return OrderStatus.PENDING, PaymentStatus.PENDING


def generate_order_number() -> str:
    """Generate an order number like ORD-20260104-A1B2C3."""
    random_part = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"ORD-{utc_date_stamp()}-{random_part}"


async def _unique_order_number(db: AsyncSession) -> str:
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number()
        taken = await db.execute(
            select(Order.id).where(Order.order_number == candidate)
        )
        if taken.first() is None:
            return candidate
    raise RuntimeError("Could not allocate a unique order number")


async def load_order(db: AsyncSession, order_id: uuid.UUID) -> Optional[Order]:
    query = (
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items), selectinload(Order.status_history))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def place_order(
    db: AsyncSession,
    user: AuthUser,
    *,
    shipping_address: dict,
    payment_method: PaymentMethod,
    billing_address: Optional[dict] = None,
    customer_notes: Optional[str] = None,
) -> Order:
    """Create an order from the user's cart.

    Steps run in this order inside one transaction: re-validate every line
    against live product state, create the order, reserve stock per line,
    empty the cart. A failed reservation rolls all of it back. The
    confirmation email is sent after commit and can never fail the checkout.

    A concurrent checkout can claim the same order number between the
    uniqueness check and the insert; the whole attempt is then rolled back
    and retried with a fresh number.
    """
    for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
        try:
            order_id = await _place_order_once(
                db,
                user,
                shipping_address=shipping_address,
                payment_method=payment_method,
                billing_address=billing_address,
                customer_notes=customer_notes,
            )
            break
        except IntegrityError:
            await db.rollback()
            if attempt == ORDER_NUMBER_ATTEMPTS:
                raise
            logger.warning(
                "Order number collision for %s, retrying (attempt %d)",
                user.user_id,
                attempt,
            )

    order = await load_order(db, order_id)

    logger.info(
        "Order %s placed by %s: %d line(s), total=%s",
        order.order_number,
        user.user_id,
        len(order.items),
        order.total_amount,
    )

    await notify_order_placed(order)
    return order


async def _place_order_once(
    db: AsyncSession,
    user: AuthUser,
    *,
    shipping_address: dict,
    payment_method: PaymentMethod,
    billing_address: Optional[dict],
    customer_notes: Optional[str],
) -> uuid.UUID:
    cart = await load_cart(db, user.user_id)
    if not cart or not cart.items:
        raise EmptyCart()

    # Re-validate against current state, not what was checked at add time
    for line in cart.items:
        product = line.product
        if product is None or not product.is_purchasable:
            raise ProductUnavailable(
                line.product_id, product.name if product else None
            )
        ensure_available(product, line.quantity)

    order_items = []
    for line in cart.items:
        product = line.product
        unit_price = _money(line.price)
        order_items.append(
            OrderItem(
                product_id=product.id,
                product_name=product.name,
                product_image=product.image_url,
                sku=product.sku,
                selected_variants=list(line.selected_variants or []),
                quantity=line.quantity,
                unit_price=unit_price,
                line_total=_money(unit_price * line.quantity),
            )
        )

    totals = compute_order_totals(item.line_total for item in order_items)
    status, payment_status = initial_statuses(payment_method)

    order = Order(
        order_number=await _unique_order_number(db),
        user_id=user.user_id,
        customer_email=user.email,
        customer_name=user.name,
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        shipping_cost=totals.shipping_cost,
        total_amount=totals.total_amount,
        shipping_address=shipping_address,
        billing_address=billing_address or shipping_address,
        payment_method=payment_method,
        payment_status=payment_status,
        status=status,
        customer_notes=customer_notes,
        items=order_items,
        status_history=[
            OrderStatusHistory(status=status, note="Order placed", updated_by=user.user_id)
        ],
    )
    db.add(order)
    await db.flush()

    try:
        for item in order_items:
            await reserve(
                db, item.product_id, item.quantity, product_name=item.product_name
            )
    except StoreError:
        await db.rollback()
        logger.warning(
            "Checkout for %s aborted during stock reservation, order rolled back",
            user.user_id,
        )
        raise

    cart.items.clear()
    recalculate_cart(cart)

    order_id = order.id
    await db.commit()
    return order_id


async def notify_order_placed(order: Order) -> None:
    """Best-effort confirmation email; failures are logged and swallowed."""
    if not order.customer_email:
        return
    try:
        await send_store_order_confirmation_email(
            to_email=order.customer_email,
            customer_name=order.customer_name
            or order.shipping_address.get("first_name")
            or "there",
            order_number=order.order_number,
            items=[
                {
                    "name": item.product_name,
                    "quantity": item.quantity,
                    "line_total": item.line_total,
                }
                for item in order.items
            ],
            subtotal=order.subtotal,
            tax=order.tax_amount,
            shipping=order.shipping_cost,
            total=order.total_amount,
            payment_method=order.payment_method.value,
            shipping_address=order.shipping_address,
            currency=get_settings().STORE_CURRENCY,
        )
    except Exception as e:
        # Log but don't fail the order
        logger.error("Failed to send order confirmation email: %s", e)
