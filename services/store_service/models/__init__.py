"""Store Service models package."""

from services.store_service.models.catalog import Product
from services.store_service.models.commerce import (
    Cart,
    CartItem,
    Order,
    OrderItem,
    OrderStatusHistory,
)
from services.store_service.models.enums import (
    NON_CANCELLABLE_STATUSES,
    OrderStatus,
    PaymentMethod,
    PaymentOutcome,
    PaymentStatus,
    ProductStatus,
    StockStatus,
)

__all__ = [
    "Cart",
    "CartItem",
    "NON_CANCELLABLE_STATUSES",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderStatusHistory",
    "PaymentMethod",
    "PaymentOutcome",
    "PaymentStatus",
    "Product",
    "ProductStatus",
    "StockStatus",
]
