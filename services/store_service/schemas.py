"""Pydantic schemas for store service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.store_service.models import (
    OrderStatus,
    PaymentMethod,
    PaymentOutcome,
    PaymentStatus,
    ProductStatus,
    StockStatus,
)

# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductSummary(BaseModel):
    """Product fields shown alongside a cart line."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    sku: Optional[str] = None
    image_url: Optional[str] = None
    price: Decimal
    status: ProductStatus
    stock_status: StockStatus


# ============================================================================
# INVENTORY SCHEMAS
# ============================================================================


class InventoryAdjustment(BaseModel):
    """Adjust inventory (restock, correction, etc.)."""

    quantity: int = Field(..., description="Positive to add, negative to subtract")
    notes: Optional[str] = None


class ProductInventoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    sku: Optional[str]
    inventory_quantity: int
    track_quantity: bool
    allow_backorder: bool
    low_stock_threshold: int
    sales_count: int
    stock_status: StockStatus


class LowStockItem(BaseModel):
    """Low stock alert item."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    sku: Optional[str]
    name: str
    inventory_quantity: int
    low_stock_threshold: int


# ============================================================================
# CART SCHEMAS
# ============================================================================


class VariantSelection(BaseModel):
    name: str = Field(..., max_length=100)  # e.g. "Size"
    value: str = Field(..., max_length=100)  # e.g. "Large"


class CartItemCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1)
    selected_variants: list[VariantSelection] = []


class CartItemUpdate(BaseModel):
    # Zero or less removes the line
    quantity: int


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    selected_variants: list[VariantSelection] = []
    price: Decimal
    line_total: Decimal
    added_at: datetime

    product: Optional[ProductSummary] = None


class CartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    items: list[CartItemResponse] = []
    total_items: int = 0
    total_amount: Decimal = Decimal("0")
    last_updated: Optional[datetime] = None


class CartSummary(BaseModel):
    total_items: int
    total_amount: Decimal
    item_count: int


# ============================================================================
# CHECKOUT SCHEMAS
# ============================================================================


class Address(BaseModel):
    """Shipping or billing address."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    address_line1: str = Field(..., min_length=1, max_length=255)
    address_line2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)


class CheckoutRequest(BaseModel):
    """Place an order from the current cart."""

    shipping_address: Address
    billing_address: Optional[Address] = None  # Defaults to shipping address
    payment_method: PaymentMethod
    customer_notes: Optional[str] = None


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    product_image: Optional[str]
    sku: Optional[str]
    selected_variants: list[VariantSelection] = []
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class StatusHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: OrderStatus
    note: Optional[str]
    updated_by: Optional[str]
    timestamp: datetime


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    user_id: str
    status: OrderStatus

    subtotal: Decimal
    tax_amount: Decimal
    shipping_cost: Decimal
    total_amount: Decimal

    shipping_address: dict
    billing_address: dict

    payment_method: PaymentMethod
    payment_status: PaymentStatus
    payment_reference: Optional[str]
    paid_at: Optional[datetime]

    cancellation_reason: Optional[str]
    cancelled_at: Optional[datetime]
    cancelled_by: Optional[str]
    inventory_released: bool = False
    tracking_number: Optional[str]
    actual_delivery_date: Optional[datetime]
    customer_notes: Optional[str]

    created_at: datetime
    updated_at: datetime

    items: list[OrderItemResponse] = []
    status_history: list[StatusHistoryResponse] = []


class OrderListResponse(BaseModel):
    """Paginated order list."""

    items: list[OrderResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class CancelOrderRequest(BaseModel):
    cancellation_reason: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    """Update order status (admin).

    ``status`` is a plain string so unknown values are reported as an invalid
    transition rather than a schema error.
    """

    status: str
    note: Optional[str] = None
    tracking_number: Optional[str] = Field(None, max_length=100)


class PaymentConfirmRequest(BaseModel):
    payment_reference: str = Field(..., min_length=1, max_length=100)


class PaymentCallback(BaseModel):
    """Inbound verdict from the payment collaborator."""

    outcome: PaymentOutcome
    payment_reference: Optional[str] = Field(None, max_length=100)
