"""Store catalog models: the product row and its inventory ledger fields."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import (
    ProductStatus,
    StockStatus,
    enum_values,
)
from sqlalchemy import Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# CATALOG MODELS
# ============================================================================


class Product(Base):
    """Sellable products.

    The catalog owns this row. The order core only reads it and applies
    delta updates to ``inventory_quantity`` and ``sales_count``.
    """

    __tablename__ = "store_products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    sku: Mapped[Optional[str]] = mapped_column(String(100), unique=True, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[ProductStatus] = mapped_column(
        SAEnum(
            ProductStatus,
            values_callable=enum_values,
            name="store_product_status_enum",
        ),
        default=ProductStatus.DRAFT,
        server_default="draft",
    )

    # Inventory ledger
    inventory_quantity: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    track_quantity: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )
    allow_backorder: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    low_stock_threshold: Mapped[int] = mapped_column(
        Integer, default=5, server_default="5", nullable=False
    )
    sales_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("ix_store_products_status", "status"),
        Index("ix_store_products_inventory_quantity", "inventory_quantity"),
    )

    @property
    def is_purchasable(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    @property
    def stock_status(self) -> StockStatus:
        """Stock badge shown next to the product."""
        if not self.track_quantity:
            return StockStatus.IN_STOCK
        if self.inventory_quantity <= 0:
            return StockStatus.OUT_OF_STOCK
        if self.inventory_quantity <= self.low_stock_threshold:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    def __repr__(self):
        return f"<Product {self.sku or self.slug} qty={self.inventory_quantity}>"
