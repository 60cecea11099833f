"""Typed store outcomes raised by the service layer.

Every error here is an expected, user-facing result. The app turns them into
JSON responses in one place (``register_error_handlers``); anything else is an
internal error.
"""

import uuid
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class StoreError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "store_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def payload(self) -> dict[str, Any]:
        return {"detail": self.detail, "code": self.code}


class ProductUnavailable(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "product_unavailable"

    def __init__(self, product_id: Optional[uuid.UUID], name: Optional[str] = None):
        self.product_id = product_id
        self.product_name = name
        label = name or (str(product_id) if product_id else "Unknown")
        super().__init__(f"Product {label} is not available")

    def payload(self) -> dict[str, Any]:
        data = super().payload()
        data["product_id"] = str(self.product_id) if self.product_id else None
        return data


class InsufficientStock(StoreError):
    status_code = status.HTTP_409_CONFLICT
    code = "insufficient_stock"

    def __init__(
        self,
        product_id: uuid.UUID,
        available: int,
        requested: int,
        name: Optional[str] = None,
    ):
        self.product_id = product_id
        self.available = max(available, 0)
        self.requested = requested
        self.product_name = name
        if name:
            detail = (
                f"Insufficient stock for {name}. "
                f"Only {self.available} items available."
            )
        else:
            detail = f"Only {self.available} items available in stock"
        super().__init__(detail)

    def payload(self) -> dict[str, Any]:
        data = super().payload()
        data.update(
            product_id=str(self.product_id),
            available=self.available,
            requested=self.requested,
        )
        return data


class EmptyCart(StoreError):
    code = "empty_cart"

    def __init__(self):
        super().__init__("Cart is empty")


class ItemNotFound(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "item_not_found"

    def __init__(self, item_id: uuid.UUID):
        self.item_id = item_id
        super().__init__("Cart item not found")


class OrderNotFound(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "order_not_found"

    def __init__(self, order_id: uuid.UUID):
        self.order_id = order_id
        super().__init__("Order not found")


class Unauthorized(StoreError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "unauthorized"

    def __init__(self, detail: str = "Access denied"):
        super().__init__(detail)


class InvalidTransition(StoreError):
    code = "invalid_transition"


class InvalidQuantity(StoreError):
    code = "invalid_quantity"

    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__("Quantity must be a positive integer")


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


def register_error_handlers(app: FastAPI) -> None:
    """Map every StoreError subclass to its JSON response."""
    app.add_exception_handler(StoreError, _store_error_handler)
