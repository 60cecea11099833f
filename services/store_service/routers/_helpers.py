"""Shared helper functions for store routers."""

import math

from services.store_service.models import Order
from services.store_service.schemas import OrderListResponse, OrderResponse


def order_page(
    orders: list[Order], total: int, page: int, page_size: int
) -> OrderListResponse:
    """Wrap a page of orders with pagination metadata."""
    total_pages = math.ceil(total / page_size) if total else 0
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
