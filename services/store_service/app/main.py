"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from libs.common.config import get_settings
from libs.common.logging import configure_logging
from services.store_service.errors import register_error_handlers
from services.store_service.routers import (
    admin_inventory_router,
    admin_orders_router,
    cart_router,
    orders_router,
)


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    configure_logging()

    app = FastAPI(
        title="Storefront Order Service",
        version="0.1.0",
        description="Cart, checkout, order lifecycle and inventory reconciliation.",
    )
    register_error_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": "store",
            "environment": get_settings().ENVIRONMENT,
        }

    # Public store routes (cart, checkout, orders)
    app.include_router(cart_router, prefix="/store")
    app.include_router(orders_router, prefix="/store")

    # Admin routes (order management, inventory)
    app.include_router(admin_orders_router, prefix="/admin/store")
    app.include_router(admin_inventory_router, prefix="/admin/store")

    return app


app = create_app()
