"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.store_service.errors import add_store_error_handler
from services.store_service.routers import orders_router, products_router
from services.store_service.services import OrderService, ProductService


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title="Zona Street Store Service",
        version="0.1.0",
        description="Storefront catalog, checkout orders and admin order management.",
    )

    # Built once per process, handed to routes through dependencies
    app.state.order_service = OrderService()
    app.state.product_service = ProductService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    add_observability_middleware(app)
    add_exception_handlers(app)
    add_store_error_handler(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    app.include_router(products_router, prefix=settings.API_PREFIX)
    app.include_router(orders_router, prefix=settings.API_PREFIX)

    return app


app = create_app()
