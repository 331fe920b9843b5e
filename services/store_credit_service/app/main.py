"""FastAPI application for the Store Credit Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.store_credit_service.routers.admin import router as admin_router
from services.store_credit_service.routers.storefront import router as storefront_router


def create_app() -> FastAPI:
    """Create and configure the Store Credit Service FastAPI app."""
    app = FastAPI(
        title="Store Credit Service",
        version="0.1.0",
        description="Customer store credit balances, ledger and admin tooling.",
    )

    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store_credit"}

    # Customer-facing pages
    app.include_router(storefront_router)

    # Admin API (service-role / admin JWT)
    app.include_router(admin_router)

    return app


app = create_app()
