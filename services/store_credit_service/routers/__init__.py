"""Store credit service routers."""

from services.store_credit_service.routers.admin import router as admin_router
from services.store_credit_service.routers.storefront import router as storefront_router

__all__ = [
    "admin_router",
    "storefront_router",
]
