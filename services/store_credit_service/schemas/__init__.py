"""Store Credit Service schemas package.

IMPORTANT: Every schema class must be listed here.
When adding a new schema, add its import and __all__ entry.
"""

from services.store_credit_service.schemas.admin import (  # noqa: F401
    AdminCustomerListResponse,
    AdminCustomerOption,
    AdminStoreCreditListResponse,
    AdminStoreCreditRow,
    StoreCreditConfigResponse,
    StoreCreditConfigUpdateRequest,
)
from services.store_credit_service.schemas.store_credit import (  # noqa: F401
    BalanceResponse,
    StoreCreditHistoryListResponse,
    StoreCreditHistoryResponse,
    StoreCreditMutationRequest,
    StoreCreditMutationResponse,
)

__all__ = [
    # Store credit
    "BalanceResponse",
    "StoreCreditHistoryListResponse",
    "StoreCreditHistoryResponse",
    "StoreCreditMutationRequest",
    "StoreCreditMutationResponse",
    # Admin
    "AdminCustomerListResponse",
    "AdminCustomerOption",
    "AdminStoreCreditListResponse",
    "AdminStoreCreditRow",
    "StoreCreditConfigResponse",
    "StoreCreditConfigUpdateRequest",
]
