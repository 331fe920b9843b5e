"""Balance and ledger request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field
from services.store_credit_service.models.enums import HistoryActionType
from services.store_credit_service.schemas.base import CamelModel


class StoreCreditMutationRequest(CamelModel):
    """Body of ``/api/store-credit/add`` and ``/api/store-credit/deduct``."""

    customer_id: uuid.UUID
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Money amount")
    reason: Optional[str] = Field(default=None, max_length=255)
    order_id: Optional[uuid.UUID] = None
    currency_id: Optional[str] = None


class StoreCreditMutationResponse(CamelModel):
    success: bool
    history_id: uuid.UUID
    balance_credits: float
    balance_amount: float
    value_per_credit: float


class BalanceResponse(CamelModel):
    customer_id: uuid.UUID
    store_credit_id: Optional[uuid.UUID] = None
    balance_credits: float
    balance_amount: float
    currency_id: Optional[str] = None
    value_per_credit: float


class StoreCreditHistoryResponse(CamelModel):
    id: uuid.UUID
    store_credit_id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    amount: float
    credits: float
    currency_id: Optional[str] = None
    reason: str
    action_type: HistoryActionType
    created_at: datetime


class StoreCreditHistoryListResponse(CamelModel):
    entries: list[StoreCreditHistoryResponse]
    total: int
