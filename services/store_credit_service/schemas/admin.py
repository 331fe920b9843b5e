"""Admin grid schemas."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import Field
from services.store_credit_service.schemas.base import CamelModel


class AdminStoreCreditRow(CamelModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    customer_full_name: str
    credits: float
    balance: float = Field(..., description="Money equivalent of credits")
    value_per_credit: float
    currency_id: Optional[str] = None
    updated_at: datetime


class AdminStoreCreditListResponse(CamelModel):
    store_credits: list[AdminStoreCreditRow]
    total: int
    skip: int
    limit: int


class AdminCustomerOption(CamelModel):
    id: uuid.UUID
    name: str
    value_per_credit: float


class AdminCustomerListResponse(CamelModel):
    customers: list[AdminCustomerOption]


class StoreCreditConfigResponse(CamelModel):
    default_value_per_credit: float = Field(
        ..., description="Effective global value per credit"
    )
    configured_value: Optional[Any] = Field(
        default=None, description="Raw stored value, may be unusable"
    )


class StoreCreditConfigUpdateRequest(CamelModel):
    default_value_per_credit: float = Field(..., gt=0, allow_inf_nan=False)
