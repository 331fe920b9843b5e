"""Interfaces the credit ledger depends on.

``StoreCreditManager`` only talks to these two ports; the SQLAlchemy
implementations live in ``repository.py`` and ``system_config.py``.
"""

import uuid
from typing import Any, Optional, Protocol

from services.store_credit_service.models import (
    Customer,
    HistoryActionType,
    StoreCredit,
    StoreCreditHistory,
)


class StoreCreditRepository(Protocol):
    """Persistence port for balances, ledger rows and customer lookups."""

    async def get_customer(self, customer_id: uuid.UUID) -> Optional[Customer]: ...

    async def get_store_credit(
        self, customer_id: uuid.UUID
    ) -> Optional[StoreCredit]: ...

    async def create_store_credit(
        self,
        customer_id: uuid.UUID,
        balance: float,
        currency_id: Optional[str],
    ) -> Optional[StoreCredit]:
        """Insert a balance row. Returns None if one was created concurrently."""
        ...

    async def increment_balance(
        self,
        store_credit_id: uuid.UUID,
        credits: float,
        currency_id: Optional[str],
    ) -> float:
        """Atomically add ``credits`` and return the new balance."""
        ...

    async def decrement_balance_if_sufficient(
        self,
        store_credit_id: uuid.UUID,
        credits: float,
        currency_id: Optional[str],
    ) -> Optional[float]:
        """Atomically subtract ``credits`` when the stored balance covers it.

        Returns the new balance, or None when nothing was changed.
        """
        ...

    async def add_history(
        self,
        *,
        store_credit_id: uuid.UUID,
        action_type: HistoryActionType,
        amount: float,
        credits: float,
        order_id: Optional[uuid.UUID],
        currency_id: Optional[str],
        reason: str,
    ) -> StoreCreditHistory: ...

    async def list_history(
        self, store_credit_id: uuid.UUID
    ) -> list[StoreCreditHistory]: ...

    async def commit(self) -> None: ...


class ConfigProvider(Protocol):
    """Configuration port for system-wide settings."""

    async def get(self, key: str) -> Any: ...
