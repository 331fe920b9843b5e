"""SQLAlchemy implementation of the store credit persistence port."""

import uuid
from typing import Optional

from libs.common.currency import BALANCE_EPSILON
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_credit_service.models import (
    Customer,
    HistoryActionType,
    StoreCredit,
    StoreCreditHistory,
)
from sqlalchemy import case, delete, desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class SqlAlchemyStoreCreditRepository:
    """Store credit persistence over a single ``AsyncSession``.

    Balance writes are single conditional UPDATE statements so that two
    requests touching the same customer cannot overwrite each other.
    Reads use ``populate_existing`` because those UPDATEs bypass the
    session's identity map.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_customer(self, customer_id: uuid.UUID) -> Optional[Customer]:
        result = await self.db.execute(
            select(Customer)
            .where(Customer.id == customer_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_customer_by_auth_id(self, auth_id: str) -> Optional[Customer]:
        result = await self.db.execute(
            select(Customer)
            .where(Customer.auth_id == auth_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_customers(self) -> list[Customer]:
        result = await self.db.execute(
            select(Customer)
            .order_by(Customer.last_name, Customer.first_name)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_store_credit(
        self, customer_id: uuid.UUID
    ) -> Optional[StoreCredit]:
        result = await self.db.execute(
            select(StoreCredit)
            .where(StoreCredit.customer_id == customer_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_store_credit_by_id(
        self, store_credit_id: uuid.UUID
    ) -> Optional[StoreCredit]:
        result = await self.db.execute(
            select(StoreCredit)
            .where(StoreCredit.id == store_credit_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_store_credits(
        self, skip: int = 0, limit: int = 100
    ) -> tuple[list[StoreCredit], int]:
        total = (
            await self.db.execute(select(func.count()).select_from(StoreCredit))
        ).scalar() or 0
        result = await self.db.execute(
            select(StoreCredit)
            .order_by(desc(StoreCredit.created_at))
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total

    async def list_history(
        self, store_credit_id: uuid.UUID
    ) -> list[StoreCreditHistory]:
        result = await self.db.execute(
            select(StoreCreditHistory)
            .where(StoreCreditHistory.store_credit_id == store_credit_id)
            .order_by(desc(StoreCreditHistory.created_at))
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_store_credit(
        self,
        customer_id: uuid.UUID,
        balance: float,
        currency_id: Optional[str],
    ) -> Optional[StoreCredit]:
        store_credit = StoreCredit(
            customer_id=customer_id,
            balance=balance,
            currency_id=currency_id,
        )
        self.db.add(store_credit)
        try:
            await self.db.flush()
        except IntegrityError:
            # Another request created the row first.
            await self.db.rollback()
            logger.info(
                "Store credit for customer %s created concurrently", customer_id
            )
            return None
        return store_credit

    async def increment_balance(
        self,
        store_credit_id: uuid.UUID,
        credits: float,
        currency_id: Optional[str],
    ) -> float:
        values = {"balance": StoreCredit.balance + credits, "updated_at": utc_now()}
        if currency_id is not None:
            values["currency_id"] = currency_id
        await self.db.execute(
            update(StoreCredit)
            .where(StoreCredit.id == store_credit_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return await self._read_balance(store_credit_id)

    async def decrement_balance_if_sufficient(
        self,
        store_credit_id: uuid.UUID,
        credits: float,
        currency_id: Optional[str],
    ) -> Optional[float]:
        remaining = StoreCredit.balance - credits
        # A balance within BALANCE_EPSILON of ``credits`` covers it; the
        # residue is zeroed.
        values = {
            "balance": case((remaining < BALANCE_EPSILON, 0.0), else_=remaining),
            "updated_at": utc_now(),
        }
        if currency_id is not None:
            values["currency_id"] = currency_id
        result = await self.db.execute(
            update(StoreCredit)
            .where(
                StoreCredit.id == store_credit_id,
                StoreCredit.balance >= credits - BALANCE_EPSILON,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self._read_balance(store_credit_id)

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
    ) -> StoreCreditHistory:
        entry = StoreCreditHistory(
            store_credit_id=store_credit_id,
            action_type=action_type,
            amount=amount,
            credits=credits,
            order_id=order_id,
            currency_id=currency_id,
            reason=reason,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def delete_store_credit(self, store_credit_id: uuid.UUID) -> None:
        """Delete a balance row together with its ledger."""
        await self.db.execute(
            delete(StoreCreditHistory).where(
                StoreCreditHistory.store_credit_id == store_credit_id
            )
        )
        await self.db.execute(
            delete(StoreCredit)
            .where(StoreCredit.id == store_credit_id)
            .execution_options(synchronize_session=False)
        )

    async def commit(self) -> None:
        await self.db.commit()

    async def _read_balance(self, store_credit_id: uuid.UUID) -> float:
        result = await self.db.execute(
            select(StoreCredit.balance).where(StoreCredit.id == store_credit_id)
        )
        return float(result.scalar_one())
