"""StoreCredit balance row and its append-only history ledger."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_credit_service.models.enums import HistoryActionType, enum_values
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class StoreCredit(Base):
    """Credit balance. One per customer, created on first credit."""

    __tablename__ = "store_credits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        unique=True,
        index=True,
        nullable=False,
    )
    balance: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    currency_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    customer: Mapped["Customer"] = relationship(lazy="selectin")  # noqa: F821

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_store_credit_balance_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<StoreCredit {self.id} customer={self.customer_id} balance={self.balance}>"


class StoreCreditHistory(Base):
    """Immutable ledger entry for a single balance change."""

    __tablename__ = "store_credit_histories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    store_credit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("store_credits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    credits: Mapped[float] = mapped_column(Float, nullable=False)
    currency_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    action_type: Mapped[HistoryActionType] = mapped_column(
        SAEnum(
            HistoryActionType,
            name="store_credit_action_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        Index(
            "ix_store_credit_histories_credit_created",
            "store_credit_id",
            "created_at",
        ),
    )

    def __repr__(self) -> str:
        return f"<StoreCreditHistory {self.id} {self.action_type.value} {self.amount}>"
