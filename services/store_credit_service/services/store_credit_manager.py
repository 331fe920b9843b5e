"""Store credit ledger: conversion, balance updates and history rows."""

import math
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Union

from libs.common.currency import (
    FALLBACK_VALUE_PER_CREDIT,
    credits_to_money,
    money_to_credits,
    parse_positive_rate,
)
from libs.common.logging import get_logger
from services.store_credit_service.models import (
    Customer,
    DeductFailureKind,
    HistoryActionType,
)
from services.store_credit_service.services.ports import (
    ConfigProvider,
    StoreCreditRepository,
)
from services.store_credit_service.services.system_config import (
    DEFAULT_VALUE_PER_CREDIT_KEY,
)

logger = get_logger(__name__)

VALUE_PER_UNIT_FIELD = "store_credit_value_per_unit"
DEFAULT_REASON = "Not specified"

_FAILURE_MESSAGES = {
    DeductFailureKind.NO_STORE_CREDIT: "No store credit found for this customer.",
    DeductFailureKind.INSUFFICIENT_BALANCE: "Insufficient store credit balance.",
    DeductFailureKind.INVALID_AMOUNT: "Amount must be greater than zero.",
}


class InvalidAmountError(ValueError):
    """Raised when a credit amount is not a positive finite number."""


class CustomerNotFoundError(LookupError):
    """Raised when crediting a customer that does not exist."""


@dataclass(frozen=True)
class CreditBalance:
    balance_credits: float
    balance_amount: float
    currency_id: Optional[str]
    value_per_credit: float


@dataclass(frozen=True)
class DeductSuccess:
    history_id: uuid.UUID
    balance_credits: float

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class DeductFailure:
    kind: DeductFailureKind

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return _FAILURE_MESSAGES[self.kind]


DeductResult = Union[DeductSuccess, DeductFailure]


def _custom_field_value(custom_fields: Any) -> Optional[float]:
    if not isinstance(custom_fields, dict):
        return None
    return parse_positive_rate(custom_fields.get(VALUE_PER_UNIT_FIELD))


def resolve_value_per_credit(
    customer: Optional[Customer], configured_default: Any
) -> float:
    """Return the money value of one credit for ``customer``.

    Resolution order: customer custom field, customer group custom field,
    configured default, then ``FALLBACK_VALUE_PER_CREDIT``. Values that are
    not positive numbers are skipped.
    """
    if customer is not None:
        rate = _custom_field_value(customer.custom_fields)
        if rate is not None:
            return rate
        if customer.group is not None:
            rate = _custom_field_value(customer.group.custom_fields)
            if rate is not None:
                return rate

    rate = parse_positive_rate(configured_default)
    if rate is not None:
        return rate
    return FALLBACK_VALUE_PER_CREDIT


def _is_valid_amount(amount: float) -> bool:
    return (
        isinstance(amount, (int, float))
        and not isinstance(amount, bool)
        and math.isfinite(amount)
        and amount > 0
    )


class StoreCreditManager:
    """Add, deduct and report store credit for customers."""

    def __init__(self, repository: StoreCreditRepository, config: ConfigProvider):
        self.repository = repository
        self.config = config

    async def get_value_per_credit(
        self, customer_id: uuid.UUID, customer: Optional[Customer] = None
    ) -> float:
        if customer is None:
            customer = await self.repository.get_customer(customer_id)
        configured_default = await self.config.get(DEFAULT_VALUE_PER_CREDIT_KEY)
        return resolve_value_per_credit(customer, configured_default)

    async def convert_money_to_credits(
        self, customer_id: uuid.UUID, amount: float
    ) -> float:
        value_per_credit = await self.get_value_per_credit(customer_id)
        return money_to_credits(amount, value_per_credit)

    async def get_store_credit_id(self, customer_id: uuid.UUID) -> Optional[uuid.UUID]:
        store_credit = await self.repository.get_store_credit(customer_id)
        return store_credit.id if store_credit else None

    async def get_credit_balance(self, customer_id: uuid.UUID) -> CreditBalance:
        """Credits, money equivalent and currency. Zero when no row exists."""
        value_per_credit = await self.get_value_per_credit(customer_id)
        store_credit = await self.repository.get_store_credit(customer_id)
        credits = float(store_credit.balance) if store_credit else 0.0
        return CreditBalance(
            balance_credits=credits,
            balance_amount=credits_to_money(credits, value_per_credit),
            currency_id=store_credit.currency_id if store_credit else None,
            value_per_credit=value_per_credit,
        )

    async def add_credit(
        self,
        customer_id: uuid.UUID,
        amount: float,
        *,
        order_id: Optional[uuid.UUID] = None,
        currency_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> uuid.UUID:
        """Credit ``amount`` (money) to the customer and return the history ID.

        Creates the balance row on first credit. Balance update and ledger
        row are committed together.
        """
        if not _is_valid_amount(amount):
            raise InvalidAmountError(f"Amount must be greater than zero, got {amount!r}")

        customer = await self.repository.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(f"Customer {customer_id} not found")

        value_per_credit = await self.get_value_per_credit(customer_id, customer)
        credits = money_to_credits(amount, value_per_credit)

        store_credit = await self.repository.get_store_credit(customer_id)
        if store_credit is None:
            store_credit = await self.repository.create_store_credit(
                customer_id, credits, currency_id
            )
            if store_credit is not None:
                store_credit_id = store_credit.id
                new_balance = credits
            else:
                store_credit = await self.repository.get_store_credit(customer_id)
                store_credit_id = store_credit.id
                new_balance = await self.repository.increment_balance(
                    store_credit_id, credits, currency_id
                )
        else:
            store_credit_id = store_credit.id
            new_balance = await self.repository.increment_balance(
                store_credit_id, credits, currency_id
            )

        entry = await self.repository.add_history(
            store_credit_id=store_credit_id,
            action_type=HistoryActionType.ADD,
            amount=amount,
            credits=credits,
            order_id=order_id,
            currency_id=currency_id,
            reason=reason or DEFAULT_REASON,
        )
        history_id = entry.id
        await self.repository.commit()

        logger.info(
            "Added %.4f credits (amount=%.2f, rate=%.4f) to store credit %s, balance=%.4f",
            credits,
            amount,
            value_per_credit,
            store_credit_id,
            new_balance,
        )
        return history_id

    async def deduct_credit(
        self,
        customer_id: uuid.UUID,
        amount: float,
        *,
        order_id: Optional[uuid.UUID] = None,
        currency_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> DeductResult:
        """Debit ``amount`` (money) from the customer's balance.

        The balance is only decremented when it covers the requested
        credits; otherwise nothing is written and a ``DeductFailure`` is
        returned.
        """
        if not _is_valid_amount(amount):
            return DeductFailure(DeductFailureKind.INVALID_AMOUNT)

        store_credit = await self.repository.get_store_credit(customer_id)
        if store_credit is None:
            logger.info("Deduct refused: no store credit for customer %s", customer_id)
            return DeductFailure(DeductFailureKind.NO_STORE_CREDIT)

        value_per_credit = await self.get_value_per_credit(customer_id)
        credits = money_to_credits(amount, value_per_credit)

        new_balance = await self.repository.decrement_balance_if_sufficient(
            store_credit.id, credits, currency_id
        )
        if new_balance is None:
            logger.info(
                "Deduct refused: %.4f credits requested from store credit %s",
                credits,
                store_credit.id,
            )
            return DeductFailure(DeductFailureKind.INSUFFICIENT_BALANCE)

        entry = await self.repository.add_history(
            store_credit_id=store_credit.id,
            action_type=HistoryActionType.DEDUCT,
            amount=amount,
            credits=credits,
            order_id=order_id,
            currency_id=currency_id,
            reason=reason or DEFAULT_REASON,
        )
        history_id = entry.id
        await self.repository.commit()

        logger.info(
            "Deducted %.4f credits (amount=%.2f) from store credit %s, balance=%.4f",
            credits,
            amount,
            store_credit.id,
            new_balance,
        )
        return DeductSuccess(history_id=history_id, balance_credits=new_balance)
