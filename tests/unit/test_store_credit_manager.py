"""Unit tests for StoreCreditManager.

Tests drive the manager through the SQLAlchemy repository and the
system_config provider using the db_session fixture. No HTTP layer.
"""

import math
import uuid

import pytest
from services.store_credit_service.models import (
    DeductFailureKind,
    HistoryActionType,
    StoreCredit,
    StoreCreditHistory,
)
from services.store_credit_service.services.repository import (
    SqlAlchemyStoreCreditRepository,
)
from services.store_credit_service.services.store_credit_manager import (
    DEFAULT_REASON,
    VALUE_PER_UNIT_FIELD,
    CustomerNotFoundError,
    DeductFailure,
    DeductSuccess,
    InvalidAmountError,
    StoreCreditManager,
)
from services.store_credit_service.services.system_config import (
    DEFAULT_VALUE_PER_CREDIT_KEY,
    SystemConfigService,
)
from sqlalchemy import func, select, update
from tests.factories import (
    CustomerFactory,
    CustomerGroupFactory,
    StoreCreditFactory,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _manager(db_session) -> StoreCreditManager:
    return StoreCreditManager(
        SqlAlchemyStoreCreditRepository(db_session), SystemConfigService(db_session)
    )


async def _make_customer(db_session, **overrides):
    customer = CustomerFactory.create(**overrides)
    db_session.add(customer)
    await db_session.commit()
    return customer


async def _make_store_credit(db_session, balance: float, **customer_overrides):
    customer = await _make_customer(db_session, **customer_overrides)
    store_credit = StoreCreditFactory.create(customer_id=customer.id, balance=balance)
    db_session.add(store_credit)
    await db_session.commit()
    return customer, store_credit


async def _history_count(db_session) -> int:
    result = await db_session.execute(
        select(func.count()).select_from(StoreCreditHistory)
    )
    return result.scalar()


async def _balance(db_session, customer_id) -> float:
    result = await db_session.execute(
        select(StoreCredit.balance).where(StoreCredit.customer_id == customer_id)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# add_credit
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_credit_creates_balance_row(db_session):
    """First credit creates the balance row and one ADD history entry."""
    customer = await _make_customer(db_session)
    manager = _manager(db_session)

    history_id = await manager.add_credit(customer.id, 25.0, currency_id="EUR")

    assert isinstance(history_id, uuid.UUID)
    assert await _balance(db_session, customer.id) == pytest.approx(25.0)

    entry = await db_session.get(StoreCreditHistory, history_id)
    assert entry.action_type == HistoryActionType.ADD
    assert entry.amount == pytest.approx(25.0)
    assert entry.credits == pytest.approx(25.0)
    assert entry.currency_id == "EUR"
    assert entry.reason == DEFAULT_REASON


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_credit_increments_existing_balance(db_session):
    customer = await _make_customer(db_session)
    manager = _manager(db_session)

    await manager.add_credit(customer.id, 10.0, reason="Refund #1")
    await manager.add_credit(customer.id, 5.5, reason="Refund #2")

    assert await _balance(db_session, customer.id) == pytest.approx(15.5)
    assert await _history_count(db_session) == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_credit_uses_customer_rate(db_session):
    """Money is converted at the customer's own value per credit."""
    customer = await _make_customer(
        db_session, custom_fields={VALUE_PER_UNIT_FIELD: 3}
    )
    manager = _manager(db_session)

    await manager.add_credit(customer.id, 30.0)

    balance = await manager.get_credit_balance(customer.id)
    assert balance.balance_credits == pytest.approx(10.0)
    assert balance.balance_amount == pytest.approx(30.0)
    assert balance.value_per_credit == 3.0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_credit_uses_group_rate(db_session):
    group = CustomerGroupFactory.create(custom_fields={VALUE_PER_UNIT_FIELD: 4.0})
    db_session.add(group)
    await db_session.commit()
    customer = await _make_customer(db_session, group_id=group.id)

    await _manager(db_session).add_credit(customer.id, 20.0)

    assert await _balance(db_session, customer.id) == pytest.approx(5.0)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_credit_uses_configured_default(db_session):
    await SystemConfigService(db_session).set(DEFAULT_VALUE_PER_CREDIT_KEY, 2.0)
    await db_session.commit()
    customer = await _make_customer(db_session)

    await _manager(db_session).add_credit(customer.id, 10.0)

    assert await _balance(db_session, customer.id) == pytest.approx(5.0)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_credit_unknown_customer(db_session):
    with pytest.raises(CustomerNotFoundError):
        await _manager(db_session).add_credit(uuid.uuid4(), 10.0)

    assert await _history_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("amount", [0, -5.0, math.inf, math.nan])
async def test_add_credit_rejects_invalid_amount(db_session, amount):
    customer = await _make_customer(db_session)

    with pytest.raises(InvalidAmountError):
        await _manager(db_session).add_credit(customer.id, amount)

    assert await _history_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_credit_keeps_currency_when_omitted(db_session):
    customer = await _make_customer(db_session)
    manager = _manager(db_session)

    await manager.add_credit(customer.id, 10.0, currency_id="USD")
    await manager.add_credit(customer.id, 10.0)

    balance = await manager.get_credit_balance(customer.id)
    assert balance.currency_id == "USD"


# ---------------------------------------------------------------------------
# deduct_credit
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_then_deduct_restores_balance(db_session):
    """Adding then deducting the same amount leaves the balance unchanged."""
    customer, _ = await _make_store_credit(
        db_session, balance=7.0, custom_fields={VALUE_PER_UNIT_FIELD: 1.7}
    )
    manager = _manager(db_session)

    await manager.add_credit(customer.id, 42.0)
    result = await manager.deduct_credit(customer.id, 42.0, reason="Order #1")

    assert isinstance(result, DeductSuccess)
    assert result.ok
    assert result.balance_credits == pytest.approx(7.0)
    assert await _balance(db_session, customer.id) == pytest.approx(7.0)

    entry = await db_session.get(StoreCreditHistory, result.history_id)
    assert entry.action_type == HistoryActionType.DEDUCT
    assert entry.reason == "Order #1"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_deduct_full_balance(db_session):
    customer, _ = await _make_store_credit(db_session, balance=12.0)

    result = await _manager(db_session).deduct_credit(customer.id, 12.0)

    assert result.ok
    assert await _balance(db_session, customer.id) == pytest.approx(0.0)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_deduct_insufficient_balance(db_session):
    """Over-deduct fails and writes nothing."""
    customer, _ = await _make_store_credit(db_session, balance=10.0)

    result = await _manager(db_session).deduct_credit(customer.id, 10.01)

    assert isinstance(result, DeductFailure)
    assert not result.ok
    assert result.kind == DeductFailureKind.INSUFFICIENT_BALANCE
    assert await _balance(db_session, customer.id) == pytest.approx(10.0)
    assert await _history_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_deduct_without_store_credit(db_session):
    customer = await _make_customer(db_session)

    result = await _manager(db_session).deduct_credit(customer.id, 5.0)

    assert isinstance(result, DeductFailure)
    assert result.kind == DeductFailureKind.NO_STORE_CREDIT
    assert result.message == "No store credit found for this customer."


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("amount", [0, -1.0, math.nan])
async def test_deduct_invalid_amount(db_session, amount):
    customer, _ = await _make_store_credit(db_session, balance=10.0)

    result = await _manager(db_session).deduct_credit(customer.id, amount)

    assert isinstance(result, DeductFailure)
    assert result.kind == DeductFailureKind.INVALID_AMOUNT
    assert await _balance(db_session, customer.id) == pytest.approx(10.0)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_deduct_checks_stored_balance(db_session):
    """The sufficiency check runs against the row, not a loaded copy."""
    customer, store_credit = await _make_store_credit(db_session, balance=50.0)
    manager = _manager(db_session)

    # Loaded object still says 50 after a concurrent writer drains the row.
    await db_session.execute(
        update(StoreCredit)
        .where(StoreCredit.id == store_credit.id)
        .values(balance=5.0)
        .execution_options(synchronize_session=False)
    )
    await db_session.commit()
    assert store_credit.balance == 50.0

    result = await manager.deduct_credit(customer.id, 8.0)

    assert isinstance(result, DeductFailure)
    assert result.kind == DeductFailureKind.INSUFFICIENT_BALANCE
    assert await _balance(db_session, customer.id) == pytest.approx(5.0)


# ---------------------------------------------------------------------------
# Balance queries
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_credit_balance_without_row(db_session):
    customer = await _make_customer(db_session)
    manager = _manager(db_session)

    balance = await manager.get_credit_balance(customer.id)

    assert balance.balance_credits == 0.0
    assert balance.balance_amount == 0.0
    assert balance.currency_id is None
    assert await manager.get_store_credit_id(customer.id) is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_convert_money_to_credits(db_session):
    customer = await _make_customer(
        db_session, custom_fields={VALUE_PER_UNIT_FIELD: "2.5"}
    )
    manager = _manager(db_session)

    assert await manager.convert_money_to_credits(customer.id, 10.0) == pytest.approx(4.0)
    assert await manager.convert_money_to_credits(customer.id, -3.0) == 0.0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_history_listed_newest_first(db_session):
    customer = await _make_customer(db_session)
    manager = _manager(db_session)
    repository = SqlAlchemyStoreCreditRepository(db_session)

    first = await manager.add_credit(customer.id, 10.0, reason="first")
    second = await manager.deduct_credit(customer.id, 4.0, reason="second")

    store_credit_id = await manager.get_store_credit_id(customer.id)
    entries = await repository.list_history(store_credit_id)

    assert [entry.id for entry in entries] == [second.history_id, first]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_deduct_tolerates_float_residue(db_session):
    """0.3 - 0.1 is stored as 0.1999...; deducting 0.2 still empties it."""
    customer = await _make_customer(db_session)
    manager = _manager(db_session)

    await manager.add_credit(customer.id, 0.3)
    first = await manager.deduct_credit(customer.id, 0.1)
    second = await manager.deduct_credit(customer.id, 0.2)

    assert isinstance(first, DeductSuccess)
    assert isinstance(second, DeductSuccess)
    assert second.balance_credits == 0.0
    assert await _balance(db_session, customer.id) == 0.0
    assert await _history_count(db_session) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_deduct_beyond_tolerance_still_refused(db_session):
    customer, _ = await _make_store_credit(db_session, balance=0.2)

    result = await _manager(db_session).deduct_credit(customer.id, 0.200001)

    assert isinstance(result, DeductFailure)
    assert result.kind == DeductFailureKind.INSUFFICIENT_BALANCE
    assert await _balance(db_session, customer.id) == pytest.approx(0.2)


# ---------------------------------------------------------------------------
# Concurrent balance row creation
# ---------------------------------------------------------------------------


class _LateRowRepository(SqlAlchemyStoreCreditRepository):
    """Misses the balance row on first lookup, as if another request
    inserted it between the read and the insert."""

    def __init__(self, db):
        super().__init__(db)
        self.lookups = 0

    async def get_store_credit(self, customer_id):
        self.lookups += 1
        if self.lookups == 1:
            return None
        return await super().get_store_credit(customer_id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_credit_falls_back_to_increment_when_row_created_concurrently(
    db_session,
):
    customer, _ = await _make_store_credit(db_session, balance=5.0)
    customer_id = customer.id
    repository = _LateRowRepository(db_session)
    manager = StoreCreditManager(repository, SystemConfigService(db_session))

    history_id = await manager.add_credit(customer_id, 3.0, reason="Refund")

    assert repository.lookups == 2
    assert await _balance(db_session, customer_id) == pytest.approx(8.0)
    assert await _history_count(db_session) == 1
    entry = await db_session.get(StoreCreditHistory, history_id)
    assert entry.action_type == HistoryActionType.ADD
    assert entry.credits == pytest.approx(3.0)

    rows = await db_session.execute(
        select(func.count())
        .select_from(StoreCredit)
        .where(StoreCredit.customer_id == customer_id)
    )
    assert rows.scalar() == 1
