"""Unit tests for the store credit install / uninstall steps."""

import pytest
from services.store_credit_service.models import (
    CustomField,
    CustomFieldSetRelation,
    StateMachineState,
    StoreCredit,
    StoreCreditHistory,
)
from services.store_credit_service.services.lifecycle import install, uninstall
from services.store_credit_service.services.order_state_installer import (
    NEW_STATE_TECHNICAL_NAME,
)
from services.store_credit_service.services.system_config import (
    DEFAULT_VALUE_PER_CREDIT_KEY,
    SystemConfigService,
)
from sqlalchemy import func, select
from tests.factories import (
    CustomerFactory,
    StoreCreditFactory,
    StoreCreditHistoryFactory,
    create_order_return_state_machine,
)


async def _count(db_session, model) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar()


async def _store_credit_state_count(db_session) -> int:
    result = await db_session.execute(
        select(func.count())
        .select_from(StateMachineState)
        .where(StateMachineState.technical_name == NEW_STATE_TECHNICAL_NAME)
    )
    return result.scalar()


async def _seed_balance(db_session):
    customer = CustomerFactory.create()
    db_session.add(customer)
    await db_session.flush()
    store_credit = StoreCreditFactory.create(customer_id=customer.id, balance=20.0)
    db_session.add(store_credit)
    await db_session.flush()
    db_session.add(StoreCreditHistoryFactory.create(store_credit_id=store_credit.id))
    await db_session.commit()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_install_seeds_everything(db_session):
    await create_order_return_state_machine(db_session)

    await install(db_session)

    assert await SystemConfigService(db_session).get(DEFAULT_VALUE_PER_CREDIT_KEY) == 1.0
    assert await _count(db_session, CustomField) == 1
    assert await _count(db_session, CustomFieldSetRelation) == 2
    assert await _store_credit_state_count(db_session) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_install_keeps_configured_rate(db_session):
    await create_order_return_state_machine(db_session)
    config = SystemConfigService(db_session)
    await config.set(DEFAULT_VALUE_PER_CREDIT_KEY, 3.0)
    await db_session.commit()

    await install(db_session)
    await install(db_session)

    assert await config.get(DEFAULT_VALUE_PER_CREDIT_KEY) == 3.0
    assert await _store_credit_state_count(db_session) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_uninstall_keeps_user_data(db_session):
    await create_order_return_state_machine(db_session)
    await install(db_session)
    await _seed_balance(db_session)

    await uninstall(db_session, keep_user_data=True)

    assert await _store_credit_state_count(db_session) == 0
    assert await _count(db_session, StoreCredit) == 1
    assert await _count(db_session, StoreCreditHistory) == 1
    assert await _count(db_session, CustomFieldSetRelation) == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_uninstall_removes_user_data(db_session):
    await create_order_return_state_machine(db_session)
    await install(db_session)
    await _seed_balance(db_session)

    await uninstall(db_session, keep_user_data=False)

    assert await _store_credit_state_count(db_session) == 0
    assert await _count(db_session, StoreCredit) == 0
    assert await _count(db_session, StoreCreditHistory) == 0
    assert await _count(db_session, CustomFieldSetRelation) == 0
    assert await SystemConfigService(db_session).get(DEFAULT_VALUE_PER_CREDIT_KEY) is None
