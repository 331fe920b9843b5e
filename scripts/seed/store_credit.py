#!/usr/bin/env python3
"""
Seed store credit data for development/testing.

Creates the ``order_return.state`` machine with its base states, a customer
group with a custom rate, sample customers and a few ledger entries via
``StoreCreditManager``.

Idempotent: checks if rows already exist before creating.
"""

import asyncio
import os
import sys
import uuid

# Add project root to path
project_root = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)
sys.path.insert(0, project_root)

from libs.db.config import AsyncSessionLocal
from services.store_credit_service.models import (
    Customer,
    CustomerGroup,
    StateMachine,
    StateMachineState,
)
from services.store_credit_service.services.lifecycle import install
from services.store_credit_service.services.repository import (
    SqlAlchemyStoreCreditRepository,
)
from services.store_credit_service.services.store_credit_manager import (
    StoreCreditManager,
)
from services.store_credit_service.services.system_config import SystemConfigService
from sqlalchemy import select

# ---------------------------------------------------------------------------
# Seed definitions
# ---------------------------------------------------------------------------

ORDER_RETURN_STATES = [
    ("open", "Open"),
    ("in_progress", "In progress"),
    ("done", "Done"),
    ("cancelled", "Cancelled"),
]

SEED_GROUP = {
    "id": uuid.UUID("00000000-0000-0000-0000-00000000a001"),
    "name": "Wholesale",
    "custom_fields": {"store_credit_value_per_unit": 2.0},
}

SEED_CUSTOMERS = [
    {
        "id": uuid.UUID("00000000-0000-0000-0000-00000000c001"),
        "auth_id": "seed-customer-default-rate",
        "email": "jane@example.com",
        "first_name": "Jane",
        "last_name": "Default",
        "custom_fields": None,
        "group_id": None,
        "credits": [(50.0, "Welcome credit"), (-10.0, "Order #1001")],
    },
    {
        "id": uuid.UUID("00000000-0000-0000-0000-00000000c002"),
        "auth_id": "seed-customer-custom-rate",
        "email": "carl@example.com",
        "first_name": "Carl",
        "last_name": "Custom",
        "custom_fields": {"store_credit_value_per_unit": 3.0},
        "group_id": None,
        "credits": [(90.0, "Return refunded as store credit")],
    },
    {
        "id": uuid.UUID("00000000-0000-0000-0000-00000000c003"),
        "auth_id": "seed-customer-group-rate",
        "email": "gina@example.com",
        "first_name": "Gina",
        "last_name": "Group",
        "custom_fields": None,
        "group_id": SEED_GROUP["id"],
        "credits": [],
    },
]


async def seed_state_machine(session) -> None:
    result = await session.execute(
        select(StateMachine).where(StateMachine.technical_name == "order_return.state")
    )
    machine = result.scalar_one_or_none()
    if machine is None:
        machine = StateMachine(technical_name="order_return.state", name="Order return state")
        session.add(machine)
        await session.flush()
        print("  Created state machine order_return.state")

    for technical_name, name in ORDER_RETURN_STATES:
        result = await session.execute(
            select(StateMachineState).where(
                StateMachineState.state_machine_id == machine.id,
                StateMachineState.technical_name == technical_name,
            )
        )
        if result.scalar_one_or_none() is None:
            session.add(
                StateMachineState(
                    technical_name=technical_name,
                    name=name,
                    state_machine_id=machine.id,
                )
            )
    await session.commit()


async def seed_customers(session) -> list[dict]:
    if await session.get(CustomerGroup, SEED_GROUP["id"]) is None:
        session.add(CustomerGroup(**SEED_GROUP))

    created = []
    for data in SEED_CUSTOMERS:
        if await session.get(Customer, data["id"]) is not None:
            print(f"  Customer {data['email']} exists, skipping")
            continue
        fields = {k: v for k, v in data.items() if k != "credits"}
        session.add(Customer(**fields))
        created.append(data)
        print(f"  Created customer {data['email']}")
    await session.commit()
    return created


async def seed_ledger(session, customers: list[dict]) -> None:
    manager = StoreCreditManager(
        SqlAlchemyStoreCreditRepository(session), SystemConfigService(session)
    )
    for data in customers:
        for amount, reason in data["credits"]:
            if amount > 0:
                await manager.add_credit(data["id"], amount, reason=reason)
            else:
                result = await manager.deduct_credit(data["id"], -amount, reason=reason)
                if not result.ok:
                    print(f"  Deduct for {data['email']} failed: {result.message}")


async def main() -> None:
    print("Seeding store credit data...")
    async with AsyncSessionLocal() as session:
        await seed_state_machine(session)
        await install(session)
        customers = await seed_customers(session)
        await seed_ledger(session, customers)
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
