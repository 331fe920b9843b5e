"""Provision the "Refund as Store Credits" order-return state.

Adds a ``store_credit`` state to the ``order_return.state`` machine plus the
transitions ``open -> store_credit`` and ``store_credit -> open``. Install
is idempotent; uninstall removes the transitions, any state history rows
pointing at the state, and the state itself.
"""

import uuid

from libs.common.logging import get_logger
from services.store_credit_service.models import (
    StateMachine,
    StateMachineHistory,
    StateMachineState,
    StateMachineTransition,
)
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

STATE_MACHINE_TECHNICAL_NAME = "order_return.state"
NEW_STATE_TECHNICAL_NAME = "store_credit"
NEW_STATE_NAME = "Refund as Store Credits"

TRANSITIONS = [
    {"action_name": "mark_as_store_credit", "from": "open", "to": "store_credit"},
    {"action_name": "mark_as_open", "from": "store_credit", "to": "open"},
]


class StateMachineNotFoundError(RuntimeError):
    """The target state machine does not exist; installation cannot proceed."""


class StateNotFoundError(RuntimeError):
    """A state referenced by a transition does not exist."""


class OrderStateInstaller:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def manage(self, is_adding: bool) -> None:
        if is_adding:
            await self.install()
        else:
            await self.uninstall()

    async def install(self) -> None:
        state_machine_id = await self._get_state_machine_id()

        if await self._get_new_state_id(state_machine_id) is None:
            self.db.add(
                StateMachineState(
                    technical_name=NEW_STATE_TECHNICAL_NAME,
                    name=NEW_STATE_NAME,
                    state_machine_id=state_machine_id,
                )
            )
            await self.db.flush()
            logger.info(
                "Created state %s in %s",
                NEW_STATE_TECHNICAL_NAME,
                STATE_MACHINE_TECHNICAL_NAME,
            )

        existing = await self._existing_transition_keys(state_machine_id)
        created = 0
        for transition in await self._build_transitions(state_machine_id):
            key = (
                transition.action_name,
                transition.from_state_id,
                transition.to_state_id,
            )
            if key in existing:
                continue
            self.db.add(transition)
            created += 1

        await self.db.commit()
        logger.info(
            "Order state install complete (%d new transitions)", created
        )

    async def uninstall(self) -> None:
        state_machine_id = await self._get_state_machine_id()
        state_id = await self._get_new_state_id(state_machine_id)
        if state_id is None:
            logger.info("State %s not installed, nothing to remove", NEW_STATE_TECHNICAL_NAME)
            return

        action_names = [t["action_name"] for t in TRANSITIONS]
        await self.db.execute(
            delete(StateMachineTransition).where(
                StateMachineTransition.state_machine_id == state_machine_id,
                StateMachineTransition.action_name.in_(action_names),
                or_(
                    StateMachineTransition.from_state_id == state_id,
                    StateMachineTransition.to_state_id == state_id,
                ),
            )
        )
        history_result = await self.db.execute(
            delete(StateMachineHistory).where(
                or_(
                    StateMachineHistory.from_state_id == state_id,
                    StateMachineHistory.to_state_id == state_id,
                )
            )
        )
        await self.db.execute(
            delete(StateMachineState).where(StateMachineState.id == state_id)
        )
        await self.db.commit()
        logger.info(
            "Removed state %s (%d history rows)",
            NEW_STATE_TECHNICAL_NAME,
            history_result.rowcount,
        )

    async def _get_state_machine_id(self) -> uuid.UUID:
        result = await self.db.execute(
            select(StateMachine.id).where(
                StateMachine.technical_name == STATE_MACHINE_TECHNICAL_NAME
            )
        )
        state_machine_id = result.scalar_one_or_none()
        if state_machine_id is None:
            raise StateMachineNotFoundError(
                f'State machine "{STATE_MACHINE_TECHNICAL_NAME}" not found.'
            )
        return state_machine_id

    async def _get_new_state_id(self, state_machine_id: uuid.UUID):
        result = await self.db.execute(
            select(StateMachineState.id).where(
                StateMachineState.technical_name == NEW_STATE_TECHNICAL_NAME,
                StateMachineState.state_machine_id == state_machine_id,
            )
        )
        return result.scalar_one_or_none()

    async def _get_state_id(
        self, technical_name: str, state_machine_id: uuid.UUID
    ) -> uuid.UUID:
        result = await self.db.execute(
            select(StateMachineState.id).where(
                StateMachineState.technical_name == technical_name,
                StateMachineState.state_machine_id == state_machine_id,
            )
        )
        state_id = result.scalar_one_or_none()
        if state_id is None:
            raise StateNotFoundError(
                f'State "{technical_name}" not found in state machine "{state_machine_id}".'
            )
        return state_id

    async def _build_transitions(
        self, state_machine_id: uuid.UUID
    ) -> list[StateMachineTransition]:
        transitions = []
        for transition in TRANSITIONS:
            transitions.append(
                StateMachineTransition(
                    action_name=transition["action_name"],
                    from_state_id=await self._get_state_id(
                        transition["from"], state_machine_id
                    ),
                    to_state_id=await self._get_state_id(
                        transition["to"], state_machine_id
                    ),
                    state_machine_id=state_machine_id,
                )
            )
        return transitions

    async def _existing_transition_keys(
        self, state_machine_id: uuid.UUID
    ) -> set[tuple[str, uuid.UUID, uuid.UUID]]:
        result = await self.db.execute(
            select(
                StateMachineTransition.action_name,
                StateMachineTransition.from_state_id,
                StateMachineTransition.to_state_id,
            ).where(StateMachineTransition.state_machine_id == state_machine_id)
        )
        return {tuple(row) for row in result.all()}
