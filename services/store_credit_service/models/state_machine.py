"""Generic state machine tables (machines, states, transitions, history)."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class StateMachine(Base):
    __tablename__ = "state_machines"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    technical_name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )


class StateMachineState(Base):
    __tablename__ = "state_machine_states"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    technical_name: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    state_machine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("state_machines.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "state_machine_id", "technical_name", name="uq_state_machine_state_name"
        ),
    )


class StateMachineTransition(Base):
    __tablename__ = "state_machine_transitions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    action_name: Mapped[str] = mapped_column(String, nullable=False)
    state_machine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("state_machines.id"), nullable=False, index=True
    )
    from_state_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("state_machine_states.id"), nullable=False
    )
    to_state_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("state_machine_states.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "state_machine_id",
            "action_name",
            "from_state_id",
            "to_state_id",
            name="uq_state_machine_transition",
        ),
    )


class StateMachineHistory(Base):
    """Recorded state change of some entity (e.g. an order return)."""

    __tablename__ = "state_machine_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    state_machine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("state_machines.id"), nullable=False
    )
    entity_name: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    action_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    from_state_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("state_machine_states.id"), nullable=False
    )
    to_state_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("state_machine_states.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
