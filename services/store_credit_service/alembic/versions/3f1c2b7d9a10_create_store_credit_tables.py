"""create_store_credit_tables

Revision ID: 3f1c2b7d9a10
Revises:
Create Date: 2026-01-28 22:40:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = "3f1c2b7d9a10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(JSONB(), "postgresql")


def _timestamps(*, updated: bool = False) -> list[sa.Column]:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if updated:
        columns.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False))
    return columns


def upgrade() -> None:
    """Upgrade schema - customers, custom fields, state machines, store credit."""

    op.create_table(
        "customer_groups",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("custom_fields", JSON_TYPE, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "customers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("auth_id", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("group_id", sa.Uuid(), nullable=True),
        sa.Column("custom_fields", JSON_TYPE, nullable=True),
        *_timestamps(updated=True),
        sa.ForeignKeyConstraint(["group_id"], ["customer_groups.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_customers_auth_id", "customers", ["auth_id"], unique=True)

    op.create_table(
        "custom_field_sets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("config", JSON_TYPE, nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "custom_fields",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("config", JSON_TYPE, nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("set_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["set_id"], ["custom_field_sets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "custom_field_set_relations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("set_id", sa.Uuid(), nullable=False),
        sa.Column("entity_name", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["set_id"], ["custom_field_sets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("set_id", "entity_name", name="uq_custom_field_set_entity"),
    )

    op.create_table(
        "state_machines",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("technical_name", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("technical_name"),
    )
    op.create_table(
        "state_machine_states",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("technical_name", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("state_machine_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["state_machine_id"], ["state_machines.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "state_machine_id", "technical_name", name="uq_state_machine_state_name"
        ),
    )
    op.create_index(
        "ix_state_machine_states_state_machine_id",
        "state_machine_states",
        ["state_machine_id"],
    )
    op.create_table(
        "state_machine_transitions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("action_name", sa.String(), nullable=False),
        sa.Column("state_machine_id", sa.Uuid(), nullable=False),
        sa.Column("from_state_id", sa.Uuid(), nullable=False),
        sa.Column("to_state_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["state_machine_id"], ["state_machines.id"]),
        sa.ForeignKeyConstraint(["from_state_id"], ["state_machine_states.id"]),
        sa.ForeignKeyConstraint(["to_state_id"], ["state_machine_states.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "state_machine_id",
            "action_name",
            "from_state_id",
            "to_state_id",
            name="uq_state_machine_transition",
        ),
    )
    op.create_index(
        "ix_state_machine_transitions_state_machine_id",
        "state_machine_transitions",
        ["state_machine_id"],
    )
    op.create_table(
        "state_machine_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("state_machine_id", sa.Uuid(), nullable=False),
        sa.Column("entity_name", sa.String(), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("action_name", sa.String(), nullable=True),
        sa.Column("from_state_id", sa.Uuid(), nullable=False),
        sa.Column("to_state_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["state_machine_id"], ["state_machines.id"]),
        sa.ForeignKeyConstraint(["from_state_id"], ["state_machine_states.id"]),
        sa.ForeignKeyConstraint(["to_state_id"], ["state_machine_states.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "system_config",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("config_key", sa.String(), nullable=False),
        sa.Column("config_value", JSON_TYPE, nullable=True),
        *_timestamps(updated=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_system_config_config_key", "system_config", ["config_key"], unique=True
    )

    op.create_table(
        "store_credits",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("balance", sa.Float(), nullable=False),
        sa.Column("currency_id", sa.String(), nullable=True),
        *_timestamps(updated=True),
        sa.CheckConstraint("balance >= 0", name="ck_store_credit_balance_non_negative"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_store_credits_customer_id", "store_credits", ["customer_id"], unique=True
    )

    action_type_enum = sa.Enum("add", "deduct", name="store_credit_action_type_enum")
    op.create_table(
        "store_credit_histories",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_credit_id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=True),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("credits", sa.Float(), nullable=False),
        sa.Column("currency_id", sa.String(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("action_type", action_type_enum, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["store_credit_id"], ["store_credits.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_store_credit_histories_store_credit_id",
        "store_credit_histories",
        ["store_credit_id"],
    )
    op.create_index(
        "ix_store_credit_histories_credit_created",
        "store_credit_histories",
        ["store_credit_id", "created_at"],
    )


def downgrade() -> None:
    """Downgrade schema - drop every table created above."""
    op.drop_index("ix_store_credit_histories_credit_created", table_name="store_credit_histories")
    op.drop_index("ix_store_credit_histories_store_credit_id", table_name="store_credit_histories")
    op.drop_table("store_credit_histories")
    sa.Enum(name="store_credit_action_type_enum").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_store_credits_customer_id", table_name="store_credits")
    op.drop_table("store_credits")
    op.drop_index("ix_system_config_config_key", table_name="system_config")
    op.drop_table("system_config")
    op.drop_table("state_machine_history")
    op.drop_index("ix_state_machine_transitions_state_machine_id", table_name="state_machine_transitions")
    op.drop_table("state_machine_transitions")
    op.drop_index("ix_state_machine_states_state_machine_id", table_name="state_machine_states")
    op.drop_table("state_machine_states")
    op.drop_table("state_machines")
    op.drop_table("custom_field_set_relations")
    op.drop_table("custom_fields")
    op.drop_table("custom_field_sets")
    op.drop_index("ix_customers_auth_id", table_name="customers")
    op.drop_table("customers")
    op.drop_table("customer_groups")
