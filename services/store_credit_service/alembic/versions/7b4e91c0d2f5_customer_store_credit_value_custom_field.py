"""customer_store_credit_value_custom_field

Seeds the ``store_credit_value_per_unit`` custom field and attaches its set
to customers and customer groups. Safe to re-run; skipped entirely when the
custom field tables are absent.

Revision ID: 7b4e91c0d2f5
Revises: 3f1c2b7d9a10
Create Date: 2026-01-28 22:40:00.000000

"""
from typing import Sequence, Union

from alembic import op

from services.store_credit_service.services.custom_field_setup import (
    ensure_value_per_unit_field,
    remove_value_per_unit_relations,
)


# revision identifiers, used by Alembic.
revision: str = "7b4e91c0d2f5"
down_revision: Union[str, Sequence[str], None] = "3f1c2b7d9a10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    ensure_value_per_unit_field(op.get_bind())


def downgrade() -> None:
    """Detach the set from customer entities; field definitions are kept."""
    remove_value_per_unit_relations(op.get_bind())
