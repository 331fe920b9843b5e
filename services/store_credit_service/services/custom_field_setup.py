"""Seed the ``store_credit_value_per_unit`` custom field.

Runs against a synchronous ``Connection`` so the same code serves the
Alembic revision (``op.get_bind()``) and the plugin lifecycle
(``AsyncConnection.run_sync``). Every step is guarded: missing tables or
columns turn the step into a no-op.
"""

import uuid
from typing import Any, Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_credit_service.models import (
    CustomField,
    CustomFieldSet,
    CustomFieldSetRelation,
)
from sqlalchemy import Table, delete, func, insert, inspect, select
from sqlalchemy.engine import Connection

logger = get_logger(__name__)

SET_NAME = "store_credit"
FIELD_NAME = "store_credit_value_per_unit"
ATTACHED_ENTITIES = ("customer", "customer_group")

SET_CONFIG = {"label": {"en-GB": "Store credit"}}
FIELD_CONFIG = {
    "label": {"en-GB": "Value per 1 credit"},
    "helpText": {
        "en-GB": (
            "Overrides the default value per credit. Can be set on customers and "
            "customer groups (e.g. 1 = $1 per credit, 3 = $3 per credit)."
        ),
    },
    "componentName": "sw-field",
    "customFieldType": "float",
}

_SET_TABLE: Table = CustomFieldSet.__table__
_FIELD_TABLE: Table = CustomField.__table__
_RELATION_TABLE: Table = CustomFieldSetRelation.__table__


def _table_exists(connection: Connection, table: Table) -> bool:
    return inspect(connection).has_table(table.name)


def _column_names(connection: Connection, table: Table) -> set[str]:
    return {column["name"] for column in inspect(connection).get_columns(table.name)}


def _get_id_by_name(connection: Connection, table: Table, name: str) -> Optional[uuid.UUID]:
    return connection.execute(
        select(table.c.id).where(table.c.name == name).limit(1)
    ).scalar_one_or_none()


def _insert(connection: Connection, table: Table, data: dict[str, Any]) -> bool:
    """Insert only the keys the live table has. Returns False if none match."""
    columns = _column_names(connection, table)
    filtered = {key: value for key, value in data.items() if key in columns}
    if not filtered:
        return False
    connection.execute(insert(table).values(**filtered))
    return True


def _ensure_set_entity_relation(
    connection: Connection, set_id: uuid.UUID, entity_name: str
) -> None:
    columns = _column_names(connection, _RELATION_TABLE)
    if "entity_name" not in columns or "set_id" not in columns:
        return

    exists = connection.execute(
        select(func.count())
        .select_from(_RELATION_TABLE)
        .where(
            _RELATION_TABLE.c.set_id == set_id,
            _RELATION_TABLE.c.entity_name == entity_name,
        )
    ).scalar()
    if exists:
        return

    _insert(
        connection,
        _RELATION_TABLE,
        {
            "id": uuid.uuid4(),
            "set_id": set_id,
            "entity_name": entity_name,
            "created_at": utc_now(),
        },
    )
    logger.info("Attached custom field set %s to %s", SET_NAME, entity_name)


def ensure_value_per_unit_field(connection: Connection) -> None:
    """Create the set, the field and both entity relations if missing."""
    if not all(
        _table_exists(connection, table)
        for table in (_SET_TABLE, _FIELD_TABLE, _RELATION_TABLE)
    ):
        return

    set_id = _get_id_by_name(connection, _SET_TABLE, SET_NAME)
    if set_id is None:
        set_id = uuid.uuid4()
        _insert(
            connection,
            _SET_TABLE,
            {
                "id": set_id,
                "name": SET_NAME,
                "config": SET_CONFIG,
                "active": True,
                "created_at": utc_now(),
            },
        )
        logger.info("Created custom field set %s", SET_NAME)

    if _get_id_by_name(connection, _FIELD_TABLE, FIELD_NAME) is None:
        _insert(
            connection,
            _FIELD_TABLE,
            {
                "id": uuid.uuid4(),
                "name": FIELD_NAME,
                "type": "float",
                "config": FIELD_CONFIG,
                "active": True,
                "set_id": set_id,
                "created_at": utc_now(),
            },
        )
        logger.info("Created custom field %s", FIELD_NAME)

    for entity_name in ATTACHED_ENTITIES:
        _ensure_set_entity_relation(connection, set_id, entity_name)


def remove_value_per_unit_relations(connection: Connection) -> None:
    """Detach the set from its entities. Set and field rows are kept."""
    if not _table_exists(connection, _SET_TABLE) or not _table_exists(
        connection, _RELATION_TABLE
    ):
        return
    set_id = _get_id_by_name(connection, _SET_TABLE, SET_NAME)
    if set_id is None:
        return
    connection.execute(
        delete(_RELATION_TABLE).where(
            _RELATION_TABLE.c.set_id == set_id,
            _RELATION_TABLE.c.entity_name.in_(ATTACHED_ENTITIES),
        )
    )
