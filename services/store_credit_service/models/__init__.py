"""Store Credit Service models package.

Re-exports all models and enums so that:
  - ``from services.store_credit_service.models import StoreCredit`` works
  - Alembic env.py imports see every table
  - SQLAlchemy's mapper registry sees every model class on import

IMPORTANT: Every model class AND enum must be listed here.
When adding a new model, add both its import and its __all__ entry.
"""

from services.store_credit_service.models.custom_field import (  # noqa: F401
    CustomField,
    CustomFieldSet,
    CustomFieldSetRelation,
)
from services.store_credit_service.models.customer import (  # noqa: F401
    Customer,
    CustomerGroup,
)
from services.store_credit_service.models.enums import (  # noqa: F401
    DeductFailureKind,
    HistoryActionType,
)
from services.store_credit_service.models.state_machine import (  # noqa: F401
    StateMachine,
    StateMachineHistory,
    StateMachineState,
    StateMachineTransition,
)
from services.store_credit_service.models.store_credit import (  # noqa: F401
    StoreCredit,
    StoreCreditHistory,
)
from services.store_credit_service.models.system_config import (  # noqa: F401
    SystemConfig,
)

__all__ = [
    # Enums
    "DeductFailureKind",
    "HistoryActionType",
    # Store credit
    "StoreCredit",
    "StoreCreditHistory",
    # Customers
    "Customer",
    "CustomerGroup",
    # Custom fields
    "CustomField",
    "CustomFieldSet",
    "CustomFieldSetRelation",
    # State machine
    "StateMachine",
    "StateMachineHistory",
    "StateMachineState",
    "StateMachineTransition",
    # Config
    "SystemConfig",
]
