"""Install / uninstall steps for the store credit feature."""

from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.store_credit_service.models import StoreCredit, StoreCreditHistory
from services.store_credit_service.services.custom_field_setup import (
    ensure_value_per_unit_field,
    remove_value_per_unit_relations,
)
from services.store_credit_service.services.order_state_installer import (
    OrderStateInstaller,
)
from services.store_credit_service.services.system_config import (
    DEFAULT_VALUE_PER_CREDIT_KEY,
    SystemConfigService,
)
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def install(db: AsyncSession) -> None:
    """Seed the custom field, the order-return state and the default rate.

    Safe to run repeatedly.
    """
    await db.run_sync(lambda session: ensure_value_per_unit_field(session.connection()))

    config = SystemConfigService(db)
    if await config.get(DEFAULT_VALUE_PER_CREDIT_KEY) is None:
        await config.set(
            DEFAULT_VALUE_PER_CREDIT_KEY,
            get_settings().STORE_CREDIT_DEFAULT_VALUE_PER_CREDIT,
        )
    await db.commit()

    await OrderStateInstaller(db).install()
    logger.info("Store credit installed")


async def uninstall(db: AsyncSession, *, keep_user_data: bool = True) -> None:
    """Remove the order-return state, and all store credit data unless kept."""
    await OrderStateInstaller(db).uninstall()

    if keep_user_data:
        logger.info("Store credit uninstalled (user data kept)")
        return

    histories = await db.execute(delete(StoreCreditHistory))
    balances = await db.execute(delete(StoreCredit))
    await db.run_sync(
        lambda session: remove_value_per_unit_relations(session.connection())
    )
    await SystemConfigService(db).delete(DEFAULT_VALUE_PER_CREDIT_KEY)
    await db.commit()
    logger.info(
        "Store credit uninstalled: removed %d balances and %d history rows",
        balances.rowcount,
        histories.rowcount,
    )
