"""Database-backed system configuration (configuration port implementation)."""

from typing import Any

from libs.common.logging import get_logger
from services.store_credit_service.models import SystemConfig
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_VALUE_PER_CREDIT_KEY = "StoreCredit.config.defaultValuePerCredit"


class SystemConfigService:
    """Read and write ``system_config`` rows by key."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, key: str) -> Any:
        """Return the stored value for ``key`` or None."""
        result = await self.db.execute(
            select(SystemConfig.config_value).where(SystemConfig.config_key == key)
        )
        return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> SystemConfig:
        """Insert or update ``key``. The caller commits."""
        result = await self.db.execute(
            select(SystemConfig).where(SystemConfig.config_key == key)
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            entry = SystemConfig(config_key=key, config_value=value)
            self.db.add(entry)
        else:
            entry.config_value = value
        await self.db.flush()
        logger.info("System config %s set to %r", key, value)
        return entry

    async def delete(self, key: str) -> None:
        await self.db.execute(delete(SystemConfig).where(SystemConfig.config_key == key))
