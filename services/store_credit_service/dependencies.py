"""FastAPI dependencies wiring the ledger to the request's DB session."""

from fastapi import Depends
from libs.db.session import get_async_db
from services.store_credit_service.services.repository import (
    SqlAlchemyStoreCreditRepository,
)
from services.store_credit_service.services.store_credit_manager import (
    StoreCreditManager,
)
from services.store_credit_service.services.system_config import SystemConfigService
from sqlalchemy.ext.asyncio import AsyncSession


def get_store_credit_repository(
    db: AsyncSession = Depends(get_async_db),
) -> SqlAlchemyStoreCreditRepository:
    return SqlAlchemyStoreCreditRepository(db)


def get_system_config(
    db: AsyncSession = Depends(get_async_db),
) -> SystemConfigService:
    return SystemConfigService(db)


def get_store_credit_manager(
    repository: SqlAlchemyStoreCreditRepository = Depends(get_store_credit_repository),
    config: SystemConfigService = Depends(get_system_config),
) -> StoreCreditManager:
    return StoreCreditManager(repository, config)
