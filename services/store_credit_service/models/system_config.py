"""Key/value system configuration (e.g. ``StoreCredit.config.*``)."""

import uuid
from datetime import datetime
from typing import Any

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class SystemConfig(Base):
    __tablename__ = "system_config"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    config_key: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    config_value: Mapped[Any] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<SystemConfig {self.config_key}={self.config_value!r}>"
