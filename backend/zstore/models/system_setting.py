"""SystemSetting ORM — keyed operational documents (currently only "store_config").

Invariants:
    - key is the primary key; STORE_CONFIG_KEY names the global status row
    - A missing store_config row means the store is open

Design Decisions:
    - One row per settings document over a single wide table: new toggles do not
      need migrations on the hot read path
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from zstore.db.base import Base

STORE_CONFIG_KEY = "store_config"


class SystemSetting(Base):
    """Operational status document owned by the store owner panel."""
    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    is_global_open: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
