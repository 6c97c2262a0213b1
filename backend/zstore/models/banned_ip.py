"""BannedIp ORM — one row per permanently banned requester IP.

Invariants:
    - ip is the primary key (existence alone denies access)
    - No expiry, no severity: reason and banned_at are informational only

Design Decisions:
    - String(45) fits the longest textual IPv6 form (incl. IPv4-mapped suffix)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from zstore.db.base import Base


class BannedIp(Base):
    """Ban record keyed by requester network identity."""
    __tablename__ = "banned_ips"

    ip: Mapped[str] = mapped_column(String(45), primary_key=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    banned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
