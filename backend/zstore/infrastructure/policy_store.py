"""SQL Policy Store — ban list and store-status reads behind the PolicyStore protocol.

Invariants:
    - Reads never write; each read uses its own short session
    - Every read failure (driver, timeout, mapping) surfaces as PolicyReadError
    - Missing store_config row reads as open (is_global_open -> True)

Design Decisions:
    - Primary-key lookups via session.get(): one indexed read per check, no ORM joins
    - Write helpers (ban_ip, unban_ip, set_global_open) live here for operator scripts
      and tests; the HTTP surface never calls them
"""

import logging

from sqlalchemy import delete

from zstore.core.errors import DatabaseError, PolicyReadError
from zstore.infrastructure.database import DatabaseSessionManager
from zstore.models.banned_ip import BannedIp
from zstore.models.system_setting import STORE_CONFIG_KEY, SystemSetting

logger = logging.getLogger(__name__)


class SqlPolicyStore:
    """PolicyStore implementation over the async SQLAlchemy session manager."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def is_banned(self, client_ip: str) -> bool:
        try:
            async with self._db.session() as session:
                record = await session.get(BannedIp, client_ip)
                return record is not None
        except DatabaseError as e:
            raise PolicyReadError(e.message, "banned_ips") from e
        except Exception as e:
            raise PolicyReadError(str(e), "banned_ips") from e

    async def is_global_open(self) -> bool:
        try:
            async with self._db.session() as session:
                config = await session.get(SystemSetting, STORE_CONFIG_KEY)
                return True if config is None else bool(config.is_global_open)
        except DatabaseError as e:
            raise PolicyReadError(e.message, STORE_CONFIG_KEY) from e
        except Exception as e:
            raise PolicyReadError(str(e), STORE_CONFIG_KEY) from e

    # ─── Operator writes ─────────────────────────────────────────

    async def ban_ip(self, client_ip: str, reason: str | None = None) -> None:
        async with self._db.session() as session:
            existing = await session.get(BannedIp, client_ip)
            if existing is None:
                session.add(BannedIp(ip=client_ip, reason=reason))
            else:
                existing.reason = reason
            await session.commit()
        logger.info("IP banned", extra={"client_ip": client_ip})

    async def unban_ip(self, client_ip: str) -> None:
        async with self._db.session() as session:
            await session.execute(delete(BannedIp).where(BannedIp.ip == client_ip))
            await session.commit()
        logger.info("IP unbanned", extra={"client_ip": client_ip})

    async def set_global_open(self, is_open: bool) -> None:
        async with self._db.session() as session:
            config = await session.get(SystemSetting, STORE_CONFIG_KEY)
            if config is None:
                session.add(SystemSetting(key=STORE_CONFIG_KEY, is_global_open=is_open))
            else:
                config.is_global_open = is_open
            await session.commit()
        logger.info(f"Store global status set to {'open' if is_open else 'closed'}")
