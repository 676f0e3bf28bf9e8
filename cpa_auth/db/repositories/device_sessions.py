"""Device pairing session repository."""

import time
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.core.logging import get_logger
from cpa_auth.db.models import DeviceSession, DeviceSessionStatus
from cpa_auth.models.domain import DeviceSessionEntry

logger = get_logger(__name__)


class DeviceSessionRepository:
    """Repository for device pairing sessions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        device_code: str,
        user_code: str,
        client_id: str,
        domain_id: int,
        interval: int,
        expires_at: datetime,
    ) -> DeviceSessionEntry:
        """Create a pending device session."""
        entry = DeviceSession(
            device_code=device_code,
            user_code=user_code,
            client_id=client_id,
            domain_id=domain_id,
            status=DeviceSessionStatus.PENDING,
            interval=interval,
            expires_at=expires_at,
        )
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)

        logger.debug(
            "db_query_complete",
            operation="create_device_session",
            id=entry.id,
            client_id=client_id,
        )

        return DeviceSessionEntry.model_validate(entry)

    async def user_code_exists(self, user_code: str) -> bool:
        result = await self.session.execute(
            select(DeviceSession.id).where(DeviceSession.user_code == user_code)
        )
        return result.first() is not None

    async def get_by_device_code(self, device_code: str) -> Optional[DeviceSessionEntry]:
        start_time = time.time()

        result = await self.session.execute(
            select(DeviceSession)
            .where(DeviceSession.device_code == device_code)
            .execution_options(populate_existing=True)
        )
        entry = result.scalar_one_or_none()

        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "db_query_complete",
            operation="get_device_session",
            found=entry is not None,
            duration_ms=round(duration_ms, 2),
        )

        return DeviceSessionEntry.model_validate(entry) if entry else None

    async def get_by_user_code(self, user_code: str) -> Optional[DeviceSessionEntry]:
        result = await self.session.execute(
            select(DeviceSession)
            .where(DeviceSession.user_code == user_code)
            .execution_options(populate_existing=True)
        )
        entry = result.scalar_one_or_none()
        return DeviceSessionEntry.model_validate(entry) if entry else None

    async def claim_approved(
        self, device_code: str, client_id: str, now: datetime
    ) -> Optional[DeviceSessionEntry]:
        """Consume an approved, unexpired session exactly once."""
        result = await self.session.execute(
            update(DeviceSession)
            .where(
                DeviceSession.device_code == device_code,
                DeviceSession.client_id == client_id,
                DeviceSession.status == DeviceSessionStatus.APPROVED,
                DeviceSession.consumed_at.is_(None),
                DeviceSession.expires_at > now,
            )
            .values(consumed_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.get_by_device_code(device_code)

    async def resolve(
        self, user_code: str, user_id: int, approved: bool, now: datetime
    ) -> Optional[DeviceSessionEntry]:
        """Move a pending session to approved or denied.

        Only a pending, unexpired session transitions, so a user code can be
        acted on once.
        """
        status = DeviceSessionStatus.APPROVED if approved else DeviceSessionStatus.DENIED
        result = await self.session.execute(
            update(DeviceSession)
            .where(
                DeviceSession.user_code == user_code,
                DeviceSession.status == DeviceSessionStatus.PENDING,
                DeviceSession.expires_at > now,
            )
            .values(status=status, user_id=user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.get_by_user_code(user_code)
