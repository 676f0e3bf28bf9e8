"""Access token repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.core.logging import get_logger
from cpa_auth.db.models import AccessToken
from cpa_auth.models.domain import AccessTokenEntry

logger = get_logger(__name__)


class AccessTokenRepository:
    """Repository for bearer access tokens."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        token: str,
        client_id: str,
        domain_id: int,
        user_id: Optional[int],
        expires_at: Optional[datetime],
    ) -> AccessTokenEntry:
        """Add an access token to the current transaction."""
        entry = AccessToken(
            token=token,
            client_id=client_id,
            domain_id=domain_id,
            user_id=user_id,
            expires_at=expires_at,
        )
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)

        logger.debug(
            "db_query_complete",
            operation="create_access_token",
            id=entry.id,
            client_id=client_id,
        )

        return AccessTokenEntry.model_validate(entry)

    async def get_by_token(self, token: str) -> Optional[AccessTokenEntry]:
        result = await self.session.execute(select(AccessToken).where(AccessToken.token == token))
        entry = result.scalar_one_or_none()
        return AccessTokenEntry.model_validate(entry) if entry else None
