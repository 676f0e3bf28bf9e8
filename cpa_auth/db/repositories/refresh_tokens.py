"""Refresh token repository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.core.logging import get_logger
from cpa_auth.db.models import RefreshToken
from cpa_auth.models.domain import RefreshTokenEntry

logger = get_logger(__name__)


class RefreshTokenRepository:
    """Repository for single-use refresh tokens."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        token: str,
        client_id: str,
        domain_id: int,
        user_id: Optional[int],
        access_token_id: int,
        expires_at: Optional[datetime],
    ) -> RefreshTokenEntry:
        entry = RefreshToken(
            token=token,
            client_id=client_id,
            domain_id=domain_id,
            user_id=user_id,
            access_token_id=access_token_id,
            expires_at=expires_at,
        )
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return RefreshTokenEntry.model_validate(entry)

    async def claim(self, token: str, client_id: str, now: datetime) -> Optional[RefreshTokenEntry]:
        """Consume an unexpired refresh token owned by the client.

        Returns None when the token is unknown, owned by another client,
        expired or already rotated.
        """
        result = await self.session.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token == token,
                RefreshToken.client_id == client_id,
                RefreshToken.consumed_at.is_(None),
                or_(RefreshToken.expires_at.is_(None), RefreshToken.expires_at > now),
            )
            .values(consumed_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.debug("db_query_complete", operation="claim_refresh_token", claimed=False)
            return None

        row = await self.session.execute(
            select(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(populate_existing=True)
        )
        return RefreshTokenEntry.model_validate(row.scalar_one())
