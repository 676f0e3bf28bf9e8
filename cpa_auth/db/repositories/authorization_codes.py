"""Authorization code repository."""

import time
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.core.logging import get_logger
from cpa_auth.db.models import AuthorizationCode
from cpa_auth.models.domain import AuthorizationCodeEntry

logger = get_logger(__name__)


class AuthorizationCodeRepository:
    """Repository for one-time authorization codes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        code: str,
        client_id: str,
        domain_id: int,
        user_id: int,
        redirect_uri: str,
        expires_at: datetime,
    ) -> AuthorizationCodeEntry:
        """Create a new authorization code."""
        entry = AuthorizationCode(
            code=code,
            client_id=client_id,
            domain_id=domain_id,
            user_id=user_id,
            redirect_uri=redirect_uri,
            expires_at=expires_at,
        )
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)

        logger.debug("db_query_complete", operation="create_authorization_code", id=entry.id)

        return AuthorizationCodeEntry.model_validate(entry)

    async def claim(
        self, code: str, client_id: str, redirect_uri: str, now: datetime
    ) -> Optional[AuthorizationCodeEntry]:
        """Consume a code bound to the given client and redirect URI.

        The check and the consumption are a single conditional update, so of
        two concurrent redemptions at most one matches a row. Returns None for
        unknown, consumed, expired or mismatched codes alike.
        """
        start_time = time.time()

        result = await self.session.execute(
            update(AuthorizationCode)
            .where(
                AuthorizationCode.code == code,
                AuthorizationCode.client_id == client_id,
                AuthorizationCode.redirect_uri == redirect_uri,
                AuthorizationCode.consumed_at.is_(None),
                AuthorizationCode.expires_at > now,
            )
            .values(consumed_at=now)
            .execution_options(synchronize_session=False)
        )
        claimed = result.rowcount == 1

        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "db_query_complete",
            operation="claim_authorization_code",
            claimed=claimed,
            duration_ms=round(duration_ms, 2),
        )

        if not claimed:
            return None

        row = await self.session.execute(
            select(AuthorizationCode)
            .where(AuthorizationCode.code == code)
            .execution_options(populate_existing=True)
        )
        return AuthorizationCodeEntry.model_validate(row.scalar_one())
