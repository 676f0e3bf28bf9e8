"""Access and refresh token issuance shared by every grant."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from cpa_auth.config import OAuthSettings
from cpa_auth.core.logging import get_logger
from cpa_auth.db.repositories import AccessTokenRepository, RefreshTokenRepository
from cpa_auth.models.domain import AccessTokenEntry, DomainEntry, RefreshTokenEntry
from cpa_auth.models.responses import TokenResponse
from cpa_auth.services import identifiers

logger = get_logger(__name__)


@dataclass
class IssuedTokens:
    access_token: AccessTokenEntry
    domain: DomainEntry
    expires_in: int
    refresh_token: Optional[RefreshTokenEntry] = None

    def to_response(self, scope: Optional[str] = None) -> TokenResponse:
        return TokenResponse(
            access_token=self.access_token.token,
            token_type="bearer",
            expires_in=self.expires_in,
            domain=self.domain.name,
            domain_display_name=self.domain.display_name,
            refresh_token=self.refresh_token.token if self.refresh_token else None,
            scope=scope,
        )


class TokenIssuer:
    """Creates token rows inside the caller's transaction.

    Callers wrap ``issue`` in ``atomic`` so the tokens, and any artifact
    consumed to obtain them, commit together.
    """

    def __init__(
        self,
        access_tokens: AccessTokenRepository,
        refresh_tokens: RefreshTokenRepository,
        settings: OAuthSettings,
    ):
        self.access_tokens = access_tokens
        self.refresh_tokens = refresh_tokens
        self.settings = settings

    async def issue(
        self,
        client_id: str,
        domain: DomainEntry,
        user_id: Optional[int],
        with_refresh_token: bool = False,
    ) -> IssuedTokens:
        """Create an access token and, for user-bound grants, a refresh token.

        Args:
            client_id: Client the tokens are issued to
            domain: Domain the access token grants access to
            user_id: Resource owner, or None for client-only tokens
            with_refresh_token: Also issue a single-use refresh token

        Returns:
            IssuedTokens holding the persisted rows
        """
        now = datetime.now(timezone.utc)
        lifetime = self.settings.access_token_lifetime

        access_token = await self.access_tokens.create(
            token=identifiers.access_token(),
            client_id=client_id,
            domain_id=domain.id,
            user_id=user_id,
            expires_at=now + timedelta(seconds=lifetime),
        )

        refresh_token = None
        if with_refresh_token:
            refresh_lifetime = self.settings.refresh_token_lifetime
            refresh_token = await self.refresh_tokens.create(
                token=identifiers.refresh_token(),
                client_id=client_id,
                domain_id=domain.id,
                user_id=user_id,
                access_token_id=access_token.id,
                expires_at=now + timedelta(seconds=refresh_lifetime) if refresh_lifetime else None,
            )

        logger.info(
            "access_token_created",
            client_id=client_id,
            domain=domain.name,
            user_bound=user_id is not None,
            with_refresh_token=refresh_token is not None,
        )

        return IssuedTokens(
            access_token=access_token,
            domain=domain,
            expires_in=lifetime,
            refresh_token=refresh_token,
        )
