"""Refresh token grant with single-use rotation."""

from datetime import datetime, timezone
from typing import Mapping

from cpa_auth.core.exceptions import InvalidGrantError
from cpa_auth.core.guards import guard_not_none, guard_params
from cpa_auth.db.base import atomic
from cpa_auth.models.requests import RefreshTokenGrant
from cpa_auth.models.responses import TokenResponse
from cpa_auth.services.grants.context import GrantContext


async def handle(params: Mapping[str, str], context: GrantContext) -> TokenResponse:
    """Rotate a refresh token into a new access token and refresh token.

    The presented refresh token is consumed in the same transaction that
    creates its successors, so it can never be redeemed twice.
    """
    with guard_params(RefreshTokenGrant, params) as grant:
        now = datetime.now(timezone.utc)

        async with atomic(context.session, "refresh_token_grant"):
            claimed = await context.refresh_tokens.claim(grant.refresh_token, grant.client_id, now)

            with guard_not_none(claimed, InvalidGrantError("Invalid refresh token")) as previous:
                domain = await context.domains.get_by_id(previous.domain_id)
                issued = await context.issuer.issue(
                    previous.client_id, domain, previous.user_id, with_refresh_token=True
                )

        return issued.to_response()
