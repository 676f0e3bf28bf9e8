"""Authorization code grant: redeem a code issued at the consent step."""

from datetime import datetime, timezone
from typing import Mapping

from cpa_auth.core.exceptions import InvalidGrantError
from cpa_auth.core.guards import guard_not_none, guard_params
from cpa_auth.db.base import atomic
from cpa_auth.models.requests import AuthorizationCodeGrant
from cpa_auth.models.responses import TokenResponse
from cpa_auth.services.grants.context import GrantContext


async def handle(params: Mapping[str, str], context: GrantContext) -> TokenResponse:
    """Consume the code and issue tokens bound to its client, domain and user.

    Unknown, consumed, expired and mismatched codes share one error so the
    response reveals nothing about which check failed.
    """
    with guard_params(AuthorizationCodeGrant, params) as grant:
        now = datetime.now(timezone.utc)

        async with atomic(context.session, "authorization_code_grant"):
            claimed = await context.codes.claim(grant.code, grant.client_id, grant.redirect_uri, now)

            with guard_not_none(claimed, InvalidGrantError("Invalid authorization code")) as code:
                domain = await context.domains.get_by_id(code.domain_id)
                issued = await context.issuer.issue(
                    code.client_id, domain, code.user_id, with_refresh_token=True
                )

        return issued.to_response()
