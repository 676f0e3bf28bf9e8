"""Device code grant: a paired device polls until the user acts."""

from datetime import datetime, timezone
from typing import Mapping

from cpa_auth.core.exceptions import (
    AccessDeniedError,
    AuthorizationPendingError,
    ExpiredTokenError,
    InvalidGrantError,
)
from cpa_auth.core.guards import guard_condition, guard_not_none, guard_params
from cpa_auth.db.base import atomic
from cpa_auth.db.models import DeviceSessionStatus
from cpa_auth.models.domain import DeviceSessionEntry
from cpa_auth.models.requests import DeviceCodeGrant
from cpa_auth.models.responses import TokenResponse
from cpa_auth.services.grants.context import GrantContext, authenticate_client


async def handle(params: Mapping[str, str], context: GrantContext) -> TokenResponse:
    """Exchange an approved device code for tokens.

    Polling never changes the session; only the successful exchange consumes
    it. Sessions of other clients and consumed sessions look unknown.
    """
    with guard_params(DeviceCodeGrant, params) as grant:
        client = await authenticate_client(context.clients, grant.client_id, grant.client_secret)
        pairing = await context.device_sessions.get_by_device_code(grant.device_code)

        owned = (
            pairing is not None
            and pairing.client_id == client.id
            and pairing.consumed_at is None
        )
        with guard_condition(owned, InvalidGrantError("Invalid device code")):
            return await _exchange(grant, client.id, pairing, context)


async def _exchange(
    grant: DeviceCodeGrant, client_id: str, pairing: DeviceSessionEntry, context: GrantContext
) -> TokenResponse:
    now = datetime.now(timezone.utc)

    if pairing.status == DeviceSessionStatus.DENIED:
        raise AccessDeniedError("The user denied the pairing request")
    if pairing.is_expired(now):
        raise ExpiredTokenError("The device code has expired")
    if pairing.status == DeviceSessionStatus.PENDING:
        raise AuthorizationPendingError(
            "The user has not yet approved the pairing request",
            interval=pairing.interval,
        )

    async with atomic(context.session, "device_code_grant"):
        claimed = await context.device_sessions.claim_approved(grant.device_code, client_id, now)
        with guard_not_none(claimed, InvalidGrantError("Invalid device code")) as approved:
            domain = await context.domains.get_by_id(approved.domain_id)
            issued = await context.issuer.issue(
                client_id, domain, approved.user_id, with_refresh_token=True
            )

    return issued.to_response()
