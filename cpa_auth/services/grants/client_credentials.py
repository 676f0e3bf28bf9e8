"""Client credentials grant: machine-to-machine tokens with no user."""

from typing import Mapping

from cpa_auth.core.exceptions import InvalidRequestError
from cpa_auth.core.guards import guard_not_none, guard_params
from cpa_auth.db.base import atomic
from cpa_auth.models.requests import ClientCredentialsGrant
from cpa_auth.models.responses import TokenResponse
from cpa_auth.services.grants.context import GrantContext, authenticate_client


async def handle(params: Mapping[str, str], context: GrantContext) -> TokenResponse:
    """Issue a client-bound access token for the requested domain."""
    with guard_params(ClientCredentialsGrant, params) as grant:
        client = await authenticate_client(context.clients, grant.client_id, grant.client_secret)
        domain = await context.domains.get_by_name(grant.domain)

        with guard_not_none(domain, InvalidRequestError("Unknown domain")) as found:
            async with atomic(context.session, "client_credentials_grant"):
                issued = await context.issuer.issue(client.id, found, user_id=None)

            return issued.to_response(scope=grant.scope)
