"""Token endpoint grant dispatch.

Each grant type URN maps to a handler taking the request parameters and a
``GrantContext`` and returning a ``TokenResponse`` or raising an
``OAuthError``.
"""

from typing import Awaitable, Callable, Dict, Mapping

from cpa_auth.core.exceptions import InvalidRequestError, OAuthError
from cpa_auth.core.logging import get_logger
from cpa_auth.models.responses import TokenResponse
from cpa_auth.services.grants import (
    authorization_code,
    client_credentials,
    device_code,
    refresh_token,
)
from cpa_auth.services.grants.context import GrantContext

logger = get_logger(__name__)

GrantHandler = Callable[[Mapping[str, str], GrantContext], Awaitable[TokenResponse]]

# see EBU Tech 3366, section 8.3
CLIENT_CREDENTIALS_GRANT = "http://tech.ebu.ch/cpa/1.0/client_credentials"
DEVICE_CODE_GRANT = "http://tech.ebu.ch/cpa/1.0/device_code"
AUTHORIZATION_CODE_GRANT = "http://tech.ebu.ch/cpa/1.0/authorization_code"
REFRESH_TOKEN_GRANT = "http://tech.ebu.ch/cpa/1.0/refresh_token"

GRANT_HANDLERS: Dict[str, GrantHandler] = {
    CLIENT_CREDENTIALS_GRANT: client_credentials.handle,
    DEVICE_CODE_GRANT: device_code.handle,
    AUTHORIZATION_CODE_GRANT: authorization_code.handle,
    REFRESH_TOKEN_GRANT: refresh_token.handle,
}


async def dispatch(params: Mapping[str, str], context: GrantContext) -> TokenResponse:
    """Route a token request to the handler for its grant type.

    Raises:
        InvalidRequestError: If grant_type is missing or not supported
        OAuthError: Whatever the selected handler raises
    """
    grant_type = params.get("grant_type")
    if not grant_type:
        raise InvalidRequestError("Missing grant type")

    handler = GRANT_HANDLERS.get(grant_type)
    if handler is None:
        raise InvalidRequestError(f"Unsupported grant type: {grant_type}")

    try:
        response = await handler(params, context)
    except OAuthError as err:
        logger.info(
            "token_request_rejected",
            grant_type=grant_type,
            client_id=params.get("client_id"),
            error=err.error,
        )
        raise

    logger.info("token_granted", grant_type=grant_type, client_id=params.get("client_id"))
    return response
