"""Token endpoint."""

from fastapi import APIRouter, Request, status

from cpa_auth.api.oauth.params import read_params
from cpa_auth.core.responses import OAuthJSONResponse
from cpa_auth.dependencies import GrantContextDep
from cpa_auth.models.responses import ErrorResponse, TokenResponse
from cpa_auth.services import grants

router = APIRouter(tags=["token"])


@router.post(
    "/token",
    response_model=TokenResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Obtain an access token",
    description=(
        "Issues tokens for the client credentials, device code, authorization code "
        "and refresh token grants. Accepts form-encoded or JSON bodies."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Malformed request or invalid grant"},
        401: {"model": ErrorResponse, "description": "Client authentication failed"},
        500: {"model": ErrorResponse, "description": "Tokens could not be stored"},
    },
)
async def token(request: Request, context: GrantContextDep) -> OAuthJSONResponse:
    """Dispatch the request to the handler for its ``grant_type``.

    Errors raised by the handlers are rendered by the ``OAuthError``
    exception handler.
    """
    params = await read_params(request)
    response = await grants.dispatch(params, context)
    return OAuthJSONResponse(response.model_dump(exclude_none=True))
