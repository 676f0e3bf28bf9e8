"""Device pairing endpoints: association and user verification."""

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse

from cpa_auth.api.oauth.params import read_form, read_params
from cpa_auth.api.templating import templates
from cpa_auth.core.exceptions import InvalidGrantError, InvalidRequestError
from cpa_auth.core.responses import OAuthJSONResponse
from cpa_auth.core.security import CurrentUser
from cpa_auth.dependencies import DevicePairingDep
from cpa_auth.models.responses import DeviceAssociationResponse, ErrorResponse

router = APIRouter(tags=["device"])


@router.post(
    "/associate",
    response_model=DeviceAssociationResponse,
    status_code=status.HTTP_200_OK,
    summary="Start a device pairing",
    responses={
        400: {"model": ErrorResponse, "description": "Missing parameters or unknown domain"},
        401: {"model": ErrorResponse, "description": "Client authentication failed"},
    },
)
async def associate(request: Request, pairing: DevicePairingDep) -> OAuthJSONResponse:
    """Create a pending pairing and return the device and user codes."""
    params = await read_params(request)
    response = await pairing.associate(params)
    return OAuthJSONResponse(response.model_dump())


@router.get("/verify", response_class=HTMLResponse, summary="Show the user code form")
async def show_verification(request: Request, user: CurrentUser) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "verify.html",
        {"user": user, "user_code": request.query_params.get("user_code", "")},
    )


@router.post("/verify", response_class=HTMLResponse, summary="Approve or deny a device")
async def submit_verification(
    request: Request, user: CurrentUser, pairing: DevicePairingDep
) -> HTMLResponse:
    """Record the user's decision; errors re-render the form with status 400."""
    params = await read_form(request)

    try:
        resolved = await pairing.verify(params, user)
    except (InvalidRequestError, InvalidGrantError) as err:
        return templates.TemplateResponse(
            request,
            "verify.html",
            {"user": user, "user_code": params.get("user_code", ""), "error": err.description},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    return templates.TemplateResponse(
        request,
        "verify.html",
        {"user": user, "user_code": "", "status": resolved.status.value},
    )
