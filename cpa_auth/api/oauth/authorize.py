"""Authorization endpoint: user consent for the code and implicit flows."""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from cpa_auth.api.oauth.params import read_form
from cpa_auth.api.templating import templates
from cpa_auth.core.logging import get_logger
from cpa_auth.core.responses import redirect_response
from cpa_auth.core.security import CurrentUser
from cpa_auth.dependencies import ConsentDep
from cpa_auth.models.requests import AuthorizeForm, AuthorizeQuery

logger = get_logger(__name__)

router = APIRouter(tags=["authorize"])


@router.get(
    "/authorize",
    response_class=HTMLResponse,
    summary="Show the consent page",
)
async def show_consent(request: Request, user: CurrentUser, consent: ConsentDep) -> HTMLResponse:
    """Validate the authorization request and ask the user to allow or deny it.

    Client and redirect URI errors are returned directly; anything after that
    is sent to the client's redirect URI.
    """
    params = dict(request.query_params)

    client = await consent.authenticate_redirect(params)
    query = consent.validate(AuthorizeQuery, params)

    logger.info("consent_requested", client_id=client.id, user_id=user.id)

    return templates.TemplateResponse(
        request,
        "authorize.html",
        {"client": client, "user": user, "query": query},
    )


@router.post(
    "/authorize",
    response_class=RedirectResponse,
    summary="Submit the user's decision",
)
async def submit_consent(
    request: Request, user: CurrentUser, consent: ConsentDep
) -> RedirectResponse:
    """Re-validate the request, then issue a code or token, or report denial."""
    params = await read_form(request)

    await consent.authenticate_redirect(params)
    form = consent.validate(AuthorizeForm, params)

    location = await consent.decide(form, user)
    return redirect_response(location)
