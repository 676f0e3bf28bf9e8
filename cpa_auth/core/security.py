"""Resource owner authentication for the interactive endpoints."""

from typing import Annotated

from fastapi import Depends, Request

from cpa_auth.core.exceptions import LoginRequiredError
from cpa_auth.core.logging import get_logger
from cpa_auth.dependencies import SessionTokenDep, SettingsDep, UserRepoDep
from cpa_auth.models.domain import UserEntry

logger = get_logger(__name__)


async def get_current_user(
    request: Request,
    settings: SettingsDep,
    session_tokens: SessionTokenDep,
    users: UserRepoDep,
) -> UserEntry:
    """Resolve the signed-in user from the session cookie.

    Args:
        request: Incoming request carrying the session cookie
        settings: Application settings
        session_tokens: Session cookie verifier
        users: User lookup

    Returns:
        UserEntry: The authenticated resource owner

    Raises:
        LoginRequiredError: If the cookie is missing, invalid, expired or
            names an unknown user

    Example:
        @router.get("/authorize")
        async def authorize(user: CurrentUser):
            pass
    """
    cookie = request.cookies.get(settings.session.cookie_name)
    user_id = session_tokens.verify(cookie) if cookie else None
    user = await users.get_by_id(user_id) if user_id is not None else None

    if user is None:
        logger.info("login_required", path=str(request.url.path))
        raise LoginRequiredError(next_url=str(request.url))

    return user


# Type alias for the authenticated user dependency
CurrentUser = Annotated[UserEntry, Depends(get_current_user)]
