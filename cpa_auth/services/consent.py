"""Interactive consent for the authorization code and implicit flows.

Validation happens in two phases. Phase one establishes that the client
exists, may use the requested response type and owns the redirect URI; its
errors go straight back to the user agent. Only after that is the redirect
URI trusted, and every later error is delivered to it (in the fragment for
``token``, in the query for ``code``).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.config import OAuthSettings
from cpa_auth.core.exceptions import (
    AccessDeniedError,
    InvalidClientError,
    InvalidRequestError,
    OAuthError,
    RedirectError,
    UnauthorizedClientError,
)
from cpa_auth.core.guards import describe_validation_error
from cpa_auth.core.logging import get_logger
from cpa_auth.core.responses import build_redirect_uri
from cpa_auth.db.base import atomic
from cpa_auth.db.repositories import (
    AuthorizationCodeRepository,
    ClientRepository,
    DomainRepository,
)
from cpa_auth.models.domain import ClientEntry, UserEntry
from cpa_auth.models.requests import AuthorizeForm
from cpa_auth.services import identifiers
from cpa_auth.services.token_issuer import TokenIssuer

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

RESPONSE_TYPES = ("code", "token")


class ConsentService:
    """Validates authorization requests and carries out the user's decision."""

    def __init__(
        self,
        session: AsyncSession,
        clients: ClientRepository,
        domains: DomainRepository,
        codes: AuthorizationCodeRepository,
        issuer: TokenIssuer,
        settings: OAuthSettings,
    ):
        self.session = session
        self.clients = clients
        self.domains = domains
        self.codes = codes
        self.issuer = issuer
        self.settings = settings

    async def authenticate_redirect(self, params: Mapping[str, Any]) -> ClientEntry:
        """Phase one: bind the request to a registered client and redirect URI.

        Raises:
            InvalidRequestError: Bad response_type, missing client_id or redirect_uri
            InvalidClientError: Unknown client or redirect URI mismatch
            UnauthorizedClientError: Client may not use the response type
        """
        response_type = params.get("response_type")
        if not response_type:
            raise InvalidRequestError("Missing response_type")
        if response_type not in RESPONSE_TYPES:
            raise InvalidRequestError(f"Unsupported response type: {response_type}")

        client_id = params.get("client_id")
        if not client_id:
            raise InvalidRequestError("Missing client_id")

        redirect_uri = params.get("redirect_uri")
        if not redirect_uri:
            raise InvalidRequestError("Missing redirect_uri")

        client = await self.clients.get_by_id(client_id)
        if client is None:
            raise InvalidClientError("Unknown client")

        if not client.can_use_response_type(response_type):
            raise UnauthorizedClientError(
                f"Client is not authorized to use response type: {response_type}"
            )

        if client.redirect_uri != redirect_uri:
            logger.warning("redirect_uri_mismatch", client_id=client_id)
            raise InvalidClientError("Redirect URI mismatch")

        return client

    def validate(self, model: type[M], params: Mapping[str, Any]) -> M:
        """Phase two: schema validation, errors delivered to the redirect URI.

        Must only be called once ``authenticate_redirect`` has accepted
        ``params``.
        """
        try:
            return model.model_validate(dict(params))
        except ValidationError as err:
            raise self._redirect_error(
                InvalidRequestError(describe_validation_error(err)), params
            ) from err

    async def decide(self, form: AuthorizeForm, user: UserEntry) -> str:
        """Carry out the user's choice and return the redirect location.

        Raises:
            RedirectError: The user denied access or the domain is unknown
            PersistenceError: The code or token could not be stored
        """
        params = form.model_dump()

        if form.authorization != "Allow":
            logger.info("consent_denied", client_id=form.client_id, user_id=user.id)
            raise self._redirect_error(AccessDeniedError("The user denied access"), params)

        domain = await self.domains.get_by_name(form.domain)
        if domain is None:
            raise self._redirect_error(InvalidRequestError("Unknown domain"), params)

        now = datetime.now(timezone.utc)

        if form.response_type == "code":
            async with atomic(self.session, "authorization_code_issue"):
                code = await self.codes.create(
                    code=identifiers.authorization_code(),
                    client_id=form.client_id,
                    domain_id=domain.id,
                    user_id=user.id,
                    redirect_uri=form.redirect_uri,
                    expires_at=now + timedelta(seconds=self.settings.authorization_code_lifetime),
                )

            logger.info(
                "authorization_code_issued",
                client_id=form.client_id,
                domain=domain.name,
                user_id=user.id,
            )
            return build_redirect_uri(form.redirect_uri, {"code": code.code, "state": form.state})

        async with atomic(self.session, "implicit_token_issue"):
            issued = await self.issuer.issue(form.client_id, domain, user.id)

        return build_redirect_uri(
            form.redirect_uri,
            {
                "access_token": issued.access_token.token,
                "token_type": "bearer",
                "expires_in": str(issued.expires_in),
                "domain": domain.name,
                "state": form.state,
            },
            use_fragment=True,
        )

    def _redirect_error(self, error: OAuthError, params: Mapping[str, Any]) -> RedirectError:
        return RedirectError(
            error,
            redirect_uri=params["redirect_uri"],
            use_fragment=params.get("response_type") == "token",
            state=params.get("state") or None,
        )
