"""Device pairing: association by the device, approval by the user."""

from datetime import datetime, timedelta, timezone
from typing import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.config import OAuthSettings
from cpa_auth.core.exceptions import InvalidGrantError, InvalidRequestError, ServerError
from cpa_auth.core.guards import guard_not_none, guard_params
from cpa_auth.core.logging import get_logger
from cpa_auth.db.base import atomic
from cpa_auth.db.repositories import ClientRepository, DeviceSessionRepository, DomainRepository
from cpa_auth.models.domain import DeviceSessionEntry, UserEntry
from cpa_auth.models.requests import AssociationRequest, VerificationForm
from cpa_auth.models.responses import DeviceAssociationResponse
from cpa_auth.services import identifiers
from cpa_auth.services.grants.context import authenticate_client

logger = get_logger(__name__)

MAX_USER_CODE_ATTEMPTS = 10


class DevicePairingService:
    """Creates pending device sessions and records the user's decision on them."""

    def __init__(
        self,
        session: AsyncSession,
        clients: ClientRepository,
        domains: DomainRepository,
        device_sessions: DeviceSessionRepository,
        settings: OAuthSettings,
    ):
        self.session = session
        self.clients = clients
        self.domains = domains
        self.device_sessions = device_sessions
        self.settings = settings

    async def associate(self, params: Mapping[str, str]) -> DeviceAssociationResponse:
        """Start a pairing for an authenticated client.

        Args:
            params: client_id, client_secret and domain

        Returns:
            Codes for the device to poll with and for the user to enter

        Raises:
            InvalidRequestError: Missing parameters or unknown domain
            InvalidClientError: Client authentication failed
        """
        with guard_params(AssociationRequest, params) as request:
            client = await authenticate_client(
                self.clients, request.client_id, request.client_secret
            )
            domain = await self.domains.get_by_name(request.domain)

            with guard_not_none(domain, InvalidRequestError("Unknown domain")) as found:
                lifetime = self.settings.device_code_lifetime
                async with atomic(self.session, "device_association"):
                    pairing = await self.device_sessions.create(
                        device_code=identifiers.device_code(),
                        user_code=await self._unused_user_code(),
                        client_id=client.id,
                        domain_id=found.id,
                        interval=self.settings.device_polling_interval,
                        expires_at=datetime.now(timezone.utc) + timedelta(seconds=lifetime),
                    )

                logger.info("device_session_created", client_id=client.id, domain=found.name)

                return DeviceAssociationResponse(
                    device_code=pairing.device_code,
                    user_code=pairing.user_code,
                    verification_uri=self.settings.verification_uri,
                    expires_in=lifetime,
                    interval=pairing.interval,
                )

    async def verify(self, params: Mapping[str, str], user: UserEntry) -> DeviceSessionEntry:
        """Approve or deny the pending session identified by a user code.

        Raises:
            InvalidRequestError: Missing user_code or authorization
            InvalidGrantError: The code is unknown, expired or already used
        """
        with guard_params(VerificationForm, params) as form:
            user_code = identifiers.normalize_user_code(form.user_code)
            approved = form.authorization == "Allow"

            async with atomic(self.session, "device_verification"):
                pairing = await self.device_sessions.resolve(
                    user_code, user.id, approved, datetime.now(timezone.utc)
                )

            with guard_not_none(
                pairing, InvalidGrantError("Unknown or expired user code")
            ) as resolved:
                logger.info(
                    "device_session_resolved",
                    client_id=resolved.client_id,
                    user_id=user.id,
                    status=resolved.status.value,
                )
                return resolved

    async def _unused_user_code(self) -> str:
        for _ in range(MAX_USER_CODE_ATTEMPTS):
            user_code = identifiers.user_code(self.settings.user_code_length)
            if not await self.device_sessions.user_code_exists(user_code):
                return user_code
        raise ServerError("Could not allocate a user code")
