"""Request context shared by the grant handlers."""

import secrets
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.config import OAuthSettings
from cpa_auth.core.exceptions import InvalidClientError
from cpa_auth.core.logging import get_logger
from cpa_auth.db.repositories import (
    AuthorizationCodeRepository,
    ClientRepository,
    DeviceSessionRepository,
    DomainRepository,
    RefreshTokenRepository,
)
from cpa_auth.models.domain import ClientEntry
from cpa_auth.services.token_issuer import TokenIssuer

logger = get_logger(__name__)


@dataclass
class GrantContext:
    """Everything a grant handler needs for one token request."""

    session: AsyncSession
    clients: ClientRepository
    domains: DomainRepository
    codes: AuthorizationCodeRepository
    refresh_tokens: RefreshTokenRepository
    device_sessions: DeviceSessionRepository
    issuer: TokenIssuer
    settings: OAuthSettings


async def authenticate_client(
    clients: ClientRepository, client_id: str, client_secret: str
) -> ClientEntry:
    """Authenticate a client by exact secret match.

    Raises:
        InvalidClientError: 401, for unknown clients and wrong secrets alike
    """
    client = await clients.get_by_id(client_id)
    if client is None or not secrets.compare_digest(
        client.secret.encode(), client_secret.encode()
    ):
        logger.warning("client_authentication_failed", client_id=client_id)
        raise InvalidClientError("Client authentication failed", status_code=401)
    return client
