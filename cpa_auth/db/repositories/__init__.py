"""Repositories wrapping all database access."""

from cpa_auth.db.repositories.access_tokens import AccessTokenRepository
from cpa_auth.db.repositories.authorization_codes import AuthorizationCodeRepository
from cpa_auth.db.repositories.clients import ClientRepository, DomainRepository, UserRepository
from cpa_auth.db.repositories.device_sessions import DeviceSessionRepository
from cpa_auth.db.repositories.refresh_tokens import RefreshTokenRepository

__all__ = [
    "AccessTokenRepository",
    "AuthorizationCodeRepository",
    "ClientRepository",
    "DeviceSessionRepository",
    "DomainRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
