"""FastAPI dependency injection functions.

This module provides dependency injection functions for FastAPI routes.
These dependencies handle the creation and lifecycle of service instances,
database sessions, and other shared resources.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.config import AppSettings, get_settings
from cpa_auth.db.base import db_manager
from cpa_auth.db.repositories import (
    AccessTokenRepository,
    AuthorizationCodeRepository,
    ClientRepository,
    DeviceSessionRepository,
    DomainRepository,
    RefreshTokenRepository,
    UserRepository,
)
from cpa_auth.services.consent import ConsentService
from cpa_auth.services.device_pairing import DevicePairingService
from cpa_auth.services.grants.context import GrantContext
from cpa_auth.services.session_token import SessionTokenService
from cpa_auth.services.token_issuer import TokenIssuer


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session, to be used as a dependency."""
    async for session in db_manager.session():
        yield session


def get_app_settings() -> AppSettings:
    return get_settings()


SessionDep = Annotated[AsyncSession, Depends(get_db)]
SettingsDep = Annotated[AppSettings, Depends(get_app_settings)]


def get_session_token_service(settings: SettingsDep) -> SessionTokenService:
    """Dependency for getting the session cookie service."""
    return SessionTokenService(
        secret_key=settings.session.secret, max_age=settings.session.max_age
    )


def get_token_issuer(session: SessionDep, settings: SettingsDep) -> TokenIssuer:
    """Dependency for getting the token issuer bound to the request session."""
    return TokenIssuer(
        AccessTokenRepository(session), RefreshTokenRepository(session), settings.oauth
    )


def get_grant_context(
    session: SessionDep,
    settings: SettingsDep,
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> GrantContext:
    """Dependency for getting the context handed to grant handlers."""
    return GrantContext(
        session=session,
        clients=ClientRepository(session),
        domains=DomainRepository(session),
        codes=AuthorizationCodeRepository(session),
        refresh_tokens=RefreshTokenRepository(session),
        device_sessions=DeviceSessionRepository(session),
        issuer=issuer,
        settings=settings.oauth,
    )


def get_consent_service(
    session: SessionDep,
    settings: SettingsDep,
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> ConsentService:
    """Dependency for getting the consent service."""
    return ConsentService(
        session,
        ClientRepository(session),
        DomainRepository(session),
        AuthorizationCodeRepository(session),
        issuer,
        settings.oauth,
    )


def get_device_pairing_service(
    session: SessionDep, settings: SettingsDep
) -> DevicePairingService:
    """Dependency for getting the device pairing service."""
    return DevicePairingService(
        session,
        ClientRepository(session),
        DomainRepository(session),
        DeviceSessionRepository(session),
        settings.oauth,
    )


def get_user_repository(session: SessionDep) -> UserRepository:
    return UserRepository(session)


# Annotated dependency types
SessionTokenDep = Annotated[SessionTokenService, Depends(get_session_token_service)]
GrantContextDep = Annotated[GrantContext, Depends(get_grant_context)]
ConsentDep = Annotated[ConsentService, Depends(get_consent_service)]
DevicePairingDep = Annotated[DevicePairingService, Depends(get_device_pairing_service)]
UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]
