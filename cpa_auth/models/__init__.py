"""Pydantic models for request/response validation."""

from cpa_auth.models.domain import (
    AccessTokenEntry,
    AuthorizationCodeEntry,
    ClientEntry,
    DeviceSessionEntry,
    DomainEntry,
    RefreshTokenEntry,
    UserEntry,
)
from cpa_auth.models.requests import (
    AssociationRequest,
    AuthorizationCodeGrant,
    AuthorizeForm,
    AuthorizeQuery,
    ClientCredentialsGrant,
    DeviceCodeGrant,
    RefreshTokenGrant,
    VerificationForm,
)
from cpa_auth.models.responses import (
    DeviceAssociationResponse,
    ErrorResponse,
    SuccessResponse,
    TokenResponse,
)

__all__ = [
    # Request models
    "AssociationRequest",
    "AuthorizationCodeGrant",
    "AuthorizeForm",
    "AuthorizeQuery",
    "ClientCredentialsGrant",
    "DeviceCodeGrant",
    "RefreshTokenGrant",
    "VerificationForm",
    # Response models
    "DeviceAssociationResponse",
    "ErrorResponse",
    "SuccessResponse",
    "TokenResponse",
    # Domain models
    "AccessTokenEntry",
    "AuthorizationCodeEntry",
    "ClientEntry",
    "DeviceSessionEntry",
    "DomainEntry",
    "RefreshTokenEntry",
    "UserEntry",
]
