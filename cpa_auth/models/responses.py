"""Pydantic response models."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class TokenResponse(BaseModel):
    """Successful token endpoint response."""

    access_token: str = Field(..., description="The new access token")
    token_type: str = Field(default="bearer", description="Always 'bearer'")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    domain: str = Field(..., description="Name of the domain the token grants access to")
    domain_display_name: str = Field(..., description="Human readable domain name")
    refresh_token: Optional[str] = Field(
        default=None, description="Single-use refresh token, for user-bound grants"
    )
    scope: Optional[str] = Field(default=None, description="Requested scope, passed through")


class DeviceAssociationResponse(BaseModel):
    """Response to a device pairing request."""

    device_code: str = Field(..., description="Code the device polls the token endpoint with")
    user_code: str = Field(..., description="Code the user enters at the verification URI")
    verification_uri: str = Field(..., description="Where the user approves the pairing")
    expires_in: int = Field(..., description="Pairing lifetime in seconds")
    interval: int = Field(..., description="Minimum seconds between polls")


class ErrorResponse(BaseModel):
    """Protocol error body (RFC 6749 section 5.2)."""

    error: str = Field(..., description="Machine-readable error identifier")
    error_description: str = Field(..., description="Human-readable error description")


class SuccessResponse(BaseModel, Generic[T]):
    """Envelope for operational endpoints."""

    data: T = Field(..., description="Response data")
