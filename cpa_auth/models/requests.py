"""Pydantic request models.

Field names follow the wire format of the token, authorization and device
pairing endpoints. Empty strings count as missing values.
"""

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RequiredStr = Annotated[str, Field(min_length=1)]


class AuthorizeQuery(BaseModel):
    """Query parameters accepted by GET /authorize."""

    model_config = ConfigDict(extra="forbid")

    response_type: Literal["code", "token"]
    client_id: RequiredStr
    redirect_uri: RequiredStr
    scope: Optional[str] = None
    state: Optional[str] = None
    domain: Optional[str] = None


class AuthorizeForm(BaseModel):
    """Consent form posted to POST /authorize."""

    model_config = ConfigDict(extra="forbid")

    response_type: Literal["code", "token"]
    client_id: RequiredStr
    redirect_uri: RequiredStr
    scope: Optional[str] = None
    state: Optional[str] = None
    domain: RequiredStr
    authorization: Literal["Allow", "Deny"]


class ClientCredentialsGrant(BaseModel):
    """Token request for the client credentials grant."""

    client_id: RequiredStr
    client_secret: RequiredStr
    domain: RequiredStr
    scope: Optional[str] = None


class DeviceCodeGrant(BaseModel):
    """Token request polling a device pairing."""

    device_code: RequiredStr
    client_id: RequiredStr
    client_secret: RequiredStr


class AuthorizationCodeGrant(BaseModel):
    """Token request redeeming an authorization code."""

    code: RequiredStr
    client_id: RequiredStr
    redirect_uri: RequiredStr


class RefreshTokenGrant(BaseModel):
    """Token request rotating a refresh token."""

    refresh_token: RequiredStr
    client_id: RequiredStr


class AssociationRequest(BaseModel):
    """Device request to start a pairing."""

    client_id: RequiredStr
    client_secret: RequiredStr
    domain: RequiredStr


class VerificationForm(BaseModel):
    """User decision posted at the verification URI."""

    user_code: RequiredStr
    authorization: Literal["Allow", "Deny"]
