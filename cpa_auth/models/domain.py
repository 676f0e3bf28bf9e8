"""Domain models."""

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict

from cpa_auth.db.models import DeviceSessionStatus, RegistrationType


def _ensure_utc(value: datetime) -> datetime:
    # Some backends (SQLite) hand back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(_ensure_utc)]


class ClientEntry(BaseModel):
    """Registered client."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    secret: str
    name: str
    redirect_uri: Optional[str]
    registration_type: RegistrationType

    def can_use_response_type(self, response_type: str) -> bool:
        """Dynamic clients are limited to non-interactive flows; implicit needs a redirect URI."""
        if response_type == "code":
            return self.registration_type != RegistrationType.DYNAMIC
        if response_type == "token":
            return bool(self.redirect_uri)
        return False


class DomainEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str


class UserEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    provider_uid: str
    display_name: Optional[str]


class AuthorizationCodeEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    client_id: str
    domain_id: int
    user_id: int
    redirect_uri: str
    created_at: UTCDateTime
    expires_at: UTCDateTime
    consumed_at: Optional[UTCDateTime]


class AccessTokenEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    token: str
    client_id: str
    domain_id: int
    user_id: Optional[int]
    created_at: UTCDateTime
    expires_at: Optional[UTCDateTime]


class RefreshTokenEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    token: str
    client_id: str
    domain_id: int
    user_id: Optional[int]
    access_token_id: Optional[int]
    expires_at: Optional[UTCDateTime]
    consumed_at: Optional[UTCDateTime]


class DeviceSessionEntry(BaseModel):
    """Device pairing as seen by the polling and approval flows."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    device_code: str
    user_code: str
    client_id: str
    domain_id: int
    user_id: Optional[int]
    status: DeviceSessionStatus
    interval: int
    created_at: UTCDateTime
    expires_at: UTCDateTime
    consumed_at: Optional[UTCDateTime]

    def is_expired(self, now: datetime) -> bool:
        return self.status == DeviceSessionStatus.EXPIRED or now >= self.expires_at
