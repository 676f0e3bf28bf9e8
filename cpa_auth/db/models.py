"""SQLAlchemy ORM models."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy import Enum as SQLEnum

from cpa_auth.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class RegistrationType(str, enum.Enum):
    """How a client was registered."""

    STATIC = "static"
    DYNAMIC = "dynamic"


class DeviceSessionStatus(str, enum.Enum):
    """Device pairing status."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    EXPIRED = "expired"


class Client(Base):
    """Registered client application."""

    __tablename__ = "clients"

    id = Column(String(64), primary_key=True)
    secret = Column(String(128), nullable=False)
    name = Column(String(255), nullable=False)
    redirect_uri = Column(Text, nullable=True)
    registration_type = Column(
        SQLEnum(
            RegistrationType,
            name="client_registration_type",
            values_callable=_enum_values,
        ),
        nullable=False,
        default=RegistrationType.DYNAMIC,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Client(id={self.id}, registration_type={self.registration_type})>"


class Domain(Base):
    """Service domain that access tokens grant access to."""

    __tablename__ = "domains"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    display_name = Column(String(255), nullable=False)
    access_token = Column(String(128), nullable=False)

    def __repr__(self):
        return f"<Domain(id={self.id}, name={self.name})>"


class User(Base):
    """Resource owner known to the identity frontend."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_uid = Column(String(255), nullable=False, unique=True)
    display_name = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id})>"


class AuthorizationCode(Base):
    """One-time code issued after user consent."""

    __tablename__ = "authorization_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True)
    client_id = Column(String(64), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    domain_id = Column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    redirect_uri = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    consumed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<AuthorizationCode(id={self.id}, client_id={self.client_id})>"


class AccessToken(Base):
    """Bearer token granting access to a domain."""

    __tablename__ = "access_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(64), nullable=False, unique=True)
    client_id = Column(String(64), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    domain_id = Column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("access_tokens_client_domain_idx", "client_id", "domain_id"),)

    def __repr__(self):
        return f"<AccessToken(id={self.id}, client_id={self.client_id}, user_id={self.user_id})>"


class RefreshToken(Base):
    """Single-use token that rotates into a new access token."""

    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(64), nullable=False, unique=True)
    client_id = Column(String(64), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    domain_id = Column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    access_token_id = Column(
        Integer, ForeignKey("access_tokens.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    consumed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<RefreshToken(id={self.id}, client_id={self.client_id})>"


class DeviceSession(Base):
    """Pairing between a device and a user, approved at the verification URI."""

    __tablename__ = "device_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_code = Column(String(64), nullable=False, unique=True)
    user_code = Column(String(16), nullable=False, unique=True)
    client_id = Column(String(64), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    domain_id = Column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    status = Column(
        SQLEnum(
            DeviceSessionStatus,
            name="device_session_status",
            values_callable=_enum_values,
        ),
        nullable=False,
        default=DeviceSessionStatus.PENDING,
    )
    interval = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    consumed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("device_sessions_status_idx", "status"),)

    def __repr__(self):
        return f"<DeviceSession(id={self.id}, client_id={self.client_id}, status={self.status})>"
