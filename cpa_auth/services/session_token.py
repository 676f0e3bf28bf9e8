"""Resource owner session cookie signing and parsing."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from cpa_auth.core.logging import get_logger

logger = get_logger(__name__)

SESSION_AUDIENCE = "cpa-auth-session"


class SessionTokenService:
    """Service for issuing and verifying JWT session cookies.

    The identity frontend signs the user in and sets a cookie produced by
    ``issue``; the authorization endpoints only ever call ``verify``.
    """

    def __init__(self, secret_key: str, max_age: int = 86400):
        """Initialize session token service.

        Args:
            secret_key: Secret key for signing JWT tokens
            max_age: Session lifetime in seconds
        """
        self.secret_key = secret_key
        self.max_age = max_age

    def issue(self, user_id: int) -> str:
        """Sign a session token for the given user.

        Args:
            user_id: Authenticated user identifier

        Returns:
            JWT token string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "aud": SESSION_AUDIENCE,
            "iat": now,
            "exp": now + timedelta(seconds=self.max_age),
        }
        return jwt.encode(payload, self.secret_key, algorithm="HS256")

    def verify(self, token: str) -> Optional[int]:
        """Return the user id carried by a valid session token.

        Args:
            token: JWT token string from the session cookie

        Returns:
            The user id, or None if the token is expired, tampered with or malformed
        """
        try:
            payload = jwt.decode(
                token, self.secret_key, algorithms=["HS256"], audience=SESSION_AUDIENCE
            )
            return int(payload["sub"])
        except jwt.ExpiredSignatureError:
            logger.info("session_expired")
        except jwt.InvalidTokenError as e:
            logger.warning("session_invalid", error=str(e))
        except (KeyError, ValueError) as e:
            logger.warning("session_malformed", error=str(e))
        return None
