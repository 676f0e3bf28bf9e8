"""Custom exception classes.

Protocol errors follow RFC 6749 section 5.2: each carries the error
identifier sent to the client, a human readable description and the HTTP
status used when the error is returned directly.
"""


class AuthServerError(Exception):
    """Base exception for the authorization server."""

    def __init__(self, message: str, code: str = "error", details: dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class OAuthError(AuthServerError):
    """Error reported to the client as ``{"error", "error_description"}``."""

    error = "invalid_request"
    status_code = 400

    def __init__(self, description: str, status_code: int | None = None):
        super().__init__(description, self.error)
        if status_code is not None:
            self.status_code = status_code

    @property
    def description(self) -> str:
        return self.message

    def as_dict(self) -> dict:
        return {"error": self.error, "error_description": self.message}


class InvalidRequestError(OAuthError):
    """Missing or malformed request parameters."""

    error = "invalid_request"


class InvalidClientError(OAuthError):
    """Unknown client or failed client authentication."""

    error = "invalid_client"


class UnauthorizedClientError(OAuthError):
    """Client is not entitled to the requested grant or response type."""

    error = "unauthorized_client"


class AccessDeniedError(OAuthError):
    """The resource owner declined the request."""

    error = "access_denied"


class InvalidGrantError(OAuthError):
    """Expired, consumed, mismatched or unknown code, device code or refresh token."""

    error = "invalid_grant"


class AuthorizationPendingError(OAuthError):
    """Device pairing has not been approved yet."""

    error = "authorization_pending"

    def __init__(self, description: str, interval: int):
        super().__init__(description)
        self.interval = interval

    def as_dict(self) -> dict:
        body = super().as_dict()
        body["interval"] = self.interval
        return body


class ExpiredTokenError(OAuthError):
    """Device code is past its lifetime."""

    error = "expired_token"


class ServerError(OAuthError):
    """Unexpected failure inside the authorization server."""

    error = "server_error"
    status_code = 500


class PersistenceError(ServerError):
    """A unit of work could not be committed."""


class RedirectError(AuthServerError):
    """Protocol error delivered to an authenticated client redirect URI.

    ``use_fragment`` selects the implicit-flow encoding (``#``) instead of the
    query string.
    """

    def __init__(
        self,
        error: OAuthError,
        redirect_uri: str,
        use_fragment: bool,
        state: str | None = None,
    ):
        super().__init__(error.message, error.error)
        self.error = error
        self.redirect_uri = redirect_uri
        self.use_fragment = use_fragment
        self.state = state


class LoginRequiredError(AuthServerError):
    """The resource owner must sign in before continuing."""

    def __init__(self, next_url: str):
        super().__init__("Authentication required", "login_required")
        self.next_url = next_url
