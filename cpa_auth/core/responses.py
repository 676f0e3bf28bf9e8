"""Direct and redirect response builders for protocol messages."""

from typing import Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import status
from fastapi.responses import JSONResponse, RedirectResponse

from cpa_auth.core.exceptions import OAuthError, RedirectError

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


class OAuthJSONResponse(JSONResponse):
    """JSON response with an explicit utf-8 charset and no caching."""

    media_type = "application/json; charset=utf-8"

    def __init__(self, content, status_code: int = status.HTTP_200_OK, **kwargs):
        super().__init__(content, status_code=status_code, **kwargs)
        self.headers.update(NO_STORE_HEADERS)


def build_redirect_uri(
    redirect_uri: str, params: Mapping[str, str | None], use_fragment: bool = False
) -> str:
    """Append parameters to a redirect URI.

    Query parameters already present on the redirect URI are preserved.
    Parameters whose value is ``None`` or empty are left out.
    """
    values = {key: value for key, value in params.items() if value}
    scheme, netloc, path, query, fragment = urlsplit(redirect_uri)

    if use_fragment:
        fragment = urlencode(values)
    else:
        merged = parse_qsl(query, keep_blank_values=True) + list(values.items())
        query = urlencode(merged)

    return urlunsplit((scheme, netloc, path, query, fragment))


def error_response(error: OAuthError) -> OAuthJSONResponse:
    """Error returned directly to the requester."""
    return OAuthJSONResponse(error.as_dict(), status_code=error.status_code)


def redirect_response(location: str) -> RedirectResponse:
    return RedirectResponse(location, status_code=status.HTTP_302_FOUND)


def redirect_error_response(exc: RedirectError) -> RedirectResponse:
    """Error delivered to the client's redirect URI."""
    params = exc.error.as_dict()
    params["state"] = exc.state
    location = build_redirect_uri(exc.redirect_uri, params, use_fragment=exc.use_fragment)
    return redirect_response(location)
