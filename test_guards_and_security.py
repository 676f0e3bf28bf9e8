"""Guards, protocol responses, identifiers and session cookies."""

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

import jwt
import pytest

from cpa_auth.core.exceptions import (
    AuthorizationPendingError,
    InvalidClientError,
    InvalidGrantError,
    InvalidRequestError,
    RedirectError,
)
from cpa_auth.core.guards import guard_condition, guard_not_none, guard_params
from cpa_auth.core.responses import build_redirect_uri, error_response, redirect_error_response
from cpa_auth.db.models import RegistrationType
from cpa_auth.middleware.logging import redact_query
from cpa_auth.models.domain import ClientEntry
from cpa_auth.models.requests import AuthorizeQuery, RefreshTokenGrant
from cpa_auth.services import identifiers
from cpa_auth.services.session_token import SESSION_AUDIENCE, SessionTokenService

SECRET = "test-secret-key-that-is-long-enough"


def test_guard_params_yields_model():
    with guard_params(RefreshTokenGrant, {"refresh_token": "abc", "client_id": "100"}) as grant:
        assert grant.refresh_token == "abc"


def test_guard_params_describes_errors():
    with pytest.raises(InvalidRequestError) as exc_info:
        with guard_params(RefreshTokenGrant, {"client_id": ""}):
            pass

    assert exc_info.value.description == "Missing refresh_token; Missing client_id"


def test_guard_params_rejects_extra_fields():
    params = {
        "response_type": "code",
        "client_id": "100",
        "redirect_uri": "http://example.com/",
        "nonce": "1",
    }
    with pytest.raises(InvalidRequestError) as exc_info:
        with guard_params(AuthorizeQuery, params):
            pass

    assert exc_info.value.description == "Unexpected parameter: nonce"


def test_guard_not_none():
    with guard_not_none("value", InvalidGrantError("unused")) as value:
        assert value == "value"

    with pytest.raises(InvalidGrantError):
        with guard_not_none(None, InvalidGrantError("Invalid refresh token")):
            pass


def test_guard_condition():
    with guard_condition(True, InvalidRequestError("unused")):
        pass

    with pytest.raises(InvalidClientError):
        with guard_condition(False, InvalidClientError("Unknown client")):
            pass


def test_error_response():
    response = error_response(InvalidClientError("Client authentication failed", status_code=401))

    assert response.status_code == 401
    assert response.headers["content-type"] == "application/json; charset=utf-8"
    assert response.headers["cache-control"] == "no-store"
    assert response.body == (
        b'{"error":"invalid_client","error_description":"Client authentication failed"}'
    )


def test_authorization_pending_carries_interval():
    error = AuthorizationPendingError("Waiting", interval=7)

    assert error.as_dict() == {
        "error": "authorization_pending",
        "error_description": "Waiting",
        "interval": 7,
    }
    assert error.status_code == 400


def test_build_redirect_uri_preserves_query():
    location = build_redirect_uri("http://example.com/cb?app=1", {"code": "abc", "state": None})

    assert parse_qs(urlsplit(location).query) == {"app": ["1"], "code": ["abc"]}


def test_build_redirect_uri_fragment():
    location = build_redirect_uri(
        "http://example.com/cb", {"access_token": "t", "state": "s"}, use_fragment=True
    )

    parts = urlsplit(location)
    assert parts.query == ""
    assert parse_qs(parts.fragment) == {"access_token": ["t"], "state": ["s"]}


def test_redirect_error_response():
    exc = RedirectError(
        InvalidRequestError("Unknown domain"),
        redirect_uri="http://example.com/cb",
        use_fragment=False,
        state="xyz",
    )

    response = redirect_error_response(exc)

    assert response.status_code == 302
    params = parse_qs(urlsplit(response.headers["location"]).query)
    assert params == {
        "error": ["invalid_request"],
        "error_description": ["Unknown domain"],
        "state": ["xyz"],
    }


@pytest.mark.parametrize(
    "registration_type, redirect_uri, response_type, allowed",
    [
        (RegistrationType.STATIC, "http://example.com/", "code", True),
        (RegistrationType.DYNAMIC, "http://example.com/", "code", False),
        (RegistrationType.DYNAMIC, "http://example.com/", "token", True),
        (RegistrationType.STATIC, None, "token", False),
        (RegistrationType.STATIC, "http://example.com/", "id_token", False),
    ],
)
def test_client_response_type_entitlement(registration_type, redirect_uri, response_type, allowed):
    client = ClientEntry(
        id="100",
        secret="s",
        name="Client",
        redirect_uri=redirect_uri,
        registration_type=registration_type,
    )

    assert client.can_use_response_type(response_type) is allowed


def test_user_code_alphabet():
    code = identifiers.user_code(10)

    assert len(code) == 10
    assert set(code) <= set(identifiers.USER_CODE_ALPHABET)


def test_normalize_user_code():
    assert identifiers.normalize_user_code(" bcdf-2345 ") == "BCDF2345"


def test_generated_tokens_differ():
    assert identifiers.access_token() != identifiers.access_token()
    assert len(identifiers.refresh_token()) == 64


def test_session_token_round_trip():
    service = SessionTokenService(SECRET)

    assert service.verify(service.issue(25)) == 25


def test_session_token_wrong_secret():
    token = SessionTokenService(SECRET).issue(25)

    assert SessionTokenService(SECRET + "-other").verify(token) is None


def test_session_token_expired():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "sub": "25",
            "aud": SESSION_AUDIENCE,
            "iat": now - timedelta(hours=2),
            "exp": now - timedelta(hours=1),
        },
        SECRET,
        algorithm="HS256",
    )

    assert SessionTokenService(SECRET).verify(token) is None


def test_session_token_malformed_subject():
    token = jwt.encode({"sub": "not-a-number", "aud": SESSION_AUDIENCE}, SECRET, algorithm="HS256")

    assert SessionTokenService(SECRET).verify(token) is None


def test_redact_query():
    redacted = redact_query("code=abc&state=xyz&client_secret=s")

    assert "abc" not in redacted
    assert parse_qs(redacted)["client_secret"] == ["***"]
    assert parse_qs(redacted)["state"] == ["xyz"]
    assert redact_query("") is None
