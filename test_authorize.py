"""Consent flow at /authorize."""

from urllib.parse import parse_qs, quote, urlsplit

import pytest
from sqlalchemy.exc import OperationalError

from cpa_auth.db.repositories import AccessTokenRepository
from cpa_auth.services.token_issuer import TokenIssuer
from conftest import DOMAIN, DYNAMIC_REDIRECT_URI, REDIRECT_URI, USER_ID


def authorize_query(**overrides):
    params = {
        "response_type": "code",
        "client_id": "100",
        "redirect_uri": REDIRECT_URI,
        "domain": DOMAIN,
        "state": "xyz",
    }
    params.update(overrides)
    return {key: value for key, value in params.items() if value is not None}


def consent_form(**overrides):
    params = {"authorization": "Allow"}
    params.update(overrides)
    return authorize_query(**params)


def redirect_params(response, part: str = "query") -> dict:
    location = urlsplit(response.headers["location"])
    return {key: values[0] for key, values in parse_qs(getattr(location, part)).items()}


async def test_get_requires_login(client):
    response = await client.get("/authorize", params=authorize_query())

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith("/login?next=")
    assert quote("http://testserver/authorize", safe="") in location


async def test_get_with_invalid_session_cookie(client):
    client.headers["Cookie"] = "cpa_session=not-a-jwt"

    response = await client.get("/authorize", params=authorize_query())

    assert response.status_code == 302
    assert response.headers["location"].startswith("/login?next=")


async def test_get_renders_consent_page(client, login):
    login()

    response = await client.get("/authorize", params=authorize_query())

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    page = response.text
    assert "Test Radio Player" in page
    assert '<input type="hidden" name="response_type" value="code">' in page
    assert '<input type="hidden" name="client_id" value="100">' in page
    assert f'<input type="hidden" name="redirect_uri" value="{REDIRECT_URI}">' in page
    assert f'<input type="hidden" name="domain" value="{DOMAIN}">' in page
    assert '<input type="hidden" name="state" value="xyz">' in page
    assert 'name="authorization" value="Allow"' in page
    assert 'name="authorization" value="Deny"' in page


async def test_get_without_state_omits_state_input(client, login):
    login()

    response = await client.get("/authorize", params=authorize_query(state=None))

    assert response.status_code == 200
    assert 'name="state"' not in response.text


async def test_get_escapes_state(client, login):
    login()

    response = await client.get("/authorize", params=authorize_query(state='"><script>'))

    assert "<script>" not in response.text


@pytest.mark.parametrize(
    "overrides, error, description",
    [
        ({"response_type": None}, "invalid_request", "Missing response_type"),
        ({"response_type": "id_token"}, "invalid_request", "Unsupported response type: id_token"),
        ({"client_id": None}, "invalid_request", "Missing client_id"),
        ({"redirect_uri": None}, "invalid_request", "Missing redirect_uri"),
        ({"client_id": "999"}, "invalid_client", "Unknown client"),
        ({"redirect_uri": "http://evil.example.com/"}, "invalid_client", "Redirect URI mismatch"),
    ],
)
async def test_get_phase_one_errors_are_direct(client, login, overrides, error, description):
    login()

    response = await client.get("/authorize", params=authorize_query(**overrides))

    assert response.status_code == 400
    assert response.json() == {"error": error, "error_description": description}


async def test_get_dynamic_client_cannot_use_code(client, login):
    login()

    response = await client.get(
        "/authorize", params=authorize_query(client_id="102", redirect_uri=DYNAMIC_REDIRECT_URI)
    )

    assert response.status_code == 400
    assert response.json()["error"] == "unauthorized_client"


async def test_get_client_without_redirect_uri_cannot_use_token(client, login):
    login()

    response = await client.get(
        "/authorize", params=authorize_query(response_type="token", client_id="101")
    )

    assert response.status_code == 400
    assert response.json()["error"] == "unauthorized_client"


async def test_get_dynamic_client_may_use_token(client, login):
    login()

    response = await client.get(
        "/authorize",
        params=authorize_query(
            response_type="token", client_id="102", redirect_uri=DYNAMIC_REDIRECT_URI
        ),
    )

    assert response.status_code == 200


async def test_get_unexpected_parameter_is_redirected(client, login):
    """Once the redirect URI is trusted, errors go to the client."""
    login()

    response = await client.get("/authorize", params=authorize_query(prompt="none"))

    assert response.status_code == 302
    assert response.headers["location"].startswith(REDIRECT_URI + "?")
    params = redirect_params(response)
    assert params["error"] == "invalid_request"
    assert params["error_description"] == "Unexpected parameter: prompt"
    assert params["state"] == "xyz"


async def test_get_unexpected_parameter_implicit_uses_fragment(client, login):
    login()

    response = await client.get(
        "/authorize", params=authorize_query(response_type="token", prompt="none")
    )

    assert response.status_code == 302
    assert redirect_params(response, "fragment")["error"] == "invalid_request"
    assert urlsplit(response.headers["location"]).query == ""


async def test_post_requires_login(client):
    response = await client.post("/authorize", data=consent_form())

    assert response.status_code == 302
    assert response.headers["location"].startswith("/login?next=")


async def test_post_allow_code(client, login):
    login()

    response = await client.post("/authorize", data=consent_form())

    assert response.status_code == 302
    assert response.headers["location"].startswith(REDIRECT_URI + "?")
    params = redirect_params(response)
    assert params["code"]
    assert params["state"] == "xyz"


async def test_post_allow_token(client, login, db_session):
    """The implicit flow returns a user-bound token in the fragment."""
    login()

    response = await client.post("/authorize", data=consent_form(response_type="token"))

    assert response.status_code == 302
    location = urlsplit(response.headers["location"])
    assert location.query == ""
    params = redirect_params(response, "fragment")
    assert params["token_type"] == "bearer"
    assert params["expires_in"] == "3600"
    assert params["domain"] == DOMAIN
    assert params["state"] == "xyz"

    stored = await AccessTokenRepository(db_session).get_by_token(params["access_token"])
    assert stored.client_id == "100"
    assert stored.user_id == USER_ID


async def test_post_deny_code(client, login):
    login()

    response = await client.post("/authorize", data=consent_form(authorization="Deny"))

    assert response.status_code == 302
    params = redirect_params(response)
    assert params["error"] == "access_denied"
    assert params["state"] == "xyz"
    assert "code" not in params


async def test_post_deny_token_uses_fragment(client, login):
    login()

    response = await client.post(
        "/authorize", data=consent_form(response_type="token", authorization="Deny")
    )

    assert response.status_code == 302
    assert redirect_params(response, "fragment")["error"] == "access_denied"


async def test_post_unknown_domain(client, login):
    login()

    response = await client.post("/authorize", data=consent_form(domain="unknown.example.com"))

    assert response.status_code == 302
    params = redirect_params(response)
    assert params["error"] == "invalid_request"
    assert params["error_description"] == "Unknown domain"


async def test_post_empty_domain(client, login):
    login()

    response = await client.post("/authorize", data=consent_form(domain=""))

    assert response.status_code == 302
    assert redirect_params(response)["error_description"] == "Missing domain"


async def test_post_missing_authorization(client, login):
    login()

    response = await client.post("/authorize", data=authorize_query())

    assert response.status_code == 302
    assert redirect_params(response)["error"] == "invalid_request"


async def test_post_invalid_response_type_is_direct(client, login):
    login()

    response = await client.post("/authorize", data=consent_form(response_type="id_token"))

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_request"


async def test_post_redirect_mismatch_is_direct_even_when_denied(client, login):
    """A denial is never sent to a redirect URI the client does not own."""
    login()

    response = await client.post(
        "/authorize",
        data=consent_form(redirect_uri="http://evil.example.com/", authorization="Deny"),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_client"


async def test_post_token_storage_failure(client, login, monkeypatch):
    """If the token cannot be committed the user agent gets a direct error."""
    login()

    async def failing_issue(self, *args, **kwargs):
        raise OperationalError("INSERT INTO access_tokens", {}, Exception("disk full"))

    monkeypatch.setattr(TokenIssuer, "issue", failing_issue)

    response = await client.post("/authorize", data=consent_form(response_type="token"))

    assert response.status_code == 500
    assert response.json()["error"] == "server_error"
    assert "location" not in response.headers
