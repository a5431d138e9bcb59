"""Tests for authentication providers."""

import base64
import json
import time
from urllib.parse import parse_qs, urlparse

import pytest
import responses

from itglue_tools.api.auth import ApiKeyAuth, JWTAuth, _token_expiry
from itglue_tools.api.base import ITGlueClient
from itglue_tools.api.credentials import JWTCredentials
from itglue_tools.core.exceptions import AuthenticationError

PORTAL = "https://acme.itglue.com"
API = "https://api.itglue.com"


def make_jwt(exp: float) -> str:
    """Build an unsigned JWT with the given expiry."""

    def encode(part: dict) -> str:
        raw = json.dumps(part).encode()
        return base64.urlsafe_b64encode(raw).decode().rstrip("=")

    return f"{encode({'alg': 'none'})}.{encode({'exp': exp})}.sig"


def add_login_flow(access_token: str = "access-1") -> None:
    responses.add(responses.POST, f"{PORTAL}/login", json={})
    responses.add(responses.GET, f"{PORTAL}/jwt/refresh_token", json={"token": "refresh-1"})
    responses.add(responses.GET, f"{PORTAL}/jwt/token", json={"token": access_token})


class TestApiKeyAuth:
    """Tests for ApiKeyAuth."""

    def test_headers(self) -> None:
        assert ApiKeyAuth("ITG.abc").headers() == {"x-api-key": "ITG.abc"}

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(AuthenticationError):
            ApiKeyAuth("")


class TestJWTAuth:
    """Tests for the JWT login flow."""

    def test_requires_credentials_or_assertion(self) -> None:
        with pytest.raises(AuthenticationError):
            JWTAuth(portal_url=PORTAL, email="a@example.com")

    @responses.activate
    def test_credential_login_flow(self) -> None:
        """Test login POST, refresh exchange and access exchange."""
        add_login_flow()

        auth = JWTAuth(portal_url=PORTAL, email="tech@example.com", password="pw", otp="123456")
        headers = auth.headers()

        assert headers == {"Authorization": "Bearer access-1"}
        assert [call.request.method for call in responses.calls] == ["POST", "GET", "GET"]

        login_body = json.loads(responses.calls[0].request.body)
        assert login_body == {
            "user": {"email": "tech@example.com", "password": "pw", "otp_attempt": "123456"}
        }
        query = parse_qs(urlparse(responses.calls[2].request.url).query)
        assert query["refresh_token"] == ["refresh-1"]

    @responses.activate
    def test_saml_login_flow(self) -> None:
        """Test login with a SAML assertion."""
        responses.add(responses.POST, f"{PORTAL}/saml/consume", json={})
        responses.add(responses.GET, f"{PORTAL}/jwt/refresh_token", json={"token": "r"})
        responses.add(responses.GET, f"{PORTAL}/jwt/token", json={"token": "a"})

        auth = JWTAuth(portal_url=PORTAL, saml_assertion="PHNhbWw+")

        assert auth.access_token() == "a"
        assert "SAMLResponse=PHNhbWw%2B" in responses.calls[0].request.body

    @responses.activate
    def test_from_credentials_tuple(self) -> None:
        add_login_flow()

        creds = JWTCredentials(portal_url=PORTAL + "/", email="e@example.com", password="pw")
        auth = JWTAuth(credentials=creds)

        assert auth.portal_url == PORTAL
        assert auth.access_token() == "access-1"

    @responses.activate
    def test_token_cached_until_expiry(self) -> None:
        """Test that a valid token is reused without new requests."""
        add_login_flow(make_jwt(time.time() + 3600))

        auth = JWTAuth(portal_url=PORTAL, email="e@example.com", password="pw")
        first = auth.headers()
        second = auth.headers()

        assert first == second
        assert len(responses.calls) == 3

    @responses.activate
    def test_expired_token_refreshed_without_login(self) -> None:
        """Test that an expired access token is re-exchanged with the refresh token."""
        add_login_flow(make_jwt(time.time() - 10))
        responses.add(responses.GET, f"{PORTAL}/jwt/token", json={"token": "access-2"})

        auth = JWTAuth(portal_url=PORTAL, email="e@example.com", password="pw")
        auth.access_token()
        assert auth.access_token() == "access-2"

        methods = [call.request.method for call in responses.calls]
        assert methods == ["POST", "GET", "GET", "GET"]

    @responses.activate
    def test_failed_login_raises(self) -> None:
        responses.add(responses.POST, f"{PORTAL}/login", status=401)

        auth = JWTAuth(portal_url=PORTAL, email="e@example.com", password="bad")
        with pytest.raises(AuthenticationError) as exc_info:
            auth.headers()

        assert exc_info.value.details["status_code"] == 401

    @responses.activate
    def test_missing_token_raises(self) -> None:
        responses.add(responses.POST, f"{PORTAL}/login", json={})
        responses.add(responses.GET, f"{PORTAL}/jwt/refresh_token", json={})

        auth = JWTAuth(portal_url=PORTAL, email="e@example.com", password="pw")
        with pytest.raises(AuthenticationError):
            auth.headers()

    @responses.activate
    def test_client_sends_bearer_token(self) -> None:
        """Test that the client uses the JWT provider for API calls."""
        add_login_flow()
        responses.add(responses.GET, f"{API}/organizations", json={"data": []})

        auth = JWTAuth(portal_url=PORTAL, email="e@example.com", password="pw")
        client = ITGlueClient(auth=auth)
        client._get("/organizations")

        api_call = responses.calls[-1].request
        assert api_call.headers["Authorization"] == "Bearer access-1"
        assert "x-api-key" not in api_call.headers


class TestTokenExpiry:
    """Tests for JWT expiry parsing."""

    def test_reads_exp_claim(self) -> None:
        assert _token_expiry(make_jwt(1700000000)) == 1700000000.0

    def test_opaque_token(self) -> None:
        assert _token_expiry("not-a-jwt") is None
