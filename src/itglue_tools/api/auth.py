"""Authentication providers for the ITGlue API.

Two header shapes are supported:

- ApiKeyAuth: a static ``x-api-key`` header.
- JWTAuth: ``Authorization: Bearer <token>`` where the token is obtained by
  logging in to the tenant portal (email/password or a SAML assertion),
  exchanging the login for a refresh token, and exchanging the refresh
  token for a short-lived access token.

Example:
    from itglue_tools.api.auth import JWTAuth

    auth = JWTAuth(
        portal_url="https://company.itglue.com",
        email="tech@example.com",
        password="secret",
        otp="123456",
    )
    headers = auth.headers()
"""

import base64
import json
import logging
import time
from typing import Any

import requests

from itglue_tools.api.credentials import JWTCredentials
from itglue_tools.core.exceptions import AuthenticationError, ITGlueConnectionError
from itglue_tools.core.interfaces import AuthProvider

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
SAML_LOGIN_PATH = "/saml/consume"
REFRESH_TOKEN_PATH = "/jwt/refresh_token"
ACCESS_TOKEN_PATH = "/jwt/token"

DEFAULT_TIMEOUT = 30  # seconds
# Refresh access tokens this many seconds before they expire
EXPIRY_MARGIN = 60


class ApiKeyAuth(AuthProvider):
    """Static API key authentication."""

    name = "api_key"

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise AuthenticationError("API key must not be empty", provider="itglue")
        self._api_key = api_key

    def headers(self) -> dict[str, str]:
        return {"x-api-key": self._api_key}


class JWTAuth(AuthProvider):
    """Bearer token authentication via the portal login flow.

    The refresh token obtained at login is kept for the lifetime of the
    provider. Access tokens are cached until shortly before their ``exp``
    claim and then re-exchanged.

    Attributes:
        portal_url: Tenant portal URL (e.g., https://company.itglue.com)
        timeout: Request timeout in seconds
    """

    name = "jwt"

    def __init__(
        self,
        portal_url: str | None = None,
        email: str | None = None,
        password: str | None = None,
        otp: str | None = None,
        saml_assertion: str | None = None,
        credentials: JWTCredentials | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the JWT provider.

        Args:
            portal_url: Tenant portal URL
            email: User email for credential login
            password: User password for credential login
            otp: One-time password when MFA is enabled
            saml_assertion: Base64 SAML response for SSO login
            credentials: Resolved JWTCredentials (alternative to the above)
            timeout: Request timeout in seconds
            session: Session to use for the login flow
        """
        if credentials:
            portal_url = portal_url or credentials.portal_url
            email = email or credentials.email
            password = password or credentials.password

        if not portal_url:
            raise AuthenticationError("Portal URL is required for JWT login", provider="itglue")
        if not saml_assertion and not (email and password):
            raise AuthenticationError(
                "JWT login needs either email and password or a SAML assertion",
                provider="itglue",
            )

        self.portal_url = portal_url.rstrip("/")
        self.timeout = timeout
        self._email = email
        self._password = password
        self._otp = otp
        self._saml_assertion = saml_assertion
        self._session = session or requests.Session()
        self._refresh_token: str | None = None
        self._access_token: str | None = None
        self._expires_at: float | None = None

    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token()}"}

    def invalidate(self) -> None:
        self._access_token = None
        self._expires_at = None

    def access_token(self) -> str:
        """Return a valid access token, logging in or refreshing as needed."""
        if self._access_token and not self._is_expired():
            return self._access_token

        if not self._refresh_token:
            self.login()

        assert self._refresh_token is not None
        self._access_token = self._exchange_access_token(self._refresh_token)
        self._expires_at = _token_expiry(self._access_token)
        logger.debug("Obtained access token from %s", self.portal_url)
        return self._access_token

    def login(self) -> None:
        """Log in to the portal and obtain a refresh token."""
        if self._saml_assertion:
            logger.debug("Logging in to %s with SAML assertion", self.portal_url)
            self._post(
                SAML_LOGIN_PATH,
                data={"SAMLResponse": self._saml_assertion},
                params={"generate_jwt": 1},
            )
        else:
            logger.debug("Logging in to %s as %s", self.portal_url, self._email)
            user: dict[str, Any] = {"email": self._email, "password": self._password}
            if self._otp:
                user["otp_attempt"] = self._otp
            self._post(
                LOGIN_PATH,
                json={"user": user},
                params={"generate_jwt": 1, "sso_disabled": 1},
            )

        body = self._call("GET", REFRESH_TOKEN_PATH)
        self._refresh_token = _extract_token(body, "refresh token")
        logger.info("Logged in to %s", self.portal_url)

    def _exchange_access_token(self, refresh_token: str) -> str:
        body = self._call("GET", ACCESS_TOKEN_PATH, params={"refresh_token": refresh_token})
        return _extract_token(body, "access token")

    def _is_expired(self) -> bool:
        if self._expires_at is None:
            return False
        return time.time() >= self._expires_at - EXPIRY_MARGIN

    def _post(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self._call("POST", path, **kwargs)

    def _call(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.portal_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("JWT login request to %s failed: %s", url, e)
            raise ITGlueConnectionError(
                f"Login request failed: {e}",
                provider="itglue",
                details={"url": url},
            ) from e

        logger.debug("%s %s -> %d", method, path, response.status_code)

        if response.status_code >= 400:
            logger.error("JWT login step %s failed with %d", path, response.status_code)
            # Force a full login on the next attempt
            self._refresh_token = None
            self.invalidate()
            raise AuthenticationError(
                f"Login failed at {path}: HTTP {response.status_code}",
                provider="itglue",
                details={"status_code": response.status_code, "url": url},
            )

        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}


def _extract_token(body: dict[str, Any], label: str) -> str:
    token = body.get("token")
    if not token:
        logger.error("Login response did not contain a %s", label)
        raise AuthenticationError(f"Login response did not contain a {label}", provider="itglue")
    return str(token)


def _token_expiry(token: str) -> float | None:
    """Read the ``exp`` claim from a JWT without verifying it."""
    try:
        payload = token.split(".")[1]
        payload += "=" * (-len(payload) % 4)
        claims = json.loads(base64.urlsafe_b64decode(payload))
        return float(claims["exp"])
    except (IndexError, KeyError, TypeError, ValueError):
        return None
