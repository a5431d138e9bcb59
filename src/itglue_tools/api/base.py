"""HTTP client for the ITGlue REST API with shared auth and request logic.

This module provides the client every resource endpoint talks through:
- Credential resolution (API key or JWT login)
- Rate limit and timeout recovery via RetryPolicy
- Mapping of error responses onto the exception hierarchy
- Paged fetching via PagedFetcher
- Request/response logging

Example:
    from itglue_tools.api.base import ITGlueClient

    with ITGlueClient(api_key="ITG.xxx", region="eu") as client:
        orgs = client.resource("organizations").list(filters={"name": "Acme"})
"""

import logging
from typing import Any

import requests

from itglue_tools.api.auth import ApiKeyAuth
from itglue_tools.api.credentials import (
    DEFAULT_REGION,
    REGION_URLS,
    get_credentials,
    region_url,
)
from itglue_tools.api.pagination import DEFAULT_PAGE_SIZE, PagedFetcher
from itglue_tools.api.retry import RetryPolicy
from itglue_tools.core.exceptions import (
    AuthenticationError,
    ITGlueConnectionError,
    NotFoundError,
    ProviderError,
)
from itglue_tools.core.interfaces import AuthProvider
from itglue_tools.core.models import FetchResult

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_TIMEOUT = 30  # seconds
JSON_API_CONTENT_TYPE = "application/vnd.api+json"


class ITGlueClient:
    """HTTP client for the ITGlue API.

    Attributes:
        base_url: API base URL (e.g., https://api.itglue.com)
        timeout: Request timeout in seconds
        page_size: Default page size for list requests
        retry_policy: Rate limit and timeout retry behaviour
    """

    provider_name = "itglue"

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        region: str | None = None,
        auth: AuthProvider | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        page_size: int = DEFAULT_PAGE_SIZE,
        retry_policy: RetryPolicy | None = None,
        service: str | None = None,
    ) -> None:
        """Initialize the ITGlue client.

        Args:
            base_url: API base URL (overrides region)
            api_key: API key for x-api-key authentication
            region: Region code ('us', 'eu', 'au')
            auth: Explicit auth provider (e.g., JWTAuth); skips API key lookup
            timeout: Request timeout in seconds
            page_size: Default page size for list requests
            retry_policy: Retry behaviour (defaults to RetryPolicy())
            service: Keyring service name for credential lookup
        """
        if auth is None:
            creds = get_credentials(
                base_url=base_url,
                api_key=api_key,
                region=region,
                service=service or "itglue-tools",
            )
            self.base_url = creds.base_url
            auth = ApiKeyAuth(creds.api_key)
        elif base_url:
            self.base_url = base_url.rstrip("/")
        else:
            self.base_url = region_url(region) if region else REGION_URLS[DEFAULT_REGION]

        self._auth = auth
        self.timeout = timeout
        self.page_size = page_size
        self.retry_policy = retry_policy or RetryPolicy()

        # Create session for connection pooling
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": JSON_API_CONTENT_TYPE,
                "Content-Type": JSON_API_CONTENT_TYPE,
            }
        )

        logger.debug(
            "Initialized %s client for %s (auth: %s)",
            self.provider_name,
            self.base_url,
            auth.name,
        )

    def __enter__(self) -> "ITGlueClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit - close session."""
        self.close()

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
        logger.debug("Closed %s client session", self.provider_name)

    def resource(self, name: str) -> Any:
        """Get a resource endpoint bound to this client.

        Args:
            name: Registered resource name (e.g., 'contacts')

        Returns:
            ResourceEndpoint instance
        """
        from itglue_tools.core.registry import get_resource

        return get_resource(name, self)

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> requests.Response:
        """Make an HTTP request through the retry policy.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            path: API path (appended to base_url)
            params: Query parameters
            json: JSON:API body (will be serialized)

        Returns:
            Response object

        Raises:
            AuthenticationError: If authentication fails (401/403)
            NotFoundError: If resource not found (404)
            RateLimitError: If a rate limit cap is configured and exhausted
            RequestTimeoutError: If the request keeps timing out
            ITGlueConnectionError: If the connection fails
            ProviderError: For other HTTP errors
        """
        url = f"{self.base_url}{path}"
        description = f"{method} {path}"
        attempt = 0

        def send() -> requests.Response:
            nonlocal attempt
            attempt += 1
            logger.debug("%s %s (attempt %d)", method, url, attempt)
            # Headers are resolved per attempt so expiring tokens get refreshed
            return self._session.request(
                method=method,
                url=url,
                params=params,
                json=json,
                headers=self._auth.headers(),
                timeout=self.timeout,
            )

        try:
            response = self.retry_policy.call(
                send,
                description=description,
                retry_timeouts=method == "GET",
            )
        except requests.exceptions.ConnectionError as e:
            logger.error("Connection to %s failed: %s", url, e)
            raise ITGlueConnectionError(
                f"Connection failed: {e}",
                provider=self.provider_name,
                details={"url": url},
            ) from e

        logger.debug(
            "%s %s -> %d (%d bytes)",
            method,
            path,
            response.status_code,
            len(response.content),
        )

        if response.status_code == 401:
            self._auth.invalidate()
            logger.error("Authentication failed for %s", description)
            raise AuthenticationError(
                "Authentication failed. Check your credentials.",
                provider=self.provider_name,
                details={"status_code": 401},
            )

        if response.status_code == 403:
            logger.error("Access forbidden for %s", description)
            raise AuthenticationError(
                "Access forbidden. Check your permissions.",
                provider=self.provider_name,
                details={"status_code": 403, "url": url},
            )

        if response.status_code == 404:
            logger.debug("Resource not found: %s", path)
            raise NotFoundError(
                f"Resource not found: {path}",
                provider=self.provider_name,
                details={"status_code": 404, "url": url},
            )

        if response.status_code >= 400:
            error_body = self._safe_json(response)
            logger.error("%s failed with %d: %s", description, response.status_code, error_body)
            raise ProviderError(
                f"Request failed: {response.status_code}",
                status_code=response.status_code,
                provider=self.provider_name,
                details={"url": url, "response": error_body},
            )

        return response

    def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a GET request and return the JSON body."""
        response = self._request("GET", path, params=params)
        return self._json_body(response)

    def _post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a POST request and return the JSON body ({} for 204)."""
        response = self._request("POST", path, params=params, json=json)
        if response.status_code == 204 or not response.content:
            return {}
        return self._json_body(response)

    def _patch(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a PATCH request and return the JSON body ({} for 204)."""
        response = self._request("PATCH", path, params=params, json=json)
        if response.status_code == 204 or not response.content:
            return {}
        return self._json_body(response)

    def _delete(
        self,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Make a DELETE request.

        Returns:
            Parsed JSON response or None for empty/204 responses
        """
        response = self._request("DELETE", path, json=json)
        if response.status_code == 204 or not response.content:
            return None
        return self._json_body(response)

    def fetch_all(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        page_size: int | None = None,
    ) -> FetchResult:
        """Fetch every page of a list endpoint.

        Args:
            path: API path
            params: Extra query parameters
            page_size: Page size override for this fetch

        Returns:
            FetchResult with all items
        """
        fetcher = PagedFetcher(self, page_size=page_size or self.page_size)
        return fetcher.fetch(path, params)

    def _json_body(self, response: requests.Response) -> dict[str, Any]:
        """Parse a successful response body as a JSON object."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            logger.error(
                "%s returned a non JSON:API body (HTTP %d)", response.url, response.status_code
            )
            raise ProviderError(
                f"Unexpected response body from {response.url}",
                status_code=response.status_code,
                provider=self.provider_name,
                details={"response": response.text},
            )
        return body

    def _safe_json(self, response: requests.Response) -> dict[str, Any] | str:
        """Safely parse JSON response, returning raw text on failure."""
        try:
            return dict(response.json())
        except (ValueError, TypeError):
            return response.text

    def test_connection(self) -> bool:
        """Test the connection to the ITGlue API.

        Returns:
            True if the API accepted the credentials

        Raises:
            AuthenticationError: If authentication fails
            ITGlueConnectionError: If connection fails
        """
        self._get("/organizations", params={"page[size]": 1})
        logger.info("Connection test successful for %s", self.base_url)
        return True
