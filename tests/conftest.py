"""Shared pytest fixtures for itglue-tools tests."""

from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from itglue_tools.api.base import ITGlueClient
from itglue_tools.api.retry import RetryPolicy
from itglue_tools.core.models import Resource

BASE_URL = "https://api.itglue.com"


@pytest.fixture(autouse=True)
def mock_sleep() -> Iterator[MagicMock]:
    """Never actually sleep during rate limit backoff."""
    with patch("itglue_tools.api.retry.time.sleep") as mock:
        yield mock


@pytest.fixture
def client() -> ITGlueClient:
    """Client with explicit credentials and default retry policy."""
    return ITGlueClient(base_url=BASE_URL, api_key="test-key")


@pytest.fixture
def capped_client() -> ITGlueClient:
    """Client that gives up after two rate limited retries."""
    return ITGlueClient(
        base_url=BASE_URL,
        api_key="test-key",
        retry_policy=RetryPolicy(max_rate_limit_retries=2),
    )


def make_item(item_id: int | str, resource_type: str = "organizations", **attributes: Any) -> dict:
    """Build a JSON:API data item."""
    return {
        "id": str(item_id),
        "type": resource_type,
        "attributes": attributes or {"name": f"Item {item_id}"},
    }


def make_page(items: list[dict], total: int | None, **extra: Any) -> dict:
    """Build a JSON:API list response."""
    body: dict[str, Any] = {"data": items}
    if total is not None:
        body["meta"] = {"total-count": total}
    body.update(extra)
    return body


@pytest.fixture
def sample_resource() -> Resource:
    """Create a sample Resource for testing."""
    return Resource.from_api(
        {
            "id": "1001",
            "type": "contacts",
            "attributes": {
                "name": "Jane Smith",
                "first-name": "Jane",
                "last-name": "Smith",
                "organization-id": 42,
            },
        }
    )
