"""
itglue-tools: Python client for the ITGlue REST API.

This package wraps the ITGlue API with authentication (API key or JWT),
automatic pagination, rate limit backoff and timeout recovery, and
endpoints for organizations, configurations, contacts, documents,
passwords, flexible assets, locations, manufacturers, models, groups,
users, document folders and organization exports.

Example Usage:
    from itglue_tools import ITGlueClient

    with ITGlueClient(api_key="ITG.xxx") as client:
        orgs = client.resource("organizations").list(filters={"name": "Acme"})
        for org in orgs:
            configs = client.resource("configurations").list(parent_id=org.id)

        password = client.resource("passwords").get("1234", show_password=True)
"""

from itglue_tools.api import ApiKeyAuth, ITGlueClient, JWTAuth, PagedFetcher, RetryPolicy
from itglue_tools.core.exceptions import (
    AuthenticationError,
    ITGlueConnectionError,
    ITGlueError,
    NotFoundError,
    PaginationError,
    ProviderError,
    RateLimitError,
    RequestTimeoutError,
    UnsupportedOperationError,
    ValidationError,
)
from itglue_tools.core.models import (
    FetchResult,
    Resource,
    Result,
    ResultStatus,
)
from itglue_tools.core.registry import (
    get_resource,
    list_resources,
    register_resource,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "ITGlueClient",
    "ApiKeyAuth",
    "JWTAuth",
    "PagedFetcher",
    "RetryPolicy",
    # Models
    "Resource",
    "FetchResult",
    "Result",
    "ResultStatus",
    # Registry
    "get_resource",
    "list_resources",
    "register_resource",
    # Exceptions
    "ITGlueError",
    "AuthenticationError",
    "ITGlueConnectionError",
    "NotFoundError",
    "PaginationError",
    "ProviderError",
    "RateLimitError",
    "RequestTimeoutError",
    "UnsupportedOperationError",
    "ValidationError",
]
