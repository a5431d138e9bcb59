"""Core interfaces, models and exceptions for itglue-tools."""

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
from itglue_tools.core.interfaces import AuthProvider
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

__all__ = [
    "Resource",
    "FetchResult",
    "Result",
    "ResultStatus",
    "AuthProvider",
    "get_resource",
    "list_resources",
    "register_resource",
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
