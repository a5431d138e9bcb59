"""Exception hierarchy for itglue-tools."""


class ITGlueError(Exception):
    """Base exception for all itglue-tools errors."""

    def __init__(self, message: str, provider: str | None = None, details: dict | None = None):
        """Initialize ITGlueError.

        Args:
            message: Error message
            provider: Component that raised the error (e.g., 'itglue')
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation."""
        if self.provider:
            return f"[{self.provider}] {self.message}"
        return self.message


class AuthenticationError(ITGlueError):
    """Authentication failed."""


class RateLimitError(ITGlueError):
    """Rate limit exceeded and the configured retry cap was reached."""

    def __init__(
        self,
        message: str,
        retry_after: int | None = None,
        provider: str | None = None,
        details: dict | None = None,
    ):
        """Initialize RateLimitError.

        Args:
            message: Error message
            retry_after: Seconds until retry is allowed
            provider: Provider name
            details: Additional error details
        """
        super().__init__(message, provider, details)
        self.retry_after = retry_after


class RequestTimeoutError(ITGlueError):
    """A request kept timing out after all timeout retries."""

    def __init__(
        self,
        message: str,
        attempts: int | None = None,
        provider: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, provider, details)
        self.attempts = attempts


class PaginationError(ITGlueError):
    """Paged fetch could not complete consistently."""

    def __init__(
        self,
        message: str,
        fetched: int | None = None,
        total_count: int | None = None,
        provider: str | None = None,
        details: dict | None = None,
    ):
        """Initialize PaginationError.

        Args:
            message: Error message
            fetched: Number of items accumulated when the fetch stopped
            total_count: Total reported by the server, if known
            provider: Provider name
            details: Additional error details
        """
        super().__init__(message, provider, details)
        self.fetched = fetched
        self.total_count = total_count


class NotFoundError(ITGlueError):
    """Resource not found."""

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
        provider: str | None = None,
        details: dict | None = None,
    ):
        """Initialize NotFoundError.

        Args:
            message: Error message
            resource_type: Type of resource (e.g., 'contacts', 'passwords')
            resource_id: Resource identifier
            provider: Provider name
            details: Additional error details
        """
        super().__init__(message, provider, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ValidationError(ITGlueError):
    """Validation error for input data."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        provider: str | None = None,
        details: dict | None = None,
    ):
        """Initialize ValidationError.

        Args:
            message: Error message
            field: Field that failed validation
            provider: Provider name
            details: Additional error details
        """
        super().__init__(message, provider, details)
        self.field = field


class UnsupportedOperationError(ITGlueError):
    """The resource type does not support the requested operation."""


class ITGlueConnectionError(ITGlueError):
    """Connection to the API failed."""


class ProviderError(ITGlueError):
    """Error response returned by the API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        provider: str | None = None,
        details: dict | None = None,
    ):
        """Initialize ProviderError.

        Args:
            message: Error message
            status_code: HTTP status code
            provider: Provider name
            details: Additional error details
        """
        super().__init__(message, provider, details)
        self.status_code = status_code
