"""Abstract interfaces shared by the ITGlue client components.

An AuthProvider turns stored credentials into the headers attached to every
API request. The client asks for headers on each attempt, so providers that
hold short-lived tokens can refresh them transparently.
"""

from abc import ABC, abstractmethod


class AuthProvider(ABC):
    """Abstract interface for request authentication.

    Implementations: ApiKeyAuth, JWTAuth
    """

    name: str = "auth"

    @abstractmethod
    def headers(self) -> dict[str, str]:
        """Return the authentication headers for the next request.

        Returns:
            Header name to value mapping

        Raises:
            AuthenticationError: If headers cannot be produced
        """

    def invalidate(self) -> None:
        """Discard any cached token so the next call re-authenticates."""
