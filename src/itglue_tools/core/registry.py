"""Resource registry for looking up ITGlue endpoints by name."""

from typing import TYPE_CHECKING, Any, TypeVar

from itglue_tools.core.exceptions import ITGlueError

if TYPE_CHECKING:
    from itglue_tools.api.base import ITGlueClient

T = TypeVar("T")

# Global registry of resource name -> endpoint class
_resource_registry: dict[str, Any] = {}


def register_resource(name: str) -> Any:
    """Decorator to register a resource endpoint class.

    Args:
        name: Resource name (e.g., 'contacts', 'flexible_assets')

    Returns:
        Decorator function

    Example:
        @register_resource("contacts")
        class Contacts(ResourceEndpoint):
            ...
    """

    def decorator(cls: type[T]) -> type[T]:
        if name in _resource_registry and _resource_registry[name] is not cls:
            raise ValueError(f"Resource '{name}' is already registered")
        _resource_registry[name] = cls
        return cls

    return decorator


def get_resource(name: str, client: "ITGlueClient") -> Any:
    """Get a resource endpoint bound to a client.

    Args:
        name: Resource name (dashes and underscores are interchangeable)
        client: ITGlue client the endpoint will use

    Returns:
        ResourceEndpoint instance

    Raises:
        ITGlueError: If the resource is not registered
    """
    _import_resources()

    key = name.replace("-", "_").lower()
    if key not in _resource_registry:
        available = sorted(_resource_registry)
        raise ITGlueError(
            f"Resource '{name}' not found. Available: {available}",
            provider="itglue",
        )

    return _resource_registry[key](client)


def list_resources() -> dict[str, Any]:
    """List all registered resources.

    Returns:
        Dictionary mapping resource names to endpoint classes
    """
    _import_resources()
    return dict(sorted(_resource_registry.items()))


def _import_resources() -> None:
    """Import the endpoint module so its decorators run."""
    import itglue_tools.api.resources  # noqa: F401
