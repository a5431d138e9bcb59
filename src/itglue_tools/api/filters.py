"""Filter map handling for ITGlue list requests."""

import logging
from collections.abc import Collection, Mapping
from typing import Any

logger = logging.getLogger(__name__)


def format_filter_value(value: Any) -> str:
    """Format a filter value the way the API expects it in a query string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(format_filter_value(v) for v in value)
    return str(value)


def build_filter_params(
    filters: Mapping[str, Any] | None,
    allowed: Collection[str],
) -> dict[str, str]:
    """Turn a filter map into ``filter[key]=value`` query parameters.

    Keys outside ``allowed`` are dropped with a warning. ``None`` values are
    skipped.

    Args:
        filters: Filter names to values (snake_case or kebab-case names)
        allowed: Filter names the endpoint supports (snake_case)

    Returns:
        Query parameters ready to pass to requests
    """
    params: dict[str, str] = {}
    if not filters:
        return params

    dropped = []
    for key, value in filters.items():
        name = key.replace("-", "_")
        if name not in allowed:
            dropped.append(key)
            continue
        if value is None:
            continue
        params[f"filter[{name}]"] = format_filter_value(value)

    if dropped:
        logger.warning(
            "Ignoring unsupported filter(s): %s. Supported: %s",
            ", ".join(sorted(dropped)),
            ", ".join(sorted(allowed)),
        )
    return params
