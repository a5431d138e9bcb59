"""Data models for ITGlue API resources and operation results."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def to_snake(key: str) -> str:
    """Convert an ITGlue kebab-case attribute name to snake_case."""
    return key.replace("-", "_")


def to_kebab(key: str) -> str:
    """Convert a snake_case attribute name to ITGlue kebab-case."""
    return key.replace("_", "-")


class ResultStatus(str, Enum):
    """Operation result status."""

    SUCCESS = "success"
    FAILED = "failed"
    NO_CHANGE = "no_change"


class Resource(BaseModel):
    """A single JSON:API resource returned by ITGlue."""

    id: str = Field(description="Resource identifier")
    type: str = Field(description="JSON:API resource type (e.g., 'organizations')")
    attributes: dict[str, Any] = Field(
        default_factory=dict, description="Resource attributes with snake_case keys"
    )
    relationships: dict[str, Any] = Field(
        default_factory=dict, description="JSON:API relationships block"
    )
    raw: dict[str, Any] = Field(default_factory=dict, description="Raw API item")

    class Config:
        """Pydantic configuration."""

        extra = "allow"

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "Resource":
        """Build a Resource from a JSON:API data item.

        Args:
            item: Item from a response ``data`` array or object

        Returns:
            Resource with attribute keys renamed to snake_case
        """
        attributes = item.get("attributes") or {}
        return cls(
            id=str(item.get("id", "")),
            type=item.get("type", ""),
            attributes={to_snake(k): v for k, v in attributes.items()},
            relationships=item.get("relationships") or {},
            raw=item,
        )

    def get(self, name: str, default: Any = None) -> Any:
        """Return an attribute value by snake_case or kebab-case name."""
        return self.attributes.get(to_snake(name), default)


class FetchResult(BaseModel):
    """Accumulated result of a paged fetch."""

    data: list[dict[str, Any]] = Field(default_factory=list, description="Accumulated items")
    included: list[dict[str, Any]] = Field(
        default_factory=list, description="Side-loaded items from 'included'"
    )
    total_count: int = Field(default=0, description="Total reported by the server")
    page_size: int = Field(description="Page size in effect when the fetch finished")

    @property
    def resources(self) -> list[Resource]:
        """Accumulated items parsed into Resource models."""
        return [Resource.from_api(item) for item in self.data]


class Result(BaseModel):
    """Operation result with status and details."""

    status: ResultStatus = Field(description="Operation result status")
    message: str | None = Field(default=None, description="Result message")
    resource_ids: list[str] = Field(default_factory=list, description="Affected resource IDs")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional details")

    @property
    def success(self) -> bool:
        """Check if operation was successful."""
        return self.status in (ResultStatus.SUCCESS, ResultStatus.NO_CHANGE)

    class Config:
        """Pydantic configuration."""

        extra = "allow"
