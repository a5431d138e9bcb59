"""ITGlue resource endpoints.

Each endpoint class declares its path, JSON:API type, supported filters,
supported operations and, where the API nests it, its parent collection.
The shared ResourceEndpoint implements list/get/create/update/delete on top
of ITGlueClient.

Example:
    from itglue_tools.api import ITGlueClient

    with ITGlueClient() as client:
        contacts = client.resource("contacts")
        for contact in contacts.list(filters={"last_name": "Smith"}, parent_id="42"):
            print(contact.id, contact.get("name"))

        contact = contacts.get("1001")
        contacts.update("1001", {"title": "CTO"})
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from itglue_tools.api.filters import build_filter_params
from itglue_tools.core.exceptions import (
    NotFoundError,
    ProviderError,
    UnsupportedOperationError,
    ValidationError,
)
from itglue_tools.core.models import Resource, Result, ResultStatus, to_kebab
from itglue_tools.core.registry import register_resource

logger = logging.getLogger(__name__)

ALL_OPERATIONS = frozenset({"list", "get", "create", "update", "delete"})
READ_OPERATIONS = frozenset({"list", "get"})


class ResourceEndpoint:
    """CRUD operations for one ITGlue resource type.

    Attributes:
        name: Registry name (e.g., 'document_folders')
        resource_type: JSON:API type (e.g., 'document-folders')
        path: Collection path (e.g., '/document_folders')
        parent: Parent collection when nested (e.g., 'organizations')
        parent_required: Whether calls must name a parent
        filters: Supported filter names
        operations: Supported operations
    """

    name = ""
    resource_type = ""
    path = ""
    parent: str | None = None
    parent_required = False
    filters: frozenset[str] = frozenset({"id"})
    operations: frozenset[str] = ALL_OPERATIONS
    provider_name = "itglue"

    def __init__(self, client: Any) -> None:
        self._client = client

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r})"

    def list(
        self,
        filters: Mapping[str, Any] | None = None,
        parent_id: str | int | None = None,
        sort: str | None = None,
        include: Iterable[str] | None = None,
        page_size: int | None = None,
    ) -> list[Resource]:
        """List resources, following pagination until the total is reached.

        Args:
            filters: Filter map; unsupported keys are dropped
            parent_id: Parent ID for nested collections
            sort: Sort expression (e.g., 'name' or '-updated_at')
            include: Related resources to side-load
            page_size: Page size override

        Returns:
            All matching resources
        """
        self._check_operation("list")
        params: dict[str, Any] = build_filter_params(filters, self.filters)
        if sort:
            params["sort"] = sort
        if include:
            params["include"] = ",".join(include)
        self._validate_list(params)

        path = self._collection_path(parent_id)
        logger.debug("Listing %s from %s", self.name, path)
        result = self._client.fetch_all(path, params=params, page_size=page_size)
        logger.debug("Fetched %d %s", len(result.data), self.name)
        return result.resources

    def get(
        self,
        resource_id: str | int,
        parent_id: str | int | None = None,
        include: Iterable[str] | None = None,
        **params: Any,
    ) -> Resource:
        """Get a single resource by ID with one GET request.

        Args:
            resource_id: Resource ID
            parent_id: Parent ID for nested collections
            include: Related resources to side-load
            **params: Extra query parameters

        Returns:
            The resource

        Raises:
            NotFoundError: If the resource does not exist
        """
        self._check_operation("get")
        query = dict(params)
        if include:
            query["include"] = ",".join(include)

        path = f"{self._collection_path(parent_id)}/{resource_id}"
        try:
            body = self._client._get(path, params=query or None)
        except NotFoundError as e:
            raise NotFoundError(
                f"{self.resource_type} {resource_id} not found",
                resource_type=self.resource_type,
                resource_id=str(resource_id),
                provider=self.provider_name,
                details=e.details,
            ) from e
        return self._single(body)

    def create(
        self,
        attributes: Mapping[str, Any],
        parent_id: str | int | None = None,
    ) -> Resource:
        """Create a resource.

        Args:
            attributes: Attribute values (snake_case or kebab-case names)
            parent_id: Parent ID for nested collections

        Returns:
            The created resource
        """
        self._check_operation("create")
        payload = {"data": self._document(attributes)}
        body = self._client._post(self._collection_path(parent_id), json=payload)
        resource = self._single(body)
        logger.info("Created %s %s", self.resource_type, resource.id)
        return resource

    def update(
        self,
        resource_id: str | int,
        attributes: Mapping[str, Any],
        parent_id: str | int | None = None,
    ) -> Resource:
        """Update a resource with PATCH.

        Args:
            resource_id: Resource ID
            attributes: Attribute values to change
            parent_id: Parent ID for nested collections

        Returns:
            The updated resource
        """
        self._check_operation("update")
        payload = {"data": self._document(attributes)}
        path = f"{self._collection_path(parent_id)}/{resource_id}"
        body = self._client._patch(path, json=payload)
        logger.info("Updated %s %s", self.resource_type, resource_id)
        if not body:
            return self.get(resource_id, parent_id=parent_id)
        return self._single(body)

    def delete(self, resource_ids: str | int | Iterable[str | int]) -> Result:
        """Delete one or more resources with a bulk delete request.

        Args:
            resource_ids: A single ID or several IDs

        Returns:
            Result listing the deleted IDs
        """
        self._check_operation("delete")
        if isinstance(resource_ids, (str, int)):
            ids = [str(resource_ids)]
        else:
            ids = [str(i) for i in resource_ids]
        if not ids:
            return Result(status=ResultStatus.NO_CHANGE, message="Nothing to delete")

        payload = {
            "data": [{"type": self.resource_type, "attributes": {"id": i}} for i in ids]
        }
        self._client._delete(self.path, json=payload)
        logger.info("Deleted %s %s", self.resource_type, ", ".join(ids))
        return Result(
            status=ResultStatus.SUCCESS,
            message=f"Deleted {len(ids)} {self.resource_type}",
            resource_ids=ids,
        )

    def _collection_path(self, parent_id: str | int | None) -> str:
        if parent_id is not None and self.parent:
            return f"/{self.parent}/{parent_id}/relationships{self.path}"
        if self.parent_required:
            logger.error("%s requires a parent %s ID", self.name, self.parent)
            raise ValidationError(
                f"{self.name} requires a parent {self.parent} ID",
                field="parent_id",
                provider=self.provider_name,
            )
        return self.path

    def _check_operation(self, operation: str) -> None:
        if operation not in self.operations:
            logger.error("%s does not support %s", self.name, operation)
            raise UnsupportedOperationError(
                f"{self.name} does not support '{operation}'",
                provider=self.provider_name,
                details={"supported": sorted(self.operations)},
            )

    def _validate_list(self, params: dict[str, Any]) -> None:
        """Hook for endpoints with required filters."""

    def _document(self, attributes: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "type": self.resource_type,
            "attributes": {to_kebab(k): v for k, v in attributes.items()},
        }

    def _single(self, body: dict[str, Any]) -> Resource:
        data = body.get("data")
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            logger.error("Response for %s contained no data", self.resource_type)
            raise ProviderError(
                f"Response for {self.resource_type} contained no data",
                provider=self.provider_name,
                details={"response": body},
            )
        return Resource.from_api(data)


@register_resource("organizations")
class Organizations(ResourceEndpoint):
    name = "organizations"
    resource_type = "organizations"
    path = "/organizations"
    filters = frozenset(
        {
            "id",
            "name",
            "organization_type_id",
            "organization_status_id",
            "created_at",
            "updated_at",
            "my_glue_account_id",
            "psa_id",
            "psa_integration_type",
            "group_id",
            "exclude_id",
            "exclude_name",
            "exclude_organization_type_id",
            "exclude_organization_status_id",
        }
    )


@register_resource("configurations")
class Configurations(ResourceEndpoint):
    name = "configurations"
    resource_type = "configurations"
    path = "/configurations"
    parent = "organizations"
    filters = frozenset(
        {
            "id",
            "name",
            "organization_id",
            "configuration_type_id",
            "configuration_status_id",
            "contact_id",
            "serial_number",
            "mac_address",
            "asset_tag",
            "psa_id",
            "psa_integration_type",
            "rmm_id",
            "rmm_integration_type",
            "archived",
        }
    )


@register_resource("contacts")
class Contacts(ResourceEndpoint):
    name = "contacts"
    resource_type = "contacts"
    path = "/contacts"
    parent = "organizations"
    filters = frozenset(
        {
            "id",
            "first_name",
            "last_name",
            "title",
            "contact_type_id",
            "important",
            "primary_email",
            "organization_id",
            "psa_id",
            "psa_integration_type",
        }
    )


@register_resource("documents")
class Documents(ResourceEndpoint):
    name = "documents"
    resource_type = "documents"
    path = "/documents"
    parent = "organizations"
    parent_required = True
    filters = frozenset({"id", "name", "document_folder_id", "archived"})


@register_resource("passwords")
class Passwords(ResourceEndpoint):
    name = "passwords"
    resource_type = "passwords"
    path = "/passwords"
    parent = "organizations"
    filters = frozenset(
        {
            "id",
            "name",
            "organization_id",
            "password_category_id",
            "url",
            "cached_resource_name",
            "archived",
        }
    )

    def get(
        self,
        resource_id: str | int,
        parent_id: str | int | None = None,
        include: Iterable[str] | None = None,
        show_password: bool = False,
        **params: Any,
    ) -> Resource:
        """Get a password; the secret is only returned with show_password."""
        params["show_password"] = "true" if show_password else "false"
        return super().get(resource_id, parent_id=parent_id, include=include, **params)


@register_resource("flexible_assets")
class FlexibleAssets(ResourceEndpoint):
    name = "flexible_assets"
    resource_type = "flexible-assets"
    path = "/flexible_assets"
    filters = frozenset({"id", "name", "organization_id", "flexible_asset_type_id"})

    def _validate_list(self, params: dict[str, Any]) -> None:
        if "filter[flexible_asset_type_id]" not in params:
            logger.error("Listing flexible assets without flexible_asset_type_id")
            raise ValidationError(
                "Listing flexible assets requires the flexible_asset_type_id filter",
                field="flexible_asset_type_id",
                provider=self.provider_name,
            )


@register_resource("locations")
class Locations(ResourceEndpoint):
    name = "locations"
    resource_type = "locations"
    path = "/locations"
    parent = "organizations"
    filters = frozenset(
        {
            "id",
            "name",
            "city",
            "region_id",
            "country_id",
            "organization_id",
            "psa_id",
            "psa_integration_type",
        }
    )


@register_resource("manufacturers")
class Manufacturers(ResourceEndpoint):
    name = "manufacturers"
    resource_type = "manufacturers"
    path = "/manufacturers"
    filters = frozenset({"id", "name"})
    operations = frozenset({"list", "get", "create", "update"})


@register_resource("models")
class Models(ResourceEndpoint):
    name = "models"
    resource_type = "models"
    path = "/models"
    parent = "manufacturers"
    filters = frozenset({"id", "manufacturer_id"})
    operations = frozenset({"list", "get", "create", "update"})


@register_resource("groups")
class Groups(ResourceEndpoint):
    name = "groups"
    resource_type = "groups"
    path = "/groups"
    filters = frozenset({"name"})
    operations = READ_OPERATIONS


@register_resource("users")
class Users(ResourceEndpoint):
    name = "users"
    resource_type = "users"
    path = "/users"
    filters = frozenset({"name", "email", "role_name"})
    operations = frozenset({"list", "get", "update"})


@register_resource("document_folders")
class DocumentFolders(ResourceEndpoint):
    name = "document_folders"
    resource_type = "document-folders"
    path = "/document_folders"
    parent = "organizations"
    parent_required = True
    filters = frozenset({"id", "name", "parent_id"})


@register_resource("exports")
class Exports(ResourceEndpoint):
    """Organization exports (a zip of an organization's data)."""

    name = "exports"
    resource_type = "exports"
    path = "/exports"
    filters = frozenset({"id"})
    operations = frozenset({"list", "get", "create", "delete"})

    def create(
        self,
        attributes: Mapping[str, Any] | None = None,
        parent_id: str | int | None = None,
        organization_id: str | int | None = None,
        include_logs: bool | None = None,
    ) -> Resource:
        """Start an export from raw attributes or an organization ID."""
        merged = dict(attributes or {})
        if organization_id is not None:
            merged["organization_id"] = organization_id
        if include_logs is not None:
            merged["include_logs"] = include_logs
        return super().create(merged, parent_id=parent_id)

    def export_organization(
        self,
        organization_id: str | int,
        include_logs: bool = False,
    ) -> Resource:
        """Start an export of one organization.

        Args:
            organization_id: Organization to export
            include_logs: Include activity logs in the export

        Returns:
            The export resource (poll with get() until its download URL is set)
        """
        return self.create(organization_id=organization_id, include_logs=include_logs)
