"""Tests for ITGlue resource endpoints."""

import json
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
import responses

from itglue_tools.api.base import ITGlueClient
from itglue_tools.api.resources import (
    Contacts,
    DocumentFolders,
    Exports,
    FlexibleAssets,
    Groups,
    Organizations,
    Passwords,
)
from itglue_tools.core.exceptions import (
    NotFoundError,
    ProviderError,
    UnsupportedOperationError,
    ValidationError,
)
from itglue_tools.core.models import ResultStatus
from tests.conftest import make_item, make_page

BASE_URL = "https://api.itglue.com"


def query_of(call_index: int) -> dict[str, list[str]]:
    return parse_qs(urlparse(responses.calls[call_index].request.url).query)


class TestResourceGet:
    """Tests for fetching a single resource."""

    @responses.activate
    def test_get_issues_exactly_one_request(self, client: ITGlueClient) -> None:
        """Test that get by ID is a single GET without pagination."""
        responses.add(
            responses.GET,
            f"{BASE_URL}/organizations/42",
            json={"data": make_item(42, "organizations", name="Acme", **{"short-name": "ACM"})},
        )

        org = Organizations(client).get(42)

        assert len(responses.calls) == 1
        assert "page" not in responses.calls[0].request.url
        assert org.id == "42"
        assert org.attributes == {"name": "Acme", "short_name": "ACM"}

    @responses.activate
    def test_get_not_found(self, client: ITGlueClient) -> None:
        """Test that a 404 raises NotFoundError with the resource identity."""
        responses.add(responses.GET, f"{BASE_URL}/contacts/999", status=404)

        with pytest.raises(NotFoundError) as exc_info:
            Contacts(client).get("999")

        assert exc_info.value.resource_type == "contacts"
        assert exc_info.value.resource_id == "999"

    @responses.activate
    def test_get_server_error(self, client: ITGlueClient) -> None:
        """Test that a non-retryable server error raises."""
        responses.add(responses.GET, f"{BASE_URL}/contacts/1", status=500)

        with pytest.raises(ProviderError):
            Contacts(client).get("1")

    @responses.activate
    def test_get_nested(self, client: ITGlueClient) -> None:
        """Test get through the parent organization."""
        responses.add(
            responses.GET,
            f"{BASE_URL}/organizations/42/relationships/contacts/7",
            json={"data": make_item(7, "contacts")},
        )

        contact = Contacts(client).get(7, parent_id=42)
        assert contact.id == "7"

    @responses.activate
    def test_password_hidden_by_default(self, client: ITGlueClient) -> None:
        responses.add(
            responses.GET,
            f"{BASE_URL}/passwords/5",
            json={"data": make_item(5, "passwords", password="s3cret")},
        )

        Passwords(client).get(5)
        assert query_of(0)["show_password"] == ["false"]

    @responses.activate
    def test_password_shown(self, client: ITGlueClient) -> None:
        responses.add(
            responses.GET,
            f"{BASE_URL}/passwords/5",
            json={"data": make_item(5, "passwords", password="s3cret")},
        )

        password = Passwords(client).get(5, show_password=True)

        assert query_of(0)["show_password"] == ["true"]
        assert password.get("password") == "s3cret"


class TestResourceList:
    """Tests for listing resources."""

    @responses.activate
    def test_list_with_filters(self, client: ITGlueClient) -> None:
        """Test supported filters are sent and unsupported ones dropped."""
        responses.add(
            responses.GET,
            f"{BASE_URL}/contacts",
            json=make_page([make_item(1, "contacts"), make_item(2, "contacts")], 2),
        )

        contacts = Contacts(client).list(
            filters={"last_name": "Smith", "favourite_colour": "blue"},
            sort="-updated_at",
            include=["locations"],
        )

        assert [c.id for c in contacts] == ["1", "2"]
        query = query_of(0)
        assert query["filter[last_name]"] == ["Smith"]
        assert "filter[favourite_colour]" not in query
        assert query["sort"] == ["-updated_at"]
        assert query["include"] == ["locations"]
        assert query["page[number]"] == ["1"]
        assert query["page[size]"] == ["1000"]

    @responses.activate
    def test_list_nested_with_page_size(self, client: ITGlueClient) -> None:
        responses.add(
            responses.GET,
            f"{BASE_URL}/organizations/42/relationships/contacts",
            json=make_page([make_item(1, "contacts")], 2),
        )
        responses.add(
            responses.GET,
            f"{BASE_URL}/organizations/42/relationships/contacts",
            json=make_page([make_item(2, "contacts")], 2),
        )

        contacts = Contacts(client).list(parent_id=42, page_size=1)

        assert len(contacts) == 2
        assert query_of(1)["page[number]"] == ["2"]

    def test_parent_required(self, client: ITGlueClient) -> None:
        with pytest.raises(ValidationError):
            DocumentFolders(client).list()

    def test_flexible_assets_need_type(self, client: ITGlueClient) -> None:
        with pytest.raises(ValidationError) as exc_info:
            FlexibleAssets(client).list(filters={"name": "Backup"})
        assert exc_info.value.field == "flexible_asset_type_id"

    @responses.activate
    def test_flexible_assets_list(self, client: ITGlueClient) -> None:
        responses.add(
            responses.GET,
            f"{BASE_URL}/flexible_assets",
            json=make_page([make_item(3, "flexible-assets")], 1),
        )

        assets = FlexibleAssets(client).list(filters={"flexible_asset_type_id": 12})

        assert assets[0].type == "flexible-assets"
        assert query_of(0)["filter[flexible_asset_type_id]"] == ["12"]


class TestResourceWrite:
    """Tests for create, update and delete."""

    @responses.activate
    def test_create_renames_attributes(self, client: ITGlueClient) -> None:
        """Test that snake_case attributes are sent as kebab-case."""
        responses.add(
            responses.POST,
            f"{BASE_URL}/organizations/42/relationships/contacts",
            json={"data": make_item(9, "contacts", **{"first-name": "Jane"})},
            status=201,
        )

        contact = Contacts(client).create(
            {"first_name": "Jane", "last_name": "Smith"}, parent_id=42
        )

        body = json.loads(responses.calls[0].request.body)
        assert body == {
            "data": {
                "type": "contacts",
                "attributes": {"first-name": "Jane", "last-name": "Smith"},
            }
        }
        assert contact.get("first_name") == "Jane"

    @responses.activate
    def test_update_uses_patch(self, client: ITGlueClient) -> None:
        responses.add(
            responses.PATCH,
            f"{BASE_URL}/organizations/42",
            json={"data": make_item(42, "organizations", name="Acme Corp")},
        )

        org = Organizations(client).update(42, {"name": "Acme Corp"})

        assert org.get("name") == "Acme Corp"
        body = json.loads(responses.calls[0].request.body)
        assert body["data"]["attributes"] == {"name": "Acme Corp"}

    @responses.activate
    def test_update_empty_response_refetches(self, client: ITGlueClient) -> None:
        responses.add(responses.PATCH, f"{BASE_URL}/organizations/42", status=204)
        responses.add(
            responses.GET,
            f"{BASE_URL}/organizations/42",
            json={"data": make_item(42, "organizations", name="Acme")},
        )

        org = Organizations(client).update(42, {"name": "Acme"})

        assert org.id == "42"
        assert len(responses.calls) == 2

    @responses.activate
    def test_bulk_delete(self, client: ITGlueClient) -> None:
        responses.add(responses.DELETE, f"{BASE_URL}/contacts", status=204)

        result = Contacts(client).delete([1, "2"])

        assert result.status == ResultStatus.SUCCESS
        assert result.resource_ids == ["1", "2"]
        body = json.loads(responses.calls[0].request.body)
        assert body == {
            "data": [
                {"type": "contacts", "attributes": {"id": "1"}},
                {"type": "contacts", "attributes": {"id": "2"}},
            ]
        }

    def test_delete_nothing(self, client: ITGlueClient) -> None:
        result = Contacts(client).delete([])
        assert result.status == ResultStatus.NO_CHANGE

    def test_unsupported_operation(self, client: ITGlueClient) -> None:
        with pytest.raises(UnsupportedOperationError):
            Groups(client).delete(1)
        with pytest.raises(UnsupportedOperationError):
            Groups(client).create({"name": "x"})

    @responses.activate
    def test_export_organization(self, client: ITGlueClient) -> None:
        responses.add(
            responses.POST,
            f"{BASE_URL}/exports",
            json={"data": make_item(3, "exports", **{"organization-id": 42})},
        )

        export = Exports(client).export_organization(42, include_logs=True)

        body = json.loads(responses.calls[0].request.body)
        assert body["data"]["attributes"] == {"organization-id": 42, "include-logs": True}
        assert export.get("organization_id") == 42

    @responses.activate
    def test_export_create_keywords(self, client: ITGlueClient) -> None:
        """Test exports.create accepts the organization keywords directly."""
        responses.add(
            responses.POST,
            f"{BASE_URL}/exports",
            json={"data": make_item(4, "exports", **{"organization-id": 7})},
        )

        export = Exports(client).create(organization_id=7, include_logs=False)

        body = json.loads(responses.calls[0].request.body)
        assert body["data"] == {
            "type": "exports",
            "attributes": {"organization-id": 7, "include-logs": False},
        }
        assert export.id == "4"

    def test_create_without_data_raises(self) -> None:
        client = MagicMock()
        client._post.return_value = {}

        with pytest.raises(ProviderError):
            Organizations(client).create({"name": "Acme"})
