"""Tests for filter parameter building."""

import logging

import pytest

from itglue_tools.api.filters import build_filter_params, format_filter_value

ALLOWED = frozenset({"name", "organization_id", "archived", "id"})


class TestBuildFilterParams:
    """Tests for build_filter_params."""

    def test_supported_keys_kept(self) -> None:
        params = build_filter_params({"name": "Acme", "organization_id": 42}, ALLOWED)
        assert params == {"filter[name]": "Acme", "filter[organization_id]": "42"}

    def test_unsupported_keys_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            params = build_filter_params({"name": "Acme", "colour": "blue"}, ALLOWED)

        assert params == {"filter[name]": "Acme"}
        assert "colour" in caplog.text

    def test_kebab_keys_accepted(self) -> None:
        params = build_filter_params({"organization-id": 7}, ALLOWED)
        assert params == {"filter[organization_id]": "7"}

    def test_none_values_skipped(self) -> None:
        assert build_filter_params({"name": None}, ALLOWED) == {}

    def test_empty_filters(self) -> None:
        assert build_filter_params(None, ALLOWED) == {}
        assert build_filter_params({}, ALLOWED) == {}


class TestFormatFilterValue:
    """Tests for value formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (True, "true"),
            (False, "false"),
            ([1, 2, 3], "1,2,3"),
            (("a", "b"), "a,b"),
            (15, "15"),
        ],
    )
    def test_format(self, value: object, expected: str) -> None:
        assert format_filter_value(value) == expected
