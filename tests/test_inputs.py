"""Tests for the string input helpers."""

import pytest

from cs_actions.exceptions import ValidationError
from cs_actions.utils.inputs import (
    default_if_empty,
    parse_bool,
    parse_headers,
    parse_int,
    parse_list,
    require,
    validate_choice,
    validate_port,
)


class TestParseBool:
    """Test 'true'/'false' parsing"""

    @pytest.mark.parametrize("value,expected", [("true", True), ("TRUE", True), (" false ", False)])
    def test_valid_values(self, value, expected):
        assert parse_bool(value, "flag") is expected

    def test_empty_uses_default(self):
        assert parse_bool("", "flag", default=True) is True
        assert parse_bool(None, "flag") is False

    def test_invalid_value(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_bool("yes", "useCookies")
        assert exc_info.value.message == "The yes for useCookies input is not a valid boolean value."
        assert exc_info.value.field == "useCookies"


class TestParseInt:
    """Test number parsing"""

    def test_valid_number(self):
        assert parse_int(" 42 ", "pageSize") == 42

    def test_default(self):
        assert parse_int(None, "pageSize", default=100) == 100

    def test_not_a_number(self):
        with pytest.raises(ValidationError, match="The abc for pageSize input is not a valid number value."):
            parse_int("abc", "pageSize")

    def test_bounds(self):
        with pytest.raises(ValidationError):
            parse_int("0", "pageNumber", minimum=1)
        with pytest.raises(ValidationError):
            parse_int("70000", "port", maximum=65535)


class TestOtherHelpers:
    """Test list, choice, port and header helpers"""

    def test_parse_list_drops_blank_entries(self):
        assert parse_list(" a, ,b ,, c") == ["a", "b", "c"]
        assert parse_list(None) == []
        assert parse_list("a;b", ";") == ["a", "b"]

    def test_require(self):
        assert require("  value ", "name") == "value"
        with pytest.raises(ValidationError, match="The name can't be null or empty."):
            require("   ", "name")

    def test_default_if_empty(self):
        assert default_if_empty("", "x") == "x"
        assert default_if_empty(" y ", "x") == "y"

    def test_validate_choice_case_insensitive_returns_canonical(self):
        assert validate_choice("ALLOW_ALL", "x509HostnameVerifier",
                               ["strict", "allow_all"], case_sensitive=False) == "allow_all"

    def test_validate_choice_lists_valid_values(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_choice("cloud-asia", "locationId", ["cloud-eu", "cloud-westus"])
        assert exc_info.value.message == (
            "The cloud-asia for locationId input is not valid. Valid values: cloud-eu, cloud-westus."
        )

    def test_validate_port(self):
        assert validate_port("-1", "proxyPort") == -1
        assert validate_port("8080", "proxyPort") == 8080
        assert validate_port(None, "proxyPort", default=8080) == 8080
        with pytest.raises(ValidationError):
            validate_port("0", "proxyPort")

    def test_parse_headers(self):
        headers = parse_headers("Accept: application/json\r\nX-Trace:abc:def\n\n")
        assert headers == {"Accept": "application/json", "X-Trace": "abc:def"}

    def test_parse_headers_rejects_lines_without_separator(self):
        with pytest.raises(ValidationError):
            parse_headers("not a header")
