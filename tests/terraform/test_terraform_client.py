"""Tests for the Terraform Cloud client helpers."""

import pytest

from cs_actions.exceptions import ValidationError
from cs_actions.services.terraform_client import TerraformRequest, parse_request_body, select, select_joined

OAUTH_CLIENTS = {
    "data": [
        {"id": "oc-1", "relationships": {"oauth-tokens": {"data": [{"id": "ot-1"}, {"id": "ot-2"}]}}},
        {"id": "oc-2", "relationships": {"oauth-tokens": {"data": []}}},
        {"id": "oc-3", "relationships": {"oauth-tokens": {"data": [{"id": "ot-3"}]}}},
    ]
}


class TestSelect:
    def test_nested_key(self):
        assert select({"data": {"id": "ws-1"}}, "data.id") == ["ws-1"]

    def test_fan_out(self):
        assert select_joined(OAUTH_CLIENTS, "data[*].relationships.oauth-tokens.data[*].id") == "ot-1,ot-2,ot-3"

    def test_missing_path(self):
        assert select({"data": {"id": "ws-1"}}, "data.attributes.name") == []
        assert select_joined({}, "data[*].id") == ""

    def test_null_values_are_skipped(self):
        document = {"data": {"relationships": {"apply": {"data": None}}}}
        assert select_joined(document, "data.relationships.apply.data.id") == ""


class TestRequestBody:
    def test_empty_body(self):
        assert parse_request_body(None) is None
        assert parse_request_body("  ") is None

    def test_valid_body_is_kept_verbatim(self):
        body = '{"data": {"type": "workspaces"}}'
        assert parse_request_body(body) == body

    def test_invalid_body(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_request_body("{not json")
        assert exc_info.value.field == "requestBody"

    def test_content_prefers_raw_body(self):
        request = TerraformRequest("POST", "/runs", body={"a": 1}, raw_body='{"b": 2}')
        assert request.content() == b'{"b": 2}'

    def test_content_serializes_body(self):
        assert TerraformRequest("POST", "/runs", body={"a": 1}).content() == b'{"a": 1}'
        assert TerraformRequest("GET", "/runs").content() is None
