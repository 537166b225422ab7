"""Tests for the Terraform Cloud variable actions."""

import json

import httpx
import pytest

from cs_actions.models.enums import ResponseName
from cs_actions.operations.terraform.variables import (
    CreateVariableOperation,
    CreateVariablesOperation,
    DeleteVariableOperation,
    ListVariablesOperation,
    UpdateVariableOperation,
    variable_body,
)

API = "https://app.terraform.io/api/v2"


@pytest.fixture
def token():
    return {"authToken": "tf-token"}


class TestVariableBody:
    def test_body(self):
        assert variable_body("region", "eu-west-1", "ENV", False, True, workspace_id="ws-1") == {
            "data": {
                "type": "vars",
                "attributes": {
                    "key": "region",
                    "value": "eu-west-1",
                    "category": "env",
                    "hcl": False,
                    "sensitive": True,
                },
                "relationships": {"workspace": {"data": {"id": "ws-1", "type": "workspaces"}}},
            }
        }

    def test_invalid_category(self, token):
        result = CreateVariableOperation().run({
            **token, "workspaceId": "ws-1", "variableName": "region", "variableCategory": "secret",
        })

        assert result.response is ResponseName.FAILURE
        assert "terraform, env" in result.outputs["returnResult"]


class TestCreateVariables:
    """Test creating several variables in one action"""

    def test_creates_every_variable(self, token, respx_mock):
        route = respx_mock.post(f"{API}/vars").mock(side_effect=[
            httpx.Response(201, json={"data": {"id": "var-1"}}),
            httpx.Response(201, json={"data": {"id": "var-2"}}),
            httpx.Response(201, json={"data": {"id": "var-3"}}),
        ])
        variables = json.dumps([
            {"propertyName": "region", "propertyValue": "eu-west-1"},
            {"propertyName": "TF_LOG", "propertyValue": "debug", "Category": "env"},
        ])
        secrets = json.dumps([{"propertyName": "db_password", "propertyValue": "s3cret", "HCL": False}])

        result = CreateVariablesOperation().run({
            **token, "workspaceId": "ws-1", "variablesJson": variables, "sensitiveVariablesJson": secrets,
        })

        assert result.response is ResponseName.SUCCESS
        assert result.outputs["variableIds"] == "var-1,var-2,var-3"
        assert "variableId" not in result.outputs

        bodies = [json.loads(call.request.content)["data"]["attributes"] for call in route.calls]
        assert [body["key"] for body in bodies] == ["region", "TF_LOG", "db_password"]
        assert [body["category"] for body in bodies] == ["terraform", "env", "terraform"]
        assert [body["sensitive"] for body in bodies] == [False, False, True]

    def test_stops_at_first_failure(self, token, respx_mock):
        route = respx_mock.post(f"{API}/vars").mock(side_effect=[
            httpx.Response(201, json={"data": {"id": "var-1"}}),
            httpx.Response(422, json={"errors": [{"title": "has already been taken"}]}),
        ])
        variables = json.dumps([
            {"propertyName": "a", "propertyValue": "1"},
            {"propertyName": "b", "propertyValue": "2"},
            {"propertyName": "c", "propertyValue": "3"},
        ])

        result = CreateVariablesOperation().run({**token, "workspaceId": "ws-1", "variablesJson": variables})

        assert result.response is ResponseName.FAILURE
        assert result.outputs["statusCode"] == "422"
        assert result.outputs["variableIds"] == "var-1"
        assert route.call_count == 2

    def test_hcl_given_as_string(self, token, respx_mock):
        route = respx_mock.post(f"{API}/vars").mock(side_effect=[
            httpx.Response(201, json={"data": {"id": "var-1"}}),
            httpx.Response(201, json={"data": {"id": "var-2"}}),
        ])
        variables = json.dumps([
            {"propertyName": "region", "propertyValue": "eu", "HCL": "false"},
            {"propertyName": "tags", "propertyValue": '{"team" = "ops"}', "HCL": "TRUE"},
        ])

        result = CreateVariablesOperation().run({**token, "workspaceId": "ws-1", "variablesJson": variables})

        assert result.response is ResponseName.SUCCESS
        bodies = [json.loads(call.request.content)["data"]["attributes"] for call in route.calls]
        assert [body["hcl"] for body in bodies] == [False, True]

    def test_invalid_hcl_flag(self, token):
        variables = json.dumps([{"propertyName": "region", "propertyValue": "eu", "HCL": "maybe"}])

        result = CreateVariablesOperation().run({**token, "workspaceId": "ws-1", "variablesJson": variables})

        assert result.response is ResponseName.FAILURE
        assert result.outputs["returnResult"] == "The maybe for HCL input is not a valid boolean value."

    def test_invalid_category_in_entry(self, token):
        variables = json.dumps([{"propertyName": "region", "propertyValue": "eu", "Category": "secret"}])

        result = CreateVariablesOperation().run({**token, "workspaceId": "ws-1", "variablesJson": variables})

        assert result.response is ResponseName.FAILURE
        assert "terraform, env" in result.outputs["returnResult"]

    def test_needs_variables(self, token):
        result = CreateVariablesOperation().run({**token, "workspaceId": "ws-1"})

        assert result.response is ResponseName.FAILURE
        assert "can't both be empty" in result.outputs["returnResult"]

    def test_invalid_json(self, token):
        result = CreateVariablesOperation().run({**token, "workspaceId": "ws-1", "variablesJson": "[{"})

        assert result.outputs["returnResult"] == "The variablesJson is not a valid JSON document."

    def test_entry_needs_a_name(self, token):
        result = CreateVariablesOperation().run({
            **token, "workspaceId": "ws-1", "variablesJson": '[{"propertyValue": "x"}]',
        })

        assert result.outputs["returnResult"] == "Every variablesJson entry needs a propertyName."


class TestVariableQueries:
    """Test listing, updating and deleting variables"""

    def test_list_variables(self, token, respx_mock):
        route = respx_mock.get(f"{API}/vars").mock(return_value=httpx.Response(200, json={"data": []}))

        result = ListVariablesOperation().run({**token, "organizationName": "acme", "workspaceName": "network"})

        assert result.response is ResponseName.SUCCESS
        params = route.calls.last.request.url.params
        assert params["filter[organization][name]"] == "acme"
        assert params["filter[workspace][name]"] == "network"

    def test_update_sends_only_given_attributes(self, token, respx_mock):
        route = respx_mock.patch(f"{API}/vars/var-1").mock(
            return_value=httpx.Response(200, json={"data": {"id": "var-1"}})
        )

        result = UpdateVariableOperation().run({**token, "variableId": "var-1", "variableValue": "eu-central-1"})

        assert result.outputs["variableId"] == "var-1"
        assert json.loads(route.calls.last.request.content) == {
            "data": {"id": "var-1", "type": "vars", "attributes": {"value": "eu-central-1"}}
        }

    def test_delete_variable(self, token, respx_mock):
        respx_mock.delete(f"{API}/vars/var-1").mock(return_value=httpx.Response(204))

        result = DeleteVariableOperation().run({**token, "variableId": "var-1"})

        assert result.response is ResponseName.SUCCESS

    def test_variable_id_stays_one_path_segment(self, token):
        request = DeleteVariableOperation().build_request({**token, "variableId": "var-1/../../runs?x=1"})

        assert request.path == "/vars/var-1%2F..%2F..%2Fruns%3Fx%3D1"
