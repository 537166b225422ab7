"""Terraform Cloud workspace variable actions."""

import json
from typing import Any, Dict, List, Optional

from ...exceptions import ValidationError
from ...models.enums import ReturnCode
from ...models.schemas import InputDefinition
from ...services.terraform_client import (
    FILTER_ORGANIZATION_NAME,
    FILTER_WORKSPACE_NAME,
    VARIABLE_PATH,
    VARIABLES_PATH,
    TerraformRequest,
    api_path,
    parse_request_body,
    select_joined,
)
from ...utils import results
from ...utils.inputs import default_if_empty, is_empty, parse_bool, require, validate_choice
from .base import ORGANIZATION_NAME, REQUEST_BODY, WORKSPACE_ID, WORKSPACE_NAME, TerraformOperation

VARIABLE_ID = "variableId"
VARIABLE_IDS = "variableIds"
VARIABLE_NAME = "variableName"
VARIABLE_VALUE = "variableValue"
VARIABLE_CATEGORY = "variableCategory"
HCL = "hcl"
SENSITIVE = "sensitive"
VARIABLES_JSON = "variablesJson"
SENSITIVE_VARIABLES_JSON = "sensitiveVariablesJson"

CATEGORIES = ("terraform", "env")


def variable_body(key: str, value: Optional[str], category: str, hcl: bool, sensitive: bool,
                  workspace_id: Optional[str] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "type": "vars",
        "attributes": {
            "key": key,
            "value": value or "",
            "category": validate_choice(category, VARIABLE_CATEGORY, CATEGORIES, case_sensitive=False),
            "hcl": hcl,
            "sensitive": sensitive,
        },
    }
    if workspace_id:
        data["relationships"] = {"workspace": {"data": {"id": workspace_id, "type": "workspaces"}}}
    return {"data": data}


def parse_variables_json(value: Optional[str], input_name: str) -> List[Dict[str, Any]]:
    """
    Parse a list of variables given as JSON.

    Each entry carries ``propertyName``, ``propertyValue`` and optionally
    ``HCL`` (boolean or 'true'/'false') and ``Category`` (``terraform`` or ``env``).
    """
    if is_empty(value):
        return []
    try:
        entries = json.loads(value)
    except ValueError:
        raise ValidationError(f"The {input_name} is not a valid JSON document.", field=input_name)
    if not isinstance(entries, list):
        raise ValidationError(f"The {input_name} must be a JSON array.", field=input_name)
    for entry in entries:
        if not isinstance(entry, dict) or is_empty(str(entry.get("propertyName") or "")):
            raise ValidationError(f"Every {input_name} entry needs a propertyName.", field=input_name)
    return entries


def entry_flag(value: Any, name: str) -> bool:
    """Read a JSON boolean that may also be given as a 'true'/'false' string."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return parse_bool(str(value), name)


class CreateVariableOperation(TerraformOperation):
    """Create one variable in a workspace."""

    action_inputs = [
        InputDefinition(WORKSPACE_ID, required=True),
        InputDefinition(VARIABLE_NAME, required=True),
        InputDefinition(VARIABLE_VALUE, encrypted=True),
        InputDefinition(VARIABLE_CATEGORY, default="terraform", description="terraform or env"),
        InputDefinition(HCL, default="false"),
        InputDefinition(SENSITIVE, default="false"),
        InputDefinition(REQUEST_BODY),
    ]
    extra_outputs = [VARIABLE_ID]

    @property
    def name(self) -> str:
        return "create_variable"

    @property
    def display_name(self) -> str:
        return "Create Variable"

    @property
    def description(self) -> str:
        return "Creates a variable in a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        raw_body = parse_request_body(inputs.get(REQUEST_BODY))
        if raw_body:
            return TerraformRequest("POST", VARIABLES_PATH, raw_body=raw_body)
        body = variable_body(
            require(inputs.get(VARIABLE_NAME), VARIABLE_NAME),
            inputs.get(VARIABLE_VALUE),
            default_if_empty(inputs.get(VARIABLE_CATEGORY), "terraform"),
            parse_bool(inputs.get(HCL), HCL),
            parse_bool(inputs.get(SENSITIVE), SENSITIVE),
            workspace_id=require(inputs.get(WORKSPACE_ID), WORKSPACE_ID),
        )
        return TerraformRequest("POST", VARIABLES_PATH, body=body)

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {VARIABLE_ID: select_joined(document, "data.id")}


class CreateVariablesOperation(TerraformOperation):
    """Create several variables, one request per variable."""

    action_inputs = [
        InputDefinition(WORKSPACE_ID, required=True),
        InputDefinition(VARIABLES_JSON),
        InputDefinition(SENSITIVE_VARIABLES_JSON, encrypted=True),
    ]
    extra_outputs = [VARIABLE_IDS]

    @property
    def name(self) -> str:
        return "create_variables"

    @property
    def display_name(self) -> str:
        return "Create Variables"

    @property
    def description(self) -> str:
        return "Creates several variables in a Terraform Cloud workspace."

    def build_requests(self, inputs: Dict[str, Optional[str]]) -> List[TerraformRequest]:
        workspace_id = require(inputs.get(WORKSPACE_ID), WORKSPACE_ID)
        entries = [(entry, False) for entry in parse_variables_json(inputs.get(VARIABLES_JSON), VARIABLES_JSON)]
        entries += [
            (entry, True)
            for entry in parse_variables_json(inputs.get(SENSITIVE_VARIABLES_JSON), SENSITIVE_VARIABLES_JSON)
        ]
        if not entries:
            raise ValidationError(
                f"The {VARIABLES_JSON} and {SENSITIVE_VARIABLES_JSON} can't both be empty.", field=VARIABLES_JSON
            )

        requests = []
        for entry, sensitive in entries:
            value = entry.get("propertyValue")
            body = variable_body(
                str(entry["propertyName"]),
                None if value is None else str(value),
                str(entry.get("Category") or "terraform"),
                entry_flag(entry.get("HCL"), "HCL"),
                sensitive,
                workspace_id=workspace_id,
            )
            requests.append(TerraformRequest("POST", VARIABLES_PATH, body=body))
        return requests

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        return self.build_requests(inputs)[0]

    def execute(self, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        requests = self.build_requests(inputs)
        variable_ids = []
        result: Dict[str, str] = {}
        with self.open_client(inputs) as client:
            for request in requests:
                result = self.to_result(client.send(request), inputs)
                if result[results.RETURN_CODE] != ReturnCode.SUCCESS.value:
                    result[VARIABLE_IDS] = ",".join(variable_ids)
                    return result
                variable_ids.append(result.pop(VARIABLE_ID))
        result[VARIABLE_IDS] = ",".join(variable_ids)
        return result

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {VARIABLE_ID: select_joined(document, "data.id")}


class ListVariablesOperation(TerraformOperation):
    action_inputs = [
        InputDefinition(ORGANIZATION_NAME, required=True),
        InputDefinition(WORKSPACE_NAME, required=True),
    ]

    @property
    def name(self) -> str:
        return "list_variables"

    @property
    def display_name(self) -> str:
        return "List Variables"

    @property
    def description(self) -> str:
        return "Lists the variables of a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        return TerraformRequest(
            "GET",
            VARIABLES_PATH,
            params={
                FILTER_ORGANIZATION_NAME: require(inputs.get(ORGANIZATION_NAME), ORGANIZATION_NAME),
                FILTER_WORKSPACE_NAME: require(inputs.get(WORKSPACE_NAME), WORKSPACE_NAME),
            },
        )


class UpdateVariableOperation(TerraformOperation):
    """Update a variable; only the given attributes are sent."""

    action_inputs = [
        InputDefinition(VARIABLE_ID, required=True),
        InputDefinition(VARIABLE_NAME),
        InputDefinition(VARIABLE_VALUE, encrypted=True),
        InputDefinition(VARIABLE_CATEGORY),
        InputDefinition(HCL),
        InputDefinition(SENSITIVE),
        InputDefinition(REQUEST_BODY),
    ]
    extra_outputs = [VARIABLE_ID]

    @property
    def name(self) -> str:
        return "update_variable"

    @property
    def display_name(self) -> str:
        return "Update Variable"

    @property
    def description(self) -> str:
        return "Updates a variable of a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        variable_id = require(inputs.get(VARIABLE_ID), VARIABLE_ID)
        path = api_path(VARIABLE_PATH, variable_id=variable_id)
        raw_body = parse_request_body(inputs.get(REQUEST_BODY))
        if raw_body:
            return TerraformRequest("PATCH", path, raw_body=raw_body)

        attributes: Dict[str, Any] = {}
        if not is_empty(inputs.get(VARIABLE_NAME)):
            attributes["key"] = inputs[VARIABLE_NAME].strip()
        if inputs.get(VARIABLE_VALUE) is not None:
            attributes["value"] = inputs[VARIABLE_VALUE]
        if not is_empty(inputs.get(VARIABLE_CATEGORY)):
            attributes["category"] = validate_choice(
                inputs[VARIABLE_CATEGORY].strip(), VARIABLE_CATEGORY, CATEGORIES, case_sensitive=False
            )
        if not is_empty(inputs.get(HCL)):
            attributes["hcl"] = parse_bool(inputs.get(HCL), HCL)
        if not is_empty(inputs.get(SENSITIVE)):
            attributes["sensitive"] = parse_bool(inputs.get(SENSITIVE), SENSITIVE)
        body = {"data": {"id": variable_id, "type": "vars", "attributes": attributes}}
        return TerraformRequest("PATCH", path, body=body)

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {VARIABLE_ID: select_joined(document, "data.id")}


class DeleteVariableOperation(TerraformOperation):
    action_inputs = [InputDefinition(VARIABLE_ID, required=True)]

    @property
    def name(self) -> str:
        return "delete_variable"

    @property
    def display_name(self) -> str:
        return "Delete Variable"

    @property
    def description(self) -> str:
        return "Deletes a variable of a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        variable_id = require(inputs.get(VARIABLE_ID), VARIABLE_ID)
        return TerraformRequest("DELETE", api_path(VARIABLE_PATH, variable_id=variable_id))
