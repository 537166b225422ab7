"""Terraform Cloud run and apply actions."""

from typing import Any, Dict, Optional

from ...models.schemas import InputDefinition
from ...services.terraform_client import (
    APPLY_PATH,
    APPLY_RUN_PATH,
    CANCEL_RUN_PATH,
    PAGE_NUMBER as PAGE_NUMBER_PARAM,
    PAGE_SIZE as PAGE_SIZE_PARAM,
    RUN_PATH,
    RUNS_PATH,
    WORKSPACE_RUNS_PATH,
    TerraformRequest,
    api_path,
    parse_request_body,
    select_joined,
)
from ...utils.inputs import default_if_empty, parse_bool, parse_int, require
from .base import PAGE_NUMBER, PAGE_SIZE, REQUEST_BODY, WORKSPACE_ID, TerraformOperation, page_inputs

RUN_ID = "runId"
RUN_MESSAGE = "runMessage"
RUN_COMMENT = "runComment"
IS_DESTROY = "isDestroy"
RUN_STATUS = "runStatus"
RUN_LIST = "runList"
APPLY_ID = "applyId"
APPLY_STATUS = "applyStatus"
STATE_VERSION_ID = "stateVersionId"


def run_body(inputs: Dict[str, Optional[str]]) -> Dict[str, Any]:
    attributes: Dict[str, Any] = {"is-destroy": parse_bool(inputs.get(IS_DESTROY), IS_DESTROY)}
    message = default_if_empty(inputs.get(RUN_MESSAGE), None)
    if message:
        attributes["message"] = message
    return {
        "data": {
            "type": "runs",
            "attributes": attributes,
            "relationships": {
                "workspace": {
                    "data": {"type": "workspaces", "id": require(inputs.get(WORKSPACE_ID), WORKSPACE_ID)}
                }
            },
        }
    }


class CreateRunOperation(TerraformOperation):
    """Queue a plan for a workspace."""

    action_inputs = [
        InputDefinition(WORKSPACE_ID, required=True),
        InputDefinition(RUN_MESSAGE),
        InputDefinition(IS_DESTROY, default="false"),
        InputDefinition(REQUEST_BODY),
    ]
    extra_outputs = [RUN_ID]

    @property
    def name(self) -> str:
        return "create_run"

    @property
    def display_name(self) -> str:
        return "Create Run"

    @property
    def description(self) -> str:
        return "Creates a run in a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        raw_body = parse_request_body(inputs.get(REQUEST_BODY))
        return TerraformRequest(
            "POST", RUNS_PATH, body=None if raw_body else run_body(inputs), raw_body=raw_body
        )

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {RUN_ID: select_joined(document, "data.id")}


class _RunActionOperation(TerraformOperation):
    """Base for the run actions that take an optional comment."""

    path_template = ""

    action_inputs = [
        InputDefinition(RUN_ID, required=True),
        InputDefinition(RUN_COMMENT),
    ]

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        run_id = require(inputs.get(RUN_ID), RUN_ID)
        return TerraformRequest(
            "POST",
            api_path(self.path_template, run_id=run_id),
            body={"comment": default_if_empty(inputs.get(RUN_COMMENT), "")},
        )


class ApplyRunOperation(_RunActionOperation):
    path_template = APPLY_RUN_PATH

    @property
    def name(self) -> str:
        return "apply_run"

    @property
    def display_name(self) -> str:
        return "Apply Run"

    @property
    def description(self) -> str:
        return "Applies a run that is paused waiting for confirmation."


class CancelRunOperation(_RunActionOperation):
    path_template = CANCEL_RUN_PATH

    @property
    def name(self) -> str:
        return "cancel_run"

    @property
    def display_name(self) -> str:
        return "Cancel Run"

    @property
    def description(self) -> str:
        return "Interrupts a run that is planning or applying."


class GetRunDetailsOperation(TerraformOperation):
    action_inputs = [InputDefinition(RUN_ID, required=True)]
    extra_outputs = [RUN_STATUS, APPLY_ID]

    @property
    def name(self) -> str:
        return "get_run_details"

    @property
    def display_name(self) -> str:
        return "Get Run Details"

    @property
    def description(self) -> str:
        return "Gets the details of a Terraform Cloud run."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        return TerraformRequest("GET", api_path(RUN_PATH, run_id=require(inputs.get(RUN_ID), RUN_ID)))

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {
            RUN_STATUS: select_joined(document, "data.attributes.status"),
            APPLY_ID: select_joined(document, "data.relationships.apply.data.id"),
        }


class ListRunsInWorkspaceOperation(TerraformOperation):
    action_inputs = [InputDefinition(WORKSPACE_ID, required=True), *page_inputs()]
    extra_outputs = [RUN_LIST]

    @property
    def name(self) -> str:
        return "list_runs_in_workspace"

    @property
    def display_name(self) -> str:
        return "List Runs in a Workspace"

    @property
    def description(self) -> str:
        return "Lists the runs of a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        workspace_id = require(inputs.get(WORKSPACE_ID), WORKSPACE_ID)
        return TerraformRequest(
            "GET",
            api_path(WORKSPACE_RUNS_PATH, workspace_id=workspace_id),
            params={
                PAGE_NUMBER_PARAM: str(parse_int(inputs.get(PAGE_NUMBER), PAGE_NUMBER, default=1, minimum=1)),
                PAGE_SIZE_PARAM: str(parse_int(inputs.get(PAGE_SIZE), PAGE_SIZE, default=100, minimum=1)),
            },
        )

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {RUN_LIST: select_joined(document, "data[*].id")}


class GetApplyDetailsOperation(TerraformOperation):
    action_inputs = [InputDefinition(APPLY_ID, required=True)]
    extra_outputs = [APPLY_STATUS, STATE_VERSION_ID]

    @property
    def name(self) -> str:
        return "get_apply_details"

    @property
    def display_name(self) -> str:
        return "Get Apply Details"

    @property
    def description(self) -> str:
        return "Gets the details of the apply phase of a run."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        return TerraformRequest("GET", api_path(APPLY_PATH, apply_id=require(inputs.get(APPLY_ID), APPLY_ID)))

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {
            APPLY_STATUS: select_joined(document, "data.attributes.status"),
            STATE_VERSION_ID: select_joined(document, "data.relationships.state-versions.data[*].id"),
        }
