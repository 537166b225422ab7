"""Terraform Cloud workspace actions."""

from typing import Any, Dict, Optional

from ...models.schemas import InputDefinition
from ...services.terraform_client import (
    PAGE_NUMBER as PAGE_NUMBER_PARAM,
    PAGE_SIZE as PAGE_SIZE_PARAM,
    WORKSPACE_PATH,
    WORKSPACES_PATH,
    TerraformRequest,
    api_path,
    parse_request_body,
    select_joined,
)
from ...exceptions import ValidationError
from ...utils.inputs import default_if_empty, parse_bool, parse_int, parse_list, require
from .base import (
    ORGANIZATION_NAME,
    PAGE_NUMBER,
    PAGE_SIZE,
    REQUEST_BODY,
    WORKSPACE_ID,
    WORKSPACE_NAME,
    TerraformOperation,
    page_inputs,
    validate_name,
)

WORKSPACE_TYPE = "workspaces"
WORKSPACE_LIST = "workspaceList"
DEFAULT_TERRAFORM_VERSION = "0.12.1"


def workspace_body(inputs: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """Build the JSON:API document creating a workspace."""
    attributes = {
        "name": validate_name(inputs.get(WORKSPACE_NAME), WORKSPACE_NAME),
        "auto-apply": parse_bool(inputs.get("autoApply"), "autoApply"),
        "file-triggers-enabled": parse_bool(inputs.get("fileTriggersEnabled"), "fileTriggersEnabled", default=True),
        "queue-all-runs": parse_bool(inputs.get("queueAllRuns"), "queueAllRuns"),
        "speculative-enabled": parse_bool(inputs.get("speculativeEnabled"), "speculativeEnabled", default=True),
        "terraform-version": default_if_empty(inputs.get("terraformVersion"), DEFAULT_TERRAFORM_VERSION),
    }
    description = default_if_empty(inputs.get("workspaceDescription"), None)
    if description:
        attributes["description"] = description
    working_directory = default_if_empty(inputs.get("workingDirectory"), None)
    if working_directory:
        attributes["working-directory"] = working_directory
    trigger_prefixes = parse_list(inputs.get("triggerPrefixes"))
    if trigger_prefixes:
        attributes["trigger-prefixes"] = trigger_prefixes

    vcs_repo_id = default_if_empty(inputs.get("vcsRepoId"), None)
    if vcs_repo_id:
        oauth_token_id = default_if_empty(inputs.get("oauthTokenId"), None)
        if not oauth_token_id:
            raise ValidationError("The oauthTokenId is required when vcsRepoId is given.", field="oauthTokenId")
        vcs_repo = {
            "identifier": vcs_repo_id,
            "oauth-token-id": oauth_token_id,
            "ingress-submodules": parse_bool(inputs.get("ingressSubmodules"), "ingressSubmodules"),
        }
        branch = default_if_empty(inputs.get("vcsBranchName"), None)
        if branch:
            vcs_repo["branch"] = branch
        attributes["vcs-repo"] = vcs_repo

    return {"data": {"type": WORKSPACE_TYPE, "attributes": attributes}}


class CreateWorkspaceOperation(TerraformOperation):
    """Create a workspace in an organization."""

    action_inputs = [
        InputDefinition(ORGANIZATION_NAME, required=True),
        InputDefinition(WORKSPACE_NAME, required=True,
                        description="Letters, numbers, underscores and hyphens only."),
        InputDefinition("workspaceDescription"),
        InputDefinition("autoApply", default="false"),
        InputDefinition("fileTriggersEnabled", default="true"),
        InputDefinition("workingDirectory"),
        InputDefinition("triggerPrefixes", description="Comma separated directory prefixes."),
        InputDefinition("queueAllRuns", default="false"),
        InputDefinition("speculativeEnabled", default="true"),
        InputDefinition("ingressSubmodules", default="false"),
        InputDefinition("vcsRepoId", description="Repository reference in the form :org/:repo."),
        InputDefinition("vcsBranchName"),
        InputDefinition("oauthTokenId"),
        InputDefinition("terraformVersion", default=DEFAULT_TERRAFORM_VERSION),
        InputDefinition(REQUEST_BODY, description="Raw JSON body replacing the generated one."),
    ]
    extra_outputs = [WORKSPACE_ID]

    @property
    def name(self) -> str:
        return "create_workspace"

    @property
    def display_name(self) -> str:
        return "Create Workspace"

    @property
    def description(self) -> str:
        return "Creates a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        organization = require(inputs.get(ORGANIZATION_NAME), ORGANIZATION_NAME)
        raw_body = parse_request_body(inputs.get(REQUEST_BODY))
        return TerraformRequest(
            "POST",
            api_path(WORKSPACES_PATH, organization=organization),
            body=None if raw_body else workspace_body(inputs),
            raw_body=raw_body,
        )

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {WORKSPACE_ID: select_joined(document, "data.id")}


class ListWorkspacesOperation(TerraformOperation):
    """List the workspaces of an organization."""

    action_inputs = [
        InputDefinition(ORGANIZATION_NAME, required=True),
        *page_inputs(),
    ]
    extra_outputs = [WORKSPACE_LIST]

    @property
    def name(self) -> str:
        return "list_workspaces"

    @property
    def display_name(self) -> str:
        return "List Workspaces"

    @property
    def description(self) -> str:
        return "Lists the workspaces of a Terraform Cloud organization."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        return TerraformRequest(
            "GET",
            api_path(WORKSPACES_PATH, organization=require(inputs.get(ORGANIZATION_NAME), ORGANIZATION_NAME)),
            params={
                PAGE_NUMBER_PARAM: str(parse_int(inputs.get(PAGE_NUMBER), PAGE_NUMBER, default=1, minimum=1)),
                PAGE_SIZE_PARAM: str(parse_int(inputs.get(PAGE_SIZE), PAGE_SIZE, default=100, minimum=1)),
            },
        )

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {WORKSPACE_LIST: select_joined(document, "data[*].attributes.name")}


class GetWorkspaceDetailsOperation(TerraformOperation):
    """Show a workspace by name."""

    action_inputs = [
        InputDefinition(ORGANIZATION_NAME, required=True),
        InputDefinition(WORKSPACE_NAME, required=True),
    ]
    extra_outputs = [WORKSPACE_ID]

    @property
    def name(self) -> str:
        return "get_workspace_details"

    @property
    def display_name(self) -> str:
        return "Get Workspace Details"

    @property
    def description(self) -> str:
        return "Gets the details of a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        return TerraformRequest(
            "GET",
            api_path(
                WORKSPACE_PATH,
                organization=require(inputs.get(ORGANIZATION_NAME), ORGANIZATION_NAME),
                workspace=validate_name(inputs.get(WORKSPACE_NAME), WORKSPACE_NAME),
            ),
        )

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {WORKSPACE_ID: select_joined(document, "data.id")}


class DeleteWorkspaceOperation(TerraformOperation):
    """Delete a workspace by name."""

    action_inputs = [
        InputDefinition(ORGANIZATION_NAME, required=True),
        InputDefinition(WORKSPACE_NAME, required=True),
    ]

    @property
    def name(self) -> str:
        return "delete_workspace"

    @property
    def display_name(self) -> str:
        return "Delete Workspace"

    @property
    def description(self) -> str:
        return "Deletes a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        return TerraformRequest(
            "DELETE",
            api_path(
                WORKSPACE_PATH,
                organization=require(inputs.get(ORGANIZATION_NAME), ORGANIZATION_NAME),
                workspace=validate_name(inputs.get(WORKSPACE_NAME), WORKSPACE_NAME),
            ),
        )
