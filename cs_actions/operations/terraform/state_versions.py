"""Terraform Cloud state version actions."""

from typing import Any, Dict, Optional

from ...models.schemas import InputDefinition
from ...services.terraform_client import CURRENT_STATE_VERSION_PATH, TerraformRequest, api_path, select_joined
from ...utils.inputs import require
from .base import WORKSPACE_ID, TerraformOperation

STATE_VERSION_ID = "stateVersionId"
HOSTED_STATE_DOWNLOAD_URL = "hostedStateDownloadUrl"


class GetCurrentStateVersionOperation(TerraformOperation):
    """Fetch the current state version of a workspace."""

    action_inputs = [InputDefinition(WORKSPACE_ID, required=True)]
    extra_outputs = [STATE_VERSION_ID, HOSTED_STATE_DOWNLOAD_URL]

    @property
    def name(self) -> str:
        return "get_current_state_version"

    @property
    def display_name(self) -> str:
        return "Get Current State Version"

    @property
    def description(self) -> str:
        return "Gets the current state version of a Terraform Cloud workspace."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        workspace_id = require(inputs.get(WORKSPACE_ID), WORKSPACE_ID)
        return TerraformRequest("GET", api_path(CURRENT_STATE_VERSION_PATH, workspace_id=workspace_id))

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {
            STATE_VERSION_ID: select_joined(document, "data.id"),
            HOSTED_STATE_DOWNLOAD_URL: select_joined(document, "data.attributes.hosted-state-download-url"),
        }
