"""Terraform Cloud OAuth client actions."""

from typing import Any, Dict, Optional

from ...models.schemas import InputDefinition
from ...services.terraform_client import OAUTH_CLIENTS_PATH, TerraformRequest, api_path, select_joined
from ...utils.inputs import require
from .base import ORGANIZATION_NAME, TerraformOperation

OAUTH_TOKEN_ID = "oauthTokenId"


class ListOAuthClientsOperation(TerraformOperation):
    """List the OAuth clients of an organization and collect their token ids."""

    action_inputs = [InputDefinition(ORGANIZATION_NAME, required=True)]
    extra_outputs = [OAUTH_TOKEN_ID]

    @property
    def name(self) -> str:
        return "list_oauth_clients"

    @property
    def display_name(self) -> str:
        return "List OAuth Client"

    @property
    def description(self) -> str:
        return "Lists the OAuth clients of a Terraform Cloud organization."

    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        organization = require(inputs.get(ORGANIZATION_NAME), ORGANIZATION_NAME)
        return TerraformRequest("GET", api_path(OAUTH_CLIENTS_PATH, organization=organization))

    def map_outputs(self, document: Any) -> Dict[str, str]:
        return {OAUTH_TOKEN_ID: select_joined(document, "data[*].relationships.oauth-tokens.data[*].id")}
