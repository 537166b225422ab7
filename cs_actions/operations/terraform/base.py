"""Shared behaviour of the Terraform Cloud actions."""

import re
from abc import abstractmethod
from typing import Any, Callable, Dict, List, Optional

import httpx

from ...config import get_settings
from ...exceptions import ValidationError
from ...models.schemas import InputDefinition
from ...services.http_client import (
    RESPONSE_CHARACTER_SET,
    build_client,
    decode_body,
    http_input_definitions,
    parse_http_settings,
)
from ...services.terraform_client import TerraformClient, TerraformRequest
from ...utils import results
from ...utils.inputs import require
from ..base import Operation

AUTH_TOKEN = "authToken"
ORGANIZATION_NAME = "organizationName"
WORKSPACE_NAME = "workspaceName"
WORKSPACE_ID = "workspaceId"
REQUEST_BODY = "requestBody"
PAGE_NUMBER = "pageNumber"
PAGE_SIZE = "pageSize"

DEFAULT_PAGE_NUMBER = "1"
DEFAULT_PAGE_SIZE = "100"

EXCEPTION_INVALID_NAME = "The {} can only contain letters, numbers, underscores, and hyphens"
_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_name(value: Optional[str], input_name: str) -> str:
    value = require(value, input_name)
    if not _NAME_PATTERN.match(value):
        raise ValidationError(EXCEPTION_INVALID_NAME.format(input_name), field=input_name)
    return value


class TerraformOperation(Operation):
    """
    Base class for actions calling a single Terraform Cloud endpoint.

    Subclasses declare their own inputs in ``action_inputs``, build the
    request in ``build_request`` and pick extra outputs in ``map_outputs``.
    """

    action_inputs: List[InputDefinition] = []
    extra_outputs: List[str] = []

    def __init__(self, client_factory: Callable[..., httpx.Client] = build_client):
        self._client_factory = client_factory
        self.inputs = [
            InputDefinition(AUTH_TOKEN, required=True, encrypted=True,
                            description="The Terraform Cloud user, team or organization token."),
            *self.action_inputs,
            *http_input_definitions(),
        ]
        self.outputs = [
            results.RETURN_RESULT, results.STATUS_CODE, *self.extra_outputs,
            results.RETURN_CODE, results.EXCEPTION,
        ]

    @abstractmethod
    def build_request(self, inputs: Dict[str, Optional[str]]) -> TerraformRequest:
        """Build the API call from the validated inputs."""
        pass

    def map_outputs(self, document: Any) -> Dict[str, str]:
        """Extract action specific outputs from a successful response."""
        return {}

    def open_client(self, inputs: Dict[str, Optional[str]]) -> TerraformClient:
        return TerraformClient(
            inputs[AUTH_TOKEN],
            parse_http_settings(inputs),
            get_settings().terraform_host,
            client_factory=self._client_factory,
        )

    def execute(self, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        request = self.build_request(inputs)
        with self.open_client(inputs) as client:
            response = client.send(request)
        return self.to_result(response, inputs)

    def to_result(self, response: httpx.Response, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        """Map a response to the result map; non 2xx answers are failures."""
        body = decode_body(response, inputs.get(RESPONSE_CHARACTER_SET) or "utf-8")
        status_code = str(response.status_code)
        if not response.is_success:
            return results.failure(body, statusCode=status_code)
        document = response.json() if body.strip() else {}
        return results.success(body, statusCode=status_code, **self.map_outputs(document))


def page_inputs() -> List[InputDefinition]:
    return [
        InputDefinition(PAGE_NUMBER, default=DEFAULT_PAGE_NUMBER),
        InputDefinition(PAGE_SIZE, default=DEFAULT_PAGE_SIZE),
    ]
