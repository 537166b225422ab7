"""Thin client for the Terraform Cloud JSON:API."""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx
import structlog

from ..exceptions import ValidationError
from ..models.schemas import HttpSettings
from .http_client import build_client

logger = structlog.get_logger(__name__)

API_PATH = "/api/v2"
APPLICATION_VND_API_JSON = "application/vnd.api+json"

WORKSPACES_PATH = "/organizations/{organization}/workspaces"
WORKSPACE_PATH = "/organizations/{organization}/workspaces/{workspace}"
OAUTH_CLIENTS_PATH = "/organizations/{organization}/oauth-clients"
RUNS_PATH = "/runs"
RUN_PATH = "/runs/{run_id}"
APPLY_RUN_PATH = "/runs/{run_id}/actions/apply"
CANCEL_RUN_PATH = "/runs/{run_id}/actions/cancel"
WORKSPACE_RUNS_PATH = "/workspaces/{workspace_id}/runs"
APPLY_PATH = "/applies/{apply_id}"
VARIABLES_PATH = "/vars"
VARIABLE_PATH = "/vars/{variable_id}"
CURRENT_STATE_VERSION_PATH = "/workspaces/{workspace_id}/current-state-version"

PAGE_NUMBER = "page[number]"
PAGE_SIZE = "page[size]"
FILTER_ORGANIZATION_NAME = "filter[organization][name]"
FILTER_WORKSPACE_NAME = "filter[workspace][name]"


def api_path(template: str, **segments: str) -> str:
    """Fill a path template, percent-encoding every segment so it stays one path component."""
    return template.format(**{name: quote(str(value), safe="") for name, value in segments.items()})


@dataclass
class TerraformRequest:
    """One call against the Terraform Cloud API."""
    method: str
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    raw_body: Optional[str] = None

    def content(self) -> Optional[bytes]:
        if self.raw_body is not None:
            return self.raw_body.encode("utf-8")
        if self.body is not None:
            return json.dumps(self.body).encode("utf-8")
        return None


class TerraformClient:
    """Opens an authenticated connection to Terraform Cloud for the duration of an action."""

    def __init__(self, auth_token: str, http: HttpSettings, host: str,
                 client_factory: Callable[..., httpx.Client] = build_client):
        self.base_url = f"https://{host}{API_PATH}"
        self._auth_token = auth_token
        self._http = http
        self._client_factory = client_factory
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "TerraformClient":
        self._client = self._client_factory(
            self._http,
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self._auth_token}",
                "Content-Type": APPLICATION_VND_API_JSON,
            },
        )
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def send(self, request: TerraformRequest) -> httpx.Response:
        """Send the request and return the raw response."""
        if self._client is None:
            raise RuntimeError("TerraformClient must be used as a context manager")

        logger.info("Calling Terraform Cloud", method=request.method, path=request.path)
        response = self._client.request(
            request.method,
            request.path,
            params=request.params or None,
            content=request.content(),
        )
        logger.info("Terraform Cloud answered", path=request.path, status_code=response.status_code)
        return response


def parse_request_body(value: Optional[str]) -> Optional[str]:
    """Check that a user supplied request body is a JSON document."""
    if value is None or not value.strip():
        return None
    try:
        json.loads(value)
    except ValueError:
        raise ValidationError("The requestBody is not a valid JSON document.", field="requestBody")
    return value


def select(document: Any, path: str) -> List[Any]:
    """
    Select values from a JSON document with a dotted path.

    ``[*]`` after a key fans out over a list, e.g.
    ``data[*].relationships.oauth-tokens.data[*].id``.
    """
    current = [document]
    for segment in path.split("."):
        fan_out = segment.endswith("[*]")
        key = segment[:-3] if fan_out else segment
        selected = []
        for node in current:
            if not isinstance(node, dict) or key not in node or node[key] is None:
                continue
            value = node[key]
            if fan_out:
                if isinstance(value, list):
                    selected.extend(value)
            else:
                selected.append(value)
        current = selected
    return current


def select_joined(document: Any, path: str, delimiter: str = ",") -> str:
    """Select values and join them into a single output string."""
    return delimiter.join(str(value) for value in select(document, path))
