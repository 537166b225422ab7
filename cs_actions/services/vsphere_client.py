"""Client for the vSphere Automation REST API."""

from typing import Any, Callable, Dict, Optional

import httpx
import structlog

from ..exceptions import AuthenticationError, ExternalServiceError
from ..models.enums import HostnameVerifier
from ..models.schemas import HttpSettings, TlsSettings
from ..models.vmware import VmInput
from .http_client import build_client

logger = structlog.get_logger(__name__)

SESSION_PATH = "/rest/com/vmware/cis/session"
VMS_PATH = "/rest/vcenter/vm"
POWER_PATH = "/rest/vcenter/vm/{vm}/power/{action}"
SESSION_HEADER = "vmware-api-session-id"
FILTER_NAMES = "filter.names"

SERVICE_NAME = "vsphere"


class VSphereClient:
    """
    A logged in vSphere session.

    Use as a context manager: the session is created on enter and deleted
    on exit.
    """

    def __init__(self, vm_input: VmInput, client_factory: Callable[..., httpx.Client] = build_client):
        self.vm_input = vm_input
        self._client_factory = client_factory
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "VSphereClient":
        tls = TlsSettings(
            trust_all_roots=self.vm_input.trust_everyone,
            hostname_verifier=HostnameVerifier.ALLOW_ALL if self.vm_input.trust_everyone else HostnameVerifier.STRICT,
        )
        self._client = self._client_factory(HttpSettings(tls=tls), base_url=self.vm_input.base_url)
        try:
            self._login()
        except Exception:
            self._client.close()
            self._client = None
            raise
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._client is None:
            return
        try:
            response = self._client.delete(SESSION_PATH)
            if not response.is_success:
                logger.warning("Could not delete vSphere session", status_code=response.status_code)
        except httpx.HTTPError as e:
            logger.warning("Could not delete vSphere session", error=str(e))
        finally:
            self._client.close()
            self._client = None

    def _login(self) -> None:
        response = self._client.post(SESSION_PATH, auth=(self.vm_input.username, self.vm_input.password))
        if response.status_code == 401:
            raise AuthenticationError(f"Cannot log into {self.vm_input.host} as {self.vm_input.username}.")
        self._check(response)
        self._client.headers[SESSION_HEADER] = response.json()["value"]
        logger.info("Opened vSphere session", host=self.vm_input.host)

    def _check(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise ExternalServiceError(
                SERVICE_NAME,
                f"vSphere answered {response.status_code} for {response.request.method} "
                f"{response.request.url.path}: {response.text}",
                status_code=response.status_code,
            )

    def find_vm(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the VM summary (vm, name, power_state) or None when no VM has that name."""
        response = self._client.get(VMS_PATH, params={FILTER_NAMES: name})
        self._check(response)
        for summary in response.json().get("value", []):
            if summary.get("name") == name:
                return summary
        return None

    def power(self, vm: str, action: str) -> None:
        """Run a power action (start, stop, suspend, reset) on a VM."""
        response = self._client.post(POWER_PATH.format(vm=vm, action=action))
        self._check(response)
        logger.info("Ran power action", vm=vm, action=action)
