"""Power On / Power Off Virtual Machine actions."""

from typing import Callable, Dict, Optional

import httpx

from ...exceptions import NotFoundError
from ...models import vmware
from ...models.enums import VmPowerState
from ...models.schemas import InputDefinition
from ...models.vmware import VmInput
from ...services.http_client import build_client
from ...services.vsphere_client import VSphereClient
from ...utils import results
from ..base import Operation

VM_NOT_FOUND = "Failure: Could not find the [{}] VM."


class PowerVmOperation(Operation):
    """Shared flow: log in, find the VM by name, run the power action."""

    #: vSphere power action and the state the VM ends up in
    action = ""
    target_state = VmPowerState.POWERED_ON
    verb = ""

    inputs = [
        InputDefinition(vmware.HOST, required=True, description="vCenter host name or IP."),
        InputDefinition(vmware.PORT, default=str(vmware.DEFAULT_PORT)),
        InputDefinition(vmware.PROTOCOL, default="https", description="http or https."),
        InputDefinition(vmware.USERNAME, required=True),
        InputDefinition(vmware.PASSWORD, encrypted=True),
        InputDefinition(vmware.TRUST_EVERYONE, default="true"),
        InputDefinition(vmware.VM_NAME, required=True),
    ]

    def __init__(self, client_factory: Callable[..., httpx.Client] = build_client):
        self._client_factory = client_factory

    def execute(self, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        vm_input = VmInput.from_inputs(inputs)
        vm_name = vm_input.virtual_machine_name
        with VSphereClient(vm_input, client_factory=self._client_factory) as client:
            summary = client.find_vm(vm_name)
            if summary is None:
                raise NotFoundError(VM_NOT_FOUND.format(vm_name), resource=vm_name)
            if summary.get("power_state") == self.target_state.value:
                return results.failure(
                    f"Failure: The [{vm_name}] VM is already in the {summary['power_state']} state."
                )
            client.power(summary["vm"], self.action)
        return results.success(f"Success: The [{vm_name}] VM was successfully {self.verb}.")


class PowerOnVmOperation(PowerVmOperation):
    action = "start"
    target_state = VmPowerState.POWERED_ON
    verb = "powered on"

    @property
    def name(self) -> str:
        return "power_on_vm"

    @property
    def display_name(self) -> str:
        return "Power On Virtual Machine"

    @property
    def description(self) -> str:
        return "Connects to a vCenter and powers on the virtual machine with the given name."


class PowerOffVmOperation(PowerVmOperation):
    action = "stop"
    target_state = VmPowerState.POWERED_OFF
    verb = "powered off"

    @property
    def name(self) -> str:
        return "power_off_vm"

    @property
    def display_name(self) -> str:
        return "Power Off Virtual Machine"

    @property
    def description(self) -> str:
        return "Connects to a vCenter and powers off the virtual machine with the given name."
