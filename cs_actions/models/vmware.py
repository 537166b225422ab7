"""Input model of the vSphere actions."""

from dataclasses import dataclass
from typing import Dict, Optional

from ..utils.inputs import default_if_empty, parse_bool, require, validate_choice, validate_port

HOST = "host"
PORT = "port"
PROTOCOL = "protocol"
USERNAME = "username"
PASSWORD = "password"
TRUST_EVERYONE = "trustEveryone"
VM_NAME = "virtualMachineName"

PROTOCOLS = ["http", "https"]
DEFAULT_PORT = 443


@dataclass
class VmInput:
    """Where the vCenter is and which virtual machine to act on."""
    host: str
    username: str
    virtual_machine_name: str
    password: str = ""
    port: int = DEFAULT_PORT
    protocol: str = "https"
    trust_everyone: bool = True

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"

    @classmethod
    def from_inputs(cls, inputs: Dict[str, Optional[str]]) -> "VmInput":
        port = validate_port(inputs.get(PORT), PORT, default=DEFAULT_PORT)
        return cls(
            host=require(inputs.get(HOST), HOST),
            username=require(inputs.get(USERNAME), USERNAME),
            virtual_machine_name=require(inputs.get(VM_NAME), VM_NAME),
            password=inputs.get(PASSWORD) or "",
            port=DEFAULT_PORT if port == -1 else port,
            protocol=validate_choice(
                default_if_empty(inputs.get(PROTOCOL), "https"), PROTOCOL, PROTOCOLS, case_sensitive=False
            ),
            trust_everyone=parse_bool(inputs.get(TRUST_EVERYONE), TRUST_EVERYONE, default=True),
        )
