"""Data classes shared by all actions."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .enums import HostnameVerifier, ResponseName


@dataclass(frozen=True)
class InputDefinition:
    """A named action input as the orchestrator sends it."""
    name: str
    required: bool = False
    encrypted: bool = False
    default: Optional[str] = None
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "required": self.required,
            "encrypted": self.encrypted,
            "default": self.default,
            "description": self.description,
        }


@dataclass
class ActionResult:
    """Result map of one action run plus the resolved response."""
    outputs: Dict[str, str]
    response: ResponseName

    @property
    def succeeded(self) -> bool:
        return self.response is ResponseName.SUCCESS


@dataclass
class PollingConfig:
    """Polling configuration."""
    interval: float = 20.0
    max_attempts: int = 5


@dataclass
class ProxySettings:
    """HTTP proxy used to reach the remote system."""
    host: str
    port: int = 8080
    username: Optional[str] = None
    password: Optional[str] = None


@dataclass
class TlsSettings:
    """Certificate handling for HTTPS and mail connections."""
    trust_all_roots: bool = False
    hostname_verifier: HostnameVerifier = HostnameVerifier.STRICT
    trust_keystore: Optional[str] = None
    trust_password: Optional[str] = None
    keystore: Optional[str] = None
    keystore_password: Optional[str] = None


@dataclass
class HttpSettings:
    """Connection settings common to every HTTP based action."""
    proxy: Optional[ProxySettings] = None
    tls: TlsSettings = field(default_factory=TlsSettings)
    connect_timeout: int = 0
    socket_timeout: int = 0
    use_cookies: bool = True
    keep_alive: bool = True
    connections_max_per_route: int = 2
    connections_max_total: int = 20
    headers: Dict[str, str] = field(default_factory=dict)
    response_character_set: Optional[str] = None