"""Models and data structures shared by the connector actions."""

from .enums import HostnameVerifier, MailProtocol, ResponseName, ReturnCode
from .schemas import ActionResult, HttpSettings, InputDefinition, PollingConfig, ProxySettings, TlsSettings

__all__ = [
    "HostnameVerifier",
    "MailProtocol",
    "ResponseName",
    "ReturnCode",
    "ActionResult",
    "HttpSettings",
    "InputDefinition",
    "PollingConfig",
    "ProxySettings",
    "TlsSettings",
]
