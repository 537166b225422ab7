"""Inputs shared by the mail actions."""

from typing import List

from ...config import get_settings
from ...models import mail
from ...models.schemas import InputDefinition
from ...services.http_client import PROXY_HOST, PROXY_PASSWORD, PROXY_PORT, PROXY_USERNAME


def proxy_input_definitions() -> List[InputDefinition]:
    return [
        InputDefinition(PROXY_HOST),
        InputDefinition(PROXY_PORT, default=str(get_settings().default_proxy_port)),
        InputDefinition(PROXY_USERNAME),
        InputDefinition(PROXY_PASSWORD, encrypted=True),
    ]


def store_input_definitions() -> List[InputDefinition]:
    """Inputs needed to connect to an IMAP or POP3 folder."""
    return [
        InputDefinition(mail.HOSTNAME, required=True),
        InputDefinition(mail.PORT, description="143 implies imap, 110 implies pop3."),
        InputDefinition(mail.PROTOCOL, description="imap, imap4 or pop3."),
        InputDefinition(mail.USERNAME, required=True),
        InputDefinition(mail.PASSWORD, encrypted=True),
        InputDefinition(mail.FOLDER, required=True),
        InputDefinition(mail.TRUST_ALL_ROOTS, default="true"),
        InputDefinition(mail.ENABLE_SSL, default="false"),
        InputDefinition(mail.ENABLE_TLS, default="false"),
        InputDefinition(mail.KEYSTORE, description="PEM file with the client certificate and key."),
        InputDefinition(mail.KEYSTORE_PASSWORD, encrypted=True),
        InputDefinition(mail.TRUST_KEYSTORE, description="PEM bundle of trusted CA certificates."),
        InputDefinition(mail.TRUST_PASSWORD, encrypted=True),
        InputDefinition(mail.TIMEOUT, description="Seconds; must be positive."),
        *proxy_input_definitions(),
    ]
