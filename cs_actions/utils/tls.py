"""SSL context construction shared by HTTP and mail connections."""

import ssl
from typing import Optional

from ..models.enums import HostnameVerifier
from ..models.schemas import TlsSettings


def build_ssl_context(tls: TlsSettings) -> ssl.SSLContext:
    """
    Build an SSL context from the certificate inputs of an action.

    ``trust_keystore`` is a PEM bundle of trusted CA certificates and
    ``keystore`` a PEM file holding the client certificate and its key.
    Both are ignored when all roots are trusted.
    """
    if tls.trust_all_roots:
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context

    context = ssl.create_default_context(cafile=_optional(tls.trust_keystore))
    if tls.hostname_verifier is HostnameVerifier.ALLOW_ALL:
        context.check_hostname = False
    if tls.keystore:
        context.load_cert_chain(tls.keystore, password=_optional(tls.keystore_password))
    return context


def _optional(value: Optional[str]) -> Optional[str]:
    return value or None
