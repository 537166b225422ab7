"""HTTP client factory shared by the REST based actions."""

from typing import Dict, Optional
from urllib.parse import quote

import httpx
import structlog

from ..config import get_settings
from ..exceptions import ValidationError
from ..models.enums import HostnameVerifier
from ..models.schemas import HttpSettings, InputDefinition, ProxySettings, TlsSettings
from ..utils.inputs import (
    EXCEPTION_INVALID_PROXY,
    default_if_empty,
    is_empty,
    parse_bool,
    parse_headers,
    parse_int,
    validate_choice,
    validate_port,
)
from ..utils.tls import build_ssl_context

logger = structlog.get_logger(__name__)

PROXY_HOST = "proxyHost"
PROXY_PORT = "proxyPort"
PROXY_USERNAME = "proxyUsername"
PROXY_PASSWORD = "proxyPassword"
TRUST_ALL_ROOTS = "trustAllRoots"
X509_HOSTNAME_VERIFIER = "x509HostnameVerifier"
TRUST_KEYSTORE = "trustKeystore"
TRUST_PASSWORD = "trustPassword"
KEYSTORE = "keystore"
KEYSTORE_PASSWORD = "keystorePassword"
CONNECT_TIMEOUT = "connectTimeout"
SOCKET_TIMEOUT = "socketTimeout"
USE_COOKIES = "useCookies"
KEEP_ALIVE = "keepAlive"
CONNECTIONS_MAX_PER_ROUTE = "connectionsMaxPerRoute"
CONNECTIONS_MAX_TOTAL = "connectionsMaxTotal"
HEADERS = "headers"
RESPONSE_CHARACTER_SET = "responseCharacterSet"


def http_input_definitions() -> list:
    """Inputs every REST action accepts for proxy, TLS and connection tuning."""
    settings = get_settings()
    return [
        InputDefinition(PROXY_HOST, description="The proxy server used to access the remote API."),
        InputDefinition(PROXY_PORT, default=str(settings.default_proxy_port),
                        description="The proxy server port."),
        InputDefinition(PROXY_USERNAME),
        InputDefinition(PROXY_PASSWORD, encrypted=True),
        InputDefinition(TRUST_ALL_ROOTS, default="false",
                        description="Trust certificates not issued by a trusted certification authority."),
        InputDefinition(X509_HOSTNAME_VERIFIER, default=HostnameVerifier.STRICT.value,
                        description="Valid values: strict, browser_compatible, allow_all."),
        InputDefinition(TRUST_KEYSTORE, description="PEM bundle of trusted CA certificates."),
        InputDefinition(TRUST_PASSWORD, encrypted=True),
        InputDefinition(KEYSTORE, description="PEM file with the client certificate and private key."),
        InputDefinition(KEYSTORE_PASSWORD, encrypted=True),
        InputDefinition(CONNECT_TIMEOUT, default=str(settings.connect_timeout),
                        description="Seconds to wait for a connection. 0 means infinite."),
        InputDefinition(SOCKET_TIMEOUT, default=str(settings.socket_timeout),
                        description="Seconds to wait for data. 0 means infinite."),
        InputDefinition(USE_COOKIES, default="true"),
        InputDefinition(KEEP_ALIVE, default="true"),
        InputDefinition(CONNECTIONS_MAX_PER_ROUTE, default=str(settings.connections_max_per_route)),
        InputDefinition(CONNECTIONS_MAX_TOTAL, default=str(settings.connections_max_total)),
        InputDefinition(HEADERS, description="Extra request headers as 'Name:Value' lines."),
        InputDefinition(RESPONSE_CHARACTER_SET,
                        description="Character set used to decode the response body."),
    ]


def parse_proxy(inputs: Dict[str, Optional[str]]) -> Optional[ProxySettings]:
    """Build the proxy settings, or None when no proxyHost is given."""
    settings = get_settings()
    proxy_host = inputs.get(PROXY_HOST)
    if is_empty(proxy_host):
        return None
    if any(char in proxy_host.strip() for char in "/@ "):
        raise ValidationError(EXCEPTION_INVALID_PROXY.format(proxy_host), field=PROXY_HOST)
    port = validate_port(inputs.get(PROXY_PORT), PROXY_PORT, default=settings.default_proxy_port)
    return ProxySettings(
        host=proxy_host.strip(),
        port=settings.default_proxy_port if port in (None, -1) else port,
        username=default_if_empty(inputs.get(PROXY_USERNAME), None),
        password=inputs.get(PROXY_PASSWORD) or None,
    )


def parse_http_settings(inputs: Dict[str, Optional[str]]) -> HttpSettings:
    """Build HttpSettings from the common HTTP inputs."""
    settings = get_settings()
    proxy = parse_proxy(inputs)

    verifier = validate_choice(
        default_if_empty(inputs.get(X509_HOSTNAME_VERIFIER), HostnameVerifier.STRICT.value),
        X509_HOSTNAME_VERIFIER,
        [verifier.value for verifier in HostnameVerifier],
        case_sensitive=False,
    )
    tls = TlsSettings(
        trust_all_roots=parse_bool(inputs.get(TRUST_ALL_ROOTS), TRUST_ALL_ROOTS),
        hostname_verifier=HostnameVerifier(verifier),
        trust_keystore=default_if_empty(inputs.get(TRUST_KEYSTORE), None),
        trust_password=inputs.get(TRUST_PASSWORD) or None,
        keystore=default_if_empty(inputs.get(KEYSTORE), None),
        keystore_password=inputs.get(KEYSTORE_PASSWORD) or None,
    )

    return HttpSettings(
        proxy=proxy,
        tls=tls,
        connect_timeout=parse_int(inputs.get(CONNECT_TIMEOUT), CONNECT_TIMEOUT,
                                  default=settings.connect_timeout, minimum=0),
        socket_timeout=parse_int(inputs.get(SOCKET_TIMEOUT), SOCKET_TIMEOUT,
                                 default=settings.socket_timeout, minimum=0),
        use_cookies=parse_bool(inputs.get(USE_COOKIES), USE_COOKIES, default=True),
        keep_alive=parse_bool(inputs.get(KEEP_ALIVE), KEEP_ALIVE, default=True),
        connections_max_per_route=parse_int(inputs.get(CONNECTIONS_MAX_PER_ROUTE), CONNECTIONS_MAX_PER_ROUTE,
                                            default=settings.connections_max_per_route, minimum=1),
        connections_max_total=parse_int(inputs.get(CONNECTIONS_MAX_TOTAL), CONNECTIONS_MAX_TOTAL,
                                        default=settings.connections_max_total, minimum=1),
        headers=parse_headers(inputs.get(HEADERS)),
        response_character_set=default_if_empty(inputs.get(RESPONSE_CHARACTER_SET), None),
    )


def proxy_url(proxy: ProxySettings) -> str:
    """Render the proxy as a URL, embedding its credentials when present."""
    credentials = ""
    if proxy.username:
        credentials = quote(proxy.username, safe="")
        if proxy.password:
            credentials += ":" + quote(proxy.password, safe="")
        credentials += "@"
    return f"http://{credentials}{proxy.host}:{proxy.port}"


def _seconds_or_none(value: int) -> Optional[float]:
    return None if not value else float(value)


def build_client(settings: HttpSettings, **kwargs) -> httpx.Client:
    """
    Create an httpx client configured from the common HTTP inputs.

    Keyword arguments are passed through to ``httpx.Client`` (``base_url``,
    ``auth``, extra ``headers`` merged over the input headers).
    """
    headers = dict(settings.headers)
    headers.update(kwargs.pop("headers", {}) or {})

    timeout = httpx.Timeout(
        _seconds_or_none(settings.socket_timeout),
        connect=_seconds_or_none(settings.connect_timeout),
    )
    limits = httpx.Limits(
        max_connections=settings.connections_max_total,
        max_keepalive_connections=settings.connections_max_per_route if settings.keep_alive else 0,
    )

    client = httpx.Client(
        proxy=proxy_url(settings.proxy) if settings.proxy else None,
        verify=build_ssl_context(settings.tls),
        timeout=timeout,
        limits=limits,
        headers=headers,
        **kwargs,
    )

    if not settings.use_cookies:
        client.event_hooks["response"].append(lambda response: client.cookies.clear())

    logger.debug(
        "HTTP client created",
        proxy=settings.proxy.host if settings.proxy else None,
        trust_all_roots=settings.tls.trust_all_roots,
    )
    return client


def decode_body(response: httpx.Response, character_set: Optional[str] = None) -> str:
    """
    Decode the response body.

    The explicit character set wins, then the charset of the Content-Type
    header, then the configured default.
    """
    encoding = character_set or response.charset_encoding or get_settings().response_character_set
    try:
        return response.content.decode(encoding, errors="replace")
    except LookupError:
        raise ValidationError(f"The given encoding ({encoding}) is invalid or not supported.",
                              field=RESPONSE_CHARACTER_SET)


def format_headers(response: httpx.Response) -> str:
    """Render response headers as 'Name: value' lines."""
    return "\n".join(f"{name}: {value}" for name, value in response.headers.items())
