"""Mail protocol clients that can reach their server through an HTTP proxy."""

import base64
import imaplib
import poplib
import smtplib
import socket
from typing import Optional

from ...exceptions import MailError
from ...models.schemas import ProxySettings

CONNECT_BUFFER_SIZE = 4096


def open_tunnel(proxy: ProxySettings, host: str, port: int, timeout: Optional[float] = None) -> socket.socket:
    """
    Open a TCP connection to host:port through an HTTP CONNECT tunnel.

    Raises:
        MailError: If the proxy refuses the tunnel
    """
    sock = socket.create_connection((proxy.host, proxy.port), timeout)
    request = f"CONNECT {host}:{port} HTTP/1.1\r\nHost: {host}:{port}\r\n"
    if proxy.username:
        credentials = f"{proxy.username}:{proxy.password or ''}".encode("utf-8")
        request += f"Proxy-Authorization: Basic {base64.b64encode(credentials).decode('ascii')}\r\n"
    sock.sendall((request + "\r\n").encode("latin-1"))

    response = b""
    while b"\r\n\r\n" not in response:
        chunk = sock.recv(CONNECT_BUFFER_SIZE)
        if not chunk:
            break
        response += chunk

    status_line = response.split(b"\r\n", 1)[0].decode("latin-1")
    parts = status_line.split(" ", 2)
    if len(parts) < 2 or parts[1] != "200":
        sock.close()
        raise MailError(f"The proxy {proxy.host}:{proxy.port} refused to connect to {host}:{port}: {status_line}")
    return sock


def _timeout(timeout):
    return None if timeout is socket._GLOBAL_DEFAULT_TIMEOUT else timeout


class ProxiedIMAP4(imaplib.IMAP4):
    def __init__(self, host: str, port: int, proxy: ProxySettings, timeout: Optional[float] = None):
        self.proxy = proxy
        super().__init__(host, port, timeout=timeout)

    def _create_socket(self, timeout=None):
        return open_tunnel(self.proxy, self.host, self.port, timeout)


class ProxiedIMAP4_SSL(imaplib.IMAP4_SSL):
    def __init__(self, host: str, port: int, proxy: ProxySettings, ssl_context=None,
                 timeout: Optional[float] = None):
        self.proxy = proxy
        super().__init__(host, port, ssl_context=ssl_context, timeout=timeout)

    def _create_socket(self, timeout=None):
        sock = open_tunnel(self.proxy, self.host, self.port, timeout)
        return self.ssl_context.wrap_socket(sock, server_hostname=self.host)


class ProxiedPOP3(poplib.POP3):
    def __init__(self, host: str, port: int, proxy: ProxySettings, timeout: Optional[float] = None):
        self.proxy = proxy
        super().__init__(host, port, timeout=timeout)

    def _create_socket(self, timeout):
        return open_tunnel(self.proxy, self.host, self.port, _timeout(timeout))


class ProxiedPOP3_SSL(poplib.POP3_SSL):
    def __init__(self, host: str, port: int, proxy: ProxySettings, context=None,
                 timeout: Optional[float] = None):
        self.proxy = proxy
        super().__init__(host, port, timeout=timeout, context=context)

    def _create_socket(self, timeout):
        sock = open_tunnel(self.proxy, self.host, self.port, _timeout(timeout))
        return self.context.wrap_socket(sock, server_hostname=self.host)


class ProxiedSMTP(smtplib.SMTP):
    def __init__(self, host: str, port: int, proxy: ProxySettings, timeout: Optional[float] = None):
        self.proxy = proxy
        super().__init__(host, port, timeout=timeout)

    def _get_socket(self, host, port, timeout):
        return open_tunnel(self.proxy, host, port, _timeout(timeout))
