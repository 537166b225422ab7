"""Tests for mail connections through an HTTP CONNECT proxy."""

import socket
from unittest.mock import MagicMock, patch

import pytest

from cs_actions.exceptions import MailError
from cs_actions.models.enums import MailProtocol
from cs_actions.models.mail import MailConnectionInput
from cs_actions.models.schemas import ProxySettings
from cs_actions.services.mail.proxy import ProxiedPOP3, ProxiedSMTP, open_tunnel
from cs_actions.services.mail.store import StoreConnector

PROXY = ProxySettings(host="proxy.example.com", port=3128, username="alice", password="pw")


@pytest.fixture
def sockets():
    """Connected pair: the client end and the end playing the proxy"""
    client_end, proxy_end = socket.socketpair()
    yield client_end, proxy_end
    client_end.close()
    proxy_end.close()


class TestOpenTunnel:
    def test_connect_with_credentials(self, sockets):
        client_end, proxy_end = sockets
        proxy_end.sendall(b"HTTP/1.1 200 Connection established\r\n\r\n")

        with patch("cs_actions.services.mail.proxy.socket.create_connection",
                   return_value=client_end) as create_connection:
            tunnel = open_tunnel(PROXY, "imap.example.com", 993, timeout=5)

        assert tunnel is client_end
        create_connection.assert_called_once_with(("proxy.example.com", 3128), 5)
        request = proxy_end.recv(4096)
        assert request.startswith(b"CONNECT imap.example.com:993 HTTP/1.1\r\n")
        assert b"Host: imap.example.com:993\r\n" in request
        assert b"Proxy-Authorization: Basic YWxpY2U6cHc=\r\n" in request
        assert request.endswith(b"\r\n\r\n")

    def test_connect_without_credentials(self, sockets):
        client_end, proxy_end = sockets
        proxy_end.sendall(b"HTTP/1.0 200 OK\r\n\r\n")

        with patch("cs_actions.services.mail.proxy.socket.create_connection", return_value=client_end):
            open_tunnel(ProxySettings(host="proxy.example.com"), "pop.example.com", 110)

        assert b"Proxy-Authorization" not in proxy_end.recv(4096)

    def test_refused_tunnel(self, sockets):
        client_end, proxy_end = sockets
        proxy_end.sendall(b"HTTP/1.1 407 Proxy Authentication Required\r\n\r\n")

        with patch("cs_actions.services.mail.proxy.socket.create_connection", return_value=client_end):
            with pytest.raises(MailError) as exc_info:
                open_tunnel(PROXY, "imap.example.com", 993)

        assert "407 Proxy Authentication Required" in exc_info.value.message
        assert client_end.fileno() == -1

    def test_proxy_hangs_up(self, sockets):
        client_end, proxy_end = sockets
        proxy_end.shutdown(socket.SHUT_WR)

        with patch("cs_actions.services.mail.proxy.socket.create_connection", return_value=client_end):
            with pytest.raises(MailError):
                open_tunnel(PROXY, "imap.example.com", 993)


class TestProxiedClients:
    """Protocol clients talk through the tunnel socket"""

    def test_pop3(self, sockets):
        client_end, proxy_end = sockets
        proxy_end.sendall(b"+OK POP3 ready\r\n")

        with patch("cs_actions.services.mail.proxy.open_tunnel", return_value=client_end) as tunnel:
            client = ProxiedPOP3("pop.example.com", 110, PROXY, timeout=5)

        assert client.welcome == b"+OK POP3 ready"
        tunnel.assert_called_once_with(PROXY, "pop.example.com", 110, 5)
        client.close()

    def test_smtp(self, sockets):
        client_end, proxy_end = sockets
        proxy_end.sendall(b"220 smtp.example.com ESMTP ready\r\n")

        with patch("cs_actions.services.mail.proxy.open_tunnel", return_value=client_end) as tunnel:
            client = ProxiedSMTP("smtp.example.com", 587, PROXY, timeout=5)

        tunnel.assert_called_once_with(PROXY, "smtp.example.com", 587, 5)
        assert client.sock is client_end
        client.close()


class TestStoreConnectorWithProxy:
    def test_plain_imap_uses_proxy(self):
        connection = MailConnectionInput(hostname="imap.example.com", port=143, protocol=MailProtocol.IMAP,
                                         username="alice", password="pw", timeout=10, proxy=PROXY)
        with patch("cs_actions.services.mail.store.ProxiedIMAP4") as proxied_imap:
            proxied_imap.return_value = MagicMock()
            StoreConnector(connection).open()

        proxied_imap.assert_called_once_with("imap.example.com", 143, PROXY, timeout=10)
        proxied_imap.return_value.login.assert_called_once_with("alice", "pw")

    def test_pop3_ssl_uses_proxy(self):
        connection = MailConnectionInput(hostname="pop.example.com", port=995, protocol=MailProtocol.POP3,
                                         username="alice", password="pw", enable_ssl=True, proxy=PROXY)
        connector = StoreConnector(connection)
        with patch("cs_actions.services.mail.store.ProxiedPOP3_SSL") as proxied_pop3:
            proxied_pop3.return_value = MagicMock()
            connector.open()

        proxied_pop3.assert_called_once_with("pop.example.com", 995, PROXY,
                                             context=connector.ssl_context, timeout=None)
        proxied_pop3.return_value.pass_.assert_called_once_with("pw")

    def test_no_proxy(self):
        connection = MailConnectionInput(hostname="imap.example.com", port=143, protocol=MailProtocol.IMAP,
                                         username="alice", password="pw")
        with patch("cs_actions.services.mail.store.ProxiedIMAP4") as proxied_imap, \
                patch("cs_actions.services.mail.store.imaplib.IMAP4") as imap:
            StoreConnector(connection).open()

        proxied_imap.assert_not_called()
        imap.assert_called_once_with("imap.example.com", 143, timeout=None)
