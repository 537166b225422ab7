"""
IMAP and POP3 mail stores.

A store is opened with ``open_store``, which picks plain, STARTTLS or
implicit SSL connections the way the mail actions document it, logs in,
and wraps the protocol client in a small common interface.
"""

import imaplib
import poplib
import re
import ssl
from abc import ABC, abstractmethod
from typing import Optional

import structlog

from ...exceptions import MailError
from ...models.enums import MailProtocol
from ...models.mail import MailConnectionInput
from ...utils.tls import build_ssl_context
from .proxy import ProxiedIMAP4, ProxiedIMAP4_SSL, ProxiedPOP3, ProxiedPOP3_SSL

logger = structlog.get_logger(__name__)

POP3_FOLDER = "INBOX"
FOLDER_DOES_NOT_EXIST = "The specified folder does not exist on the remote server."
COUNT_MESSAGES_IN_FOLDER_ERROR_MESSAGE = " messages in folder"
UNRECOGNIZED_SSL_MESSAGE_PLAINTEXT_CONNECTION = (
    "Unrecognized SSL message, plaintext connection? "
    "The server does not speak SSL on this port: disable SSL or enable TLS."
)

_PLAINTEXT_SSL_ERRORS = ("WRONG_VERSION_NUMBER", "wrong version number", "record layer failure")
_LITERAL_SIZE = re.compile(rb"\{\d+\}$")


def is_plaintext_ssl_error(error: BaseException) -> bool:
    """True when an SSL handshake was attempted against a plaintext port."""
    return isinstance(error, ssl.SSLError) and any(text in str(error) for text in _PLAINTEXT_SSL_ERRORS)


class MailStore(ABC):
    """A logged in connection to one mailbox."""

    def __init__(self, client):
        self.client = client

    @abstractmethod
    def open_folder(self, folder: str) -> int:
        """Open the folder for reading and writing and return its message count."""
        pass

    @abstractmethod
    def fetch(self, number: int) -> bytes:
        """Return the raw RFC 822 message without changing its flags."""
        pass

    @abstractmethod
    def mark_seen(self, number: int) -> None:
        pass

    @abstractmethod
    def mark_deleted(self, number: int) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the folder, expunging deleted messages, and log out."""
        pass

    @abstractmethod
    def abort(self) -> None:
        """Log out, dropping pending deletions."""
        pass

    def check_message_number(self, number: int, count: int) -> None:
        if number > count:
            raise MailError(
                f"message value was: {number} there are only {count}{COUNT_MESSAGES_IN_FOLDER_ERROR_MESSAGE}"
            )


class ImapStore(MailStore):
    """IMAP4 mailbox."""

    def __init__(self, client: imaplib.IMAP4):
        super().__init__(client)
        self._selected = False

    def open_folder(self, folder: str) -> int:
        status, data = self.client.select(_quote(folder))
        if status != "OK":
            raise MailError(FOLDER_DOES_NOT_EXIST)
        self._selected = True
        return int(data[0])

    def fetch(self, number: int) -> bytes:
        status, data = self.client.fetch(str(number), "(BODY.PEEK[])")
        if status != "OK":
            raise MailError(f"Could not fetch message {number}: {data}")
        for item in data:
            if isinstance(item, tuple) and _LITERAL_SIZE.search(item[0]):
                return item[1]
        raise MailError(f"Message {number} was not returned by the server.")

    def mark_seen(self, number: int) -> None:
        self.client.store(str(number), "+FLAGS", "\\Seen")

    def mark_deleted(self, number: int) -> None:
        self.client.store(str(number), "+FLAGS", "\\Deleted")

    def close(self) -> None:
        try:
            if self._selected:
                self.client.close()
        finally:
            self.client.logout()

    def abort(self) -> None:
        # LOGOUT without CLOSE does not expunge
        self.client.logout()


class Pop3Store(MailStore):
    """POP3 mailbox; POP3 servers only expose the INBOX folder."""

    def open_folder(self, folder: str) -> int:
        if folder.upper() != POP3_FOLDER:
            raise MailError(FOLDER_DOES_NOT_EXIST)
        count, _ = self.client.stat()
        return count

    def fetch(self, number: int) -> bytes:
        _, lines, _ = self.client.retr(number)
        return b"\r\n".join(lines) + b"\r\n"

    def mark_seen(self, number: int) -> None:
        # POP3 has no flags
        pass

    def mark_deleted(self, number: int) -> None:
        self.client.dele(number)

    def close(self) -> None:
        self.client.quit()

    def abort(self) -> None:
        try:
            self.client.rset()
        finally:
            self.client.quit()


def _quote(folder: str) -> str:
    if folder.startswith('"') or " " not in folder:
        return folder
    return '"' + folder.replace("\\", "\\\\").replace('"', '\\"') + '"'


class StoreConnector:
    """
    Opens a logged in MailStore.

    With ``enable_tls`` a plain connection is upgraded with STARTTLS; if that
    fails and ``enable_ssl`` is also set, an implicit SSL connection is tried
    instead. ``enable_ssl`` alone connects with implicit SSL.
    """

    def __init__(self, connection: MailConnectionInput):
        self.connection = connection
        self._ssl_context: Optional[ssl.SSLContext] = None

    @property
    def ssl_context(self) -> ssl.SSLContext:
        if self._ssl_context is None:
            self._ssl_context = build_ssl_context(self.connection.tls)
        return self._ssl_context

    def open(self) -> MailStore:
        connection = self.connection
        logger.info(
            "Connecting to mail store",
            host=connection.hostname,
            port=connection.port,
            protocol=connection.protocol.value,
            ssl=connection.enable_ssl,
            tls=connection.enable_tls,
            proxy=connection.proxy.host if connection.proxy else None,
        )
        try:
            if connection.enable_tls:
                return self._open_tls_or_ssl()
            if connection.enable_ssl:
                return self._login(self._connect_ssl())
            return self._login(self._connect_plain())
        except ssl.SSLError as e:
            if is_plaintext_ssl_error(e):
                raise MailError(UNRECOGNIZED_SSL_MESSAGE_PLAINTEXT_CONNECTION) from e
            raise

    def _open_tls_or_ssl(self) -> MailStore:
        client = None
        try:
            client = self._connect_plain()
            self._start_tls(client)
        except (OSError, imaplib.IMAP4.error, poplib.error_proto) as e:
            if client is not None:
                _shutdown(client, self.connection.protocol)
            if not self.connection.enable_ssl:
                raise
            logger.warning("STARTTLS failed, trying SSL", host=self.connection.hostname, error=str(e))
            return self._login(self._connect_ssl())
        return self._login(client)

    def _connect_plain(self):
        connection = self.connection
        if connection.protocol is MailProtocol.IMAP:
            if connection.proxy:
                return ProxiedIMAP4(connection.hostname, connection.port, connection.proxy,
                                    timeout=connection.timeout)
            return imaplib.IMAP4(connection.hostname, connection.port, timeout=connection.timeout)
        if connection.proxy:
            return ProxiedPOP3(connection.hostname, connection.port, connection.proxy, timeout=connection.timeout)
        return poplib.POP3(connection.hostname, connection.port, timeout=connection.timeout)

    def _connect_ssl(self):
        connection = self.connection
        if connection.protocol is MailProtocol.IMAP:
            if connection.proxy:
                return ProxiedIMAP4_SSL(connection.hostname, connection.port, connection.proxy,
                                        ssl_context=self.ssl_context, timeout=connection.timeout)
            return imaplib.IMAP4_SSL(connection.hostname, connection.port,
                                     ssl_context=self.ssl_context, timeout=connection.timeout)
        if connection.proxy:
            return ProxiedPOP3_SSL(connection.hostname, connection.port, connection.proxy,
                                   context=self.ssl_context, timeout=connection.timeout)
        return poplib.POP3_SSL(connection.hostname, connection.port,
                               context=self.ssl_context, timeout=connection.timeout)

    def _start_tls(self, client) -> None:
        if self.connection.protocol is MailProtocol.IMAP:
            client.starttls(ssl_context=self.ssl_context)
        else:
            client.stls(context=self.ssl_context)

    def _login(self, client) -> MailStore:
        """Authenticate, dropping the connection when the server refuses."""
        connection = self.connection
        try:
            if connection.protocol is MailProtocol.IMAP:
                client.login(connection.username, connection.password)
                return ImapStore(client)
            client.user(connection.username)
            client.pass_(connection.password)
            return Pop3Store(client)
        except (OSError, imaplib.IMAP4.error, poplib.error_proto):
            _shutdown(client, connection.protocol)
            raise


def _shutdown(client, protocol: MailProtocol) -> None:
    try:
        if protocol is MailProtocol.IMAP:
            client.shutdown()
        else:
            client.close()
    except OSError:
        logger.debug("Ignoring error while dropping mail connection")


def open_store(connection: MailConnectionInput) -> MailStore:
    return StoreConnector(connection).open()
