"""Input models of the mail actions."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..exceptions import ValidationError
from ..services.http_client import parse_proxy
from ..utils.inputs import (
    default_if_empty,
    is_empty,
    parse_bool,
    parse_headers,
    parse_int,
    parse_list,
    require,
    validate_choice,
)
from .enums import MailProtocol
from .schemas import ProxySettings, TlsSettings

HOSTNAME = "hostname"
PORT = "port"
PROTOCOL = "protocol"
USERNAME = "username"
PASSWORD = "password"
FOLDER = "folder"
TRUST_ALL_ROOTS = "trustAllRoots"
MESSAGE_NUMBER = "messageNumber"
SUBJECT_ONLY = "subjectOnly"
ENABLE_SSL = "enableSSL"
ENABLE_TLS = "enableTLS"
KEYSTORE = "keystore"
KEYSTORE_PASSWORD = "keystorePassword"
TRUST_KEYSTORE = "trustKeystore"
TRUST_PASSWORD = "trustPassword"
CHARACTER_SET = "characterSet"
DELETE_UPON_RETRIEVAL = "deleteUponRetrieval"
MARK_MESSAGE_AS_READ = "markMessageAsRead"
DECRYPTION_KEYSTORE = "decryptionKeystore"
DECRYPTION_KEY_ALIAS = "decryptionKeyAlias"
DECRYPTION_KEYSTORE_PASSWORD = "decryptionKeystorePassword"
TIMEOUT = "timeout"
VERIFY_CERTIFICATE = "verifyCertificate"

IMAP4 = "imap4"
IMAP_PORT = 143
POP3_PORT = 110
SMTP_PORT = 25

MESSAGES_ARE_NUMBERED_STARTING_AT_1 = "Messages are numbered starting at 1 through the total number of messages in the folder!"
SPECIFY_PORT_OR_PROTOCOL_OR_BOTH = "Please specify the port, the protocol, or both."
SPECIFY_PORT_FOR_PROTOCOL = "Please specify the port for the indicated protocol."
SPECIFY_PROTOCOL_FOR_GIVEN_PORT = "Please specify the protocol for the indicated port."
TIMEOUT_MUST_BE_POSITIVE = "timeout value must be a positive number"


def resolve_protocol_and_port(protocol: Optional[str], port: Optional[str]) -> Tuple[MailProtocol, int]:
    """
    Work out the mail protocol and port from the two optional inputs.

    Port 143 implies IMAP and port 110 implies POP3; a known protocol
    without a port gets its default port. ``imap4`` is an alias of ``imap``.

    Raises:
        ValidationError: If neither is given, or the combination is ambiguous
    """
    protocol = default_if_empty(protocol, None)
    port_number = parse_int(port, PORT, minimum=1, maximum=65535)
    known = {MailProtocol.IMAP.value, IMAP4, MailProtocol.POP3.value}

    if protocol is None and port_number is None:
        raise ValidationError(SPECIFY_PORT_OR_PROTOCOL_OR_BOTH, field=PROTOCOL)

    if protocol is None:
        if port_number == IMAP_PORT:
            return MailProtocol.IMAP, port_number
        if port_number == POP3_PORT:
            return MailProtocol.POP3, port_number
        raise ValidationError(SPECIFY_PROTOCOL_FOR_GIVEN_PORT, field=PROTOCOL)

    lowered = protocol.lower()
    if lowered not in known:
        if port_number is None:
            raise ValidationError(SPECIFY_PORT_FOR_PROTOCOL, field=PORT)
        raise ValidationError(
            f"The {protocol} for {PROTOCOL} input is not valid. Valid values: imap, imap4, pop3.", field=PROTOCOL
        )

    mail_protocol = MailProtocol.POP3 if lowered == MailProtocol.POP3.value else MailProtocol.IMAP
    if port_number is None:
        port_number = POP3_PORT if mail_protocol is MailProtocol.POP3 else IMAP_PORT
    return mail_protocol, port_number


def parse_timeout(value: Optional[str]) -> Optional[int]:
    """Mail timeouts are whole seconds and must be positive when given."""
    if is_empty(value):
        return None
    timeout = parse_int(value, TIMEOUT)
    if timeout <= 0:
        raise ValidationError(TIMEOUT_MUST_BE_POSITIVE, field=TIMEOUT)
    return timeout


@dataclass
class MailConnectionInput:
    """How to reach and log into a mail store."""
    hostname: str
    port: int
    protocol: MailProtocol
    username: str
    password: str = ""
    folder: str = "INBOX"
    enable_ssl: bool = False
    enable_tls: bool = False
    tls: TlsSettings = field(default_factory=lambda: TlsSettings(trust_all_roots=True))
    timeout: Optional[int] = None
    proxy: Optional[ProxySettings] = None

    @classmethod
    def from_inputs(cls, inputs: Dict[str, Optional[str]]) -> "MailConnectionInput":
        hostname = require(inputs.get(HOSTNAME), HOSTNAME)
        username = require(inputs.get(USERNAME), USERNAME)
        folder = require(inputs.get(FOLDER), FOLDER)
        protocol, port = resolve_protocol_and_port(inputs.get(PROTOCOL), inputs.get(PORT))

        # trustAllRoots is true unless explicitly 'false'
        trust_all_roots = (inputs.get(TRUST_ALL_ROOTS) or "").strip().lower() != "false"

        return cls(
            hostname=hostname,
            port=port,
            protocol=protocol,
            username=username,
            password=(inputs.get(PASSWORD) or "").strip(),
            folder=folder,
            enable_ssl=parse_bool(inputs.get(ENABLE_SSL), ENABLE_SSL),
            enable_tls=parse_bool(inputs.get(ENABLE_TLS), ENABLE_TLS),
            tls=TlsSettings(
                trust_all_roots=trust_all_roots,
                trust_keystore=default_if_empty(inputs.get(TRUST_KEYSTORE), None),
                trust_password=inputs.get(TRUST_PASSWORD) or None,
                keystore=default_if_empty(inputs.get(KEYSTORE), None),
                keystore_password=inputs.get(KEYSTORE_PASSWORD) or None,
            ),
            timeout=parse_timeout(inputs.get(TIMEOUT)),
            proxy=parse_proxy(inputs),
        )


@dataclass
class DecryptionSettings:
    """Where to find the private key used for S/MIME enveloped parts."""
    keystore: str
    alias: str = ""
    password: str = ""
    verify_certificate: bool = False


@dataclass
class GetMailMessageInput:
    """Validated inputs of the Get Mail Message action."""
    connection: MailConnectionInput
    message_number: int
    subject_only: bool = False
    character_set: Optional[str] = None
    delete_upon_retrieval: bool = False
    mark_as_read: bool = False
    decryption: Optional[DecryptionSettings] = None

    @classmethod
    def from_inputs(cls, inputs: Dict[str, Optional[str]]) -> "GetMailMessageInput":
        connection = MailConnectionInput.from_inputs(inputs)
        raw_number = require(inputs.get(MESSAGE_NUMBER), MESSAGE_NUMBER)
        message_number = parse_int(raw_number, MESSAGE_NUMBER)
        if message_number < 1:
            raise ValidationError(MESSAGES_ARE_NUMBERED_STARTING_AT_1, field=MESSAGE_NUMBER)

        decryption = None
        if not is_empty(inputs.get(DECRYPTION_KEYSTORE)):
            decryption = DecryptionSettings(
                keystore=inputs[DECRYPTION_KEYSTORE].strip(),
                alias=(inputs.get(DECRYPTION_KEY_ALIAS) or "").strip(),
                password=inputs.get(DECRYPTION_KEYSTORE_PASSWORD) or "",
                verify_certificate=parse_bool(inputs.get(VERIFY_CERTIFICATE), VERIFY_CERTIFICATE),
            )

        return cls(
            connection=connection,
            message_number=message_number,
            subject_only=parse_bool(inputs.get(SUBJECT_ONLY), SUBJECT_ONLY),
            character_set=default_if_empty(inputs.get(CHARACTER_SET), None),
            delete_upon_retrieval=parse_bool(inputs.get(DELETE_UPON_RETRIEVAL), DELETE_UPON_RETRIEVAL),
            mark_as_read=parse_bool(inputs.get(MARK_MESSAGE_AS_READ), MARK_MESSAGE_AS_READ),
            decryption=decryption,
        )


FROM = "from"
TO = "to"
CC = "cc"
BCC = "bcc"
SUBJECT = "subject"
BODY = "body"
HTML_EMAIL = "htmlEmail"
READ_RECEIPT = "readReceipt"
ATTACHMENTS = "attachments"
DELIMITER = "delimiter"
CONTENT_TRANSFER_ENCODING = "contentTransferEncoding"
HEADERS = "headers"

CONTENT_TRANSFER_ENCODINGS = ["base64", "quoted-printable", "7bit", "8bit"]


@dataclass
class SendMailInput:
    """Validated inputs of the Send Mail action."""
    hostname: str
    port: int
    sender: str
    to: List[str]
    subject: str = ""
    body: str = ""
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)
    html_email: bool = True
    read_receipt: bool = False
    attachments: List[str] = field(default_factory=list)
    username: Optional[str] = None
    password: Optional[str] = None
    character_set: str = "UTF-8"
    content_transfer_encoding: str = "base64"
    enable_tls: bool = False
    tls: TlsSettings = field(default_factory=lambda: TlsSettings(trust_all_roots=True))
    timeout: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    proxy: Optional[ProxySettings] = None

    @classmethod
    def from_inputs(cls, inputs: Dict[str, Optional[str]]) -> "SendMailInput":
        delimiter = inputs.get(DELIMITER) or ","
        to = parse_list(inputs.get(TO), delimiter)
        if not to:
            raise ValidationError(f"The {TO} can't be null or empty.", field=TO)

        return cls(
            hostname=require(inputs.get(HOSTNAME), HOSTNAME),
            port=parse_int(inputs.get(PORT), PORT, default=SMTP_PORT, minimum=1, maximum=65535),
            sender=require(inputs.get(FROM), FROM),
            to=to,
            subject=inputs.get(SUBJECT) or "",
            body=inputs.get(BODY) or "",
            cc=parse_list(inputs.get(CC), delimiter),
            bcc=parse_list(inputs.get(BCC), delimiter),
            html_email=parse_bool(inputs.get(HTML_EMAIL), HTML_EMAIL, default=True),
            read_receipt=parse_bool(inputs.get(READ_RECEIPT), READ_RECEIPT),
            attachments=parse_list(inputs.get(ATTACHMENTS), delimiter),
            username=default_if_empty(inputs.get(USERNAME), None),
            password=inputs.get(PASSWORD) or None,
            character_set=default_if_empty(inputs.get(CHARACTER_SET), "UTF-8"),
            content_transfer_encoding=validate_choice(
                default_if_empty(inputs.get(CONTENT_TRANSFER_ENCODING), "base64"),
                CONTENT_TRANSFER_ENCODING,
                CONTENT_TRANSFER_ENCODINGS,
                case_sensitive=False,
            ),
            enable_tls=parse_bool(inputs.get(ENABLE_TLS), ENABLE_TLS),
            tls=TlsSettings(
                trust_all_roots=(inputs.get(TRUST_ALL_ROOTS) or "").strip().lower() != "false",
                trust_keystore=default_if_empty(inputs.get(TRUST_KEYSTORE), None),
                keystore=default_if_empty(inputs.get(KEYSTORE), None),
                keystore_password=inputs.get(KEYSTORE_PASSWORD) or None,
            ),
            timeout=parse_timeout(inputs.get(TIMEOUT)),
            headers=parse_headers(inputs.get(HEADERS)),
            proxy=parse_proxy(inputs),
        )
