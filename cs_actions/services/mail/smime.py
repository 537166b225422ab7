"""
S/MIME decryption of enveloped message parts.

The private key comes from a PKCS#12 keystore given as a file path or an
http(s) URL. Before decrypting, the recipient list of the enveloped data is
read so that a part encrypted for somebody else fails with the list of
certificates it was encrypted for.
"""

import email
from dataclasses import dataclass
from datetime import datetime, timezone
from email.message import Message
from typing import List, Optional, Tuple

import httpx
import structlog
from cryptography import x509
from cryptography.hazmat.primitives.serialization import pkcs7, pkcs12

from ...exceptions import DecryptionError
from ...models.mail import DecryptionSettings

logger = structlog.get_logger(__name__)

PRIVATE_KEY_ERROR_MESSAGE = "The decryption keystore does not contain a private key entry."
KEY_ALIAS_NOT_FOUND = 'Can\'t find a key pair with alias "{}" in the given keystore'
NOT_ENCRYPTED_FOR_CERTIFICATE = 'This email wasn\'t encrypted with "{}".\n'
ENCRYPT_RECID = "This email was encrypted with the following certificates:\n"

HTTP = "http"
FILE_PREFIX = "file:"

RecipientId = Tuple[x509.Name, int]


@dataclass
class DecryptionKey:
    private_key: object
    certificate: x509.Certificate

    @property
    def recipient_id(self) -> RecipientId:
        return self.certificate.issuer, self.certificate.serial_number


def format_recipient(recipient: RecipientId) -> str:
    issuer, serial = recipient
    return f"issuer={issuer.rfc4514_string()}, serial={serial}"


def read_keystore(location: str) -> bytes:
    """Read keystore bytes from a path, a file: URL or an http(s) URL."""
    if location.lower().startswith(HTTP):
        response = httpx.get(location, follow_redirects=True)
        response.raise_for_status()
        return response.content
    if location.lower().startswith(FILE_PREFIX):
        location = location[len(FILE_PREFIX):]
    with open(location, "rb") as keystore:
        return keystore.read()


def load_decryption_key(settings: DecryptionSettings, data: Optional[bytes] = None) -> DecryptionKey:
    """
    Load the key pair selected by the alias from a PKCS#12 keystore.

    An empty alias selects the key entry of the keystore.

    Raises:
        DecryptionError: If there is no usable key pair, or the certificate
            is outside its validity period while verification is on
    """
    if data is None:
        data = read_keystore(settings.keystore)
    password = settings.password.encode("utf-8") if settings.password else None
    try:
        keystore = pkcs12.load_pkcs12(data, password)
    except ValueError as e:
        raise DecryptionError(f"Could not load the decryption keystore: {e}")

    if keystore.key is None or keystore.cert is None:
        raise DecryptionError(PRIVATE_KEY_ERROR_MESSAGE)

    if settings.alias:
        friendly_name = keystore.cert.friendly_name
        if friendly_name is None or friendly_name.decode("utf-8", errors="replace") != settings.alias:
            raise DecryptionError(KEY_ALIAS_NOT_FOUND.format(settings.alias))

    certificate = keystore.cert.certificate
    if settings.verify_certificate:
        now = datetime.now(timezone.utc)
        if not certificate.not_valid_before_utc <= now <= certificate.not_valid_after_utc:
            raise DecryptionError(
                f"The decryption certificate is not valid at {now.isoformat()} "
                f"(valid from {certificate.not_valid_before_utc.isoformat()} "
                f"to {certificate.not_valid_after_utc.isoformat()})."
            )
    return DecryptionKey(keystore.key, certificate)


class SmimeDecryptor:
    """Callable used by the message parser to open enveloped parts."""

    def __init__(self, key: DecryptionKey):
        self.key = key

    def __call__(self, part: Message) -> Message:
        data = part.get_payload(decode=True) or b""
        recipients = enveloped_recipients(data)
        if recipients is not None and self.key.recipient_id not in recipients:
            message = NOT_ENCRYPTED_FOR_CERTIFICATE.format(format_recipient(self.key.recipient_id)) + ENCRYPT_RECID
            message += "".join(f'"{format_recipient(recipient)}"\n' for recipient in recipients)
            raise DecryptionError(message)

        try:
            content = pkcs7.pkcs7_decrypt_der(data, self.key.certificate, self.key.private_key, [])
        except ValueError as e:
            raise DecryptionError(f"Could not decrypt the S/MIME part: {e}")
        logger.debug("Decrypted S/MIME part", size=len(content))
        return email.message_from_bytes(content)


# Minimal DER reading, enough to list the KeyTransRecipientInfo entries
# of a CMS EnvelopedData structure.

_SEQUENCE = 0x30
_SET = 0x31
_INTEGER = 0x02
_OID = 0x06
_CONTEXT_0 = 0xA0

_STRING_CODECS = {
    0x0C: "utf-8",
    0x13: "ascii",
    0x14: "latin-1",
    0x16: "ascii",
    0x1C: "utf-32-be",
    0x1E: "utf-16-be",
}


def _read(data: bytes, offset: int) -> Tuple[int, int, int]:
    tag = data[offset]
    length = data[offset + 1]
    offset += 2
    if length & 0x80:
        count = length & 0x7F
        if count == 0:
            raise ValueError("indefinite length encoding")
        length = int.from_bytes(data[offset:offset + count], "big")
        offset += count
    if offset + length > len(data):
        raise ValueError("truncated DER element")
    return tag, offset, offset + length


def _children(data: bytes, start: int, end: int) -> List[Tuple[int, int, int]]:
    children = []
    while start < end:
        element = _read(data, start)
        children.append(element)
        start = element[2]
    return children


def _oid(raw: bytes) -> str:
    first = raw[0]
    arcs = [min(first // 40, 2), first - 40 * min(first // 40, 2)]
    value = 0
    for byte in raw[1:]:
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            arcs.append(value)
            value = 0
    return ".".join(str(arc) for arc in arcs)


def _name(data: bytes, start: int, end: int) -> x509.Name:
    rdns = []
    for _, rdn_start, rdn_end in _children(data, start, end):
        attributes = []
        for _, attr_start, attr_end in _children(data, rdn_start, rdn_end):
            (_, oid_start, oid_end), (value_tag, value_start, value_end) = _children(data, attr_start, attr_end)[:2]
            codec = _STRING_CODECS.get(value_tag, "utf-8")
            attributes.append(x509.NameAttribute(
                x509.ObjectIdentifier(_oid(data[oid_start:oid_end])),
                data[value_start:value_end].decode(codec, errors="replace"),
            ))
        rdns.append(x509.RelativeDistinguishedName(attributes))
    return x509.Name(rdns)


def enveloped_recipients(data: bytes) -> Optional[List[RecipientId]]:
    """
    List issuer and serial number of every key transport recipient.

    Returns None when the structure cannot be read with this minimal
    parser (BER indefinite lengths, unexpected layout).
    """
    try:
        tag, start, end = _read(data, 0)
        if tag != _SEQUENCE:
            return None
        content_info = _children(data, start, end)
        explicit = next(child for child in content_info if child[0] == _CONTEXT_0)
        _, enveloped_start, enveloped_end = _read(data, explicit[1])
        enveloped = _children(data, enveloped_start, enveloped_end)
        recipient_set = next(child for child in enveloped if child[0] == _SET)

        recipients = []
        for info_tag, info_start, info_end in _children(data, recipient_set[1], recipient_set[2]):
            if info_tag != _SEQUENCE:
                continue
            rid_tag, rid_start, rid_end = _children(data, info_start, info_end)[1]
            if rid_tag != _SEQUENCE:
                continue
            (_, name_start, name_end), (_, serial_start, serial_end) = _children(data, rid_start, rid_end)[:2]
            serial = int.from_bytes(data[serial_start:serial_end], "big", signed=True)
            recipients.append((_name(data, name_start, name_end), serial))
        return recipients
    except (ValueError, IndexError, StopIteration):
        return None
