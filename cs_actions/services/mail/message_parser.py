"""Extraction of subject, attachment names and bodies from MIME messages."""

import re
from email.header import decode_header, make_header
from email.message import Message
from typing import Callable, Dict, List, Optional

from ...exceptions import MailError

TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"
MULTIPART_MIXED = "multipart/mixed"
MULTIPART_RELATED = "multipart/related"
MULTIPART_ALTERNATIVE = "multipart/alternative"
ENCRYPTED_CONTENT_TYPES = ("application/pkcs7-mime", "application/x-pkcs7-mime")

EXCEPTION_INVALID_ENCODING = "The given encoding ({}) is invalid or not supported."
DEFAULT_CHARSET = "utf-8"

# =?charset? prefix of an RFC 2047 encoded word
_CHARSET_TAG = re.compile(r"=\?[^\(\)<>@,;:/\[\]\?\.= ]+\?")
_FOLDING = re.compile(r"\r?\n(?=[ \t])")

Decryptor = Callable[[Message], Message]


def change_header_charset(header: str, charset: str) -> str:
    """Replace the charset of every encoded word in a header with the given one."""
    return _CHARSET_TAG.sub(lambda _: f"=?{charset}?", header)


def decode_text(value: Optional[str], character_set: Optional[str] = None) -> str:
    """Decode RFC 2047 encoded words, leaving plain text untouched."""
    if not value:
        return ""
    if "=?" not in value:
        return value
    try:
        return str(make_header(decode_header(value)))
    except LookupError as e:
        raise MailError(EXCEPTION_INVALID_ENCODING.format(character_set or e))


def convert_message(text: str) -> str:
    """Turn new lines of an HTML body into <br> tags."""
    return text.replace("\n", "<br>")


def has_disposition(part: Message) -> bool:
    return part.get("Content-Disposition") is not None


def is_encrypted(part: Message) -> bool:
    if part.get_content_type() not in ENCRYPTED_CONTENT_TYPES:
        return False
    smime_type = part.get_param("smime-type")
    return smime_type is None or str(smime_type).lower() == "enveloped-data"


class MessageParser:
    """
    Reads the parts of one message.

    ``character_set`` forces the charset used for encoded words and text
    bodies. ``decryptor`` turns an S/MIME enveloped part into the MIME
    entity it wraps; without it encrypted parts are read as they are.
    """

    def __init__(self, character_set: Optional[str] = None, decryptor: Optional[Decryptor] = None):
        self.character_set = character_set
        self.decryptor = decryptor

    def _maybe_decrypt(self, part: Message) -> Message:
        if self.decryptor is not None and is_encrypted(part):
            return self.decryptor(part)
        return part

    def _header(self, value: Optional[str]) -> str:
        if not value:
            return ""
        value = _FOLDING.sub("", str(value))
        if self.character_set:
            value = change_header_charset(value, self.character_set)
        return value

    def subject(self, message: Message) -> str:
        return decode_text(self._header(message.get("Subject")), self.character_set)

    def attached_file_names(self, message: Message) -> str:
        """Comma separated, decoded names of every attached file."""
        names = [decode_text(self._header(name), self.character_set) for name in self._file_names(message)]
        return ",".join(names)

    def _file_names(self, part: Message) -> List[str]:
        part = self._maybe_decrypt(part)
        if part.is_multipart():
            names = []
            for sub_part in part.get_payload():
                names.extend(self._file_names(sub_part))
            return names

        file_name = part.get_filename()
        if not file_name:
            return []
        if "?" not in file_name:
            return [file_name]
        # keep only the encoded words
        start = file_name.find("=?")
        end = file_name.rfind("?=")
        if start == -1 or end == -1:
            return [file_name]
        return [file_name[start:end + 2]]

    def text(self, part: Message) -> str:
        """Decoded payload of a non multipart part."""
        payload = part.get_payload(decode=True) or b""
        charset = self.character_set or part.get_content_charset() or DEFAULT_CHARSET
        try:
            return payload.decode(charset, errors="replace")
        except LookupError:
            raise MailError(EXCEPTION_INVALID_ENCODING.format(charset))

    def bodies_by_content_type(self, message: Message) -> Dict[str, str]:
        """
        Collect the text bodies of a message keyed by content type.

        Parts with a Content-Disposition header are attachments or inline
        resources and are skipped.
        """
        message = self._maybe_decrypt(message)
        content_type = message.get_content_type()

        if content_type == TEXT_PLAIN:
            return {TEXT_PLAIN: self.text(message)}
        if content_type == TEXT_HTML:
            return {TEXT_HTML: convert_message(self.text(message))}
        if content_type in (MULTIPART_MIXED, MULTIPART_RELATED):
            return {MULTIPART_MIXED: self._mixed_content(message) or ""}
        if not message.is_multipart():
            return {}

        bodies: Dict[str, str] = {}
        for part in message.get_payload():
            part = self._maybe_decrypt(part)
            if has_disposition(part):
                continue
            if part.is_multipart():
                for sub_part in part.get_payload():
                    if sub_part.get_content_maintype() == "text":
                        bodies[sub_part.get_content_type()] = self.text(sub_part)
            else:
                bodies[part.get_content_type()] = self.text(part)
        return bodies

    def _mixed_content(self, message: Message) -> Optional[str]:
        for part in message.get_payload():
            part = self._maybe_decrypt(part)
            if has_disposition(part):
                continue
            content_type = part.get_content_type()
            if content_type == MULTIPART_RELATED:
                content = self._related_content(part)
                if content is not None:
                    return content
            if content_type == MULTIPART_ALTERNATIVE:
                return self._alternative_content(part)
            if content_type in (TEXT_PLAIN, TEXT_HTML):
                return self.text(part)
        return None

    def _related_content(self, part: Message) -> Optional[str]:
        for related in part.get_payload():
            if not has_disposition(related) and related.get_content_type() == MULTIPART_ALTERNATIVE:
                return self._alternative_content(related)
        return None

    def _alternative_content(self, part: Message) -> str:
        # the last alternative is the richest one
        content = ""
        for alternative in part.get_payload():
            if not has_disposition(alternative) and not alternative.is_multipart():
                content = self.text(alternative)
        return content

    def body(self, message: Message) -> Dict[str, str]:
        """The ``body`` (last body found) and ``plainTextBody`` outputs."""
        bodies = self.bodies_by_content_type(message)
        last_body = list(bodies.values())[-1] if bodies else ""
        return {
            "body": decode_text(last_body, self.character_set),
            "plainTextBody": decode_text(bodies.get(TEXT_PLAIN, ""), self.character_set),
        }

    def raw(self, raw_message: bytes) -> str:
        """The full message source with NUL characters removed."""
        charset = self.character_set or DEFAULT_CHARSET
        try:
            text = raw_message.decode(charset, errors="replace")
        except LookupError:
            raise MailError(EXCEPTION_INVALID_ENCODING.format(charset))
        return text.replace("\x00", "")
