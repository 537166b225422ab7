"""Tests for the mail input models."""

import pytest

from cs_actions.exceptions import ValidationError
from cs_actions.models.enums import MailProtocol
from cs_actions.models.mail import (
    MESSAGES_ARE_NUMBERED_STARTING_AT_1,
    SPECIFY_PORT_FOR_PROTOCOL,
    SPECIFY_PORT_OR_PROTOCOL_OR_BOTH,
    SPECIFY_PROTOCOL_FOR_GIVEN_PORT,
    TIMEOUT_MUST_BE_POSITIVE,
    GetMailMessageInput,
    MailConnectionInput,
    SendMailInput,
    resolve_protocol_and_port,
)

STORE_INPUTS = {"hostname": "mail.example.com", "username": "alice", "password": "pw", "folder": "INBOX"}


class TestProtocolAndPort:
    @pytest.mark.parametrize("protocol, port, expected", [
        (None, "143", (MailProtocol.IMAP, 143)),
        (None, "110", (MailProtocol.POP3, 110)),
        ("imap", None, (MailProtocol.IMAP, 143)),
        ("IMAP4", None, (MailProtocol.IMAP, 143)),
        ("pop3", None, (MailProtocol.POP3, 110)),
        ("imap", "993", (MailProtocol.IMAP, 993)),
        ("pop3", "995", (MailProtocol.POP3, 995)),
    ])
    def test_resolves(self, protocol, port, expected):
        assert resolve_protocol_and_port(protocol, port) == expected

    @pytest.mark.parametrize("protocol, port, message", [
        (None, None, SPECIFY_PORT_OR_PROTOCOL_OR_BOTH),
        ("", " ", SPECIFY_PORT_OR_PROTOCOL_OR_BOTH),
        (None, "993", SPECIFY_PROTOCOL_FOR_GIVEN_PORT),
        ("smtp", None, SPECIFY_PORT_FOR_PROTOCOL),
    ])
    def test_ambiguous(self, protocol, port, message):
        with pytest.raises(ValidationError) as exc_info:
            resolve_protocol_and_port(protocol, port)
        assert exc_info.value.message == message

    def test_unknown_protocol_with_port(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve_protocol_and_port("smtp", "25")
        assert "imap, imap4, pop3" in exc_info.value.message


class TestMailConnectionInput:
    def test_defaults(self):
        connection = MailConnectionInput.from_inputs({**STORE_INPUTS, "port": "143"})

        assert connection.protocol is MailProtocol.IMAP
        assert connection.tls.trust_all_roots is True
        assert connection.enable_ssl is False
        assert connection.timeout is None
        assert connection.proxy is None

    def test_trust_all_roots_only_false_disables(self):
        connection = MailConnectionInput.from_inputs({**STORE_INPUTS, "port": "143", "trustAllRoots": "FALSE"})
        assert connection.tls.trust_all_roots is False

    def test_proxy(self):
        connection = MailConnectionInput.from_inputs({
            **STORE_INPUTS, "protocol": "pop3", "proxyHost": "proxy.local", "proxyPort": "3128",
        })
        assert connection.proxy.host == "proxy.local"
        assert connection.proxy.port == 3128

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError) as exc_info:
            MailConnectionInput.from_inputs({**STORE_INPUTS, "port": "143", "timeout": "0"})
        assert exc_info.value.message == TIMEOUT_MUST_BE_POSITIVE

    def test_missing_folder(self):
        with pytest.raises(ValidationError) as exc_info:
            MailConnectionInput.from_inputs({**STORE_INPUTS, "port": "143", "folder": ""})
        assert exc_info.value.field == "folder"


class TestGetMailMessageInput:
    def test_message_number_starts_at_one(self):
        with pytest.raises(ValidationError) as exc_info:
            GetMailMessageInput.from_inputs({**STORE_INPUTS, "port": "143", "messageNumber": "0"})
        assert exc_info.value.message == MESSAGES_ARE_NUMBERED_STARTING_AT_1

    def test_decryption_settings(self):
        request = GetMailMessageInput.from_inputs({
            **STORE_INPUTS,
            "port": "143",
            "messageNumber": "2",
            "decryptionKeystore": "/keys/alice.p12",
            "decryptionKeyAlias": "alice",
            "decryptionKeystorePassword": "changeit",
        })

        assert request.message_number == 2
        assert request.decryption.keystore == "/keys/alice.p12"
        assert request.decryption.alias == "alice"
        assert request.decryption.verify_certificate is False

    def test_no_decryption_without_keystore(self):
        request = GetMailMessageInput.from_inputs({**STORE_INPUTS, "port": "143", "messageNumber": "1"})
        assert request.decryption is None


class TestSendMailInput:
    def test_custom_delimiter(self):
        request = SendMailInput.from_inputs({
            "hostname": "smtp.example.com",
            "from": "alice@example.com",
            "to": "bob@example.com; carol@example.com",
            "cc": "dave@example.com",
            "delimiter": ";",
        })

        assert request.to == ["bob@example.com", "carol@example.com"]
        assert request.cc == ["dave@example.com"]
        assert request.port == 25
        assert request.html_email is True
        assert request.content_transfer_encoding == "base64"

    def test_recipient_required(self):
        with pytest.raises(ValidationError) as exc_info:
            SendMailInput.from_inputs({"hostname": "smtp.example.com", "from": "alice@example.com", "to": " , "})
        assert exc_info.value.field == "to"

    def test_invalid_transfer_encoding(self):
        with pytest.raises(ValidationError):
            SendMailInput.from_inputs({
                "hostname": "smtp.example.com", "from": "a@example.com", "to": "b@example.com",
                "contentTransferEncoding": "uuencode",
            })
