"""Tests for the Get Mail Message and Get Mail Message Count actions."""

from typing import Dict, List
from unittest.mock import MagicMock

import pytest

from cs_actions.models.enums import ResponseName
from cs_actions.operations.mail.get_mail_message import GetMailMessageOperation
from cs_actions.operations.mail.get_mail_message_count import GetMailMessageCountOperation
from cs_actions.services.mail import MailReader
from cs_actions.services.mail.store import ImapStore, MailStore

MESSAGE = (
    b"From: alice@example.com\r\n"
    b"To: bob@example.com\r\n"
    b"Subject: Lunch\r\n"
    b"MIME-Version: 1.0\r\n"
    b"Content-Type: multipart/mixed; boundary=\"B\"\r\n"
    b"\r\n"
    b"--B\r\n"
    b"Content-Type: text/plain; charset=\"utf-8\"\r\n"
    b"\r\n"
    b"Noon at the usual place?\r\n"
    b"--B\r\n"
    b"Content-Type: text/plain\r\n"
    b"Content-Disposition: attachment; filename=\"menu.txt\"\r\n"
    b"\r\n"
    b"soup\r\n"
    b"--B--\r\n"
)


class FakeStore(MailStore):
    """In-memory folder recording what the reader does with it."""

    def __init__(self, folders: Dict[str, List[bytes]]):
        super().__init__(client=None)
        self.folders = folders
        self.folder = None
        self.seen: List[int] = []
        self.deleted: List[int] = []
        self.closed = False
        self.aborted = False

    def open_folder(self, folder: str) -> int:
        self.folder = folder
        return len(self.folders[folder])

    def fetch(self, number: int) -> bytes:
        return self.folders[self.folder][number - 1]

    def mark_seen(self, number: int) -> None:
        self.seen.append(number)

    def mark_deleted(self, number: int) -> None:
        self.deleted.append(number)

    def close(self) -> None:
        self.closed = True

    def abort(self) -> None:
        self.aborted = True


@pytest.fixture
def store():
    return FakeStore({"INBOX": [MESSAGE]})


@pytest.fixture
def reader(store):
    return MailReader(store_opener=lambda connection: store)


@pytest.fixture
def inputs():
    return {
        "hostname": "imap.example.com",
        "port": "143",
        "username": "bob",
        "password": "pw",
        "folder": "INBOX",
        "messageNumber": "1",
    }


class TestGetMailMessage:
    """Test reading a message through a fake store"""

    def test_full_message(self, reader, store, inputs):
        result = GetMailMessageOperation(reader=reader).run(inputs)

        assert result.response is ResponseName.SUCCESS
        outputs = result.outputs
        assert outputs["subject"] == "Lunch"
        assert outputs["attachedFileNames"] == "menu.txt"
        # multipart/mixed bodies are reported under body only
        assert outputs["plainTextBody"] == ""
        assert outputs["body"].strip() == "Noon at the usual place?"
        assert outputs["returnResult"] == MESSAGE.decode("utf-8")
        assert store.seen == []
        assert store.deleted == []
        assert store.closed

    def test_subject_only(self, reader, inputs):
        result = GetMailMessageOperation(reader=reader).run({**inputs, "subjectOnly": "true"})

        assert result.outputs["returnResult"] == "Lunch"
        assert result.outputs["subject"] == "Lunch"
        assert "body" not in result.outputs

    def test_mark_read_and_delete(self, reader, store, inputs):
        GetMailMessageOperation(reader=reader).run(
            {**inputs, "markMessageAsRead": "true", "deleteUponRetrieval": "true"}
        )

        assert store.seen == [1]
        assert store.deleted == [1]
        assert store.closed

    def test_failed_read_keeps_message(self, reader, store, inputs):
        result = GetMailMessageOperation(reader=reader).run({
            **inputs, "characterSet": "no-such-charset",
            "markMessageAsRead": "true", "deleteUponRetrieval": "true",
        })

        assert result.response is ResponseName.FAILURE
        assert result.outputs["returnResult"] == "The given encoding (no-such-charset) is invalid or not supported."
        assert store.seen == []
        assert store.deleted == []
        assert store.aborted
        assert not store.closed

    def test_failed_read_does_not_expunge_imap_folder(self, inputs):
        client = MagicMock()
        client.select.return_value = ("OK", [b"1"])
        client.fetch.return_value = ("OK", [(b"1 (BODY[] {%d}" % len(MESSAGE), MESSAGE), b")"])
        reader = MailReader(store_opener=lambda connection: ImapStore(client))

        result = GetMailMessageOperation(reader=reader).run(
            {**inputs, "characterSet": "no-such-charset", "deleteUponRetrieval": "true"}
        )

        assert result.response is ResponseName.FAILURE
        client.store.assert_not_called()
        client.close.assert_not_called()
        client.logout.assert_called_once()

    def test_message_number_too_high(self, reader, store, inputs):
        result = GetMailMessageOperation(reader=reader).run({**inputs, "messageNumber": "4"})

        assert result.response is ResponseName.FAILURE
        assert result.outputs["returnResult"] == "message value was: 4 there are only 1 messages in folder"
        assert store.aborted
        assert not store.closed

    def test_invalid_message_number_does_not_connect(self, inputs):
        opened = []
        reader = MailReader(store_opener=opened.append)

        result = GetMailMessageOperation(reader=reader).run({**inputs, "messageNumber": "0"})

        assert result.response is ResponseName.FAILURE
        assert opened == []

    def test_decryption_key_is_loaded(self, store, inputs):
        loaded = []

        def key_loader(settings):
            loaded.append(settings)
            return object()

        reader = MailReader(store_opener=lambda connection: store, key_loader=key_loader)
        result = GetMailMessageOperation(reader=reader).run({
            **inputs, "decryptionKeystore": "/keys/bob.p12", "decryptionKeystorePassword": "changeit",
        })

        # the message is not encrypted so the key is never used
        assert result.response is ResponseName.SUCCESS
        assert loaded[0].keystore == "/keys/bob.p12"
        assert loaded[0].password == "changeit"


class TestGetMailMessageCount:
    def test_count(self, inputs):
        store = FakeStore({"INBOX": [MESSAGE, MESSAGE, MESSAGE]})
        operation = GetMailMessageCountOperation(reader=MailReader(store_opener=lambda connection: store))

        result = operation.run(inputs)

        assert result.response is ResponseName.SUCCESS
        assert result.outputs["returnResult"] == "3"
        assert store.closed

    def test_missing_protocol_and_port(self, inputs):
        operation = GetMailMessageCountOperation(reader=MailReader(store_opener=lambda connection: None))

        result = operation.run({**inputs, "port": ""})

        assert result.outputs["returnResult"] == "Please specify the port, the protocol, or both."
