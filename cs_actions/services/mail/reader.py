"""Reading messages from IMAP and POP3 mail stores."""

import email
import imaplib
import poplib
from typing import Callable, Dict

import structlog

from ...models.mail import DecryptionSettings, GetMailMessageInput, MailConnectionInput
from ...utils import results
from .message_parser import MessageParser
from .smime import DecryptionKey, SmimeDecryptor, load_decryption_key
from .store import MailStore, open_store

logger = structlog.get_logger(__name__)

SUBJECT = "subject"
ATTACHED_FILE_NAMES = "attachedFileNames"
BODY = "body"
PLAIN_TEXT_BODY = "plainTextBody"


class MailReader:
    """Service behind the Get Mail Message and Get Mail Message Count actions."""

    def __init__(self,
                 store_opener: Callable[[MailConnectionInput], MailStore] = open_store,
                 key_loader: Callable[[DecryptionSettings], DecryptionKey] = load_decryption_key):
        self._open_store = store_opener
        self._load_key = key_loader

    def get_message(self, request: GetMailMessageInput) -> Dict[str, str]:
        """
        Fetch one message and map it to the action outputs.

        The message is only flagged once its outputs are built, and pending
        deletions are dropped when reading fails.
        """
        number = request.message_number
        store = self._open_store(request.connection)
        try:
            count = store.open_folder(request.connection.folder)
            store.check_message_number(number, count)
            raw_message = store.fetch(number)
            logger.info("Fetched mail message", folder=request.connection.folder, number=number,
                        size=len(raw_message))

            outputs = self._read(request, raw_message)

            if request.delete_upon_retrieval:
                store.mark_deleted(number)
            if request.mark_as_read:
                store.mark_seen(number)
        except Exception:
            _abort(store)
            raise
        _close(store)
        return outputs

    def _read(self, request: GetMailMessageInput, raw_message: bytes) -> Dict[str, str]:
        decryptor = None
        if request.decryption is not None:
            decryptor = SmimeDecryptor(self._load_key(request.decryption))

        message = email.message_from_bytes(raw_message)
        parser = MessageParser(request.character_set, decryptor)
        subject = parser.subject(message)
        if request.subject_only:
            return results.success(subject, **{SUBJECT: subject})

        bodies = parser.body(message)
        return results.success(
            parser.raw(raw_message),
            **{
                SUBJECT: subject,
                ATTACHED_FILE_NAMES: parser.attached_file_names(message),
                BODY: bodies[BODY],
                PLAIN_TEXT_BODY: bodies[PLAIN_TEXT_BODY],
            },
        )

    def get_message_count(self, connection: MailConnectionInput) -> Dict[str, str]:
        store = self._open_store(connection)
        try:
            count = store.open_folder(connection.folder)
        finally:
            _close(store)
        logger.info("Counted mail messages", folder=connection.folder, count=count)
        return results.success(str(count))


def _close(store: MailStore) -> None:
    try:
        store.close()
    except (OSError, imaplib.IMAP4.error, poplib.error_proto) as e:
        logger.warning("Error while closing mail store", error=str(e))


def _abort(store: MailStore) -> None:
    try:
        store.abort()
    except (OSError, imaplib.IMAP4.error, poplib.error_proto) as e:
        logger.warning("Error while aborting mail store", error=str(e))
