import logging
from typing import List, Tuple

from .common_structures import MessageType

_MESSAGE_TYPES = (
    (logging.ERROR, MessageType.ERROR),
    (logging.WARNING, MessageType.WARNING),
    (logging.INFO, MessageType.INFO),
)


class LspLoggingHandler(logging.Handler):
    """
    Collects log records as `(message, MessageType)` pairs, to be forwarded to the peer as `window/logMessage`.
    """

    def __init__(
        self, buffer: List[Tuple[str, MessageType]], level: int = logging.NOTSET
    ):
        super().__init__(level)
        self.buffer = buffer
        self.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    @staticmethod
    def message_type(levelno: int) -> MessageType:
        for threshold, message_type in _MESSAGE_TYPES:
            if levelno >= threshold:
                return message_type
        return MessageType.LOG

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.buffer.append((self.format(record), self.message_type(record.levelno)))
        except Exception:
            self.handleError(record)
