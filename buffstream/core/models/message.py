from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Message:
    """
    A single typed frame exchanged over a byte stream.
    The codec never interprets `type` or `payload`; both are carried
    unchanged from the Writer to the Reader.
    """
    type: int
    """
    Caller-defined kind of payload, any signed 64-bit integer.
    """

    payload: bytes = b""
    """
    Raw message body.
    """

    @property
    def length(self) -> int:
        return len(self.payload)

    def to_dict(self) -> dict[str, int | bytes]:
        """Return a plain dictionary representation of the message."""
        return {"type": self.type, "length": self.length, "payload": self.payload}


@dataclass(frozen=True)
class Idle:
    """Reader state: no header is pending."""


@dataclass(frozen=True)
class HeaderCached:
    """
    Reader state: a header has been consumed from the stream but its
    payload has not been delivered yet because the caller's buffer was
    too small.
    """
    type: int
    length: int


ReaderState = Idle | HeaderCached

IDLE = Idle()


ReceiveMessage = Callable[[], Message | None]
"""
Callable provided to an application for receiving a message.
It blocks until a message is available and returns None once the peer
has closed its side of the stream.
"""


SendMessage = Callable[[Message], None]
"""
Callable provided to an application for sending a message to the peer.
"""
