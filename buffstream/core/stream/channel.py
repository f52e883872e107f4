import logging
from collections.abc import Callable
from typing import Any

from buffstream.core.errors import EndOfStream
from buffstream.core.models.message import Message
from buffstream.core.ports.serializer import Serializer
from buffstream.core.stream.reader import Reader
from buffstream.core.stream.writer import Writer


class Channel:
    """
    One end of a duplex message stream.

    A Channel pairs a Reader on the incoming direction with a Writer on
    the outgoing direction of the same connection. The two halves share
    no state, so one thread may block in `recv()` while another thread
    calls `send()`. Each half on its own keeps the single-consumer /
    single-producer rule of Reader and Writer: two threads receiving (or
    two threads sending) on one Channel corrupt the stream.

    Payload objects go through the configured Serializer; `send_raw` and
    `recv_raw` bypass it.
    """
    def __init__(
        self,
        reader: Reader,
        writer: Writer,
        serializer: Serializer,
        max_message_size: int | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self._serializer = serializer
        self._max_message_size = max_message_size
        self._on_close = on_close
        self._closed = False
        self._logger = logging.getLogger("core.stream.channel")

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, msg_type: int, obj: Any) -> int:
        return self.send_raw(msg_type, self._serializer.serialize(obj))

    def send_raw(self, msg_type: int, payload: bytes) -> int:
        written = self.writer.write(msg_type, payload)
        self.writer.flush()
        return written

    def send_message(self, message: Message) -> None:
        self.send_raw(message.type, message.payload)

    def recv(self) -> tuple[int, Any]:
        message = self.recv_raw()
        return message.type, self._serializer.deserialize(message.payload)

    def recv_raw(self) -> Message:
        return self.reader.read_message(max_size=self._max_message_size)

    def receive_or_none(self) -> Message | None:
        """Like recv_raw(), but returns None when the peer closed cleanly."""
        try:
            return self.recv_raw()
        except EndOfStream:
            self._logger.debug("Peer closed the stream")
            return None

    def close(self) -> None:
        if self._closed:
            return

        self._closed = True
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
