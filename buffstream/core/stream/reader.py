from collections.abc import Iterator

from buffstream.core.codec.varint import decode_varint
from buffstream.core.errors import (
    BufferTooSmall,
    EndOfStream,
    MalformedHeader,
    MessageTooLarge,
    TruncatedMessage,
)
from buffstream.core.models.message import IDLE, HeaderCached, Message, ReaderState
from buffstream.core.ports.stream import ByteSource


class Reader:
    """
    Recovers messages, one per call, from a byte source.

    The Reader is a two-state machine. In the Idle state the next call
    decodes a `(length, type)` header from the stream. When that header
    announces more bytes than the caller's buffer can hold, the Reader
    keeps it in a single-slot cache (the HeaderCached state) and raises
    BufferTooSmall without touching the payload. Later calls work from
    the cached header, so a header is never read twice from the stream,
    until a large enough buffer is supplied and the payload is read in
    full.

    The Reader owns its source: nothing else may read from the same
    stream, and `read` must not be called concurrently on one instance.
    Either mistake corrupts message boundaries without raising.
    """
    def __init__(self, source: ByteSource, buffer_size: int = 4096) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")

        self._source = source
        self._state: ReaderState = IDLE
        self._buffer = bytearray(buffer_size)

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def pending(self) -> HeaderCached | None:
        """The header waiting for a larger buffer, if any."""
        if isinstance(self._state, HeaderCached):
            return self._state
        return None

    def read(self, buffer: bytearray | memoryview) -> tuple[int, int]:
        """
        Read the next message into `buffer` and return `(type, length)`.

        On success the payload occupies `buffer[:length]`. Raises
        EndOfStream when the stream ends cleanly before a header,
        BufferTooSmall when the message does not fit (retry with a bigger
        buffer), and a FramingError subclass when the stream is corrupt
        or truncated. Errors from the source propagate unchanged.
        """
        # views are released on exit so the caller may resize `buffer`
        # while handling BufferTooSmall
        with memoryview(buffer) as raw, raw.cast("B") as view:
            if view.readonly:
                raise TypeError("read() requires a writable buffer")
            capacity = view.nbytes

            state = self._state
            if isinstance(state, HeaderCached):
                msg_type, length = state.type, state.length
                self._state = IDLE
            else:
                msg_type, length = self._read_header()

            if length > capacity:
                self._state = HeaderCached(type=msg_type, length=length)
                raise BufferTooSmall(required=length, capacity=capacity)

            with view[:length] as target:
                self._read_payload(target)

        return msg_type, length

    def read_message(self, max_size: int | None = None) -> Message:
        """
        Read the next message into a freshly sized Message.

        The internal buffer grows to fit the pending message. When
        `max_size` is given and the message is bigger, MessageTooLarge is
        raised and the header stays cached, like BufferTooSmall.
        """
        while True:
            pending = self.pending
            if pending is not None and max_size is not None and pending.length > max_size:
                raise MessageTooLarge(pending.length, max_size)

            limit = len(self._buffer) if max_size is None else min(len(self._buffer), max_size)
            try:
                with memoryview(self._buffer) as whole, whole[:limit] as target:
                    msg_type, length = self.read(target)
            except BufferTooSmall as ex:
                if max_size is not None and ex.required > max_size:
                    raise MessageTooLarge(ex.required, max_size) from ex
                self._buffer = bytearray(ex.required)
                continue

            return Message(type=msg_type, payload=bytes(self._buffer[:length]))

    def __iter__(self) -> Iterator[Message]:
        while True:
            try:
                yield self.read_message()
            except EndOfStream:
                return

    def _read_header(self) -> tuple[int, int]:
        length = decode_varint(self._source)
        try:
            msg_type = decode_varint(self._source)
        except EndOfStream as ex:
            raise TruncatedMessage(expected=length, received=0) from ex

        if length < 0:
            raise MalformedHeader(f"Negative message length: {length}")

        return msg_type, length

    def _read_payload(self, view: memoryview) -> None:
        expected = view.nbytes
        received = 0
        while received < expected:
            n = self._source.readinto(view[received:])
            if not n:
                raise TruncatedMessage(expected=expected, received=received)
            received += n
