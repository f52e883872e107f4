class BuffStreamError(Exception):
    """Base class for every error raised by the codec."""


class BufferTooSmall(BuffStreamError):
    """
    The next message does not fit in the buffer handed to `Reader.read`.

    This error is recoverable: the header stays cached in the Reader and
    no payload byte has been consumed. Call `read` again with a buffer of
    at least `required` bytes.
    """
    def __init__(self, required: int, capacity: int) -> None:
        super().__init__(
            f"Read buffer too small: message needs {required} bytes, "
            f"buffer holds {capacity}"
        )
        self.required = required
        self.capacity = capacity


class MessageTooLarge(BuffStreamError):
    """
    The pending message exceeds the size the caller is willing to allocate.

    Like BufferTooSmall, the header stays cached and the stream is intact.
    """
    def __init__(self, length: int, max_size: int) -> None:
        super().__init__(
            f"Message of {length} bytes exceeds max size of {max_size} bytes"
        )
        self.length = length
        self.max_size = max_size


class EndOfStream(BuffStreamError, EOFError):
    """The stream ended cleanly, right before a message header."""


class FramingError(BuffStreamError):
    """
    The stream no longer carries well-formed frames.

    There is no resynchronization: the connection should be dropped.
    """


class MalformedVarint(FramingError):
    pass


class MalformedHeader(FramingError):
    pass


class TruncatedMessage(FramingError):
    """The stream ended after a header, before the full message arrived."""
    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            f"Stream ended after {received} of {expected} bytes"
        )
        self.expected = expected
        self.received = received


class ShortWrite(BuffStreamError):
    """The sink accepted fewer bytes than requested without raising."""
    def __init__(self, expected: int, written: int) -> None:
        super().__init__(f"Short write: {written} of {expected} bytes")
        self.expected = expected
        self.written = written
