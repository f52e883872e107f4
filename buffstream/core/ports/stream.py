from typing import Protocol


class ByteSource(Protocol):
    """
    Defines the input side of a byte stream as seen by the Reader.

    Any blocking binary file object satisfies it (io.BufferedReader,
    io.BytesIO, socket.makefile("rb")). Implementations must:
    - block until data is available
    - return fewer bytes than requested only at end of data
    - raise OSError (or a subclass) on transport failure
    """

    def read(self, size: int, /) -> bytes:
        """Read up to `size` bytes; an empty result means end of data."""

    def readinto(self, buffer: memoryview, /) -> int | None:
        """Fill `buffer` from the stream and return the number of bytes read."""


class ByteSink(Protocol):
    """
    Defines the output side of a byte stream as seen by the Writer.

    A write either transfers every byte or raises. Transports that may
    legitimately accept part of a write must be wrapped in an adapter
    that retries until complete (see buffstream.infra.io_stream).
    """

    def write(self, data: bytes | memoryview, /) -> int | None:
        """Write `data` and return the number of bytes accepted."""
