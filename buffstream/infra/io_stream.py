import io
import logging
import socket
from typing import Any

from buffstream.core.errors import ShortWrite
from buffstream.core.models.config import StreamConfig
from buffstream.core.ports.serializer import Serializer
from buffstream.core.ports.stream import ByteSink, ByteSource
from buffstream.core.stream.channel import Channel
from buffstream.core.stream.reader import Reader
from buffstream.core.stream.writer import Writer

logger = logging.getLogger("infra.io_stream")


class FullWriteSink:
    """
    Adapts a raw stream, whose `write` may accept only part of the data,
    to the write-fully-or-fail contract expected by the Writer.

    Partial writes are retried with the remainder until every byte has
    been accepted. A raw stream in non-blocking mode that cannot make
    progress (write returns None or 0) raises ShortWrite instead of
    spinning.
    """
    def __init__(self, raw: Any) -> None:
        self._raw = raw

    def write(self, data: bytes | memoryview) -> int:
        view = memoryview(data).cast("B")
        total = view.nbytes
        written = 0
        while written < total:
            n = self._raw.write(view[written:])
            if not n:
                raise ShortWrite(total, written)
            written += n
            if written < total:
                logger.debug(f"Partial write of {n} bytes, {total - written} remaining")
        return total

    def flush(self) -> None:
        flush = getattr(self._raw, "flush", None)
        if flush is not None:
            flush()

    def close(self) -> None:
        self._raw.close()


class SocketSink:
    """Writes to a connected socket with `sendall`, which never short-writes."""
    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    def write(self, data: bytes | memoryview) -> int:
        self._sock.sendall(data)
        return memoryview(data).nbytes

    def close(self) -> None:
        self._sock.close()


def as_source(obj: Any) -> ByteSource:
    """
    Return a ByteSource reading from `obj`.

    Sockets are read through a buffered file object, raw unbuffered
    streams are wrapped in io.BufferedReader so the one-byte header reads
    do not each turn into a system call. Buffered binary streams are used
    as they are.
    """
    if isinstance(obj, socket.socket):
        return obj.makefile("rb")
    if isinstance(obj, io.RawIOBase):
        return io.BufferedReader(obj)
    if isinstance(obj, io.TextIOBase):
        raise TypeError("A binary stream is required, got a text stream")
    if not hasattr(obj, "read") or not hasattr(obj, "readinto"):
        raise TypeError(f"Cannot read bytes from {type(obj).__name__}")
    return obj


def as_sink(obj: Any) -> ByteSink:
    """
    Return a ByteSink writing to `obj` with write-fully-or-fail semantics.
    """
    if isinstance(obj, socket.socket):
        return SocketSink(obj)
    if isinstance(obj, io.RawIOBase):
        return FullWriteSink(obj)
    if isinstance(obj, io.TextIOBase):
        raise TypeError("A binary stream is required, got a text stream")
    if not hasattr(obj, "write"):
        raise TypeError(f"Cannot write bytes to {type(obj).__name__}")
    return obj


def open_reader(obj: Any, config: StreamConfig | None = None) -> Reader:
    config = config or StreamConfig()
    return Reader(as_source(obj), buffer_size=config.read_buffer_size)


def open_writer(obj: Any) -> Writer:
    return Writer(as_sink(obj))


def open_channel(
    sock: socket.socket,
    serializer: Serializer,
    config: StreamConfig | None = None,
) -> Channel:
    """
    Build a Channel over a connected socket.

    Reads go through a buffered file object, writes use `sendall`.
    Closing the Channel closes both and the socket itself.
    """
    config = config or StreamConfig()
    rfile = sock.makefile("rb")

    def close() -> None:
        # shutdown first: it unblocks a thread waiting in rfile.read()
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected
            pass
        try:
            rfile.close()
        finally:
            sock.close()

    return Channel(
        reader=Reader(rfile, buffer_size=config.read_buffer_size),
        writer=Writer(SocketSink(sock)),
        serializer=serializer,
        max_message_size=config.max_message_size,
        on_close=close,
    )
