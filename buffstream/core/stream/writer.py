from buffstream.core.codec.varint import MAX_VARINT_LEN, put_varint, check_int64
from buffstream.core.errors import ShortWrite
from buffstream.core.models.message import Message
from buffstream.core.ports.stream import ByteSink


class Writer:
    """
    Serializes one message at a time onto a byte sink.

    Each message goes out as three full writes, in this order:

        [length: varint][type: varint][payload]

    The Writer does no buffering of its own; wrap the sink in a buffered
    stream if fewer system calls are wanted, and call `flush()` when the
    messages must leave. A failing write aborts the message and may leave
    a partial frame on the stream, after which the stream must be
    considered broken.

    The Writer is not reentrant: the header scratch buffers and the
    three-step sequence assume a single producer. Concurrent `write`
    calls on one instance interleave frames silently.
    """
    def __init__(self, sink: ByteSink) -> None:
        self._sink = sink
        self._len_buf = bytearray(MAX_VARINT_LEN)
        self._type_buf = bytearray(MAX_VARINT_LEN)

    def write(self, msg_type: int, payload: bytes | bytearray | memoryview) -> int:
        """
        Write one message and return the number of bytes put on the sink,
        header included.
        """
        check_int64(msg_type)
        view = memoryview(payload).cast("B")

        len_size = put_varint(self._len_buf, view.nbytes)
        type_size = put_varint(self._type_buf, msg_type)

        self._write_full(memoryview(self._len_buf)[:len_size])
        self._write_full(memoryview(self._type_buf)[:type_size])
        if view.nbytes:
            self._write_full(view)

        return len_size + type_size + view.nbytes

    def write_message(self, message: Message) -> int:
        return self.write(message.type, message.payload)

    def flush(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()

    def _write_full(self, data: memoryview) -> None:
        written = self._sink.write(data)
        # None means "everything" for blocking file objects
        if written is not None and written < data.nbytes:
            raise ShortWrite(data.nbytes, written)
