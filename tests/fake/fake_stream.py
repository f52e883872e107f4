import io


class FakeSource:
    """
    An in-memory ByteSource intended for tests.

    It serves `data` like a socket would: at most `chunk` bytes per
    readinto() call, and it can be told to fail with an OSError once a
    number of bytes have been consumed. It records how many bytes were
    read so tests can check the stream position.
    """

    def __init__(self, data: bytes, chunk: int | None = None, fail_after: int | None = None) -> None:
        self._data = bytes(data)
        self._chunk = chunk
        self._fail_after = fail_after
        self.position = 0

    def _available(self, size: int) -> int:
        if self._fail_after is not None and self.position >= self._fail_after:
            raise ConnectionResetError("Connection reset by peer")
        size = min(size, len(self._data) - self.position)
        if self._chunk is not None:
            size = min(size, self._chunk)
        if self._fail_after is not None:
            size = min(size, self._fail_after - self.position)
        return size

    def read(self, size: int) -> bytes:
        n = self._available(size)
        chunk = self._data[self.position:self.position + n]
        self.position += n
        return chunk

    def readinto(self, buffer) -> int:
        view = memoryview(buffer).cast("B")
        n = self._available(view.nbytes)
        view[:n] = self._data[self.position:self.position + n]
        self.position += n
        return n


class FakeSink:
    """
    An in-memory ByteSink intended for tests.

    Every write() call is recorded separately in `calls`. The sink can
    raise an OSError on a given call, accept only `accept` bytes per
    call, or return None like a blocking file object.
    """

    def __init__(
        self,
        fail_on_call: int | None = None,
        accept: int | None = None,
        return_none: bool = False,
    ) -> None:
        self.calls: list[bytes] = []
        self.flushed = 0
        self._fail_on_call = fail_on_call
        self._accept = accept
        self._return_none = return_none

    def write(self, data) -> int | None:
        if self._fail_on_call is not None and len(self.calls) == self._fail_on_call:
            raise BrokenPipeError("Broken pipe")

        data = bytes(data)
        if self._accept is not None:
            data = data[:self._accept]
        self.calls.append(data)

        if self._return_none:
            return None
        return len(data)

    def flush(self) -> None:
        self.flushed += 1

    @property
    def buffer(self) -> bytes:
        return b"".join(self.calls)


class ChunkedRawStream(io.RawIOBase):
    """
    An unbuffered raw stream accepting and returning at most `chunk`
    bytes per call. With `blocked` set, write() returns None like a
    non-blocking stream that would block.
    """

    def __init__(self, data: bytes = b"", chunk: int = 1, blocked: bool = False) -> None:
        super().__init__()
        self._in = io.BytesIO(data)
        self.written = bytearray()
        self.write_calls = 0
        self._chunk = chunk
        self._blocked = blocked

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        view = memoryview(buffer).cast("B")
        data = self._in.read(min(self._chunk, view.nbytes))
        view[:len(data)] = data
        return len(data)

    def write(self, data) -> int | None:
        self.write_calls += 1
        if self._blocked:
            return None
        chunk = bytes(data)[:self._chunk]
        self.written.extend(chunk)
        return len(chunk)
