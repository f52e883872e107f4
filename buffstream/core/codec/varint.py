"""
Signed variable-length integers.

A value is zigzag-folded into an unsigned 64-bit integer so that small
negative and small positive numbers both stay short, then written 7 bits
at a time, least significant group first. Every byte but the last has
its high bit set:

    0   -> 00
    -1  -> 01
    1   -> 02
    -64 -> 7f
    64  -> 80 01

A 64-bit value never needs more than MAX_VARINT_LEN bytes.
"""
from buffstream.core.errors import EndOfStream, MalformedVarint
from buffstream.core.ports.stream import ByteSource

MAX_VARINT_LEN = 10

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_UINT64_MASK = (1 << 64) - 1


def zigzag_encode(value: int) -> int:
    return ((value << 1) ^ (value >> 63)) & _UINT64_MASK


def zigzag_decode(value: int) -> int:
    return (value >> 1) ^ -(value & 1)


def check_int64(value: int) -> None:
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"{value} does not fit in a signed 64-bit integer")


def put_varint(buf: bytearray, value: int) -> int:
    """
    Encode `value` into `buf` and return the number of bytes written.

    `buf` must hold at least MAX_VARINT_LEN bytes; nothing else is
    allocated.
    """
    check_int64(value)
    ux = zigzag_encode(value)
    i = 0
    while ux >= 0x80:
        buf[i] = (ux & 0x7F) | 0x80
        ux >>= 7
        i += 1
    buf[i] = ux
    return i + 1


def encode_varint(value: int) -> bytes:
    buf = bytearray(MAX_VARINT_LEN)
    n = put_varint(buf, value)
    return bytes(buf[:n])


def varint_size(value: int) -> int:
    check_int64(value)
    ux = zigzag_encode(value)
    size = 1
    while ux >= 0x80:
        ux >>= 7
        size += 1
    return size


def decode_varint(source: ByteSource) -> int:
    """
    Read one varint from `source`, one byte at a time.

    Raises EndOfStream when the source is exhausted before the first
    byte, and MalformedVarint when it ends mid-value or the encoding
    runs past 64 bits. Errors raised by the source itself propagate.
    """
    ux = 0
    shift = 0
    for i in range(MAX_VARINT_LEN):
        chunk = source.read(1)
        if not chunk:
            if i == 0:
                raise EndOfStream("End of stream")
            raise MalformedVarint(f"Stream ended inside a varint after {i} byte(s)")

        b = chunk[0]
        if b < 0x80:
            # the 10th byte may only carry the 64th bit
            if i == MAX_VARINT_LEN - 1 and b > 1:
                raise MalformedVarint("Varint overflows a 64-bit integer")
            return zigzag_decode(ux | (b << shift))

        ux |= (b & 0x7F) << shift
        shift += 7

    raise MalformedVarint(f"Varint longer than {MAX_VARINT_LEN} bytes")
