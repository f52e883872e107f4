from buffstream.core.codec.varint import decode_varint, encode_varint, put_varint, varint_size, MAX_VARINT_LEN
from buffstream.core.errors import (
    BuffStreamError,
    BufferTooSmall,
    EndOfStream,
    FramingError,
    MalformedHeader,
    MalformedVarint,
    MessageTooLarge,
    ShortWrite,
    TruncatedMessage,
)
from buffstream.core.models.message import HeaderCached, Idle, Message
from buffstream.core.stream.channel import Channel
from buffstream.core.stream.reader import Reader
from buffstream.core.stream.writer import Writer
from buffstream.infra.io_stream import open_channel, open_reader, open_writer

__all__ = [
    "MAX_VARINT_LEN",
    "BuffStreamError",
    "BufferTooSmall",
    "Channel",
    "EndOfStream",
    "FramingError",
    "HeaderCached",
    "Idle",
    "MalformedHeader",
    "MalformedVarint",
    "Message",
    "MessageTooLarge",
    "Reader",
    "ShortWrite",
    "TruncatedMessage",
    "Writer",
    "decode_varint",
    "encode_varint",
    "open_channel",
    "open_reader",
    "open_writer",
    "put_varint",
    "varint_size",
]
