import argparse
import contextlib
import sys
from typing import BinaryIO

import yaml

from buffstream.bootstrap.config.settings import BuffStreamConfig
from buffstream.bootstrap.deps import get_dispatcher, get_renderer, get_serializer
from buffstream.core.errors import EndOfStream
from buffstream.infra.io_stream import open_reader, open_writer

dispatcher = get_dispatcher()


def encode_payload(text: str, use_msgpack: bool) -> bytes:
    if use_msgpack:
        return get_serializer().serialize(yaml.safe_load(text))
    return text.encode()


def open_input(path: str) -> contextlib.AbstractContextManager[BinaryIO]:
    if path == "-":
        return contextlib.nullcontext(sys.stdin.buffer)
    return open(path, "rb")


def open_output(path: str, append: bool) -> contextlib.AbstractContextManager[BinaryIO]:
    if path == "-":
        return contextlib.nullcontext(sys.stdout.buffer)
    return open(path, "ab" if append else "wb")


@dispatcher.command("dump")
def dump(namespace: argparse.Namespace, config: BuffStreamConfig) -> int:
    renderer = get_renderer(namespace.output, namespace.msgpack)
    stream_config = config.stream.to_stream_config()

    with open_input(namespace.file) as fp:
        reader = open_reader(fp, stream_config)
        while True:
            try:
                message = reader.read_message(max_size=stream_config.max_message_size)
            except EndOfStream:
                break
            print(renderer.render_message(message))

    return 0


@dispatcher.command("write")
def write(namespace: argparse.Namespace, _: BuffStreamConfig) -> int:
    payload = encode_payload(namespace.payload, namespace.msgpack)

    with open_output(namespace.file, namespace.append) as fp:
        writer = open_writer(fp)
        writer.write(namespace.msg_type, payload)
        writer.flush()

    return 0
