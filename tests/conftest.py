import os
import socket
from typing import Generator

import pytest
import yaml

from buffstream.infra.msgpack_serializer import MsgPackSerializer
from tests.fake.fake_stream import FakeSink
from tests.helpers import FakeBuffStreamConfig


@pytest.fixture
def serializer():
    return MsgPackSerializer()


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def socket_pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    left, right = socket.socketpair()
    left.settimeout(5)
    right.settimeout(5)
    try:
        yield left, right
    finally:
        left.close()
        right.close()


@pytest.fixture
def config_file(tmp_path):
    file = tmp_path / "buffstream.yaml"

    data = {
        "stream": {
            "read_buffer_size": 16,
            "max_message_size": 1024,
        },
        "server": {
            "host": "127.0.0.1",
            "port": 0,
            "backlog": 10,
            "timeout_graceful_shutdown": 1,
        },
    }

    file.write_text(yaml.dump(data))
    return file


@pytest.fixture
def buff_config(config_file) -> Generator[FakeBuffStreamConfig, None, None]:
    backup = os.environ.copy()

    try:
        os.environ["TEST_BUFFSTREAMCONFIG"] = str(config_file)
        yield FakeBuffStreamConfig()
    finally:
        os.environ.clear()
        os.environ.update(backup)
