import functools
import socket
import threading

import pytest

from buffstream.bootstrap.handlers.echo import echo
from buffstream.core.errors import EndOfStream
from buffstream.core.models.config import ServerConfig, StreamConfig
from buffstream.core.models.message import Message
from buffstream.core.transport.server import MessageServer
from buffstream.infra.io_stream import open_channel


def make_server(app, serializer, timeout: float = 1.0) -> MessageServer:
    config = ServerConfig(
        app=app,
        host="127.0.0.1",
        port=0,
        backlog=10,
        stream=StreamConfig(read_buffer_size=8, max_message_size=1024),
        timeout_graceful_shutdown=timeout,
    )
    factory = functools.partial(open_channel, serializer=serializer, config=config.stream)
    return MessageServer(config, factory)


def connect(server: MessageServer, serializer):
    sock = socket.create_connection(server.address, timeout=5)
    return open_channel(sock, serializer)


@pytest.mark.it
def test_echo_round_trip(serializer):
    with make_server(echo, serializer) as server:
        with connect(server, serializer) as client:
            client.send_raw(7, b"\x01\x02\x03")
            client.send_raw(-3, b"")
            client.send(1, {"hello": "world"})

            assert client.recv_raw() == Message(type=7, payload=b"\x01\x02\x03")
            assert client.recv_raw() == Message(type=-3, payload=b"")
            assert client.recv() == (1, {"hello": "world"})


@pytest.mark.it
def test_multiple_clients(serializer):
    received = []
    lock = threading.Lock()

    def app(receive, send):
        message = receive()
        with lock:
            received.append(message)
        send(Message(type=0, payload=b"ack"))

    with make_server(app, serializer) as server:
        for letter in [b"a", b"b", b"c"]:
            with connect(server, serializer) as client:
                client.send_raw(1, letter)
                assert client.recv_raw().payload == b"ack"

    assert sorted(m.payload for m in received) == [b"a", b"b", b"c"]


@pytest.mark.it
def test_receive_returns_none_when_client_closes(serializer):
    done = threading.Event()
    seen = []

    def app(receive, send):
        while (message := receive()) is not None:
            seen.append(message)
        done.set()

    with make_server(app, serializer) as server:
        client = connect(server, serializer)
        client.send_raw(1, b"bye")
        client.close()

        assert done.wait(5)

    assert seen == [Message(type=1, payload=b"bye")]


@pytest.mark.it
def test_application_error_closes_connection(serializer):
    def app(receive, send):
        receive()
        raise RuntimeError("boom")

    with make_server(app, serializer) as server:
        with connect(server, serializer) as client:
            client.send_raw(1, b"x")
            with pytest.raises(EndOfStream):
                client.recv_raw()


@pytest.mark.it
def test_oversized_message_closes_connection(serializer):
    with make_server(echo, serializer) as server:
        with connect(server, serializer) as client:
            client.send_raw(1, b"x" * 2048)
            with pytest.raises((EndOfStream, ConnectionError)):
                client.recv_raw()


@pytest.mark.it
def test_shutdown_with_open_connection(serializer):
    server = make_server(echo, serializer)
    server.start()

    client = connect(server, serializer)
    client.send_raw(1, b"ping")
    assert client.recv_raw().payload == b"ping"

    server.shutdown()

    assert not server.state.connections
    assert not server.state.threads
    with pytest.raises(EndOfStream):
        client.recv_raw()
    client.close()


@pytest.mark.it
def test_address_requires_start(serializer):
    with pytest.raises(RuntimeError):
        make_server(echo, serializer).address
