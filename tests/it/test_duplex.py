import os
import random
import socket
import threading

import pytest

from buffstream.core.errors import BufferTooSmall
from buffstream.infra.io_stream import open_reader, open_writer


def random_messages(count: int, seed: int) -> list[tuple[int, bytes]]:
    rng = random.Random(seed)
    return [(rng.randint(-50, 50), os.urandom(rng.randint(0, 50))) for _ in range(count)]


def write_all(sock: socket.socket, messages, errors: list) -> None:
    try:
        writer = open_writer(sock)
        for msg_type, payload in messages:
            writer.write(msg_type, payload)
    except Exception as ex:  # noqa
        errors.append(ex)


def read_all(sock: socket.socket, count: int, received: list, errors: list) -> None:
    try:
        reader = open_reader(sock)
        buf = bytearray(50)
        for _ in range(count):
            msg_type, length = reader.read(buf)
            received.append((msg_type, bytes(buf[:length])))
    except Exception as ex:  # noqa
        errors.append(ex)


def run_duplex(a: socket.socket, b: socket.socket) -> None:
    a_to_b = random_messages(25, seed=1)
    b_to_a = random_messages(25, seed=2)
    got_by_a: list = []
    got_by_b: list = []
    errors: list = []

    threads = [
        threading.Thread(target=write_all, args=(a, a_to_b, errors)),
        threading.Thread(target=write_all, args=(b, b_to_a, errors)),
        threading.Thread(target=read_all, args=(b, len(a_to_b), got_by_b, errors)),
        threading.Thread(target=read_all, args=(a, len(b_to_a), got_by_a, errors)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert errors == []
    assert got_by_b == a_to_b
    assert got_by_a == b_to_a


@pytest.mark.it
def test_full_duplex_over_socketpair(socket_pair):
    run_duplex(*socket_pair)


@pytest.mark.it
def test_full_duplex_over_tcp():
    listener = socket.create_server(("127.0.0.1", 0))
    try:
        dialed = socket.create_connection(listener.getsockname(), timeout=5)
        accepted, _ = listener.accept()
        accepted.settimeout(5)
        try:
            run_duplex(dialed, accepted)
            run_duplex(accepted, dialed)
        finally:
            dialed.close()
            accepted.close()
    finally:
        listener.close()


@pytest.mark.it
def test_short_buffer_recovery_across_threads(socket_pair):
    left, right = socket_pair
    payload = os.urandom(50)
    writer_thread = threading.Thread(target=lambda: open_writer(left).write(17, payload))
    writer_thread.start()

    reader = open_reader(right)
    with pytest.raises(BufferTooSmall):
        reader.read(bytearray(10))

    buf = bytearray(50)
    assert reader.read(buf) == (17, 50)
    assert bytes(buf) == payload

    writer_thread.join(timeout=5)
