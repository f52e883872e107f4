import argparse
import logging
import socket

from buffstream.bootstrap.commands.stream import encode_payload
from buffstream.bootstrap.config.settings import BuffStreamConfig
from buffstream.bootstrap.deps import get_dispatcher, get_echo_server, get_renderer, get_serializer
from buffstream.core.helpers.utils import setup_signal_handler
from buffstream.infra.io_stream import open_channel

dispatcher = get_dispatcher()
logger = logging.getLogger("bootstrap.commands.net")


def parse_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid address '{address}', expected host:port")
    return host, int(port)


@dispatcher.command("serve")
def serve(_: argparse.Namespace, config: BuffStreamConfig) -> int:
    server = get_echo_server(config)

    try:
        with setup_signal_handler() as stop_event:
            server.start()
            print("Listening on %s:%d" % server.address, flush=True)
            try:
                while not stop_event.wait(0.5):
                    pass
            finally:
                logger.info("Shutting down")
                server.shutdown()
    except KeyboardInterrupt:
        pass

    return 0


@dispatcher.command("send")
def send(namespace: argparse.Namespace, config: BuffStreamConfig) -> int:
    host, port = parse_address(namespace.address)
    payload = encode_payload(namespace.payload, namespace.msgpack)
    renderer = get_renderer("yaml", namespace.msgpack)

    sock = socket.create_connection((host, port), timeout=namespace.timeout)
    with open_channel(sock, get_serializer(), config.stream.to_stream_config()) as channel:
        channel.send_raw(namespace.msg_type, payload)
        reply = channel.recv_raw()

    print(renderer.render_message(reply))
    return 0
