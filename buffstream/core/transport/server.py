import logging
import socket
import socketserver
import threading
import time
from collections.abc import Callable

from buffstream.core.models.config import ServerConfig
from buffstream.core.models.state import ServerState
from buffstream.core.stream.channel import Channel

ChannelFactory = Callable[[socket.socket], Channel]


class _ConnectionHandler(socketserver.BaseRequestHandler):
    server: "_ThreadingServer"

    def handle(self) -> None:
        self.server.owner.serve_connection(self.request, self.client_address)


class _ThreadingServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True
    block_on_close = False

    def __init__(self, owner: "MessageServer", address: tuple[str, int], backlog: int) -> None:
        self.owner = owner
        self.request_queue_size = backlog
        super().__init__(address, _ConnectionHandler)


class MessageServer:
    """
    Owns the lifecycle of a TCP server that accepts connections, frames
    each of them with a Channel and runs the configured Application on
    it, one thread per connection.

    For every accepted socket the server builds a Channel through the
    injected factory, then calls `app(receive, send)`. `receive()` returns
    the next Message, or None once the peer has closed its side cleanly;
    `send(message)` writes one frame back. When the Application returns
    or raises, the connection is closed. Application errors are logged
    and never reach the accept loop.

    On shutdown, MessageServer stops accepting, closes every open
    connection (which unblocks handlers waiting in `receive()`) and waits
    up to `timeout_graceful_shutdown` seconds for the handler threads to
    finish. Threads still alive after that are reported and abandoned;
    they are daemon threads.
    """
    def __init__(self, config: ServerConfig, channel_factory: ChannelFactory) -> None:
        self._config = config
        self._channel_factory = channel_factory
        self.state = ServerState()
        self._logger = logging.getLogger("core.transport.server")

        self._server: _ThreadingServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def address(self) -> tuple[str, int]:
        """The bound (host, port); the port is real even if 0 was configured."""
        if self._server is None:
            raise RuntimeError("Server is not started")
        host, port = self._server.server_address[:2]
        return host, port

    def start(self) -> None:
        config = self._config
        self._server = _ThreadingServer(self, (config.host, config.port), config.backlog)
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="buffstream-accept",
            daemon=True,
        )
        self._thread.start()
        self._logger.info("Listening on %s:%d" % self.address)

    def serve_connection(self, sock: socket.socket, client_address: tuple) -> None:
        who = "%s:%d" % client_address[:2]
        channel = self._channel_factory(sock)
        current = threading.current_thread()

        with self.state.lock:
            self.state.connections.add(channel)
            self.state.threads.add(current)
        self._logger.debug(f"{who} - Connection made")

        try:
            self._config.app(channel.receive_or_none, channel.send_message)
        except Exception as exc:
            self._logger.error(f"{who} - Exception in Application", exc_info=exc)
        finally:
            channel.close()
            with self.state.lock:
                self.state.connections.discard(channel)
                self.state.threads.discard(current)
            self._logger.debug(f"{who} - Connection lost")

    def shutdown(self) -> None:
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
        if self._thread is not None:
            self._thread.join()

        with self.state.lock:
            connections = list(self.state.connections)
        for channel in connections:
            channel.close()

        deadline = time.monotonic() + self._config.timeout_graceful_shutdown
        with self.state.lock:
            threads = list(self.state.threads)
        for thread in threads:
            thread.join(max(0.0, deadline - time.monotonic()))

        with self.state.lock:
            remaining = [t for t in self.state.threads if t.is_alive()]
        if remaining:
            self._logger.error(
                f"Abandon {len(remaining)} running handler(s), "
                f"timeout graceful shutdown: {remaining}"
            )

    def __enter__(self) -> "MessageServer":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
