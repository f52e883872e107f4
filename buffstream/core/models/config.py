from dataclasses import dataclass, field

from buffstream.core.transport.application import Application


@dataclass
class StreamConfig:
    """
    Per-stream tuning shared by every Reader created from configuration.
    """
    read_buffer_size: int = 4096
    """
    Initial size of the buffer used by Reader.read_message().
    It grows to fit larger messages.
    """

    max_message_size: int = 16 * 1024 * 1024  # 16MB
    """
    Largest payload read_message() accepts before raising MessageTooLarge.
    """


@dataclass
class ServerConfig:
    """
    Static configuration for a MessageServer.

    This structure defines all parameters required to start a server:
    networking, per-connection stream limits and graceful shutdown behavior.
    """
    app: Application
    """
    The user-defined application callable with the signature:
        def app(receive, send)
    It receives decoded messages and may send responses.
    """

    host: str
    """
    IP address or hostname on which the server listens.
    """

    port: int
    """
    TCP port to bind. If set to 0, the OS selects an available port.
    """

    backlog: int = 128
    """
    Maximum number of pending TCP connections waiting for accept().
    """

    stream: StreamConfig = field(default_factory=StreamConfig)
    """
    Limits applied to the Reader of each connection.
    """

    timeout_graceful_shutdown: float = 5.0
    """
    Maximum time (in seconds) allowed for handler threads to finish once
    shutdown has closed their connections.
    """
