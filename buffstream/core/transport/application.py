from typing import Protocol

from buffstream.core.models.message import ReceiveMessage, SendMessage


class Application(Protocol):
    """
    This interface defines the per-connection handler run by the MessageServer.

    An Application is a callable that receives two functions: `receive`,
    which blocks for and returns the next incoming Message (None once the
    peer has finished sending), and `send`, which writes a Message to the
    peer. It implements the logic of a single connection by calling
    `receive()` to consume messages and `send(message)` to produce
    responses.

    The Application runs in its own thread until it returns or raises.
    When it exits, the connection is closed.

    The Application never deals with framing; the Channel built by the
    server does that.
    """
    def __call__(self, receive: ReceiveMessage, send: SendMessage) -> None:
        ...
