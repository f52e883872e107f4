from buffstream.core.models.message import ReceiveMessage, SendMessage


def echo(receive: ReceiveMessage, send: SendMessage) -> None:
    """Send every received message back unchanged, in order."""
    while (message := receive()) is not None:
        send(message)
