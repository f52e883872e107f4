from typing import Protocol

from buffstream.core.models.message import Message


class Renderer(Protocol):
    """Turns messages into text for the terminal."""
    def render(self, data: dict) -> str:
        ...

    def render_message(self, message: Message) -> str:
        """One message as text, without the trailing newline."""
        return self.render(message.to_dict()).rstrip("\n")
