from typing import Protocol, Any


class Serializer(Protocol):
    """
    Defines the interface for turning Python objects into message
    payloads and back.

    The codec itself only moves bytes; a Serializer is only needed by
    callers exchanging structured data through a Channel.

    Implementations must be:
    - deterministic
    - pure (no side effects)
    - raise on malformed input rather than return partial data
    """

    def serialize(self, message: Any) -> bytes:
        """Encode a Python object into a payload."""

    def deserialize(self, data: bytes) -> Any:
        """Decode a payload back into a Python object."""
