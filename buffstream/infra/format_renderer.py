import json

import yaml

from buffstream.core.ports.render import Renderer
from buffstream.core.ports.serializer import Serializer


class _PayloadNormalizer:
    """
    Turns a message dictionary into printable values. The `payload`
    entry is decoded with the serializer when one is configured; any
    remaining bytes are shown as hex text.
    """
    def __init__(self, serializer: Serializer | None = None) -> None:
        self._serializer = serializer

    def _prepare(self, data: dict) -> dict:
        if self._serializer is not None and isinstance(data.get("payload"), (bytes, bytearray)):
            data = {**data, "payload": self._serializer.deserialize(bytes(data["payload"]))}
        return self._normalize(data)

    def _normalize(self, obj):
        if isinstance(obj, (bytes, bytearray)):
            return bytes(obj).hex()

        if isinstance(obj, dict):
            return {self._normalize(k): self._normalize(v) for k, v in obj.items()}

        if isinstance(obj, (list, tuple)):
            return [self._normalize(x) for x in obj]

        return obj


class JsonRenderer(_PayloadNormalizer, Renderer):
    def render(self, data: dict) -> str:
        return json.dumps(self._prepare(data), indent=2, sort_keys=False)


class YamlRenderer(_PayloadNormalizer, Renderer):
    def render(self, data: dict) -> str:
        return yaml.safe_dump(self._prepare(data), sort_keys=False, explicit_start=True)
