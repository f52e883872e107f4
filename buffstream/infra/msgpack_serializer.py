from typing import Any

import msgpack

from buffstream.core.ports.serializer import Serializer


class MsgPackSerializer(Serializer):
    """
    Encodes payload objects as msgpack.

    `bytes` and `str` stay distinct on the wire (bin vs str types), and
    maps may use integer keys, which YAML payload text produces easily.
    """
    def serialize(self, message: Any) -> bytes:
        return msgpack.packb(message, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        return msgpack.unpackb(data, raw=False, strict_map_key=False)
