"""
Streaming serialization of Utf8Payload objects.

Each Utf8Payload is framed as
    [stream_len][stream_bytes][extra_len][extra_bytes]
where the stream is stored verbatim and the extra payload (if present) is
pickled with cloudpickle (extra_len is 0 if there is none). Frames are
compressed incrementally with zstd.

WARNING: cloudpickle uses pickle under the hood. Do NOT use with untrusted
data sources.
"""

from typing import List

import cloudpickle as pickle

from ..compress.zstd import FramedZstdDeserializer, FramedZstdSerializer
from .interface import Utf8Payload


class Utf8Serializer(FramedZstdSerializer):
    """Serializer writing the mesh stream and its pickled extra as two sections."""

    def __init__(self, zstd_level: int = 7):
        """
        Initialize the serializer.

        Args:
            zstd_level: Zstd compression level (1-22). Default is 7.
        """
        super().__init__(level=zstd_level)

    def payload_to_sections(self, payload: Utf8Payload) -> List[bytes]:
        if payload.extra is not None:
            extra_pickled = pickle.dumps(payload.extra, protocol=pickle.DEFAULT_PROTOCOL)
        else:
            extra_pickled = b""
        return [payload.stream, extra_pickled]


class Utf8Deserializer(FramedZstdDeserializer):
    """Deserializer for `Utf8Serializer` containers."""

    num_sections = 2

    def sections_to_payload(self, sections: List[bytes]) -> Utf8Payload:
        stream, extra_bytes = sections
        extra = pickle.loads(extra_bytes) if extra_bytes else None
        return Utf8Payload(stream=stream, extra=extra)
