"""
Zstandard-based streaming container with length-prefix framing.

Each payload becomes a frame of a fixed number of sections,
    [len_0][section_0][len_1][section_1]...
with 4-byte big-endian lengths, and the concatenated frames are compressed
incrementally with zstd. Subclasses choose how a payload maps to sections.

WARNING: the pickle-based serializer uses cloudpickle. Do NOT use it with
untrusted data sources. Only use with trusted data (local files, same-process,
etc.).
"""

import struct
from abc import abstractmethod
from typing import Iterator, List, Optional, Tuple

import cloudpickle as pickle
import zstandard as zstd

from ..deserializer import AbstractDeserializer
from ..payload import Payload
from ..serializer import AbstractSerializer

# 4-byte big-endian length prefix (max 4GB per section)
_LEN = struct.Struct(">I")


def split_frame(buffer: bytearray, num_sections: int) -> Optional[Tuple[List[bytes], int]]:
    """
    Split one complete frame off the front of a buffer.

    Args:
        buffer: Decompressed container bytes.
        num_sections: Number of length-prefixed sections per frame.

    Returns:
        Tuple of (sections, frame size), or None if the frame is incomplete.
    """
    sections = []
    offset = 0
    for _ in range(num_sections):
        if len(buffer) < offset + _LEN.size:
            return None
        (length,) = _LEN.unpack(buffer[offset: offset + _LEN.size])
        offset += _LEN.size
        if len(buffer) < offset + length:
            return None
        sections.append(bytes(buffer[offset: offset + length]))
        offset += length
    return sections, offset


class FramedZstdSerializer(AbstractSerializer):
    """
    Streaming serializer writing length-prefixed sections through zstd.

    Subclasses implement `payload_to_sections`.
    """

    def __init__(self, level: int = 7):
        """
        Initialize the serializer.

        Args:
            level: Zstd compression level (1-22). Default is 7.
        """
        self._compressor = zstd.ZstdCompressor(level=level).compressobj()

    @abstractmethod
    def payload_to_sections(self, payload: Payload) -> List[bytes]:
        """Split a payload into its byte sections."""
        pass

    def serialize_frame(self, payload: Payload) -> Iterator[bytes]:
        framed = b"".join(
            _LEN.pack(len(section)) + section
            for section in self.payload_to_sections(payload)
        )
        out = self._compressor.compress(framed)
        if out:
            yield out

    def flush(self) -> Iterator[bytes]:
        tail = self._compressor.flush()
        if tail:
            yield tail


class FramedZstdDeserializer(AbstractDeserializer):
    """
    Streaming deserializer for `FramedZstdSerializer` containers.

    Decompresses incoming bytes incrementally, buffers until a complete frame
    is available, then rebuilds and yields its payload. Subclasses set
    `num_sections` and implement `sections_to_payload`.
    """

    num_sections: int = 1

    def __init__(self):
        self._decompressor = zstd.ZstdDecompressor().decompressobj()
        self._buffer = bytearray()

    @abstractmethod
    def sections_to_payload(self, sections: List[bytes]) -> Payload:
        """Rebuild a payload from its byte sections."""
        pass

    def deserialize_frame(self, data: bytes) -> Iterator[Payload]:
        decompressed = self._decompressor.decompress(data)
        if decompressed:
            self._buffer.extend(decompressed)
        yield from self._extract_payloads()

    def flush(self) -> Iterator[Payload]:
        yield from self._extract_payloads()

        # If there's leftover data, it's incomplete/corrupted
        if self._buffer:
            raise ValueError(
                f"Incomplete data in buffer: {len(self._buffer)} bytes remaining"
            )

    def _extract_payloads(self) -> Iterator[Payload]:
        while True:
            frame = split_frame(self._buffer, self.num_sections)
            if frame is None:
                break
            sections, size = frame
            del self._buffer[:size]
            yield self.sections_to_payload(sections)


class PickleZstdSerializer(FramedZstdSerializer):
    """Serializer storing each payload as a single cloudpickle section."""

    def payload_to_sections(self, payload: Payload) -> List[bytes]:
        return [pickle.dumps(payload, protocol=pickle.DEFAULT_PROTOCOL)]


class PickleZstdDeserializer(FramedZstdDeserializer):
    """Deserializer for `PickleZstdSerializer` containers."""

    num_sections = 1

    def sections_to_payload(self, sections: List[bytes]) -> Payload:
        return pickle.loads(sections[0])
