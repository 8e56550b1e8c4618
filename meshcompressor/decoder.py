from abc import ABC, abstractmethod
from typing import Iterator

from .batch.drawbatch import DrawMesh
from .deserializer import AbstractDeserializer
from .payload import Payload


class AbstractDecoder(ABC):
    """
    Abstract base class for mesh decompression pipelines.

    Decoding is split in two stages:
    1. Deserialize container bytes to Payload objects (via the deserializer)
    2. Unpack Payloads to DrawMesh groups (via `unpack`)

    Subclasses implement `unpack`; every payload is unpacked independently.
    """

    def __init__(self, deserializer: AbstractDeserializer):
        """
        Initialize the decoder.

        Args:
            deserializer: The deserializer to use for converting bytes to Payload.
        """
        self._deserializer = deserializer

    @abstractmethod
    def unpack(self, payload: Payload) -> Iterator[DrawMesh]:
        """
        Unpack mesh group(s) from a Payload.

        Args:
            payload: A Payload instance to unpack.

        Yields:
            Decoded DrawMesh groups with dequantized attributes.
        """
        pass

    def decode_frame(self, data: bytes) -> Iterator[DrawMesh]:
        """
        Decode one chunk of container bytes.

        Args:
            data: A bytes chunk of the container.

        Yields:
            DrawMesh groups completed by this chunk.
        """
        for payload in self._deserializer.deserialize_frame(data):
            yield from self.unpack(payload)

    def flush(self) -> Iterator[DrawMesh]:
        """
        Flush the deserialization stage and unpack what it held back.

        Yields:
            Remaining DrawMesh groups.
        """
        for payload in self._deserializer.flush():
            yield from self.unpack(payload)

    def decode_stream(self, stream: Iterator[bytes]) -> Iterator[DrawMesh]:
        """
        Decode a stream of container byte chunks into mesh groups.

        Args:
            stream: An iterator that yields bytes objects to decode.

        Yields:
            Decoded DrawMesh groups in container order.
        """
        for data in stream:
            yield from self.decode_frame(data)

        yield from self.flush()
