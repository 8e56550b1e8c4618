from abc import ABC, abstractmethod
from typing import Iterator

from .batch.drawbatch import DrawMesh
from .payload import Payload
from .serializer import AbstractSerializer


class AbstractEncoder(ABC):
    """
    Abstract base class for mesh compression pipelines.

    Encoding is split in two stages:
    1. Pack each DrawMesh group into Payload objects (via `pack`)
    2. Serialize Payloads to container bytes (via the serializer)

    Subclasses implement `pack`; every group is packed independently.
    """

    def __init__(self, serializer: AbstractSerializer):
        """
        Initialize the encoder.

        Args:
            serializer: The serializer to use for converting Payload to bytes.
        """
        self._serializer = serializer

    @abstractmethod
    def pack(self, mesh: DrawMesh) -> Iterator[Payload]:
        """
        Pack one mesh group into Payload objects.

        Args:
            mesh: The DrawMesh of one texture group.

        Yields:
            Packed Payload instances for this group.
        """
        pass

    def encode_frame(self, mesh: DrawMesh) -> Iterator[bytes]:
        """
        Encode one mesh group.

        Args:
            mesh: The DrawMesh of one texture group.

        Yields:
            Encoded byte chunks. May yield zero, one, or multiple chunks.
        """
        for payload in self.pack(mesh):
            yield from self._serializer.serialize_frame(payload)

    def flush(self) -> Iterator[bytes]:
        """
        Flush the serialization stage.

        Yields:
            Remaining encoded byte chunks.
        """
        yield from self._serializer.flush()

    def encode_stream(self, stream: Iterator[DrawMesh]) -> Iterator[bytes]:
        """
        Encode a stream of mesh groups into one container.

        Args:
            stream: An iterator that yields DrawMesh groups to encode.

        Yields:
            Encoded bytes for each group and for the final flush.
        """
        for mesh in stream:
            yield from self.encode_frame(mesh)

        yield from self.flush()
