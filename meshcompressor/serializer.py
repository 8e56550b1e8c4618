from abc import ABC, abstractmethod
from typing import Iterator

from .payload import Payload


class AbstractSerializer(ABC):
    """
    Turns mesh group payloads into a container byte stream.

    Serializers may buffer internally (e.g. inside a streaming compressor), so
    the bytes of one payload can come out across several calls; `flush` must
    be called once after the last payload.
    """

    @abstractmethod
    def serialize_frame(self, payload: Payload) -> Iterator[bytes]:
        """
        Serialize the payload of one mesh group.

        Args:
            payload: The Payload to serialize.

        Yields:
            Container byte chunks; possibly none if the data is still buffered.
        """
        pass

    @abstractmethod
    def flush(self) -> Iterator[bytes]:
        """
        Emit whatever the serializer still holds and close the container.

        Yields:
            The remaining container byte chunks.
        """
        pass
