from abc import ABC, abstractmethod
from typing import Iterator

from .payload import Payload


class AbstractDeserializer(ABC):
    """
    Turns a container byte stream back into mesh group payloads.

    Input may be split at arbitrary byte boundaries; a payload is yielded as
    soon as all of its bytes have arrived.
    """

    @abstractmethod
    def deserialize_frame(self, data: bytes) -> Iterator[Payload]:
        """
        Feed one chunk of container bytes.

        Args:
            data: The next chunk of the container.

        Yields:
            Every payload completed by this chunk.
        """
        pass

    @abstractmethod
    def flush(self) -> Iterator[Payload]:
        """
        Signal the end of the container.

        Yields:
            Any payloads still buffered.

        Raises:
            ValueError: If the container ends inside a payload.
        """
        pass
