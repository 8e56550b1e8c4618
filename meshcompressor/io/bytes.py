"""
Container file access, plus the atomic output helper shared by every writer.
"""

import os
from contextlib import contextmanager
from typing import IO, Iterator


@contextmanager
def atomic_output(path: str, mode: str = "wb", **open_kwargs) -> Iterator[IO]:
    """
    Open `path` for writing so that it only appears once writing succeeded.

    Data goes to `path + ".part"`, which replaces `path` when the block exits
    normally and is removed when it raises. Missing parent directories are
    created.

    Raises:
        FileExistsError: If `path` already exists.
    """
    if os.path.exists(path):
        raise FileExistsError(f"Refusing to overwrite {path}")
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    part = path + ".part"
    try:
        with open(part, mode, **open_kwargs) as f:
            yield f
    except BaseException:
        if os.path.exists(part):
            os.remove(part)
        raise
    os.replace(part, path)


class BytesReader:
    """
    Streams a container file in fixed-size chunks.

    Decoders accept arbitrary chunk boundaries, so the chunk size only trades
    memory against call overhead.

    Example:
        for chunk in BytesReader("model.bin").read():
            ...
    """

    DEFAULT_CHUNK_SIZE = 64 * 1024

    def __init__(self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._path = path
        self._chunk_size = chunk_size

    def read(self) -> Iterator[bytes]:
        """
        Yields:
            Chunks of at most `chunk_size` bytes, in file order.

        Raises:
            FileNotFoundError: If the container does not exist.
        """
        if not os.path.isfile(self._path):
            raise FileNotFoundError(f"Container not found: {self._path}")
        with open(self._path, "rb") as f:
            while chunk := f.read(self._chunk_size):
                yield chunk


class BytesWriter:
    """
    Writes the chunks of an encoder into a container file.

    The file only appears once the whole chunk iterator has been consumed, so
    an encoder error midway leaves nothing behind.

    Example:
        BytesWriter("model.bin").write(encoder.encode_stream(meshes))
    """

    def __init__(self, path: str):
        self._path = path

    def write(self, data: Iterator[bytes]) -> int:
        """
        Consume `data` into the container file.

        Returns:
            Number of bytes written.

        Raises:
            FileExistsError: If the container already exists.
        """
        total = 0
        with atomic_output(self._path) as f:
            for chunk in data:
                total += f.write(chunk)
        return total
