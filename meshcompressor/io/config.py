from dataclasses import dataclass

from omegaconf import MISSING
from .obj import ObjReader, ObjWriter
from .bytes import BytesReader, BytesWriter
from .streams import Utf8StreamReader, Utf8StreamWriter


@dataclass
class ObjReaderConfig:
    """Configuration for reading the texture groups of an OBJ file."""
    path: str = MISSING


@dataclass
class ObjWriterConfig:
    """Configuration for writing decoded groups to an OBJ file."""
    path: str = MISSING
    precision: int = 6


def build_obj_reader(config: ObjReaderConfig) -> ObjReader:
    """Build an ObjReader from configuration."""
    return ObjReader(path=config.path)


def build_obj_writer(config: ObjWriterConfig) -> ObjWriter:
    """Build an ObjWriter from configuration."""
    return ObjWriter(
        path=config.path,
        precision=config.precision,
    )


@dataclass
class BytesReaderConfig:
    """Configuration for reading bytes data from a file."""
    path: str = MISSING
    chunk_size: int = BytesReader.DEFAULT_CHUNK_SIZE


@dataclass
class BytesWriterConfig:
    """Configuration for writing bytes data to a file."""
    path: str = MISSING


def build_bytes_reader(config: BytesReaderConfig) -> BytesReader:
    """Build a BytesReader from configuration."""
    return BytesReader(
        path=config.path,
        chunk_size=config.chunk_size,
    )


def build_bytes_writer(config: BytesWriterConfig) -> BytesWriter:
    """Build a BytesWriter from configuration."""
    return BytesWriter(
        path=config.path,
    )


@dataclass
class Utf8StreamReaderConfig:
    """Configuration for reading a plain stream directory."""
    path: str = MISSING


@dataclass
class Utf8StreamWriterConfig:
    """Configuration for writing a plain stream directory."""
    path: str = MISSING


def build_utf8_stream_reader(config: Utf8StreamReaderConfig) -> Utf8StreamReader:
    """Build a Utf8StreamReader from configuration."""
    return Utf8StreamReader(directory=config.path)


def build_utf8_stream_writer(config: Utf8StreamWriterConfig) -> Utf8StreamWriter:
    """Build a Utf8StreamWriter from configuration."""
    return Utf8StreamWriter(directory=config.path)
