"""
IO module for reading OBJ meshes, writing decoded meshes and bytes data.
"""

from .obj import ObjReader, ObjWriter, ObjParseError, Material, WavefrontObjFile, parse_mtl
from .bytes import BytesReader, BytesWriter, atomic_output
from .streams import MANIFEST_NAME, Utf8StreamReader, Utf8StreamWriter
from .config import (
    ObjReaderConfig,
    ObjWriterConfig,
    BytesReaderConfig,
    BytesWriterConfig,
    build_obj_reader,
    build_obj_writer,
    build_bytes_reader,
    build_bytes_writer,
    Utf8StreamReaderConfig,
    Utf8StreamWriterConfig,
    build_utf8_stream_reader,
    build_utf8_stream_writer,
)

__all__ = [
    "ObjReader",
    "ObjWriter",
    "ObjParseError",
    "Material",
    "WavefrontObjFile",
    "parse_mtl",
    "ObjReaderConfig",
    "ObjWriterConfig",
    "BytesReaderConfig",
    "BytesWriterConfig",
    "build_obj_reader",
    "build_obj_writer",
    "build_bytes_reader",
    "build_bytes_writer",
    "BytesReader",
    "BytesWriter",
    "atomic_output",
    "MANIFEST_NAME",
    "Utf8StreamReader",
    "Utf8StreamWriter",
    "Utf8StreamReaderConfig",
    "Utf8StreamWriterConfig",
    "build_utf8_stream_reader",
    "build_utf8_stream_writer",
]
