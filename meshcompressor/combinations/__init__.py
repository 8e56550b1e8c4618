"""
Named mesh codecs, each an encoder/decoder pair over one container format.

Importing this package registers every codec in `CODECS`.
"""

from .registry import CODECS, Codec, get_codec, register_codec
from .quant_zstd import (
    QUANT_ZSTD,
    QuantZstdEncoderConfig,
    QuantZstdDecoderConfig,
    MeshQuantEncoder,
    MeshQuantDecoder,
    build_quantzstd_encoder,
    build_quantzstd_decoder,
)
from .utf8_zstd import (
    UTF8_ZSTD,
    Utf8ZstdEncoderConfig,
    Utf8ZstdDecoderConfig,
    MeshUtf8Encoder,
    MeshUtf8Decoder,
    build_utf8zstd_encoder,
    build_utf8zstd_decoder,
)

__all__ = [
    # registry.py
    "CODECS",
    "Codec",
    "get_codec",
    "register_codec",
    # quant_zstd.py
    "QUANT_ZSTD",
    "QuantZstdEncoderConfig",
    "QuantZstdDecoderConfig",
    "MeshQuantEncoder",
    "MeshQuantDecoder",
    "build_quantzstd_encoder",
    "build_quantzstd_decoder",
    # utf8_zstd.py
    "UTF8_ZSTD",
    "Utf8ZstdEncoderConfig",
    "Utf8ZstdDecoderConfig",
    "MeshUtf8Encoder",
    "MeshUtf8Decoder",
    "build_utf8zstd_encoder",
    "build_utf8zstd_decoder",
]
