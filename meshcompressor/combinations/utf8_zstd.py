"""
Quantization + UTF-8 delta stream + Zstd encoder/decoder combination.

Each group is reordered, quantized and compressed to the varint mesh stream;
the stream and the group's quantization parameters are then framed and zstd
compressed into the container.
"""

from dataclasses import dataclass, field
from typing import Iterator

from ..batch.drawbatch import DrawMesh
from ..quant.mesh import dequantize_mesh
from ..quant.params import QuantConfig
from ..utf8.interface import Utf8Payload, quantized_to_utf8, utf8_to_quantized
from ..utf8.serialize import Utf8Serializer, Utf8Deserializer
from .quant_zstd import MeshQuantDecoder, MeshQuantEncoder
from .registry import Codec, register_codec


class MeshUtf8Encoder(MeshQuantEncoder):
    """Encoder producing one Utf8Payload per mesh group."""

    def pack(self, mesh: DrawMesh) -> Iterator[Utf8Payload]:
        yield quantized_to_utf8(self.quantize(mesh))


class MeshUtf8Decoder(MeshQuantDecoder):
    """Decoder rebuilding mesh groups from Utf8Payload streams."""

    def unpack(self, payload: Utf8Payload) -> Iterator[DrawMesh]:
        yield dequantize_mesh(utf8_to_quantized(payload))


@dataclass
class Utf8ZstdEncoderConfig:
    """Configuration for the Quantization + UTF-8 + Zstd encoder."""
    quant: QuantConfig = field(default_factory=QuantConfig)
    optimize: bool = True
    zstd_level: int = 7


@dataclass
class Utf8ZstdDecoderConfig:
    """Configuration for the Quantization + UTF-8 + Zstd decoder."""
    pass


def build_utf8zstd_encoder(config: Utf8ZstdEncoderConfig) -> MeshUtf8Encoder:
    """Build encoder from configuration."""
    return MeshUtf8Encoder(
        serializer=Utf8Serializer(zstd_level=config.zstd_level),
        quant_config=QuantConfig(
            position_bits=config.quant.position_bits,
            texcoord_bits=config.quant.texcoord_bits,
            normal_bits=config.quant.normal_bits,
        ),
        optimize=config.optimize,
    )


def build_utf8zstd_decoder(config: Utf8ZstdDecoderConfig) -> MeshUtf8Decoder:
    """Build decoder from configuration."""
    return MeshUtf8Decoder(deserializer=Utf8Deserializer())


UTF8_ZSTD = register_codec(Codec(
    name="utf8zstd",
    build_encoder=build_utf8zstd_encoder,
    encoder_config=Utf8ZstdEncoderConfig,
    build_decoder=build_utf8zstd_decoder,
    decoder_config=Utf8ZstdDecoderConfig,
    description="Delta-coded UTF-8 mesh streams in a zstd container",
))
