"""
Quantization + Zstd encoder/decoder combination.

Groups are reordered and quantized, then the quantized arrays are pickled and
zstd compressed as they are. This is the baseline the delta-coded UTF-8
stream is measured against.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..batch.drawbatch import DrawMesh
from ..compress.zstd import PickleZstdDeserializer, PickleZstdSerializer
from ..decoder import AbstractDecoder
from ..deserializer import AbstractDeserializer
from ..encoder import AbstractEncoder
from ..optimize import optimize_mesh
from ..quant.mesh import QuantizedMeshPayload, dequantize_mesh, quantize_mesh
from ..quant.params import QuantConfig
from ..quant.quant import estimate_quantization_error
from ..serializer import AbstractSerializer
from .registry import Codec, register_codec

logger = logging.getLogger(__name__)


class MeshQuantEncoder(AbstractEncoder):
    """
    Encoder that reorders and quantizes every mesh group.

    Yields one QuantizedMeshPayload per group; subclasses convert it further
    in `pack`.
    """

    def __init__(
        self,
        serializer: AbstractSerializer,
        quant_config: Optional[QuantConfig] = None,
        optimize: bool = True,
    ):
        """
        Initialize the encoder.

        Args:
            serializer: The serializer to use for converting Payload to bytes.
            quant_config: Bit depths for quantization, the defaults if None.
            optimize: Whether to renumber vertices in first-use order before
                quantization. Meshes read through a DrawBatch already satisfy
                the index ordering the stream needs.
        """
        super().__init__(serializer)
        self._quant_config = quant_config if quant_config is not None else QuantConfig()
        self._optimize = optimize

    def quantize(self, mesh: DrawMesh) -> QuantizedMeshPayload:
        if self._optimize:
            mesh = optimize_mesh(mesh)
        payload = quantize_mesh(
            mesh,
            position_bits=self._quant_config.position_bits,
            texcoord_bits=self._quant_config.texcoord_bits,
            normal_bits=self._quant_config.normal_bits,
        )
        logger.info(
            f"Group '{mesh.name}': {mesh.num_vertices} vertices, {mesh.num_triangles} triangles"
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Group '{mesh.name}' params: {payload.params.to_dict()}")
            logger.debug(
                f"Group '{mesh.name}' error: {estimate_quantization_error(mesh.attribs, payload.params)}"
            )
        return payload

    def pack(self, mesh: DrawMesh) -> Iterator[QuantizedMeshPayload]:
        yield self.quantize(mesh)


class MeshQuantDecoder(AbstractDecoder):
    """Decoder that dequantizes QuantizedMeshPayload groups."""

    def __init__(self, deserializer: AbstractDeserializer):
        super().__init__(deserializer)

    def unpack(self, payload: QuantizedMeshPayload) -> Iterator[DrawMesh]:
        yield dequantize_mesh(payload)


@dataclass
class QuantZstdEncoderConfig:
    """Configuration for the Quantization + Zstd encoder."""
    quant: QuantConfig = field(default_factory=QuantConfig)
    optimize: bool = True
    zstd_level: int = 7


@dataclass
class QuantZstdDecoderConfig:
    """Configuration for the Quantization + Zstd decoder."""
    pass


def build_quantzstd_encoder(config: QuantZstdEncoderConfig) -> MeshQuantEncoder:
    """Build encoder from configuration."""
    return MeshQuantEncoder(
        serializer=PickleZstdSerializer(level=config.zstd_level),
        quant_config=QuantConfig(
            position_bits=config.quant.position_bits,
            texcoord_bits=config.quant.texcoord_bits,
            normal_bits=config.quant.normal_bits,
        ),
        optimize=config.optimize,
    )


def build_quantzstd_decoder(config: QuantZstdDecoderConfig) -> MeshQuantDecoder:
    """Build decoder from configuration."""
    return MeshQuantDecoder(deserializer=PickleZstdDeserializer())


QUANT_ZSTD = register_codec(Codec(
    name="quantzstd",
    build_encoder=build_quantzstd_encoder,
    encoder_config=QuantZstdEncoderConfig,
    build_decoder=build_quantzstd_decoder,
    decoder_config=QuantZstdDecoderConfig,
    description="Quantized arrays pickled into a zstd container (baseline)",
))
