"""
Quantization of whole draw meshes.
"""

from dataclasses import dataclass

import numpy as np

from ..batch.drawbatch import DrawMesh
from ..payload import Payload
from .bounds import Bounds
from .params import (
    DEFAULT_NORMAL_BITS,
    DEFAULT_POSITION_BITS,
    DEFAULT_TEXCOORD_BITS,
    QuantParams,
)
from .quant import dequantize_attribs, quantize_attribs


@dataclass
class QuantizedMeshPayload(Payload):
    """
    Payload of one quantized mesh group.

    Attributes:
        name: Group label.
        params: Quantization parameters of the group.
        quantized: Quantized interleaved attributes, shape (8 * N,), uint16.
        indices: Triangle list of flat indices, shape (3 * T,), int64.
    """
    name: str
    params: QuantParams
    quantized: np.ndarray
    indices: np.ndarray

    @property
    def num_vertices(self) -> int:
        return self.quantized.size // 8


def quantize_mesh(
    mesh: DrawMesh,
    position_bits: int = DEFAULT_POSITION_BITS,
    texcoord_bits: int = DEFAULT_TEXCOORD_BITS,
    normal_bits: int = DEFAULT_NORMAL_BITS,
) -> QuantizedMeshPayload:
    """
    Derive parameters from the bounds of a mesh and quantize it.

    Args:
        mesh: The DrawMesh to quantize.
        position_bits: Bit depth of the position channels.
        texcoord_bits: Bit depth of the texcoord channels.
        normal_bits: Bit depth of the normal channels.

    Returns:
        The quantized mesh; indices are passed through unchanged.
    """
    bounds = Bounds.from_attribs(mesh.attribs)
    params = QuantParams.from_bounds(
        bounds,
        position_bits=position_bits,
        texcoord_bits=texcoord_bits,
        normal_bits=normal_bits,
    )
    return QuantizedMeshPayload(
        name=mesh.name,
        params=params,
        quantized=quantize_attribs(mesh.attribs, params),
        indices=np.asarray(mesh.indices, dtype=np.int64),
    )


def dequantize_mesh(payload: QuantizedMeshPayload) -> DrawMesh:
    """Reconstruct a DrawMesh from its quantized form."""
    return DrawMesh(
        name=payload.name,
        attribs=dequantize_attribs(payload.quantized, payload.params),
        indices=np.asarray(payload.indices, dtype=np.int64),
    )
