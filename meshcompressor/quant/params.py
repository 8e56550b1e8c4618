"""
Derivation of per-channel quantization parameters from bounds.
"""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from .bounds import Bounds

POSITION_CHANNELS = slice(0, 3)
TEXCOORD_CHANNELS = slice(3, 5)
NORMAL_CHANNELS = slice(5, 8)

DEFAULT_POSITION_BITS = 14
DEFAULT_TEXCOORD_BITS = 10
DEFAULT_NORMAL_BITS = 10

# Zigzagged deltas of 14-bit codes stay below 0x8000, inside the varint range
MAX_BITS = 14

# Normals are assumed to lie in [-1, 1]
NORMAL_OFFSET = 1.0
NORMAL_SCALE = 2.0


def uniform_scale_from_bounds(bounds: Bounds) -> np.float32:
    """Largest extent of the three position channels."""
    extents = bounds.maxes[POSITION_CHANNELS] - bounds.mins[POSITION_CHANNELS]
    return extents.max()


@dataclass
class QuantConfig:
    """Bit depths used when deriving quantization parameters."""
    position_bits: int = DEFAULT_POSITION_BITS
    texcoord_bits: int = DEFAULT_TEXCOORD_BITS
    normal_bits: int = DEFAULT_NORMAL_BITS


@dataclass
class QuantParams:
    """
    Offset, scale and bit depth of each attribute channel.

    A value v of channel j is quantized as
        trunc(ldexp(v + offsets[j], bits[j]) / scales[j] - 0.5)

    Attributes:
        offsets: Per-channel offsets, shape (8,), float32.
        scales: Per-channel ranges, shape (8,), float32.
        bits: Per-channel bit depths, shape (8,), int32.
    """
    offsets: np.ndarray
    scales: np.ndarray
    bits: np.ndarray

    @classmethod
    def from_bounds(
        cls,
        bounds: Bounds,
        position_bits: int = DEFAULT_POSITION_BITS,
        texcoord_bits: int = DEFAULT_TEXCOORD_BITS,
        normal_bits: int = DEFAULT_NORMAL_BITS,
    ) -> "QuantParams":
        """
        Derive parameters from the bounds of the buffer to be quantized.

        Positions share one scale so the model keeps its aspect ratio;
        texcoords are scaled per axis; normals use a fixed [-1, 1] range.

        Args:
            bounds: Bounds enclosing every record that will be quantized.
            position_bits: Bit depth of the position channels.
            texcoord_bits: Bit depth of the texcoord channels.
            normal_bits: Bit depth of the normal channels.

        Returns:
            The derived QuantParams.

        Raises:
            ValueError: If the bounds are empty or a bit depth is not in [1, MAX_BITS].
        """
        if bounds.is_empty():
            raise ValueError("Cannot derive quantization parameters from empty bounds")
        for name, b in (("position", position_bits), ("texcoord", texcoord_bits), ("normal", normal_bits)):
            if not 1 <= b <= MAX_BITS:
                raise ValueError(f"{name}_bits must be in [1, {MAX_BITS}], got {b}")

        offsets = np.empty(8, dtype=np.float32)
        scales = np.empty(8, dtype=np.float32)
        bits = np.empty(8, dtype=np.int32)

        offsets[POSITION_CHANNELS] = -bounds.mins[POSITION_CHANNELS]
        scales[POSITION_CHANNELS] = uniform_scale_from_bounds(bounds)
        bits[POSITION_CHANNELS] = position_bits

        offsets[TEXCOORD_CHANNELS] = -bounds.mins[TEXCOORD_CHANNELS]
        scales[TEXCOORD_CHANNELS] = bounds.maxes[TEXCOORD_CHANNELS] - bounds.mins[TEXCOORD_CHANNELS]
        bits[TEXCOORD_CHANNELS] = texcoord_bits

        offsets[NORMAL_CHANNELS] = NORMAL_OFFSET
        scales[NORMAL_CHANNELS] = NORMAL_SCALE
        bits[NORMAL_CHANNELS] = normal_bits

        return cls(offsets=offsets, scales=scales, bits=bits)

    def to_dict(self) -> Dict[str, List]:
        """Plain-list form, suitable for JSON."""
        return {
            "offsets": self.offsets.tolist(),
            "scales": self.scales.tolist(),
            "bits": self.bits.tolist(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, List]) -> "QuantParams":
        return cls(
            offsets=np.asarray(d["offsets"], dtype=np.float32),
            scales=np.asarray(d["scales"], dtype=np.float32),
            bits=np.asarray(d["bits"], dtype=np.int32),
        )
