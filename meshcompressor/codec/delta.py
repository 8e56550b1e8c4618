"""
Delta coding of quantized attribute and index streams.

Attributes are delta coded per channel in a transposed traversal (all values
of channel 0, then channel 1, ...) and the signed 16-bit deltas are zigzag
mapped to small unsigned codes. Indices are coded against the running
high-water mark of an optimized index list, so that freshly introduced
vertices cost a single zero.
"""

from typing import Sequence

import numpy as np

from .utf8 import encode_varints

# Number of channels in an interleaved attribute record
NUM_CHANNELS = 8

_WORD_MASK = 0xFFFF


def zigzag(delta):
    """
    Map a signed 16-bit delta to an unsigned code.

    0 -> 0, -1 -> 1, 1 -> 2, -2 -> 3, ... Inputs are first wrapped to the
    int16 range, so a modular uint16 difference can be passed directly.

    Args:
        delta: An int or an integer numpy array.

    Returns:
        The code as int, or a uint16 array for array input.
    """
    d = np.asarray(delta, dtype=np.int64)
    d = ((d + 0x8000) & _WORD_MASK) - 0x8000
    z = ((d >> 15) ^ (d << 1)) & _WORD_MASK
    return z.astype(np.uint16) if z.ndim else int(z)


def unzigzag(code):
    """
    Inverse of `zigzag`.

    Args:
        code: An int or an integer numpy array of unsigned 16-bit codes.

    Returns:
        The signed delta as int, or an int16 array for array input.
    """
    z = np.asarray(code, dtype=np.int64) & _WORD_MASK
    d = (z >> 1) ^ -(z & 1)
    return d.astype(np.int16) if d.ndim else int(d)


# =============================================================================
# Attributes
# =============================================================================

def attrib_deltas(quantized: np.ndarray) -> np.ndarray:
    """
    Compute the zigzagged, channel-transposed deltas of a quantized stream.

    Args:
        quantized: Quantized attributes, length 8 * N, any unsigned dtype
            holding 16-bit codes.

    Returns:
        uint16 array of length 8 * N ordered channel by channel.
    """
    quantized = np.asarray(quantized)
    if quantized.size % NUM_CHANNELS != 0:
        raise ValueError(
            f"Attribute stream length {quantized.size} is not a multiple of {NUM_CHANNELS}"
        )
    channels = quantized.reshape(-1, NUM_CHANNELS).T.astype(np.int64)
    # Modular uint16 subtraction against the previous value, starting from 0
    deltas = np.diff(channels, axis=1, prepend=0) & _WORD_MASK
    return zigzag(deltas.ravel())


def compress_attribs(quantized: np.ndarray) -> bytes:
    """Encode a quantized attribute stream as varint bytes."""
    return encode_varints(attrib_deltas(quantized))


def decompress_attribs(codes: Sequence[int], vertex_count: int) -> np.ndarray:
    """
    Rebuild quantized attributes from channel-transposed zigzag codes.

    Args:
        codes: Exactly 8 * vertex_count decoded varints.
        vertex_count: Number of vertices in the stream.

    Returns:
        Interleaved uint16 array of length 8 * vertex_count.
    """
    codes = np.asarray(codes, dtype=np.int64)
    if codes.size != NUM_CHANNELS * vertex_count:
        raise ValueError(
            f"Expected {NUM_CHANNELS * vertex_count} attribute codes, got {codes.size}"
        )
    deltas = unzigzag(codes).astype(np.int64).reshape(NUM_CHANNELS, vertex_count)
    channels = np.cumsum(deltas, axis=1) & _WORD_MASK
    return channels.T.ravel().astype(np.uint16)


# =============================================================================
# Indices
# =============================================================================

def index_deltas(indices: Sequence[int]) -> np.ndarray:
    """
    Compute the high-water-mark deltas of an optimized index list.

    Args:
        indices: Flat indices where every value is at most one greater than
            every value before it.

    Returns:
        uint16 array of `high_water_mark - index` values.

    Raises:
        ValueError: If an index references a vertex that has not been
            introduced yet.
    """
    deltas = np.empty(len(indices), dtype=np.uint16)
    high_water_mark = 0
    for n, index in enumerate(indices):
        index = int(index)
        if index < 0 or index > high_water_mark:
            raise ValueError(
                f"Index {index} at position {n} exceeds high-water mark {high_water_mark}"
            )
        deltas[n] = high_water_mark - index
        if index == high_water_mark:
            high_water_mark += 1
    return deltas


def compress_indices(indices: Sequence[int]) -> bytes:
    """Encode an optimized index list as varint bytes."""
    return encode_varints(index_deltas(indices))


def decompress_indices(deltas: Sequence[int]) -> np.ndarray:
    """
    Inverse of `index_deltas`.

    Args:
        deltas: Decoded high-water-mark deltas.

    Returns:
        int64 array of flat indices.
    """
    indices = np.empty(len(deltas), dtype=np.int64)
    high_water_mark = 0
    for n, delta in enumerate(deltas):
        index = high_water_mark - int(delta)
        if index < 0:
            raise ValueError(f"Delta {delta} at position {n} points before the first vertex")
        indices[n] = index
        if delta == 0:
            high_water_mark += 1
    return indices
