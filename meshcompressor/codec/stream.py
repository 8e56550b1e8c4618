"""
Assembly and parsing of a complete compressed mesh stream.

Layout:
    [varint(vertex_count - 1)]
    [8 * vertex_count varints: attribute deltas, channel transposed, zigzagged]
    [3 * triangle_count varints: index deltas from the high-water mark]

There are no length fields; the attribute section length follows from the
header and the index section runs to the end of the stream.
"""

import logging
from typing import Sequence, Tuple

import numpy as np

from .delta import (
    NUM_CHANNELS,
    compress_attribs,
    compress_indices,
    decompress_attribs,
    decompress_indices,
)
from .utf8 import MAX_WORD, decode_varints, encode_varint

logger = logging.getLogger(__name__)

# An index delta can reach the vertex count, which must itself be a varint word
MAX_VERTICES = MAX_WORD


def compress_mesh(quantized: np.ndarray, indices: Sequence[int]) -> bytes:
    """
    Compress a quantized mesh into a single byte stream.

    The whole stream is built in memory; nothing is returned if any stage
    fails.

    Args:
        quantized: Quantized interleaved attributes, length 8 * vertex_count.
        indices: Optimized flat index list satisfying the high-water-mark
            invariant.

    Returns:
        The compressed stream.

    Raises:
        ValueError: If the attribute length is not a multiple of 8, the vertex
            count is not in (0, MAX_VERTICES), or the index list is not optimized.
    """
    quantized = np.asarray(quantized)
    if quantized.size % NUM_CHANNELS != 0:
        raise ValueError(
            f"Attribute stream length {quantized.size} is not a multiple of {NUM_CHANNELS}"
        )
    vertex_count = quantized.size // NUM_CHANNELS
    if not 0 < vertex_count < MAX_VERTICES:
        raise ValueError(f"Vertex count {vertex_count} is outside (0, {MAX_VERTICES})")

    header = encode_varint(vertex_count - 1)
    attribs = compress_attribs(quantized)
    index_bytes = compress_indices(indices)
    logger.debug(
        f"Compressed {vertex_count} vertices, {len(indices) // 3} triangles: "
        f"header {len(header)} B, attribs {len(attribs)} B, indices {len(index_bytes)} B"
    )
    return header + attribs + index_bytes


def decompress_mesh(data: bytes) -> Tuple[np.ndarray, np.ndarray]:
    """
    Parse a stream produced by `compress_mesh`.

    Args:
        data: The compressed stream.

    Returns:
        Tuple of (quantized attributes as uint16, flat indices as int64).

    Raises:
        ValueError: If the stream is truncated or malformed.
    """
    words = decode_varints(data)
    if not words:
        raise ValueError("Empty mesh stream")
    vertex_count = words[0] + 1
    attrib_end = 1 + NUM_CHANNELS * vertex_count
    if len(words) < attrib_end:
        raise ValueError(
            f"Stream holds {len(words) - 1} attribute codes, expected {attrib_end - 1}"
        )
    index_words = words[attrib_end:]
    if len(index_words) % 3 != 0:
        raise ValueError(f"Index count {len(index_words)} is not a multiple of 3")
    quantized = decompress_attribs(words[1:attrib_end], vertex_count)
    indices = decompress_indices(index_words)
    return quantized, indices
