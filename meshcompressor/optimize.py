"""
Index reordering ahead of index compression.

The index compressor codes each index against the high-water mark of the
indices before it, so every vertex must be introduced by the first triangle
that uses it. This stage renumbers vertices in order of first reference and
permutes the attribute buffer to match.
"""

import logging

import numpy as np

from .batch.drawbatch import DrawMesh
from .codec.delta import NUM_CHANNELS

logger = logging.getLogger(__name__)


def first_use_order(indices: np.ndarray, num_vertices: int) -> np.ndarray:
    """
    Compute the renumbering that orders vertices by first reference.

    Args:
        indices: Flat index list, values in [0, num_vertices).
        num_vertices: Number of vertices in the attribute buffer.

    Returns:
        int64 array `order` of the referenced vertices; `order[k]` is the old
        index of the vertex that becomes index k.
    """
    indices = np.asarray(indices, dtype=np.int64)
    if indices.size and (indices.min() < 0 or indices.max() >= num_vertices):
        raise ValueError(f"Index list references vertices outside [0, {num_vertices})")
    _, first = np.unique(indices, return_index=True)
    return indices[np.sort(first)]


def optimize_mesh(mesh: DrawMesh) -> DrawMesh:
    """
    Renumber a mesh so its index list satisfies the high-water-mark invariant.

    Triangle order is preserved and vertices no triangle references are
    dropped.

    Args:
        mesh: The DrawMesh to reorder.

    Returns:
        A new DrawMesh with permuted attributes and renumbered indices.
    """
    order = first_use_order(mesh.indices, mesh.num_vertices)
    remap = np.full(mesh.num_vertices, -1, dtype=np.int64)
    remap[order] = np.arange(order.size, dtype=np.int64)

    records = mesh.attribs.reshape(-1, NUM_CHANNELS)
    dropped = mesh.num_vertices - order.size
    if dropped:
        logger.debug(f"Dropping {dropped} unreferenced vertices from group '{mesh.name}'")

    return DrawMesh(
        name=mesh.name,
        attribs=records[order].ravel().astype(np.float32),
        indices=remap[mesh.indices],
    )
