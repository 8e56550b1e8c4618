"""
Per-group draw batches: flattened interleaved attributes plus triangle indices.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from .flatten import IndexFlattener, IndexTriple

POSITION_DIM = 3
TEXCOORD_DIM = 2
NORMAL_DIM = 3


@dataclass
class DrawMesh:
    """
    One output group of a mesh, ready for quantization.

    Attributes:
        name: Group label (texture path), "" for the default group.
        attribs: Interleaved attributes, shape (8 * N,), dtype float32, in
            the order position.xyz, texcoord.uv, normal.xyz.
        indices: Triangle list of flat indices, shape (3 * T,), dtype int64.
    """
    name: str
    attribs: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float32))
    indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))

    @property
    def num_vertices(self) -> int:
        return self.attribs.size // 8

    @property
    def num_triangles(self) -> int:
        return self.indices.size // 3


class DrawBatch:
    """
    Builds the DrawMesh of one group from raw index triples.

    The position, texcoord and normal source buffers are shared by every group
    of a mesh and may keep growing while triangles are added.
    """

    def __init__(
        self,
        positions: Sequence[float],
        texcoords: Sequence[float],
        normals: Sequence[float],
        name: str = "",
    ):
        self.name = name
        self._positions = positions
        self._texcoords = texcoords
        self._normals = normals
        self._flattener = IndexFlattener()
        self._flattener.reserve(1024)
        self._attribs: List[float] = []
        self._indices: List[int] = []

    @property
    def num_triangles(self) -> int:
        return len(self._indices) // 3

    def _lookup_attribs(self, position: int, texcoord: int, normal: int) -> List[float]:
        if not 0 <= position or position * POSITION_DIM + POSITION_DIM > len(self._positions):
            raise IndexError(f"Position index {position} out of range")
        record = list(self._positions[POSITION_DIM * position:POSITION_DIM * (position + 1)])

        if texcoord == -1:
            record.extend([0.0] * TEXCOORD_DIM)
        elif 0 <= texcoord and texcoord * TEXCOORD_DIM + TEXCOORD_DIM <= len(self._texcoords):
            record.extend(self._texcoords[TEXCOORD_DIM * texcoord:TEXCOORD_DIM * (texcoord + 1)])
        else:
            raise IndexError(f"Texcoord index {texcoord} out of range")

        if normal == -1:
            record.extend([0.0] * NORMAL_DIM)
        elif 0 <= normal and normal * NORMAL_DIM + NORMAL_DIM <= len(self._normals):
            record.extend(self._normals[NORMAL_DIM * normal:NORMAL_DIM * (normal + 1)])
        else:
            raise IndexError(f"Normal index {normal} out of range")
        return record

    def add_triangle(self, triples: Sequence[IndexTriple]) -> None:
        """
        Add one triangle.

        Every corner is looked up before the batch changes, so a triangle that
        raises leaves the batch as it was.

        Args:
            triples: Three 0-based (position, texcoord, normal) triples, with
                -1 marking an absent texcoord or normal.

        Raises:
            ValueError: If not exactly three triples are given.
            IndexError: If a triple references a missing source attribute.
        """
        if len(triples) != 3:
            raise ValueError(f"A triangle needs 3 corners, got {len(triples)}")
        records = [self._lookup_attribs(*triple) for triple in triples]
        for (position, texcoord, normal), record in zip(triples, records):
            flat_index, is_new = self._flattener.get_flat_index(position, texcoord, normal)
            if is_new:
                self._attribs.extend(record)
            self._indices.append(flat_index)

    def add_face(self, triples: Sequence[IndexTriple]) -> None:
        """
        Add a convex polygon as a triangle fan around its first corner.

        Args:
            triples: Three or more (position, texcoord, normal) triples.

        Raises:
            ValueError: If fewer than three corners are given.
        """
        if len(triples) < 3:
            raise ValueError(f"A face needs at least 3 corners, got {len(triples)}")
        pivot = triples[0]
        for i in range(1, len(triples) - 1):
            self.add_triangle((pivot, triples[i], triples[i + 1]))

    def draw_mesh(self) -> DrawMesh:
        """Snapshot the batch as a DrawMesh."""
        return DrawMesh(
            name=self.name,
            attribs=np.asarray(self._attribs, dtype=np.float32),
            indices=np.asarray(self._indices, dtype=np.int64),
        )
