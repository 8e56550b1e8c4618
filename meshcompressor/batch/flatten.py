"""
Flattening of (position, texcoord, normal) index triples into dense indices.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple, Union


class _Unassigned:
    """Table entry for a position that has not been seen yet."""

    def __repr__(self) -> str:
        return "UNASSIGNED"


class _Ambiguous:
    """Table entry for a position seen with more than one texcoord/normal pair."""

    def __repr__(self) -> str:
        return "AMBIGUOUS"


UNASSIGNED = _Unassigned()
AMBIGUOUS = _Ambiguous()


@dataclass(frozen=True)
class Assigned:
    """Table entry for a position seen with exactly one texcoord/normal pair."""
    flat_index: int
    texcoord: int
    normal: int


TableEntry = Union[_Unassigned, _Ambiguous, Assigned]
IndexTriple = Tuple[int, int, int]


class IndexFlattener:
    """
    Assigns a dense flat index to every distinct index triple.

    Most positions in a mesh carry a single texcoord/normal combination, so the
    flattener keeps a table indexed by position that answers those in O(1).
    Positions on seams, which carry several combinations, are marked ambiguous
    in the table and resolved through a dict keyed by the full triple.

    Flat indices are assigned 0, 1, 2, ... in order of first occurrence, and a
    triple keeps its flat index for the lifetime of the flattener.

    Example:
        flattener = IndexFlattener()
        flattener.get_flat_index(0, 0, 0)  # (0, True)
        flattener.get_flat_index(0, 0, 0)  # (0, False)
        flattener.get_flat_index(0, 1, 0)  # (1, True)
    """

    def __init__(self, num_positions: int = 0):
        """
        Initialize the flattener.

        Args:
            num_positions: Initial size of the position table. The table
                grows on demand.
        """
        self._count = 0
        self._table: List[TableEntry] = [UNASSIGNED] * num_positions
        self._map: Dict[IndexTriple, int] = {}

    def count(self) -> int:
        """Number of distinct triples assigned so far."""
        return self._count

    def reserve(self, size: int) -> None:
        """Grow the position table to at least `size` entries."""
        if size > len(self._table):
            self._table.extend([UNASSIGNED] * (size - len(self._table)))

    def _next_index(self) -> int:
        flat_index = self._count
        self._count += 1
        return flat_index

    def get_flat_index(self, position: int, texcoord: int, normal: int) -> Tuple[int, bool]:
        """
        Look up or assign the flat index of a triple.

        Args:
            position: 0-based position index.
            texcoord: 0-based texcoord index, or -1 if absent.
            normal: 0-based normal index, or -1 if absent.

        Returns:
            Tuple of (flat_index, is_new). is_new is True only on the first
            call for this triple.

        Raises:
            ValueError: If the position index is negative.
        """
        if position < 0:
            raise ValueError(f"Position index must be non-negative, got {position}")
        if position >= len(self._table):
            self.reserve(position + 1)

        entry = self._table[position]
        if entry is UNASSIGNED:
            flat_index = self._next_index()
            self._table[position] = Assigned(flat_index, texcoord, normal)
            return flat_index, True
        if entry is AMBIGUOUS:
            return self._get_from_map((position, texcoord, normal))
        if entry.texcoord == texcoord and entry.normal == normal:
            return entry.flat_index, False

        # Second combination at this position: move both triples to the map
        self._map[(position, entry.texcoord, entry.normal)] = entry.flat_index
        self._table[position] = AMBIGUOUS
        flat_index = self._next_index()
        self._map[(position, texcoord, normal)] = flat_index
        return flat_index, True

    def _get_from_map(self, triple: IndexTriple) -> Tuple[int, bool]:
        flat_index = self._map.get(triple)
        if flat_index is not None:
            return flat_index, False
        flat_index = self._next_index()
        self._map[triple] = flat_index
        return flat_index, True
