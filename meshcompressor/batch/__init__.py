"""
Vertex deduplication and per-group draw batch construction.
"""

from .flatten import IndexFlattener, Assigned, UNASSIGNED, AMBIGUOUS
from .drawbatch import DrawBatch, DrawMesh

__all__ = [
    # flatten.py
    'IndexFlattener',
    'Assigned',
    'UNASSIGNED',
    'AMBIGUOUS',
    # drawbatch.py
    'DrawBatch',
    'DrawMesh',
]
