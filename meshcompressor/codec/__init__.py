"""
Mesh stream codec: varint byte encoding, delta coding and stream assembly.
"""

from .utf8 import MAX_WORD, encode_varint, encode_varints, decode_varints
from .delta import (
    NUM_CHANNELS,
    zigzag,
    unzigzag,
    attrib_deltas,
    compress_attribs,
    decompress_attribs,
    index_deltas,
    compress_indices,
    decompress_indices,
)
from .stream import MAX_VERTICES, compress_mesh, decompress_mesh

__all__ = [
    # utf8.py
    'MAX_WORD',
    'encode_varint',
    'encode_varints',
    'decode_varints',
    # delta.py
    'NUM_CHANNELS',
    'zigzag',
    'unzigzag',
    'attrib_deltas',
    'compress_attribs',
    'decompress_attribs',
    'index_deltas',
    'compress_indices',
    'decompress_indices',
    # stream.py
    'MAX_VERTICES',
    'compress_mesh',
    'decompress_mesh',
]
