"""
UTF-8 mesh stream payloads.

This module converts quantized mesh groups to and from the compact varint
stream, which carries only the vertex count, the attribute deltas and the
index deltas. Everything else a decoder needs (group name and quantization
parameters) travels in a separate extra payload.
"""

from dataclasses import dataclass
from typing import Optional

from ..codec.stream import compress_mesh, decompress_mesh
from ..payload import Payload
from ..quant.mesh import QuantizedMeshPayload
from ..quant.params import QuantParams


@dataclass
class Utf8MeshExtra(Payload):
    """
    Data of a mesh group that is not part of the varint stream.

    Attributes:
        name: Group label.
        params: Quantization parameters of the group.
    """
    name: str
    params: QuantParams


@dataclass
class Utf8Payload(Payload):
    """
    Payload holding one compressed mesh stream.

    Attributes:
        stream: The compressed mesh stream (valid UTF-8 text).
        extra: Optional additional payload for data not covered by the stream.
    """
    stream: bytes
    extra: Optional[Payload] = None


def quantized_to_utf8(payload: QuantizedMeshPayload) -> Utf8Payload:
    """
    Compress a quantized mesh group into a Utf8Payload.

    The index list must already satisfy the high-water-mark invariant.

    Raises:
        ValueError: If the group violates a stream precondition.
    """
    return Utf8Payload(
        stream=compress_mesh(payload.quantized, payload.indices),
        extra=Utf8MeshExtra(name=payload.name, params=payload.params),
    )


def utf8_to_quantized(payload: Utf8Payload) -> QuantizedMeshPayload:
    """Parse a Utf8Payload back into its quantized mesh group."""
    extra: Utf8MeshExtra = payload.extra
    if extra is None:
        raise ValueError("Utf8Payload carries no quantization parameters")
    quantized, indices = decompress_mesh(payload.stream)
    return QuantizedMeshPayload(
        name=extra.name,
        params=extra.params,
        quantized=quantized,
        indices=indices,
    )


def as_utf8_payload(payload: Payload) -> Utf8Payload:
    """Return `payload` as a Utf8Payload, compressing quantized groups."""
    if isinstance(payload, Utf8Payload):
        return payload
    if isinstance(payload, QuantizedMeshPayload):
        return quantized_to_utf8(payload)
    raise TypeError(f"Cannot convert {type(payload).__name__} to a Utf8Payload")
