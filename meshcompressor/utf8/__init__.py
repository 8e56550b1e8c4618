"""
UTF-8 varint mesh stream payloads and their container serialization.
"""

from .interface import Utf8MeshExtra, Utf8Payload, as_utf8_payload, quantized_to_utf8, utf8_to_quantized
from .serialize import Utf8Serializer, Utf8Deserializer

__all__ = [
    # interface.py
    'Utf8MeshExtra',
    'Utf8Payload',
    'quantized_to_utf8',
    'utf8_to_quantized',
    'as_utf8_payload',
    # serialize.py
    'Utf8Serializer',
    'Utf8Deserializer',
]
