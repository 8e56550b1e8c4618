from .batch import DrawBatch, DrawMesh, IndexFlattener
from .codec import compress_mesh, decompress_mesh
from .decoder import AbstractDecoder
from .deserializer import AbstractDeserializer
from .encoder import AbstractEncoder
from .optimize import optimize_mesh
from .payload import Payload
from .quant import Bounds, QuantConfig, QuantParams, quantize_mesh, dequantize_mesh
from .serializer import AbstractSerializer

__all__ = [
    "Payload",
    "AbstractEncoder",
    "AbstractDecoder",
    "AbstractSerializer",
    "AbstractDeserializer",
    "IndexFlattener",
    "DrawBatch",
    "DrawMesh",
    "Bounds",
    "QuantConfig",
    "QuantParams",
    "quantize_mesh",
    "dequantize_mesh",
    "optimize_mesh",
    "compress_mesh",
    "decompress_mesh",
]
