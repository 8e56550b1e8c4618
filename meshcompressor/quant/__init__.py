"""
Bounds-driven fixed-bit quantization of interleaved mesh attributes.
"""

from .bounds import Bounds
from .params import MAX_BITS, QuantConfig, QuantParams, uniform_scale_from_bounds
from .mesh import QuantizedMeshPayload, quantize_mesh, dequantize_mesh
from .quant import (
    quantize,
    quantize_attribs,
    dequantize_attribs,
    quantization_step,
    estimate_quantization_error,
)

__all__ = [
    # bounds.py
    'Bounds',
    # params.py
    'MAX_BITS',
    'QuantConfig',
    'QuantParams',
    'uniform_scale_from_bounds',
    # quant.py
    'quantize',
    'quantize_attribs',
    'dequantize_attribs',
    'quantization_step',
    'estimate_quantization_error',
    # mesh.py
    'QuantizedMeshPayload',
    'quantize_mesh',
    'dequantize_mesh',
]
