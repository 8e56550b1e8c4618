"""
Attribute quantization and dequantization.

All arithmetic is carried out in IEEE single precision with an exact
power-of-two scaling (ldexp) and explicit truncation toward zero, so the codes
are bit-identical across platforms.
"""

import numpy as np

from ..codec.delta import NUM_CHANNELS
from .params import QuantParams

_HALF = np.float32(0.5)


def _quantize(values, offsets, scales, bits) -> np.ndarray:
    values = np.asarray(values, dtype=np.float32)
    offsets = np.asarray(offsets, dtype=np.float32)
    scales = np.asarray(scales, dtype=np.float32)
    bits = np.asarray(bits, dtype=np.int32)

    shifted = values + offsets
    scaled = np.ldexp(shifted, bits).astype(np.float32)
    # A zero-range channel holds a single value, which maps to code 0
    ratio = np.divide(scaled, scales, out=np.zeros_like(scaled), where=scales != 0)
    codes = np.trunc(ratio - _HALF)
    # Out-of-range results wrap rather than clamp
    return (codes.astype(np.int64) & 0xFFFF).astype(np.uint16)


def quantize(value: float, offset: float, scale: float, bits: int) -> int:
    """
    Quantize a single value.

    Applies the formula:
        code = trunc(ldexp(value + offset, bits) / scale - 0.5)

    Args:
        value: The value to quantize.
        offset: Channel offset, normally minus the channel minimum.
        scale: Channel range.
        bits: Bit depth of the code.

    Returns:
        The unsigned code.
    """
    return int(_quantize(value, offset, scale, bits))


def quantize_attribs(attribs: np.ndarray, params: QuantParams) -> np.ndarray:
    """
    Quantize an interleaved attribute buffer.

    Args:
        attribs: Interleaved attributes, length 8 * N.
        params: Parameters derived from bounds enclosing `attribs`.

    Returns:
        uint16 codes, length 8 * N.
    """
    attribs = np.asarray(attribs, dtype=np.float32)
    if attribs.size % NUM_CHANNELS != 0:
        raise ValueError(
            f"Attribute buffer length {attribs.size} is not a multiple of {NUM_CHANNELS}"
        )
    records = attribs.reshape(-1, NUM_CHANNELS)
    return _quantize(records, params.offsets, params.scales, params.bits).ravel()


def dequantize_attribs(quantized: np.ndarray, params: QuantParams) -> np.ndarray:
    """
    Map codes back to the centre of their quantization bucket.

    Applies the formula:
        value = ldexp(code + 0.5, -bits) * scale - offset

    Args:
        quantized: uint16 codes, length 8 * N.
        params: The parameters used for quantization.

    Returns:
        float32 attributes, length 8 * N.
    """
    quantized = np.asarray(quantized)
    records = quantized.reshape(-1, NUM_CHANNELS).astype(np.float32)
    centred = np.ldexp(records + _HALF, -params.bits).astype(np.float32)
    return (centred * params.scales - params.offsets).astype(np.float32).ravel()


def quantization_step(params: QuantParams) -> np.ndarray:
    """Size of one quantization bucket per channel."""
    return np.ldexp(params.scales, -params.bits).astype(np.float32)


def estimate_quantization_error(attribs: np.ndarray, params: QuantParams) -> dict:
    """
    Estimate the quantization error statistics.

    Useful for debugging and validating quantization parameters.

    Args:
        attribs: Original interleaved attributes, length 8 * N.
        params: Quantization parameters.

    Returns:
        Dictionary of per-channel lists (8 entries each):
            - 'max_error': Maximum absolute error.
            - 'mean_error': Mean absolute error.
            - 'rmse': Root mean squared error.
            - 'relative_max_error': Max error relative to the step size.
    """
    attribs = np.asarray(attribs, dtype=np.float32)
    reconstructed = dequantize_attribs(quantize_attribs(attribs, params), params)

    error = np.abs(attribs - reconstructed).reshape(-1, NUM_CHANNELS).astype(np.float64)
    step = quantization_step(params).astype(np.float64)
    max_error = error.max(axis=0)

    return {
        'max_error': max_error.tolist(),
        'mean_error': error.mean(axis=0).tolist(),
        'rmse': np.sqrt((error ** 2).mean(axis=0)).tolist(),
        'relative_max_error': np.divide(
            max_error, step, out=np.zeros_like(max_error), where=step != 0
        ).tolist(),
    }
