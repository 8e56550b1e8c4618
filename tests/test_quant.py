import numpy as np
import pytest

from meshcompressor.codec import compress_attribs, decode_varints
from meshcompressor.quant import (
    MAX_BITS,
    Bounds,
    QuantParams,
    dequantize_attribs,
    dequantize_mesh,
    estimate_quantization_error,
    quantization_step,
    quantize,
    quantize_attribs,
    quantize_mesh,
)
from meshcompressor.batch import DrawMesh


def random_attribs(n: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    positions = rng.uniform(-50.0, 120.0, size=(n, 3))
    texcoords = rng.uniform(0.0, 1.0, size=(n, 2))
    normals = rng.normal(size=(n, 3))
    normals /= np.linalg.norm(normals, axis=1, keepdims=True)
    return np.hstack([positions, texcoords, normals]).astype(np.float32).ravel()


# ------------------------------------------------------------------------------
# Bounds
# ------------------------------------------------------------------------------

def test_bounds_start_empty():
    bounds = Bounds()
    assert bounds.is_empty()
    assert np.all(bounds.mins == np.inf)
    assert np.all(bounds.maxes == -np.inf)


def test_bounds_enclose_and_clear():
    bounds = Bounds()
    bounds.enclose([1, 2, 3, 0.5, 0.25, 0, 0, 1])
    bounds.enclose([-1, 4, 3, 0.0, 1.00, 0, 1, 0])
    assert not bounds.is_empty()
    np.testing.assert_array_equal(bounds.mins, [-1, 2, 3, 0, 0.25, 0, 0, 0])
    np.testing.assert_array_equal(bounds.maxes, [1, 4, 3, 0.5, 1, 0, 1, 1])
    assert bounds.mins.dtype == np.float32

    bounds.clear()
    assert bounds.is_empty()


def test_bounds_reject_bad_input():
    bounds = Bounds()
    with pytest.raises(ValueError):
        bounds.enclose(np.zeros(7))
    with pytest.raises(ValueError):
        bounds.enclose([np.nan, 0, 0, 0, 0, 0, 0, 0])
    with pytest.raises(ValueError):
        bounds.enclose([np.inf, 0, 0, 0, 0, 0, 0, 0])
    assert bounds.is_empty()


# ------------------------------------------------------------------------------
# QuantParams
# ------------------------------------------------------------------------------

def test_params_from_bounds():
    bounds = Bounds.from_attribs([
        -1, 0, 2, 0.25, 0.0, 0, 0, 1,
        3, 1, 2, 0.75, 0.5, 0, 0, 1,
    ])
    params = QuantParams.from_bounds(bounds)
    np.testing.assert_array_equal(params.offsets, [1, 0, -2, -0.25, 0, 1, 1, 1])
    # positions share the largest extent, texcoords are scaled per axis
    np.testing.assert_array_equal(params.scales, [4, 4, 4, 0.5, 0.5, 2, 2, 2])
    np.testing.assert_array_equal(params.bits, [14, 14, 14, 10, 10, 10, 10, 10])


def test_params_custom_bits():
    bounds = Bounds.from_attribs(random_attribs(10))
    params = QuantParams.from_bounds(bounds, position_bits=12, texcoord_bits=8, normal_bits=6)
    np.testing.assert_array_equal(params.bits, [12, 12, 12, 8, 8, 6, 6, 6])
    with pytest.raises(ValueError):
        QuantParams.from_bounds(bounds, position_bits=MAX_BITS + 1)
    with pytest.raises(ValueError):
        QuantParams.from_bounds(bounds, normal_bits=0)


def test_widest_bit_depth_stays_encodable():
    attribs = random_attribs(300)
    params = QuantParams.from_bounds(
        Bounds.from_attribs(attribs), position_bits=MAX_BITS, texcoord_bits=MAX_BITS, normal_bits=MAX_BITS
    )
    codes = quantize_attribs(attribs, params)
    assert decode_varints(compress_attribs(codes))


def test_params_require_bounds():
    with pytest.raises(ValueError):
        QuantParams.from_bounds(Bounds())


def test_params_dict_form():
    params = QuantParams.from_bounds(Bounds.from_attribs(random_attribs(10)))
    restored = QuantParams.from_dict(params.to_dict())
    np.testing.assert_array_equal(restored.offsets, params.offsets)
    np.testing.assert_array_equal(restored.scales, params.scales)
    np.testing.assert_array_equal(restored.bits, params.bits)


# ------------------------------------------------------------------------------
# quantize / dequantize
# ------------------------------------------------------------------------------

def test_quantize_single_values():
    # Minimum maps to 0, maximum to 2^bits - 1
    assert quantize(-3.0, 3.0, 10.0, 14) == 0
    assert quantize(7.0, 3.0, 10.0, 14) == (1 << 14) - 1
    assert quantize(2.0, 3.0, 10.0, 14) == 8191
    assert quantize(-1.0, 1.0, 2.0, 10) == 0
    assert quantize(1.0, 1.0, 2.0, 10) == 1023
    assert quantize(0.0, 1.0, 2.0, 10) == 511


def test_quantize_zero_range_channel():
    assert quantize(5.0, -5.0, 0.0, 14) == 0
    attribs = np.array([0, 1, 2, 0, 0, 0, 0, 1, 1, 1, 2, 1, 0, 0, 0, 1], dtype=np.float32)
    params = QuantParams.from_bounds(Bounds.from_attribs(attribs))
    quantized = quantize_attribs(attribs, params)
    # texcoord v never varies
    assert quantized[4] == 0
    assert quantized[12] == 0


def test_quantized_codes_stay_in_range():
    attribs = random_attribs(500)
    params = QuantParams.from_bounds(Bounds.from_attribs(attribs))
    codes = quantize_attribs(attribs, params).reshape(-1, 8)
    assert codes.dtype == np.uint16
    assert np.all(codes < (1 << params.bits.astype(np.int64)))


def test_dequantize_error_within_one_step():
    attribs = random_attribs(500)
    params = QuantParams.from_bounds(Bounds.from_attribs(attribs))
    restored = dequantize_attribs(quantize_attribs(attribs, params), params)
    assert restored.dtype == np.float32

    error = np.abs(restored - attribs).reshape(-1, 8)
    step = quantization_step(params)
    assert np.all(error <= step * 1.01 + 1e-4)


def test_quantization_is_deterministic():
    attribs = random_attribs(100)
    params = QuantParams.from_bounds(Bounds.from_attribs(attribs))
    np.testing.assert_array_equal(
        quantize_attribs(attribs, params),
        quantize_attribs(attribs.copy(), params),
    )


def test_estimate_quantization_error():
    attribs = random_attribs(200)
    params = QuantParams.from_bounds(Bounds.from_attribs(attribs))
    stats = estimate_quantization_error(attribs, params)
    assert set(stats) == {'max_error', 'mean_error', 'rmse', 'relative_max_error'}
    for values in stats.values():
        assert len(values) == 8
    assert all(r <= 1.01 for r in stats['relative_max_error'])


# ------------------------------------------------------------------------------
# Mesh level
# ------------------------------------------------------------------------------

def test_quantize_mesh_round_trip():
    attribs = random_attribs(4)
    mesh = DrawMesh(name="tex.png", attribs=attribs, indices=np.array([0, 1, 2, 0, 2, 3]))
    payload = quantize_mesh(mesh, position_bits=12)
    assert payload.name == "tex.png"
    assert payload.num_vertices == 4
    assert payload.params.bits[0] == 12

    restored = dequantize_mesh(payload)
    assert restored.name == "tex.png"
    np.testing.assert_array_equal(restored.indices, mesh.indices)
    step = np.tile(quantization_step(payload.params), 4)
    assert np.all(np.abs(restored.attribs - attribs) <= step * 1.01 + 1e-4)
