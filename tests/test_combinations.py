import json

import numpy as np
import pytest
import zstandard as zstd
from omegaconf import OmegaConf

from meshcompressor.__main__ import do_decode, do_encode, do_export, do_import, main, make_job_config
from meshcompressor.batch import DrawMesh
from meshcompressor.codec import decode_varints, decompress_mesh
from meshcompressor.compress.zstd import PickleZstdSerializer
from meshcompressor.combinations import (
    CODECS,
    Codec,
    MeshQuantEncoder,
    QuantZstdDecoderConfig,
    QuantZstdEncoderConfig,
    Utf8ZstdDecoderConfig,
    Utf8ZstdEncoderConfig,
    build_quantzstd_decoder,
    build_quantzstd_encoder,
    build_utf8zstd_decoder,
    build_utf8zstd_encoder,
    get_codec,
    register_codec,
)
from meshcompressor.io import (
    MANIFEST_NAME,
    BytesReader,
    BytesWriter,
    ObjReader,
    Utf8StreamReader,
    WavefrontObjFile,
)
from meshcompressor.optimize import optimize_mesh
from meshcompressor.quant import Bounds, QuantConfig, QuantParams, dequantize_attribs, quantization_step
from meshcompressor.utf8 import Utf8Deserializer, Utf8Payload, Utf8Serializer

GRID_OBJ_HEADER = "mtllib grid.mtl\n"
GRID_MTL = "newmtl tiles\nmap_Kd tiles.png\n"


def grid_obj(size: int = 6) -> str:
    """A size x size vertex grid, left half untextured, right half on tiles.png."""
    lines = [GRID_OBJ_HEADER]
    for y in range(size):
        for x in range(size):
            lines.append(f"v {x * 0.5} {y * 0.25} {(x * y) % 3 * 0.1}\n")
            lines.append(f"vt {x / (size - 1)} {y / (size - 1)}\n")
    lines.append("vn 0 0 1\nvn 0 1 0\n")
    for half, prefix in ((range(0, size // 2), ""), (range(size // 2, size - 1), "usemtl tiles\n")):
        lines.append(prefix)
        for y in range(size - 1):
            for x in half:
                a = y * size + x + 1
                b, c, d = a + 1, a + size + 1, a + size
                n = 1 + (x + y) % 2
                lines.append(f"f {a}/{a}/{n} {b}/{b}/{n} {c}/{c}/{n} {d}/{d}/{n}\n")
    return "".join(lines)


def write_grid(directory) -> str:
    (directory / "grid.mtl").write_text(GRID_MTL)
    path = directory / "grid.obj"
    path.write_text(grid_obj())
    return str(path)


def grid_meshes(directory):
    return list(ObjReader(write_grid(directory)).read())


def shuffled_mesh() -> DrawMesh:
    """A mesh whose vertices are not in first-use order."""
    rng = np.random.default_rng(3)
    attribs = rng.uniform(-1.0, 1.0, size=(20, 8)).astype(np.float32)
    return DrawMesh(name="shuffled", attribs=attribs.ravel(), indices=rng.permutation(20)[:18])


def roundtrip(encoder, decoder, meshes, chunk: int = 17):
    data = b"".join(encoder.encode_stream(iter(meshes)))
    chunks = [data[i: i + chunk] for i in range(0, len(data), chunk)]
    return data, list(decoder.decode_stream(iter(chunks)))


def assert_close_to(decoded: DrawMesh, source: DrawMesh):
    expected = optimize_mesh(source)
    assert decoded.name == source.name
    np.testing.assert_array_equal(decoded.indices, expected.indices)
    step = quantization_step(QuantParams.from_bounds(Bounds.from_attribs(expected.attribs)))
    error = np.abs(decoded.attribs - expected.attribs).reshape(-1, 8)
    assert np.all(error <= step * 1.01 + 1e-5)


# ------------------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------------------

def test_registry_contents():
    assert {"utf8zstd", "quantzstd"} <= set(CODECS)
    assert get_codec("utf8zstd").encoder_config is Utf8ZstdEncoderConfig
    assert get_codec("quantzstd").decoder_config is QuantZstdDecoderConfig
    with pytest.raises(KeyError):
        get_codec("draco")


def test_duplicate_registration_rejected():
    with pytest.raises(ValueError):
        register_codec(Codec(
            name="utf8zstd",
            build_encoder=build_utf8zstd_encoder,
            encoder_config=Utf8ZstdEncoderConfig,
            build_decoder=build_utf8zstd_decoder,
            decoder_config=Utf8ZstdDecoderConfig,
        ))


# ------------------------------------------------------------------------------
# Pipelines
# ------------------------------------------------------------------------------

@pytest.mark.parametrize("build_encoder, build_decoder, encoder_cfg, decoder_cfg", [
    (build_utf8zstd_encoder, build_utf8zstd_decoder, Utf8ZstdEncoderConfig, Utf8ZstdDecoderConfig),
    (build_quantzstd_encoder, build_quantzstd_decoder, QuantZstdEncoderConfig, QuantZstdDecoderConfig),
])
def test_stream_round_trip(tmp_path, build_encoder, build_decoder, encoder_cfg, decoder_cfg):
    meshes = grid_meshes(tmp_path) + [shuffled_mesh()]
    _, decoded = roundtrip(build_encoder(encoder_cfg()), build_decoder(decoder_cfg()), meshes)
    assert [m.name for m in decoded] == ["", "tiles.png", "shuffled"]
    for got, source in zip(decoded, meshes):
        assert_close_to(got, source)


def test_codecs_agree_on_quantized_values(tmp_path):
    meshes = grid_meshes(tmp_path)
    _, via_utf8 = roundtrip(
        build_utf8zstd_encoder(Utf8ZstdEncoderConfig()),
        build_utf8zstd_decoder(Utf8ZstdDecoderConfig()),
        meshes,
    )
    _, via_pickle = roundtrip(
        build_quantzstd_encoder(QuantZstdEncoderConfig()),
        build_quantzstd_decoder(QuantZstdDecoderConfig()),
        meshes,
    )
    for a, b in zip(via_utf8, via_pickle):
        np.testing.assert_array_equal(a.attribs, b.attribs)
        np.testing.assert_array_equal(a.indices, b.indices)


def test_encoding_is_deterministic(tmp_path):
    meshes = grid_meshes(tmp_path)
    first = b"".join(build_utf8zstd_encoder(Utf8ZstdEncoderConfig()).encode_stream(iter(meshes)))
    second = b"".join(build_utf8zstd_encoder(Utf8ZstdEncoderConfig()).encode_stream(iter(meshes)))
    assert first == second


def test_fewer_bits_give_larger_error(tmp_path):
    mesh = grid_meshes(tmp_path)[0]
    config = Utf8ZstdEncoderConfig()
    config.quant.position_bits = 6
    _, decoded = roundtrip(build_utf8zstd_encoder(config), build_utf8zstd_decoder(Utf8ZstdDecoderConfig()), [mesh])
    coarse = np.abs(decoded[0].attribs - optimize_mesh(mesh).attribs).reshape(-1, 8)[:, :3].max()

    _, decoded = roundtrip(
        build_utf8zstd_encoder(Utf8ZstdEncoderConfig()), build_utf8zstd_decoder(Utf8ZstdDecoderConfig()), [mesh]
    )
    fine = np.abs(decoded[0].attribs - optimize_mesh(mesh).attribs).reshape(-1, 8)[:, :3].max()
    assert fine < coarse


def test_unoptimized_mesh_fails_without_reordering():
    config = Utf8ZstdEncoderConfig(optimize=False)
    encoder = build_utf8zstd_encoder(config)
    with pytest.raises(ValueError):
        list(encoder.encode_stream(iter([shuffled_mesh()])))


def test_bit_depth_beyond_varint_range_rejected_before_writing(tmp_path):
    meshes = grid_meshes(tmp_path)
    config = Utf8ZstdEncoderConfig(quant=QuantConfig(position_bits=15))
    path = tmp_path / "out.bin"
    with pytest.raises(ValueError):
        BytesWriter(str(path)).write(build_utf8zstd_encoder(config).encode_stream(iter(meshes)))
    assert not path.exists()


def test_encoders_get_their_own_quant_config():
    first = MeshQuantEncoder(PickleZstdSerializer())
    second = MeshQuantEncoder(PickleZstdSerializer())
    assert first._quant_config == QuantConfig()
    assert first._quant_config is not second._quant_config


def test_empty_stream_decodes_to_nothing():
    _, decoded = roundtrip(
        build_utf8zstd_encoder(Utf8ZstdEncoderConfig()),
        build_utf8zstd_decoder(Utf8ZstdDecoderConfig()),
        [],
    )
    assert decoded == []


# ------------------------------------------------------------------------------
# Container
# ------------------------------------------------------------------------------

def test_utf8_container_carries_the_stream_verbatim():
    serializer = Utf8Serializer()
    payload = Utf8Payload(stream="héllo".encode("utf-8"), extra=None)
    data = b"".join(serializer.serialize_frame(payload)) + b"".join(serializer.flush())

    deserializer = Utf8Deserializer()
    payloads = list(deserializer.deserialize_frame(data)) + list(deserializer.flush())
    assert payloads == [payload]


def test_truncated_container_rejected():
    deserializer = Utf8Deserializer()
    # a frame header announcing more bytes than follow
    data = zstd.ZstdCompressor().compress(b"\x00\x00\x00\x64abc")
    assert list(deserializer.deserialize_frame(data)) == []
    with pytest.raises(ValueError):
        list(deserializer.flush())


def test_container_stream_is_valid_utf8(tmp_path):
    meshes = grid_meshes(tmp_path)
    encoder = build_utf8zstd_encoder(Utf8ZstdEncoderConfig())
    payloads = [p for mesh in meshes for p in encoder.pack(mesh)]
    for payload in payloads:
        payload.stream.decode("utf-8")
        words = decode_varints(payload.stream)
        mesh = optimize_mesh(next(m for m in meshes if m.name == payload.extra.name))
        assert words[0] == mesh.num_vertices - 1
        assert len(words) == 1 + 8 * mesh.num_vertices + 3 * mesh.num_triangles


# ------------------------------------------------------------------------------
# Files and CLI
# ------------------------------------------------------------------------------

def test_bytes_writer_is_atomic(tmp_path):
    path = tmp_path / "out.bin"

    def failing():
        yield b"abc"
        raise RuntimeError("encoder failed")

    with pytest.raises(RuntimeError):
        BytesWriter(str(path)).write(failing())
    assert list(tmp_path.iterdir()) == []

    assert BytesWriter(str(path)).write(iter([b"abc", b"de"])) == 5
    assert b"".join(BytesReader(str(path), chunk_size=2).read()) == b"abcde"
    with pytest.raises(FileExistsError):
        BytesWriter(str(path)).write(iter([b"x"]))


@pytest.mark.parametrize("codec_name", ["utf8zstd", "quantzstd"])
def test_encode_decode_files(tmp_path, codec_name):
    write_grid(tmp_path)
    codec = get_codec(codec_name)

    encode_cfg = OmegaConf.structured(make_job_config("encode", codec))
    encode_cfg.input.path = str(tmp_path / "grid.obj")
    encode_cfg.output.path = str(tmp_path / "grid.bin")
    do_encode(encode_cfg, codec)
    assert (tmp_path / "grid.bin").stat().st_size > 0

    decode_cfg = OmegaConf.structured(make_job_config("decode", codec))
    decode_cfg.input.path = str(tmp_path / "grid.bin")
    decode_cfg.output.path = str(tmp_path / "decoded" / "grid.obj")
    do_decode(decode_cfg, codec)

    source = list(ObjReader(str(tmp_path / "grid.obj")).read())
    decoded = WavefrontObjFile.from_file(str(tmp_path / "decoded" / "grid.obj")).draw_meshes()
    # the written file has no materials, so every group lands in one batch
    assert len(decoded) == 1
    assert decoded[0].num_triangles == sum(m.num_triangles for m in source)


@pytest.mark.parametrize("codec_name", ["utf8zstd", "quantzstd"])
def test_export_writes_bare_streams(tmp_path, codec_name):
    write_grid(tmp_path)
    codec = get_codec(codec_name)
    out = tmp_path / "streams"

    cfg = OmegaConf.structured(make_job_config("export", codec))
    cfg.input.path = str(tmp_path / "grid.obj")
    cfg.output.path = str(out)
    do_export(cfg, codec)

    sources = list(ObjReader(str(tmp_path / "grid.obj")).read())
    manifest = json.loads((out / MANIFEST_NAME).read_text(encoding="utf-8"))
    assert [g["name"] for g in manifest["groups"]] == [m.name for m in sources]
    for group, source in zip(manifest["groups"], sources):
        stream = (out / group["file"]).read_bytes()
        stream.decode("utf-8")
        quantized, indices = decompress_mesh(stream)
        params = QuantParams.from_dict(group["params"])
        decoded = DrawMesh(name=group["name"], attribs=dequantize_attribs(quantized, params), indices=indices)
        assert_close_to(decoded, source)
        assert group["vertices"] == decoded.num_vertices
        assert group["triangles"] == decoded.num_triangles

    assert [p.extra.name for p in Utf8StreamReader(str(out)).read()] == [m.name for m in sources]
    with pytest.raises(FileExistsError):
        do_export(cfg, codec)

    cfg = OmegaConf.structured(make_job_config("import", codec))
    cfg.input.path = str(out)
    cfg.output.path = str(tmp_path / "imported.obj")
    do_import(cfg, codec)
    imported = WavefrontObjFile.from_file(str(tmp_path / "imported.obj")).draw_meshes()
    assert imported[0].num_triangles == sum(m.num_triangles for m in sources)


def test_stream_reader_needs_a_manifest(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(Utf8StreamReader(str(tmp_path)).read())


def test_cli_lists_codecs(capsys):
    main(["list"])
    assert capsys.readouterr().out.split() == sorted(CODECS)


def test_cli_rejects_unknown_codec():
    with pytest.raises(SystemExit):
        main(["encode", "draco"])
    with pytest.raises(SystemExit):
        main(["compress", "utf8zstd"])
