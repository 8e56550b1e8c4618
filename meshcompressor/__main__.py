"""
Command-line interface for meshcompressor.

Every registered codec can encode an OBJ file into a container and decode a
container back into an OBJ file. `export` writes the bare mesh stream of
each group plus a JSON manifest instead, for clients without zstd, and
`import` reads such a directory back. Options are Hydra overrides on a config
assembled from the reader, writer and codec config dataclasses.

Usage:
    python -m meshcompressor list
    python -m meshcompressor encode <codec> input.path=<obj> output.path=<bin> [codec.*=...]
    python -m meshcompressor decode <codec> input.path=<bin> output.path=<obj>
    python -m meshcompressor export <codec> input.path=<obj> output.path=<dir> [codec.*=...]
    python -m meshcompressor import <codec> input.path=<dir> output.path=<obj>

Example:
    python -m meshcompressor encode utf8zstd \
        input.path=data/model.obj \
        output.path=model.bin \
        codec.quant.position_bits=12

    python -m meshcompressor decode utf8zstd \
        input.path=model.bin \
        output.path=decoded/model.obj

Hydra options (after the codec name):
    --help              Show configuration schema
    --cfg job           Show resolved configuration
"""

import logging
import os
import sys
from dataclasses import field, make_dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Type

import hydra
from hydra.core.config_store import ConfigStore
from hydra.core.global_hydra import GlobalHydra
from omegaconf import DictConfig

from .batch.drawbatch import DrawMesh
from .combinations import CODECS, Codec, get_codec
from .io import (
    ObjReaderConfig,
    ObjWriterConfig,
    BytesReaderConfig,
    BytesWriterConfig,
    build_obj_reader,
    build_obj_writer,
    build_bytes_reader,
    build_bytes_writer,
    Utf8StreamReaderConfig,
    Utf8StreamWriterConfig,
    build_utf8_stream_reader,
    build_utf8_stream_writer,
)
from .quant.mesh import dequantize_mesh
from .utf8.interface import as_utf8_payload, utf8_to_quantized

logger = logging.getLogger(__name__)


# =============================================================================
# Logging helpers
# =============================================================================

def log_groups(meshes: Iterator[DrawMesh], verb: str) -> Iterator[DrawMesh]:
    """Pass mesh groups through, logging the size of each."""
    count = 0
    for mesh in meshes:
        logger.info(
            f"{verb} group '{mesh.name or 'default'}': "
            f"{mesh.num_vertices} vertices, {mesh.num_triangles} triangles"
        )
        count += 1
        yield mesh
    logger.info(f"{verb} {count} groups")


class ByteCounter:
    """Counts the bytes flowing through a chunk iterator."""

    def __init__(self):
        self.total = 0

    def wrap(self, chunks: Iterator[bytes]) -> Iterator[bytes]:
        for chunk in chunks:
            self.total += len(chunk)
            yield chunk


# =============================================================================
# Jobs
# =============================================================================

def do_encode(cfg: DictConfig, codec: Codec) -> None:
    """Encode the OBJ file at cfg.input.path into a container."""
    reader = build_obj_reader(cfg.input)
    writer = build_bytes_writer(cfg.output)
    encoder = codec.build_encoder(cfg.codec)

    logger.info(f"Encoding {cfg.input.path} -> {cfg.output.path} with {codec.name}")
    meshes = log_groups(reader.read(), "Encoding")
    written = writer.write(encoder.encode_stream(meshes))

    source_size = os.path.getsize(cfg.input.path)
    ratio = source_size / written if written else 0.0
    logger.info(f"Wrote {written} bytes ({source_size} bytes of OBJ, ratio {ratio:.2f})")


def do_decode(cfg: DictConfig, codec: Codec) -> None:
    """Decode the container at cfg.input.path into an OBJ file."""
    reader = build_bytes_reader(cfg.input)
    writer = build_obj_writer(cfg.output)
    decoder = codec.build_decoder(cfg.codec)

    logger.info(f"Decoding {cfg.input.path} -> {cfg.output.path} with {codec.name}")
    counter = ByteCounter()
    meshes = log_groups(decoder.decode_stream(counter.wrap(reader.read())), "Decoded")
    writer.write(meshes)
    logger.info(f"Read {counter.total} bytes")


def do_export(cfg: DictConfig, codec: Codec) -> None:
    """Write the groups of the OBJ file at cfg.input.path as plain stream files."""
    reader = build_obj_reader(cfg.input)
    writer = build_utf8_stream_writer(cfg.output)
    encoder = codec.build_encoder(cfg.codec)

    logger.info(f"Exporting {cfg.input.path} -> {cfg.output.path} with {codec.name} settings")
    meshes = log_groups(reader.read(), "Exporting")
    payloads = (as_utf8_payload(p) for mesh in meshes for p in encoder.pack(mesh))
    written = writer.write(payloads)
    logger.info(f"Wrote {written} stream bytes")


def do_import(cfg: DictConfig, codec: Codec) -> None:
    """Decode the plain stream files at cfg.input.path into an OBJ file."""
    reader = build_utf8_stream_reader(cfg.input)
    writer = build_obj_writer(cfg.output)

    logger.info(f"Importing {cfg.input.path} -> {cfg.output.path}")
    meshes = (dequantize_mesh(utf8_to_quantized(p)) for p in reader.read())
    writer.write(log_groups(meshes, "Imported"))


# command -> (input config, output config, codec config attribute, action)
JOBS: Dict[str, Tuple[Type, Type, str, Callable[[DictConfig, Codec], None]]] = {
    "encode": (ObjReaderConfig, BytesWriterConfig, "encoder_config", do_encode),
    "decode": (BytesReaderConfig, ObjWriterConfig, "decoder_config", do_decode),
    "export": (ObjReaderConfig, Utf8StreamWriterConfig, "encoder_config", do_export),
    "import": (Utf8StreamReaderConfig, ObjWriterConfig, "decoder_config", do_import),
}


def make_job_config(command: str, codec: Codec) -> Type:
    """Assemble the config dataclass of a job from its parts."""
    input_cls, output_cls, codec_attr, _ = JOBS[command]
    codec_cls = getattr(codec, codec_attr)
    return make_dataclass(
        f"{command.capitalize()}{codec_cls.__name__}",
        [
            ("input", input_cls, field(default_factory=input_cls)),
            ("output", output_cls, field(default_factory=output_cls)),
            ("codec", codec_cls, field(default_factory=codec_cls)),
        ],
    )


def run(command: str, codec_name: str, overrides: List[str]) -> None:
    """Run a job under Hydra with the given command-line overrides."""
    codec = get_codec(codec_name)
    action = JOBS[command][3]

    GlobalHydra.instance().clear()
    ConfigStore.instance().store(name="config", node=make_job_config(command, codec))

    @hydra.main(version_base=None, config_path=None, config_name="config")
    def _job(cfg: DictConfig) -> None:
        action(cfg, codec)

    sys.argv = [sys.argv[0]] + overrides
    _job()


# =============================================================================
# Entry point
# =============================================================================

def _usage() -> str:
    lines = ["Usage: python -m meshcompressor <list|encode|decode|export|import> <codec> [overrides]", "Codecs:"]
    lines += [f"  {name}: {codec.description}" for name, codec in sorted(CODECS.items())]
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = sys.argv[1:] if argv is None else argv

    if not args or args[0] in ("-h", "--help", "help"):
        print(_usage())
        sys.exit(0 if args else 1)
    if args[0] == "list":
        print("\n".join(sorted(CODECS)))
        return

    command = args[0]
    if command not in JOBS:
        sys.exit(f"Error: unknown command '{command}'\n{_usage()}")
    if len(args) < 2 or args[1] not in CODECS:
        sys.exit(f"Error: {command} needs one of the codecs {sorted(CODECS)}")

    run(command, args[1], args[2:])


if __name__ == "__main__":
    main()
