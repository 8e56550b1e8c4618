"""
Plain mesh stream files for clients that read the varint stream directly.

A stream directory holds one `<n>.utf8` file per group, each the bare output
of `compress_mesh` with no container around it, and a `manifest.json`
describing the groups in order:

    {
        "groups": [
            {
                "file": "000.utf8",
                "name": "texture.png",
                "vertices": 4,
                "triangles": 2,
                "params": {"offsets": [...], "scales": [...], "bits": [...]}
            }
        ]
    }
"""

import json
import logging
import os
from typing import Iterator

from ..codec.utf8 import decode_varints
from ..quant.params import QuantParams
from ..utf8.interface import Utf8MeshExtra, Utf8Payload
from .bytes import atomic_output

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


class Utf8StreamWriter:
    """
    Writes Utf8Payload groups as plain stream files plus a JSON manifest.

    Stream files are written as the payloads arrive; the manifest is written
    last, so a directory without one is incomplete.

    Example:
        writer = Utf8StreamWriter("output/model")
        writer.write(payloads)
    """

    def __init__(self, directory: str):
        self._directory = directory

    def write(self, payloads: Iterator[Utf8Payload]) -> int:
        """
        Write every payload and the manifest.

        Returns:
            Number of stream bytes written, manifest excluded.

        Raises:
            FileExistsError: If the directory already holds a manifest.
            ValueError: If a payload carries no group name and parameters.
        """
        manifest_path = os.path.join(self._directory, MANIFEST_NAME)
        if os.path.exists(manifest_path):
            raise FileExistsError(f"Refusing to overwrite {manifest_path}")

        groups = []
        total = 0
        for n, payload in enumerate(payloads):
            extra = payload.extra
            if not isinstance(extra, Utf8MeshExtra):
                raise ValueError(f"Group {n} carries no name and quantization parameters")
            filename = f"{n:03d}.utf8"
            with atomic_output(os.path.join(self._directory, filename)) as f:
                total += f.write(payload.stream)
            words = decode_varints(payload.stream)
            vertex_count = words[0] + 1
            groups.append({
                "file": filename,
                "name": extra.name,
                "vertices": vertex_count,
                "triangles": (len(words) - 1 - 8 * vertex_count) // 3,
                "params": extra.params.to_dict(),
            })
            logger.debug(f"Wrote {filename}: {len(payload.stream)} bytes")

        with atomic_output(manifest_path, "w", encoding="utf-8") as f:
            json.dump({"groups": groups}, f, indent=2)
        return total


class Utf8StreamReader:
    """
    Reads a directory written by Utf8StreamWriter back into Utf8Payloads.

    Example:
        for payload in Utf8StreamReader("output/model").read():
            ...
    """

    def __init__(self, directory: str):
        self._directory = directory

    def read(self) -> Iterator[Utf8Payload]:
        """
        Yields:
            One Utf8Payload per group, in manifest order.

        Raises:
            FileNotFoundError: If the manifest or a stream file is missing.
        """
        manifest_path = os.path.join(self._directory, MANIFEST_NAME)
        if not os.path.isfile(manifest_path):
            raise FileNotFoundError(f"Stream manifest not found: {manifest_path}")
        with open(manifest_path, "r", encoding="utf-8") as f:
            manifest = json.load(f)

        for group in manifest["groups"]:
            with open(os.path.join(self._directory, group["file"]), "rb") as f:
                stream = f.read()
            yield Utf8Payload(
                stream=stream,
                extra=Utf8MeshExtra(name=group["name"], params=QuantParams.from_dict(group["params"])),
            )
