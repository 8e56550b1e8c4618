"""
Wavefront OBJ/MTL reading into per-texture draw batches, and OBJ writing.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Tuple

import numpy as np

from ..batch.drawbatch import (
    DrawBatch,
    DrawMesh,
    NORMAL_DIM,
    POSITION_DIM,
    TEXCOORD_DIM,
)
from ..batch.flatten import IndexTriple
from .bytes import atomic_output

logger = logging.getLogger(__name__)


class ObjParseError(ValueError):
    """Malformed OBJ or MTL input."""

    def __init__(self, why: str, line_num: int):
        super().__init__(f"{why} at line {line_num}")
        self.why = why
        self.line_num = line_num


@dataclass
class Material:
    """A material from an MTL file; only the diffuse terms are kept."""
    name: str
    kd: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    map_kd: str = ""


def _parse_floats(tokens: List[str], why: str, line_num: int) -> List[float]:
    try:
        return [float(t) for t in tokens]
    except ValueError:
        raise ObjParseError(why, line_num) from None


def parse_mtl(lines: Iterable[str]) -> List[Material]:
    """
    Parse the `newmtl`, `Kd` and `map_Kd` statements of an MTL file.

    Args:
        lines: Lines of the MTL file.

    Returns:
        Materials in declaration order.
    """
    materials: List[Material] = []
    for line_num, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        keyword, _, rest = line.partition(" ")
        rest = rest.strip()
        if keyword == "newmtl":
            materials.append(Material(name=rest))
        elif keyword in ("Kd", "map_Kd"):
            if not materials:
                raise ObjParseError(f"{keyword} before newmtl", line_num)
            if keyword == "Kd":
                floats = _parse_floats(rest.split(), "bad Kd", line_num)
                if len(floats) != 3:
                    raise ObjParseError("bad Kd", line_num)
                materials[-1].kd = tuple(floats)
            else:
                materials[-1].map_kd = rest
    return materials


class WavefrontObjFile:
    """
    OBJ parser that batches triangles by the diffuse texture of their material.

    Every batch shares the same position, texcoord and normal buffers. Faces
    before any `usemtl`, or with a material without `map_Kd`, go to the
    default batch "".

    Example:
        obj = WavefrontObjFile.from_file("model.obj")
        for mesh in obj.draw_meshes():
            ...
    """

    def __init__(self, base_dir: str = ""):
        """
        Initialize an empty parser.

        Args:
            base_dir: Directory `mtllib` paths are resolved against.
        """
        self._base_dir = base_dir
        self.positions: List[float] = []
        self.texcoords: List[float] = []
        self.normals: List[float] = []
        self.materials: List[Material] = []
        self._material_textures: Dict[str, str] = {}
        self._batches: Dict[str, DrawBatch] = {}
        self._current = self._get_batch("")
        self._warned = set()

    @classmethod
    def from_file(cls, path: str) -> "WavefrontObjFile":
        obj = cls(base_dir=os.path.dirname(path))
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            obj.parse(f)
        return obj

    @property
    def texture_batches(self) -> Dict[str, DrawBatch]:
        return self._batches

    def draw_meshes(self) -> List[DrawMesh]:
        """DrawMeshes of every batch holding at least one triangle."""
        return [b.draw_mesh() for b in self._batches.values() if b.num_triangles > 0]

    def parse(self, lines: Iterable[str]) -> None:
        for line_num, line in enumerate(lines, start=1):
            self.parse_line(line.strip(), line_num)
        logger.debug(
            f"positions: {len(self.positions) // POSITION_DIM}, "
            f"texcoords: {len(self.texcoords) // TEXCOORD_DIM}, "
            f"normals: {len(self.normals) // NORMAL_DIM}"
        )

    def parse_line(self, line: str, line_num: int) -> None:
        if not line or line.startswith("#"):
            return
        tokens = line.split()
        keyword = tokens[0]
        args = tokens[1:]
        if keyword == "v":
            self._parse_position(args, line_num)
        elif keyword == "vt":
            self._parse_texcoord(args, line_num)
        elif keyword == "vn":
            self._parse_normal(args, line_num)
        elif keyword in ("f", "fo"):
            self._parse_face(args, line_num)
        elif keyword == "g":
            self._warn_once("group unsupported", line_num)
        elif keyword == "o":
            self._warn_once("object unsupported", line_num)
        elif keyword == "s":
            self._warn_once("s unsupported", line_num)
        elif keyword == "p":
            self._warn("point unsupported", line_num)
        elif keyword == "l":
            self._warn("line unsupported", line_num)
        elif keyword == "usemtl":
            self._parse_usemtl(line[len(keyword):].strip(), line_num)
        elif keyword == "mtllib":
            self._parse_mtllib(line[len(keyword):].strip(), line_num)
        else:
            self._warn("unknown keyword", line_num)

    def _warn(self, why: str, line_num: int) -> None:
        logger.warning(f"{why} at line {line_num}")

    def _warn_once(self, why: str, line_num: int) -> None:
        if why not in self._warned:
            self._warned.add(why)
            self._warn(why, line_num)

    def _get_batch(self, texture: str) -> DrawBatch:
        if texture not in self._batches:
            self._batches[texture] = DrawBatch(
                self.positions, self.texcoords, self.normals, name=texture
            )
        return self._batches[texture]

    def _parse_position(self, args: List[str], line_num: int) -> None:
        floats = _parse_floats(args, "bad position", line_num)
        # Trailing r g b vertex colours are ignored
        if len(floats) not in (POSITION_DIM, 6):
            raise ObjParseError("bad position", line_num)
        self.positions.extend(floats[:POSITION_DIM])

    def _parse_texcoord(self, args: List[str], line_num: int) -> None:
        floats = _parse_floats(args, "bad texcoord", line_num)
        if not 1 <= len(floats) <= 3:
            raise ObjParseError("bad texcoord", line_num)
        floats = (floats + [0.0])[:TEXCOORD_DIM]
        self.texcoords.extend(floats)

    def _parse_normal(self, args: List[str], line_num: int) -> None:
        floats = _parse_floats(args, "bad normal", line_num)
        if len(floats) != NORMAL_DIM:
            raise ObjParseError("bad normal", line_num)
        self.normals.extend(floats)

    def _resolve_index(self, token: str, count: int, line_num: int) -> int:
        """Convert a 1-based or negative relative OBJ index to 0-based."""
        try:
            index = int(token)
        except ValueError:
            raise ObjParseError("bad index", line_num) from None
        if index > 0:
            return index - 1
        if index < 0 and count + index >= 0:
            return count + index
        raise ObjParseError("bad index", line_num)

    def _parse_corner(self, token: str, line_num: int) -> IndexTriple:
        parts = token.split("/")
        if len(parts) > 3 or not parts[0]:
            raise ObjParseError("bad index", line_num)
        position = self._resolve_index(parts[0], len(self.positions) // POSITION_DIM, line_num)
        texcoord = normal = -1
        if len(parts) > 1 and parts[1]:
            texcoord = self._resolve_index(parts[1], len(self.texcoords) // TEXCOORD_DIM, line_num)
        if len(parts) > 2 and parts[2]:
            normal = self._resolve_index(parts[2], len(self.normals) // NORMAL_DIM, line_num)
        return position, texcoord, normal

    def _parse_face(self, args: List[str], line_num: int) -> None:
        if len(args) < 3:
            raise ObjParseError("face needs at least 3 vertices", line_num)
        corners = [self._parse_corner(token, line_num) for token in args]
        try:
            self._current.add_face(corners)
        except IndexError as e:
            raise ObjParseError(str(e), line_num) from e

    def _parse_usemtl(self, name: str, line_num: int) -> None:
        texture = self._material_textures.get(name, "")
        if texture not in self._batches:
            raise ObjParseError("texture not found", line_num)
        self._current = self._batches[texture]

    def _parse_mtllib(self, filename: str, line_num: int) -> None:
        path = os.path.join(self._base_dir, filename)
        if not os.path.exists(path):
            self._warn("mtllib not found", line_num)
            return
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            materials = parse_mtl(f)
        for material in materials:
            self.materials.append(material)
            self._material_textures[material.name] = material.map_kd
            if material.map_kd:
                self._get_batch(material.map_kd)


class ObjReader:
    """
    Reader for the draw meshes of an OBJ file, one per texture group.

    Example:
        reader = ObjReader("data/model.obj")
        for mesh in reader.read():
            process(mesh)
    """

    def __init__(self, path: str):
        self._path = path

    def read(self) -> Iterator[DrawMesh]:
        """Read the OBJ file and yield its non-empty groups."""
        if not os.path.exists(self._path):
            raise FileNotFoundError(f"OBJ file not found: {self._path}")
        obj = WavefrontObjFile.from_file(self._path)
        yield from obj.draw_meshes()


class ObjWriter:
    """
    Writer for draw meshes to a single OBJ file, one object per group.

    Example:
        writer = ObjWriter("output/model.obj")
        writer.write(mesh_iterator)
    """

    def __init__(self, path: str, precision: int = 6):
        self._path = path
        self._precision = precision

    def _format(self, values: np.ndarray) -> str:
        return " ".join(f"{v:.{self._precision}g}" for v in values.tolist())

    def write(self, meshes: Iterator[DrawMesh]) -> None:
        """
        Write meshes to the OBJ file.

        Raises:
            FileExistsError: If the target file already exists.
        """
        offset = 1
        with atomic_output(self._path, "w", encoding="utf-8") as f:
            for mesh in meshes:
                records = mesh.attribs.reshape(-1, 8)
                f.write(f"o {mesh.name or 'default'}\n")
                for record in records:
                    f.write(f"v {self._format(record[0:3])}\n")
                for record in records:
                    f.write(f"vt {self._format(record[3:5])}\n")
                for record in records:
                    f.write(f"vn {self._format(record[5:8])}\n")
                for tri in mesh.indices.reshape(-1, 3) + offset:
                    f.write("f " + " ".join(f"{i}/{i}/{i}" for i in tri.tolist()) + "\n")
                offset += len(records)
