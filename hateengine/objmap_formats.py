"""Readers for the text and binary formats that make up a level map.

These are Wavefront OBJ geometry, MTL material libraries, ``.map`` entity
descriptions and ``.heluv`` light-map coordinate tables.
"""

from __future__ import annotations

import logging
import re
import struct
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

log = logging.getLogger(__name__)

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]

_WORD_DELIMITERS = " \v\t"
_TRIM_CHARS = " \v\t\n"

_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class MapParseError(ValueError):
    """Raised when the brace structure of a map file is broken."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"{message} at line {line}")
        self.line = line


def _parse_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    return float(match.group(1))


def _parse_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    value = int(match.group(1))
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def split_words(text: str, delimiters: str) -> list[str]:
    """Split ``text`` at any of the ``delimiters`` characters, dropping empty pieces."""
    if not delimiters:
        return [text] if text else []
    pattern = "[" + re.escape(delimiters) + "]"
    return [token for token in re.split(pattern, text) if token]


def trim(text: str) -> str:
    """Strip spaces, tabs, vertical tabs and newlines from both ends."""
    return text.strip(_TRIM_CHARS)


def _lines(data: str) -> Iterator[str]:
    pieces = data.split("\n")
    if pieces and pieces[-1] == "":
        pieces.pop()
    for line in pieces:
        yield line[:-1] if line.endswith("\r") else line


@dataclass(frozen=True)
class Property:
    """A raw entity property value with typed views on it."""

    value: str

    def as_float(self) -> float:
        return _parse_float(self.value)

    def as_int(self) -> int:
        return _parse_int(self.value)

    def as_bool(self) -> bool:
        return _parse_int(self.value) != 0

    def as_string(self) -> str:
        return self.value

    def as_vec3(self) -> Vec3:
        parts = split_words(self.value, " ")
        if len(parts) != 3:
            raise ValueError(f"invalid vec3: {self.value!r}")
        x, y, z = (_parse_float(part) for part in parts)
        return x, y, z

    def as_vec3_xzy(self) -> Vec3:
        """The vector with map axes (x, y up is z) turned into engine axes."""
        x, y, z = self.as_vec3()
        return x, z, -y

    def as_vec2(self) -> Vec2:
        parts = split_words(self.value, " ")
        if len(parts) != 2:
            raise ValueError(f"invalid vec2: {self.value!r}")
        x, y = (_parse_float(part) for part in parts)
        return x, y


@dataclass
class Entity:
    classname: str = ""
    position: Vec3 = (0.0, 0.0, 0.0)
    properties: dict[str, Property] = field(default_factory=dict)


@dataclass
class ObjFace:
    indices: list[int] = field(default_factory=list)
    normal: Vec3 = (0.0, 0.0, 0.0)
    tex_indices: list[int] = field(default_factory=list)
    light_tex: list[Vec2] = field(default_factory=list)


@dataclass
class ObjObject:
    name: str
    material: str = ""
    faces: list[ObjFace] = field(default_factory=list)


@dataclass
class ObjData:
    """Everything read from an OBJ file."""

    vertices: list[Vec3] = field(default_factory=list)
    normals: list[Vec3] = field(default_factory=list)
    tex_coords: list[Vec2] = field(default_factory=list)
    objects: list[ObjObject] = field(default_factory=list)
    material_libraries: list[str] = field(default_factory=list)


@dataclass
class HeluvObject:
    """Light-map coordinates per face of one object, and its light-map texture."""

    uv: list[list[Vec2]] = field(default_factory=list)
    texture: Optional[Any] = None


# ----------------------------------------------------------------------------- map


def _quoted_words(line: str) -> list[str]:
    words: list[str] = []
    word: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '"':
            in_quotes = not in_quotes
            if not in_quotes and word:
                words.append("".join(word))
                word = []
        elif ch == "\\" and i < len(line) - 1:
            following = line[i + 1]
            if following in '"\\':
                word.append(following)
                i += 1
        else:
            word.append(ch)
        i += 1
    return words


def parse_map(data: str, grid_size: float = 16.0, name: str = "") -> list[Entity]:
    """Read point entities from a map file; brushes and ``worldspawn`` are skipped."""
    entities: list[Entity] = []
    current = Entity()
    depth = 0  # 1 = entity, 2 = brush
    for line_num, line in enumerate(_lines(data), start=1):
        words = _quoted_words(line)
        if line.startswith("//"):
            continue
        first = line[:1]

        if depth == 2:
            if first == "}":
                depth -= 1
            continue

        if first == "{":
            depth += 1
            if depth > 2:
                raise MapParseError(f"map {name!r}: unexpected entity depth {depth}", line_num)
            if depth == 1:
                current = Entity()
        elif first == "}":
            if depth == 0:
                raise MapParseError(f"map {name!r}: unexpected closing brace", line_num)
            depth -= 1
            if current.classname and current.classname != "worldspawn":
                entities.append(current)
        else:
            if depth != 1:
                log.warning(
                    "map %r: unexpected entity depth (%d) for parameter at line %d, skip",
                    name, depth, line_num,
                )
                continue
            if len(words) < 2:
                log.warning("map %r: unexpected parameter at line %d, skip", name, line_num)
                continue
            key, value = trim(words[0]), trim(words[1])
            if key == "classname":
                current.classname = value
            elif key == "origin":
                if len(split_words(value, " ")) != 3:
                    log.error("map %r: invalid origin %r at line %d", name, value, line_num)
                    current.position = (0.0, 0.0, 0.0)
                else:
                    x, y, z = Property(value).as_vec3_xzy()
                    current.position = (x / grid_size, y / grid_size, z / grid_size)
            else:
                current.properties.setdefault(key, Property(value))
    return entities


# ----------------------------------------------------------------------------- heluv

_HELUV_HEADER = struct.Struct("<II")
_HELUV_OBJECT = struct.Struct("<HI")
_HELUV_COUNT = struct.Struct("<B")
_HELUV_UV = struct.Struct("<ff")


def parse_heluv(data: bytes) -> dict[str, HeluvObject]:
    """Read a light-map coordinate table, keyed by object name."""
    buffer = bytes(data)
    result: dict[str, HeluvObject] = {}
    try:
        _version, count = _HELUV_HEADER.unpack_from(buffer, 0)
        offset = _HELUV_HEADER.size
        for _ in range(count):
            name_len, faces_count = _HELUV_OBJECT.unpack_from(buffer, offset)
            offset += _HELUV_OBJECT.size
            raw_name = buffer[offset:offset + name_len]
            if len(raw_name) != name_len:
                raise ValueError("unexpected end of light-map data")
            offset += name_len
            faces: list[list[Vec2]] = []
            for _ in range(faces_count):
                (uv_count,) = _HELUV_COUNT.unpack_from(buffer, offset)
                offset += _HELUV_COUNT.size
                face = []
                for _ in range(uv_count):
                    face.append(_HELUV_UV.unpack_from(buffer, offset))
                    offset += _HELUV_UV.size
                faces.append(face)
            result[raw_name.decode("utf-8", errors="replace")] = HeluvObject(faces)
    except struct.error as exc:
        raise ValueError("unexpected end of light-map data") from exc
    return result


# ----------------------------------------------------------------------------- obj


def _one_based(index: int) -> int:
    return index - 1 if index > 0 else index


def _parse_face(
    words: list[str], obj: ObjObject, normals: list[Vec3], heluv: dict[str, HeluvObject]
) -> ObjFace:
    face = ObjFace()
    normal_indices: list[int] = []
    previous_normal = 0
    light = heluv.get(obj.name)
    face_index = len(obj.faces)
    for uv_index, word in enumerate(words[1:]):
        parts = split_words(word, "/")
        face.indices.append(_one_based(_parse_int(parts[0])))
        if len(parts) >= 2 and parts[1]:
            face.tex_indices.append(_one_based(_parse_int(parts[1])))
        if len(parts) >= 3:
            normal = _parse_int(parts[2])
            normal_indices.append(_one_based(normal))
            if uv_index > 0 and previous_normal != normal:
                log.warning("Different normals in a face of %r", obj.name)
            previous_normal = normal
        if (
            light is not None
            and face_index < len(light.uv)
            and uv_index < len(light.uv[face_index])
        ):
            face.light_tex.append(tuple(light.uv[face_index][uv_index]))
        else:
            face.light_tex.append((0.0, 0.0))
    if normal_indices:
        face.normal = normals[normal_indices[0]]
    return face


def parse_obj(
    data: str, grid_size: float = 16.0, heluv: Optional[dict[str, HeluvObject]] = None
) -> ObjData:
    """Read vertices, normals, texture coordinates and faced objects from OBJ text.

    Vertex positions are divided by ``grid_size``; indices become zero-based.
    """
    heluv = heluv or {}
    result = ObjData()
    current: Optional[ObjObject] = None
    for line in _lines(data):
        words = split_words(line, _WORD_DELIMITERS)
        if not words:
            continue
        kind = words[0]
        if kind == "v":
            if len(words) < 4:
                continue
            x, y, z = (_parse_float(w) / grid_size for w in words[1:4])
            result.vertices.append((x, y, z))
        elif kind == "f":
            if len(words) < 4:
                continue
            if current is None:
                raise ValueError("face given before any object")
            current.faces.append(_parse_face(words, current, result.normals, heluv))
        elif kind == "vt":
            if len(words) < 3:
                continue
            result.tex_coords.append((_parse_float(words[1]), _parse_float(words[2])))
        elif kind == "vn":
            if len(words) < 4:
                continue
            x, y, z = (_parse_float(w) for w in words[1:4])
            result.normals.append((x, y, z))
        elif kind == "usemtl":
            if len(words) < 2 or current is None:
                continue
            if not current.material:
                current.material = words[1]
        elif kind == "mtllib":
            if len(words) < 2:
                continue
            result.material_libraries.append(words[1])
        elif kind == "o":
            if len(words) < 2:
                continue
            current = ObjObject(words[1])
            result.objects.append(current)
    return result


def parse_mtllib(data: str) -> dict[str, Optional[str]]:
    """Map each material name to its diffuse texture file, or None if it has none."""
    materials: dict[str, Optional[str]] = {}
    current: Optional[str] = None
    for line in _lines(data):
        words = split_words(line, _WORD_DELIMITERS)
        if len(words) < 2:
            continue
        if words[0] == "newmtl":
            current = words[1]
            materials[current] = None
        elif words[0] == "map_Kd" and current is not None:
            materials[current] = words[1]
    return materials