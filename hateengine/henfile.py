"""Navigation graphs: nodes with positions and weighted links to other nodes."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Union

from .resource import Resource

_HEADER = struct.Struct("<II")
_NODE = struct.Struct("<3fI")
_LINK = struct.Struct("<If")


class HENFormatError(ValueError):
    """Raised when navigation graph data is truncated or inconsistent."""


@dataclass
class HENNodeLink:
    """A weighted edge to the node at ``index``."""

    weight: float
    index: int
    node: Optional["HENNode"] = field(default=None, compare=False, repr=False)


@dataclass
class HENNode:
    position: tuple[float, float, float]
    links: list[HENNodeLink] = field(default_factory=list)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunk = stream.read(size)
    if len(chunk) != size:
        raise HENFormatError("unexpected end of navigation graph data")
    return chunk


class HENFile(Resource):
    """A navigation graph read from a binary file or buffer."""

    def __init__(self, nodes: Optional[Iterable[HENNode]] = None, version: int = 0) -> None:
        super().__init__()
        self.version = version
        self.nodes: list[HENNode] = list(nodes or [])
        self._loaded = True

    @classmethod
    def read(cls, stream: BinaryIO) -> "HENFile":
        """Parse a graph from a binary stream."""
        version, count = _HEADER.unpack(_read_exact(stream, _HEADER.size))
        nodes: list[HENNode] = []
        link_counts: list[int] = []
        for _ in range(count):
            x, y, z, link_count = _NODE.unpack(_read_exact(stream, _NODE.size))
            nodes.append(HENNode((x, y, z)))
            link_counts.append(link_count)
        for node, link_count in zip(nodes, link_counts):
            for _ in range(link_count):
                index, weight = _LINK.unpack(_read_exact(stream, _LINK.size))
                if index >= len(nodes):
                    raise HENFormatError(f"link to missing node {index}")
                node.links.append(HENNodeLink(weight, index, nodes[index]))
        return cls(nodes, version)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> "HENFile":
        return cls.read(io.BytesIO(bytes(data)))

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "HENFile":
        with open(path, "rb") as stream:
            return cls.read(stream)