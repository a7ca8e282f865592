"""Encrypted resource archives."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

from Crypto.Cipher import Blowfish

from .henfile import HENFile
from .texture import TexFiltering, Texture, TexWrap

_HEADER = struct.Struct("<IQQ")
_U64 = struct.Struct("<Q")
_ENTRY = struct.Struct("<QQQ")


class HERFormatError(ValueError):
    """Raised when an archive is truncated or inconsistent."""


@dataclass(frozen=True)
class _Entry:
    original_size: int
    aligned_size: int
    offset: int


@dataclass
class HERResource:
    """The decrypted bytes of one archive member."""

    data: bytes = b""

    def as_string(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    def as_texture(
        self,
        tex_wrap: TexWrap = TexWrap.Repeat,
        tex_filtering: TexFiltering = TexFiltering.Linear,
        mipmap: bool = True,
        mipmap_bias: float = -1.0,
    ) -> Texture:
        return Texture.from_encoded(self.data, tex_wrap, tex_filtering, mipmap, mipmap_bias)

    def as_hen_file(self) -> HENFile:
        return HENFile.from_bytes(self.data)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunk = stream.read(size)
    if len(chunk) != size:
        raise HERFormatError("unexpected end of archive")
    return chunk


class HERFile:
    """An archive whose members are Blowfish-encrypted with a shared key."""

    def __init__(self, path: Union[str, Path], password: str) -> None:
        self.path = Path(path)
        self._key = password.encode("utf-8")
        Blowfish.new(self._key, Blowfish.MODE_ECB)  # reject unusable keys early
        self._entries: dict[str, _Entry] = {}
        with open(self.path, "rb") as stream:
            self.version, self.data_pointer, count = _HEADER.unpack(
                _read_exact(stream, _HEADER.size)
            )
            for _ in range(count):
                (name_length,) = _U64.unpack(_read_exact(stream, _U64.size))
                name = _read_exact(stream, name_length).decode("utf-8")
                self._entries[name] = _Entry(*_ENTRY.unpack(_read_exact(stream, _ENTRY.size)))

    def names(self) -> list[str]:
        """Member names in the order they are listed in the archive."""
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> HERResource:
        try:
            entry = self._entries[key]
        except KeyError:
            raise KeyError(f"{self.path}: resource {key!r} not found") from None
        if entry.aligned_size % Blowfish.block_size:
            raise HERFormatError(f"resource {key!r} is not block aligned")
        with open(self.path, "rb") as stream:
            stream.seek(self.data_pointer + entry.offset)
            encrypted = _read_exact(stream, entry.aligned_size)
        cipher = Blowfish.new(self._key, Blowfish.MODE_ECB)
        return HERResource(cipher.decrypt(encrypted)[: entry.original_size])