"""Image textures held in memory until handed to a rendering back end."""

from __future__ import annotations

import copy as _copy
import io
from enum import IntEnum
from typing import Callable, Optional, Union

from PIL import Image

from .resource import Resource

_GL_NEAREST = 0x2600
_GL_NEAREST_MIPMAP_LINEAR = 0x2702


class TexType(IntEnum):
    RGB = 0x1907
    RGBA = 0x1908


class TexWrap(IntEnum):
    Clamp = 0x2900
    Repeat = 0x2901
    ClampToEdge = 0x812F
    ClampToBorder = 0x812D


class TexFiltering(IntEnum):
    Nearest = 0x2600
    Linear = 0x2601


class TextureError(Exception):
    """Raised when image data cannot be read or decoded."""


TextureCallback = Callable[["Texture"], None]


def _decode(image: Image.Image) -> tuple[bytes, int, int, TexType]:
    has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
    mode = "RGBA" if has_alpha else "RGB"
    converted = image.convert(mode)
    fmt = TexType.RGBA if has_alpha else TexType.RGB
    return converted.tobytes(), converted.width, converted.height, fmt


class Texture(Resource):
    """Raw pixel data plus the sampling settings used when it is uploaded."""

    def __init__(
        self,
        data: bytes,
        width: int,
        height: int,
        tex_type: TexType,
        tex_wrap: TexWrap = TexWrap.Repeat,
        tex_filtering: TexFiltering = TexFiltering.Linear,
        mipmap: bool = True,
        mipmap_bias: float = -1.0,
        autoload: bool = True,
    ) -> None:
        super().__init__()
        self.data = bytes(data)
        self.width = width
        self.height = height
        self.format = TexType(tex_type)
        self.wrap = TexWrap(tex_wrap)
        self.filtering = TexFiltering(tex_filtering)
        self.mipmap_filtering = int(self.filtering)
        if mipmap:
            self.mipmap_filtering += _GL_NEAREST_MIPMAP_LINEAR - _GL_NEAREST
        self.mipmap_lod_bias = mipmap_bias
        self.autoload = autoload
        self.file_name = ""
        self.texture_id = 0
        self._gpu_loaded = False
        self._unloader: Optional[TextureCallback] = None
        self._loaded = True

    @classmethod
    def from_file(
        cls,
        file_name: str,
        tex_wrap: TexWrap = TexWrap.Repeat,
        tex_filtering: TexFiltering = TexFiltering.Linear,
        mipmap: bool = True,
        mipmap_bias: float = -1.0,
        autoload: bool = True,
    ) -> "Texture":
        """Read and decode an image file."""
        try:
            with Image.open(file_name) as image:
                data, width, height, fmt = _decode(image)
        except OSError as exc:
            raise TextureError(f'Texture "{file_name}" was not found') from exc
        texture = cls(
            data, width, height, fmt, tex_wrap, tex_filtering, mipmap, mipmap_bias, autoload
        )
        texture.file_name = file_name
        return texture

    @classmethod
    def from_encoded(
        cls,
        data: Union[bytes, bytearray],
        tex_wrap: TexWrap = TexWrap.Repeat,
        tex_filtering: TexFiltering = TexFiltering.Linear,
        mipmap: bool = True,
        mipmap_bias: float = -1.0,
    ) -> "Texture":
        """Decode an image held in memory (PNG, JPEG and the like)."""
        try:
            with Image.open(io.BytesIO(bytes(data))) as image:
                pixels, width, height, fmt = _decode(image)
        except OSError as exc:
            raise TextureError("Error loading texture from memory") from exc
        return cls(pixels, width, height, fmt, tex_wrap, tex_filtering, mipmap, mipmap_bias)

    def copy(self) -> "Texture":
        """A shallow copy sharing the same GPU texture handle."""
        return _copy.copy(self)

    @property
    def is_gpu_loaded(self) -> bool:
        return self._gpu_loaded

    def load(self, loader: TextureCallback, unloader: Optional[TextureCallback]) -> None:
        """Upload through ``loader`` and release the CPU-side pixel data."""
        if unloader is None:
            raise ValueError("an unloader must be given")
        self._unloader = unloader
        if not self._gpu_loaded:
            loader(self)
            self._gpu_loaded = True
        self.data = b""

    def unload(self) -> None:
        """Release the GPU copy through the unloader given to :meth:`load`."""
        if self._gpu_loaded:
            if self._unloader is not None:
                self._unloader(self)
            self._gpu_loaded = False
            self.autoload = False