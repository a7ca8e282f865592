import io

import pytest
from PIL import Image

from hateengine.texture import TexFiltering, Texture, TextureError, TexType, TexWrap


def _png(mode, size=(3, 2)):
    buf = io.BytesIO()
    Image.new(mode, size, (10, 20, 30, 40)[: len(mode)]).save(buf, format="PNG")
    return buf.getvalue()


def test_texture_stores_gl_constants():
    tex = Texture(
        b"\x00" * 4,
        1,
        1,
        TexType.RGBA,
        tex_wrap=TexWrap.ClampToEdge,
        tex_filtering=TexFiltering.Linear,
        mipmap=False,
    )
    assert tex.format == 0x1908
    assert tex.wrap == 0x812F
    assert tex.filtering == 0x2601
    assert tex.mipmap_filtering == 0x2601


def test_from_encoded_rgba():
    tex = Texture.from_encoded(_png("RGBA"))
    assert (tex.width, tex.height) == (3, 2)
    assert tex.format is TexType.RGBA
    assert len(tex.data) == 3 * 2 * 4
    assert tex.data[:4] == bytes([10, 20, 30, 40])
    assert tex.is_loaded


def test_from_encoded_rgb():
    tex = Texture.from_encoded(_png("RGB"))
    assert tex.format is TexType.RGB
    assert len(tex.data) == 3 * 2 * 3


def test_from_encoded_rejects_garbage():
    with pytest.raises(TextureError):
        Texture.from_encoded(b"not an image")


def test_from_file(tmp_path):
    path = tmp_path / "img.png"
    path.write_bytes(_png("RGB", (4, 5)))
    tex = Texture.from_file(str(path), mipmap=False)
    assert (tex.width, tex.height) == (4, 5)
    assert tex.file_name == str(path)
    assert tex.mipmap_filtering == tex.filtering


def test_from_file_missing(tmp_path):
    with pytest.raises(TextureError):
        Texture.from_file(str(tmp_path / "absent.png"))


def test_mipmap_filtering_uses_mipmap_variant():
    tex = Texture(b"\x00" * 3, 1, 1, TexType.RGB, tex_filtering=TexFiltering.Linear, mipmap=True)
    assert tex.mipmap_filtering == 0x2703
    nearest = Texture(b"\x00" * 3, 1, 1, TexType.RGB, tex_filtering=TexFiltering.Nearest)
    assert nearest.mipmap_filtering == 0x2702


def test_load_and_unload():
    events = []

    def loader(t):
        events.append("load")
        t.texture_id = 5

    def unloader(t):
        events.append("unload")

    tex = Texture(b"\x01\x02\x03", 1, 1, TexType.RGB)
    tex.load(loader, unloader)
    assert tex.is_gpu_loaded
    assert tex.texture_id == 5
    assert tex.data == b""
    tex.load(loader, unloader)
    assert events == ["load"]
    tex.unload()
    assert events == ["load", "unload"]
    assert not tex.is_gpu_loaded
    assert tex.autoload is False


def test_load_requires_unloader():
    tex = Texture(b"\x01\x02\x03", 1, 1, TexType.RGB)
    with pytest.raises(ValueError):
        tex.load(lambda t: None, None)
    assert not tex.is_gpu_loaded


def test_unload_without_load_does_nothing():
    tex = Texture(b"\x01\x02\x03", 1, 1, TexType.RGB)
    tex.unload()
    assert tex.autoload is True


def test_copy_shares_handle_and_data():
    tex = Texture(b"\x01\x02\x03", 1, 1, TexType.RGB, tex_wrap=TexWrap.Clamp)
    tex.texture_id = 9
    dup = tex.copy()
    assert dup is not tex
    assert dup.texture_id == 9
    assert dup.data == tex.data
    assert dup.wrap is TexWrap.Clamp
    dup.width = 7
    assert tex.width == 1