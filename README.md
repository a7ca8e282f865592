# hateengine

Resource handling for a small 3D game engine: encrypted archives, navigation
graphs, textures, anchored screen coordinates, input key codes and level maps
built from OBJ geometry.

## Modules

- `hateengine.ids`: `UUID`, a 64-bit identifier. With no argument it takes the
  next value of a process-wide counter; `UUID(42)` wraps a given value. It
  compares by value, can be used as a dictionary key, and exposes the number as
  `.u64`.
- `hateengine.resource`: `Resource`, the base class with an `is_loaded` property.
- `hateengine.texture`: `Texture` holds raw pixel data and its sampling settings
  (`TexType`, `TexWrap`, `TexFiltering`). Build one from pixels with the
  constructor, from an image file with `Texture.from_file`, or from encoded
  image bytes (PNG, JPEG, ...) with `Texture.from_encoded`. Decoding failures
  raise `TextureError`. `load(loader, unloader)` hands the texture to a
  renderer callback and drops the CPU-side pixels; `unload()` calls the
  unloader. `load` raises `ValueError` when no unloader is given.
- `hateengine.coords`: `CoordsUI` is a point in pixels or percent of the screen
  (`Units`), measured from one of nine `Anchor`s. `get_coords` gives the
  absolute screen position, `get_top_left_coords` the offset as if anchored at
  the top-left corner, `get_raw_coords` the stored values.
- `hateengine.keys`: the `Key` and `MouseButton` code enums, and `ActionKey`, a
  frozen pair of `ActionKeyType` and code, built with `ActionKey.keyboard(key)`
  or `ActionKey.mouse(button)`.
- `hateengine.henfile`: `HENFile` reads a binary navigation graph of `HENNode`s
  (a position and a list of `HENNodeLink`s, each with a weight, the index of the
  target node and the node itself). Read with `HENFile.from_path`,
  `HENFile.from_bytes` or `HENFile.read(stream)`; truncated data or links to
  missing nodes raise `HENFormatError`.
- `hateengine.herfile`: `HERFile` opens an archive whose members are
  Blowfish-encrypted with one key. `names()` lists the members,
  `"name" in archive` tests for one, and `archive["name"]` returns a decrypted
  `HERResource` (a missing name raises `KeyError`, a broken archive
  `HERFormatError`). A resource offers `.data`, `as_string()`, `as_texture()`
  and `as_hen_file()`.
- `hateengine.objmap_formats`: readers for the parts of a level:
  `parse_obj` (OBJ geometry into `ObjData`), `parse_mtllib` (material name to
  diffuse texture file), `parse_map` (point entities of a `.map` file as
  `Entity` objects, skipping brushes and `worldspawn`; broken braces raise
  `MapParseError`) and `parse_heluv` (light-map coordinates per object as
  `HeluvObject`). `Property` gives typed views of an entity value: `as_float`,
  `as_int`, `as_bool`, `as_string`, `as_vec2`, `as_vec3`, `as_vec3_xzy`.
- `hateengine.objmap_geometry`: `generate_lod` cuts every face into a grid of
  cells `step` wide and triangulates them into `MeshData` (vertices relative to
  the mesh's `position`, indices, normals, UVs and light-map UVs);
  `generate_collision` builds one `ConvexHull` per object. Helpers
  `point_in_polygon`, `point_in_triangle`, `point_on_triangle_edge`,
  `barycentric` and `sort_vertices_ccw` are public too.
- `hateengine.objmap`: `ObjMapModel` puts the above together. It loads a level
  from files (`from_files`) or from archive members (`from_her`), makes two
  levels of detail (`lods`), convex `collision_shapes` and `entities`.
  `deserialize_entities` calls a handler per entity class name,
  `add_entity_object_to_level` queues objects in `level_objects`, and
  `meshes_for_distance` picks the meshes for a viewing distance.

## Install

```
pip install hateengine
```

## Examples

Read a resource out of an encrypted archive:

```python
from hateengine.herfile import HERFile

password = "password"
archive = HERFile("data.her", password)
if "readme.txt" in archive:
    print(archive["readme.txt"].as_string())
```

Load a level and hook up its entities:

```python
from hateengine.objmap import ObjMapModel

level = ObjMapModel.from_files("maps/level.obj", "maps/level.map", "maps/level.heluv")

def spawn_light(model, entity, data):
    print(entity.classname, entity.position)

level.deserialize_entities({"light": spawn_light}, data=None)
meshes = level.meshes_for_distance(5.0)
```

Place a point 10 by 20 pixels from the bottom-right corner:

```python
from hateengine.coords import Anchor, CoordsUI

pos = CoordsUI(10, 20, anchor=Anchor.BottomRight)
print(pos.get_coords(800, 600))  # (790.0, 580.0)
```

## What it does not do

This package prepares data; it does not draw, play or run anything. There is no
window, renderer, audio output, physics simulation, font loading or set of UI
widgets. Textures are only handed to whatever `loader` and `unloader`
callbacks you pass to `Texture.load`, and `ObjMapModel` produces plain mesh and
hull data for an engine of your own to consume.

## Tests

```
pip install -e .[test]
pytest
```