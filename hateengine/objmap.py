"""Level maps assembled from OBJ geometry, a ``.map`` entity file and a light-map table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Protocol, Union

from .herfile import HERFile
from .objmap_formats import (
    Entity,
    HeluvObject,
    parse_heluv,
    parse_map,
    parse_mtllib,
    parse_obj,
)
from .objmap_geometry import ConvexHull, MeshData, generate_collision, generate_lod
from .resource import Resource
from .texture import TexFiltering, Texture, TexWrap

log = logging.getLogger(__name__)

# Grid step of the far level of detail: large enough that every face is one cell.
_FAR_LOD_STEP = 1_000_000.0

EntityDeserializer = Callable[["ObjMapModel", Entity, Any], None]


@dataclass
class LOD:
    """Meshes to draw from ``distance`` onwards."""

    distance: float
    meshes: list[MeshData] = field(default_factory=list)


class _Source(Protocol):
    def read_text(self, name: str) -> str: ...

    def material_texture(self, name: str) -> Texture: ...

    def light_texture(self, object_name: str) -> Texture: ...


@dataclass
class _DirectorySource:
    """Companion files looked up next to the OBJ and light-map files."""

    obj_dir: Path
    heluv_dir: Path

    def read_text(self, name: str) -> str:
        return (self.obj_dir / name).read_text(encoding="utf-8", errors="replace")

    def material_texture(self, name: str) -> Texture:
        return Texture.from_file(str(self.obj_dir / name))

    def light_texture(self, object_name: str) -> Texture:
        return Texture.from_file(
            str(self.heluv_dir / f"{object_name}.png"),
            TexWrap.Repeat,
            TexFiltering.Linear,
            False,
        )


@dataclass
class _ArchiveSource:
    """Companion files looked up as members of a resource archive."""

    her: HERFile

    def read_text(self, name: str) -> str:
        return self.her[name].as_string()

    def material_texture(self, name: str) -> Texture:
        return self.her[name].as_texture()

    def light_texture(self, object_name: str) -> Texture:
        return self.her[f"{object_name}.png"].as_texture(
            TexWrap.Repeat, TexFiltering.Linear, False
        )


class ObjMapModel(Resource):
    """A level: meshes at two levels of detail, collision hulls and map entities."""

    def __init__(
        self,
        obj_text: str,
        source: _Source,
        map_text: str = "",
        heluv_data: bytes = b"",
        grid_size: float = 16.0,
        generate_collision: bool = True,
        lod_dist: float = 15.0,
        lod_step: float = 1.0,
        name: str = "",
    ) -> None:
        super().__init__()
        self.name = name
        self.grid_size = grid_size

        self.heluv: dict[str, HeluvObject] = parse_heluv(heluv_data) if heluv_data else {}
        for object_name, entry in self.heluv.items():
            entry.texture = source.light_texture(object_name)

        obj = parse_obj(obj_text, grid_size, self.heluv)

        self.materials: dict[str, Optional[Texture]] = {}
        for library in obj.material_libraries:
            self.materials = {
                material: source.material_texture(texture_name) if texture_name else None
                for material, texture_name in parse_mtllib(source.read_text(library)).items()
            }

        self.lods: list[LOD] = [
            LOD(0.0, generate_lod(obj.vertices, obj.tex_coords, obj.objects, lod_step)),
            LOD(lod_dist, generate_lod(obj.vertices, obj.tex_coords, obj.objects, _FAR_LOD_STEP)),
        ]

        self.collision_shapes: list[ConvexHull] = (
            generate_collision(obj.vertices, obj.objects) if generate_collision else []
        )

        self.entities: list[Entity] = parse_map(map_text, grid_size, name) if map_text else []
        self.entities_data: Any = None
        self.level_objects: list[Any] = []
        self._loaded = True

    @classmethod
    def from_files(
        cls,
        obj_file_name: Union[str, Path],
        map_file_name: Union[str, Path] = "",
        lightmap_file_name: Union[str, Path] = "",
        grid_size: float = 16.0,
        generate_collision: bool = True,
        lod_dist: float = 15.0,
        lod_step: float = 1.0,
    ) -> "ObjMapModel":
        """Load a level from files; empty map or light-map names are skipped."""
        obj_path = Path(obj_file_name)
        heluv_data = b""
        heluv_dir = Path(".")
        if lightmap_file_name:
            lightmap_path = Path(lightmap_file_name)
            heluv_dir = lightmap_path.parent
            heluv_data = lightmap_path.read_bytes()
        obj_text = obj_path.read_text(encoding="utf-8", errors="replace")
        map_text = ""
        if map_file_name:
            map_text = Path(map_file_name).read_text(encoding="utf-8", errors="replace")
        return cls(
            obj_text,
            _DirectorySource(obj_path.parent, heluv_dir),
            map_text,
            heluv_data,
            grid_size,
            generate_collision,
            lod_dist,
            lod_step,
            name=str(map_file_name),
        )

    @classmethod
    def from_her(
        cls,
        her: HERFile,
        obj_file_name: str,
        map_file_name: str = "",
        heluv_file_name: str = "",
        grid_size: float = 16.0,
        generate_collision: bool = True,
        lod_dist: float = 15.0,
        lod_step: float = 1.0,
    ) -> "ObjMapModel":
        """Load a level whose files are members of a resource archive."""
        obj_text = her[obj_file_name].as_string()
        map_text = her[map_file_name].as_string() if map_file_name else ""
        heluv_data = her[heluv_file_name].data if heluv_file_name else b""
        return cls(
            obj_text,
            _ArchiveSource(her),
            map_text,
            heluv_data,
            grid_size,
            generate_collision,
            lod_dist,
            lod_step,
            name=map_file_name,
        )

    def deserialize_entities(
        self, deserializers: Mapping[str, EntityDeserializer], data: Any = None
    ) -> None:
        """Call the deserializer registered for each entity's class name."""
        for entity in self.entities:
            handler = deserializers.get(entity.classname)
            if handler is not None:
                handler(self, entity, data)
        self.entities_data = data

    def add_entity_object_to_level(self, obj: Any) -> None:
        """Queue an object built from an entity to be added to the level."""
        self.level_objects.append(obj)

    def meshes_for_distance(self, distance: float) -> list[MeshData]:
        """Meshes of the farthest level of detail whose distance does not exceed ``distance``."""
        chosen = self.lods[0]
        for lod in sorted(self.lods, key=lambda item: item.distance):
            if lod.distance <= distance:
                chosen = lod
        return chosen.meshes