import struct

import pytest
from Crypto.Cipher import Blowfish
from PIL import Image

from hateengine.herfile import HERFile
from hateengine.objmap import LOD, ObjMapModel
from hateengine.objmap_formats import MapParseError

SQUARE_OBJ = """o Box
v 0 0 0
v 2 0 0
v 2 2 0
v 0 2 0
vn 0 0 1
f 1//1 2//1 3//1 4//1
"""

MAP_TEXT = """// level
{
"classname" "worldspawn"
{
( 0 0 0 ) ( 1 0 0 ) ( 0 1 0 ) tex 0 0 0 1 1
}
}
{
"classname" "light"
"origin" "16 32 48"
"light" "300"
}
"""


def _write_png(path, size=(2, 2)):
    Image.new("RGB", size, (10, 20, 30)).save(path)


def _heluv_bytes(name, faces):
    raw = name.encode()
    out = struct.pack("<II", 1, 1) + struct.pack("<HI", len(raw), len(faces)) + raw
    for face in faces:
        out += struct.pack("<B", len(face))
        for u, v in face:
            out += struct.pack("<ff", u, v)
    return out


def _write_her(path, members, key):
    cipher = Blowfish.new(key, Blowfish.MODE_ECB)
    table = b""
    blob = b""
    for name, payload in members.items():
        aligned = payload + b"\0" * (-len(payload) % 8)
        raw = name.encode()
        table += struct.pack("<Q", len(raw)) + raw
        table += struct.pack("<QQQ", len(payload), len(aligned), len(blob))
        blob += cipher.encrypt(aligned)
    header_size = struct.calcsize("<IQQ")
    path.write_bytes(
        struct.pack("<IQQ", 1, header_size + len(table), len(members)) + table + blob
    )


@pytest.fixture
def square_obj(tmp_path):
    path = tmp_path / "level.obj"
    path.write_text(SQUARE_OBJ)
    return path


def test_lods_have_given_distances(square_obj):
    model = ObjMapModel.from_files(square_obj, grid_size=1.0, lod_dist=15.0)
    assert model.is_loaded
    assert [lod.distance for lod in model.lods] == [0.0, 15.0]
    assert all(isinstance(lod, LOD) for lod in model.lods)


def test_mesh_buffers_are_consistent(square_obj):
    model = ObjMapModel.from_files(square_obj, grid_size=1.0)
    for lod in model.lods:
        (mesh,) = lod.meshes
        assert mesh.name == "Box"
        assert len(mesh.vertices) > 0
        assert len(mesh.vertices) % 9 == 0
        assert mesh.indices == list(range(len(mesh.vertices) // 3))
        assert len(mesh.normals) == len(mesh.vertices)


def test_fine_lod_has_at_least_as_many_vertices(square_obj):
    model = ObjMapModel.from_files(square_obj, grid_size=1.0, lod_step=0.5)
    fine = model.lods[0].meshes[0]
    coarse = model.lods[1].meshes[0]
    assert len(fine.vertices) >= len(coarse.vertices)


def test_mesh_vertices_stay_on_the_face(square_obj):
    model = ObjMapModel.from_files(square_obj, grid_size=1.0)
    mesh = model.lods[0].meshes[0]
    px, py, pz = mesh.position
    for i in range(0, len(mesh.vertices), 3):
        x = mesh.vertices[i] + px
        y = mesh.vertices[i + 1] + py
        z = mesh.vertices[i + 2] + pz
        assert -1e-6 <= x <= 2 + 1e-6
        assert -1e-6 <= y <= 2 + 1e-6
        assert z == pytest.approx(0.0, abs=1e-6)


def test_grid_size_scales_geometry(tmp_path, square_obj):
    small = ObjMapModel.from_files(square_obj, grid_size=2.0)
    mesh = small.lods[1].meshes[0]
    px, py, _ = mesh.position
    xs = [mesh.vertices[i] + px for i in range(0, len(mesh.vertices), 3)]
    assert max(xs) <= 1 + 1e-6


def test_collision_hull_covers_face(square_obj):
    model = ObjMapModel.from_files(square_obj, grid_size=1.0)
    (hull,) = model.collision_shapes
    assert len(hull.vertices) == 12
    assert len(hull.faces) == 1
    assert sorted(hull.faces[0]) == [0, 1, 2, 3]


def test_collision_can_be_disabled(square_obj):
    model = ObjMapModel.from_files(square_obj, grid_size=1.0, generate_collision=False)
    assert model.collision_shapes == []


def test_map_entities_are_read(tmp_path, square_obj):
    map_path = tmp_path / "level.map"
    map_path.write_text(MAP_TEXT)
    model = ObjMapModel.from_files(square_obj, map_path, grid_size=16.0)
    assert [e.classname for e in model.entities] == ["light"]
    light = model.entities[0]
    assert light.properties["light"].as_int() == 300
    assert light.position == pytest.approx((1.0, 3.0, -2.0))


def test_broken_map_raises(tmp_path, square_obj):
    map_path = tmp_path / "broken.map"
    map_path.write_text("}\n")
    with pytest.raises(MapParseError):
        ObjMapModel.from_files(square_obj, map_path, grid_size=1.0)


def test_missing_obj_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ObjMapModel.from_files(tmp_path / "absent.obj")


def test_lightmap_coordinates_and_texture(tmp_path, square_obj):
    heluv_path = tmp_path / "level.heluv"
    heluv_path.write_bytes(
        _heluv_bytes("Box", [[(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]])
    )
    _write_png(tmp_path / "Box.png", (2, 3))
    lit = ObjMapModel.from_files(square_obj, "", heluv_path, grid_size=1.0)
    plain = ObjMapModel.from_files(square_obj, grid_size=1.0)
    assert lit.heluv["Box"].texture.height == 3
    assert max(lit.lods[0].meshes[0].light_uv) > 0
    assert all(v == 0 for v in plain.lods[0].meshes[0].light_uv)


def test_material_library_textures(tmp_path):
    (tmp_path / "level.mtl").write_text("newmtl stone\nmap_Kd stone.png\n")
    _write_png(tmp_path / "stone.png", (4, 2))
    obj_path = tmp_path / "level.obj"
    obj_path.write_text("mtllib level.mtl\n" + SQUARE_OBJ.replace("o Box\n", "o Box\nusemtl stone\n"))
    model = ObjMapModel.from_files(obj_path, grid_size=1.0)
    assert model.materials["stone"].width == 4
    assert model.lods[0].meshes[0].material == "stone"


def test_meshes_for_distance(square_obj):
    model = ObjMapModel.from_files(square_obj, grid_size=1.0, lod_dist=15.0)
    assert model.meshes_for_distance(0.0) is model.lods[0].meshes
    assert model.meshes_for_distance(14.9) is model.lods[0].meshes
    assert model.meshes_for_distance(100.0) is model.lods[1].meshes


def test_deserialize_entities_dispatches_by_classname(tmp_path, square_obj):
    map_path = tmp_path / "level.map"
    map_path.write_text(MAP_TEXT)
    model = ObjMapModel.from_files(square_obj, map_path, grid_size=16.0)
    seen = []

    def on_light(m, entity, data):
        seen.append((m, entity.classname, data))
        m.add_entity_object_to_level(entity.properties["light"].as_int())

    context = {"level": 1}
    model.deserialize_entities({"light": on_light, "door": on_light}, context)
    assert seen == [(model, "light", context)]
    assert model.entities_data is context
    assert model.level_objects == [300]


def test_add_entity_object_keeps_order(square_obj):
    model = ObjMapModel.from_files(square_obj, grid_size=1.0)
    first, second = object(), object()
    model.add_entity_object_to_level(first)
    model.add_entity_object_to_level(second)
    assert model.level_objects == [first, second]


def test_from_her_archive(tmp_path):
    password = "password"
    archive = tmp_path / "level.her"
    _write_her(
        archive,
        {"level.obj": SQUARE_OBJ.encode(), "level.map": MAP_TEXT.encode()},
        password.encode(),
    )
    her = HERFile(archive, password)
    model = ObjMapModel.from_her(her, "level.obj", "level.map", grid_size=1.0)
    assert model.lods[0].meshes[0].name == "Box"
    assert [e.classname for e in model.entities] == ["light"]


def test_from_her_missing_member_raises(tmp_path):
    password = "password"
    archive = tmp_path / "level.her"
    _write_her(archive, {"level.obj": SQUARE_OBJ.encode()}, password.encode())
    her = HERFile(archive, password)
    with pytest.raises(KeyError):
        ObjMapModel.from_her(her, "level.obj", "absent.map")