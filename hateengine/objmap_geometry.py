"""Geometry for level maps: grid meshes of polygon faces and convex collision hulls."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .objmap_formats import ObjObject, Vec2, Vec3

log = logging.getLogger(__name__)

_EDGE_EPSILON = 0.01
_CELL_MARGIN = 0.01
_BARY_EPSILON = 1e-6
_FLOAT_MAX = 3.4028234663852886e38
# Smallest positive normal single-precision float; the upper bound of a
# mesh's extent starts here rather than at the lowest float.
_FLOAT_MIN_POSITIVE = 1.1754943508222875e-38
_INVALID_BARY: Vec3 = (-1.0, -1.0, -1.0)


@dataclass
class MeshData:
    """Triangle mesh of one map object, with vertices relative to ``position``."""

    name: str
    vertices: list[float] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    normals: list[float] = field(default_factory=list)
    uv: list[float] = field(default_factory=list)
    light_uv: list[float] = field(default_factory=list)
    position: Vec3 = (0.0, 0.0, 0.0)
    material: str = ""


@dataclass
class ConvexHull:
    """Collision hull of one map object.

    Vertices are flat, each stored as (z, y, x); faces list vertex indices in
    counter-clockwise order.
    """

    vertices: list[float] = field(default_factory=list)
    faces: list[list[int]] = field(default_factory=list)


@dataclass
class _Triangle:
    points: tuple[Vec2, Vec2, Vec2]
    tex: tuple[Vec2, Vec2, Vec2] = ((0.0, 0.0), (0.0, 0.0), (0.0, 0.0))
    light_tex: tuple[Vec2, Vec2, Vec2] = ((0.0, 0.0), (0.0, 0.0), (0.0, 0.0))


def _sign(p1: Vec2, p2: Vec2, p3: Vec2) -> float:
    return (p1[0] - p3[0]) * (p2[1] - p3[1]) - (p2[0] - p3[0]) * (p1[1] - p3[1])


def point_in_polygon(point: Vec2, polygon: Sequence[Vec2]) -> bool:
    """True if ``point`` lies inside or on the border of the convex ``polygon``."""
    has_neg = has_pos = False
    count = len(polygon)
    for i, v1 in enumerate(polygon):
        v2 = polygon[(i + 1) % count]
        d = _sign(point, v1, v2)
        has_neg = has_neg or d < 0
        has_pos = has_pos or d > 0
        if has_neg and has_pos:
            return False
    return True


def point_in_triangle(point: Vec2, triangle: Sequence[Vec2]) -> bool:
    """True if ``point`` lies inside or on the border of ``triangle``."""
    v1, v2, v3 = triangle[0], triangle[1], triangle[2]
    d = (_sign(point, v1, v2), _sign(point, v2, v3), _sign(point, v3, v1))
    has_neg = any(x < 0 for x in d)
    has_pos = any(x > 0 for x in d)
    return not (has_neg and has_pos)


def point_on_triangle_edge(point: Vec2, triangle: Sequence[Vec2]) -> bool:
    """True if ``point`` lies strictly between the ends of one of the triangle's edges."""
    px, py = point
    edges = ((triangle[0], triangle[1]), (triangle[1], triangle[2]), (triangle[2], triangle[0]))
    for v1, v2 in edges:
        min_x, max_x = min(v1[0], v2[0]), max(v1[0], v2[0])
        min_y, max_y = min(v1[1], v2[1]), max(v1[1], v2[1])
        if abs(px - v1[0]) < _EDGE_EPSILON and abs(v1[0] - v2[0]) < _EDGE_EPSILON:
            if min_y < py < max_y:
                return True
        elif abs(py - v1[1]) < _EDGE_EPSILON and abs(v1[1] - v2[1]) < _EDGE_EPSILON:
            if min_x < px < max_x:
                return True
        elif min_y < py < max_y and min_x < px < max_x:
            slope = (v2[1] - v1[1]) / (v2[0] - v1[0])
            expected_y = (px - v1[0]) * slope + v1[1]
            if abs(py - expected_y) < _EDGE_EPSILON:
                return True
    return False


def barycentric(p: Vec2, v0: Vec2, v1: Vec2, v2: Vec2) -> Vec3:
    """Barycentric weights of ``p`` in the triangle, or (-1, -1, -1) if outside or degenerate."""
    e1 = (v1[0] - v0[0], v1[1] - v0[1])
    e2 = (v2[0] - v0[0], v2[1] - v0[1])
    ep = (p[0] - v0[0], p[1] - v0[1])
    denom = e1[0] * e2[1] - e1[1] * e2[0]
    if abs(denom) < _BARY_EPSILON:
        log.debug("Degenerate triangle or too small area.")
        return _INVALID_BARY
    v = (ep[0] * e2[1] - ep[1] * e2[0]) / denom
    w = (e1[0] * ep[1] - e1[1] * ep[0]) / denom
    u = 1.0 - v - w
    low, high = -_BARY_EPSILON, 1.0 + _BARY_EPSILON
    if any(c < low or c > high for c in (u, v, w)):
        return _INVALID_BARY
    return (u, v, w)


def _near(a: Vec2, b: Vec2) -> bool:
    return abs(a[0] - b[0]) < _EDGE_EPSILON and abs(a[1] - b[1]) < _EDGE_EPSILON


def _interpolate(weights: Vec3, values: tuple[Vec2, Vec2, Vec2]) -> Vec2:
    return (
        sum(w * val[0] for w, val in zip(weights, values)),
        sum(w * val[1] for w, val in zip(weights, values)),
    )


def _uvs_at(p: Vec2, triangles: Sequence[_Triangle]) -> tuple[Vec2, Vec2] | None:
    for t in triangles:
        if point_in_triangle(p, t.points) or point_on_triangle_edge(p, t.points):
            weights = barycentric(p, *t.points)
            return _interpolate(weights, t.tex), _interpolate(weights, t.light_tex)
        for corner, tex, light in zip(t.points, t.tex, t.light_tex):
            if _near(p, corner):
                return tex, light
    return None


def _angle_sorted(indices: Sequence[int], points: Sequence[Vec2], center: Vec2) -> list[int]:
    cx, cy = center

    def angle(i: int) -> float:
        return math.atan2(points[i][1] - cy, points[i][0] - cx)

    return sorted(indices, key=angle, reverse=True)


def _grid_points(poly: list[Vec2], poly_min: Vec2, poly_max: Vec2, step: float) -> list[Vec2]:
    grid: list[Vec2] = []

    x = poly_min[0] - step
    while x < poly_max[0]:
        x = poly_max[0] if abs(poly_max[0] - x) < step else x + step
        y = poly_min[1] - step
        while y < poly_max[1]:
            y = poly_max[1] if abs(poly_max[1] - y) < step else y + step
            if point_in_polygon((x, y), poly):
                grid.append((x, y))

    for i, a in enumerate(poly):
        b = poly[(i + 1) % len(poly)]
        min_x, max_x = min(a[0], b[0]), max(a[0], b[0])
        min_y, max_y = min(a[1], b[1]), max(a[1], b[1])
        x = poly_min[0] + step
        while x < max_x:
            if x > min_x:
                grid.append((x, a[1] + (b[1] - a[1]) * (x - a[0]) / (b[0] - a[0])))
            x += step
        y = poly_min[1] + step
        while y < max_y:
            if y > min_y:
                grid.append((a[0] + (b[0] - a[0]) * (y - a[1]) / (b[1] - a[1]), y))
            y += step

    grid.extend(poly)
    return grid


def _cells(grid: list[Vec2], poly_min: Vec2, g_x: int, g_y: int, step: float) -> list[list[int]]:
    cells: list[list[list[int]]] = [[[] for _ in range(g_y)] for _ in range(g_x)]
    for i, (px, py) in enumerate(grid):
        cx = max(0, math.floor((px - poly_min[0]) / step))
        cy = max(0, math.floor((py - poly_min[1]) / step))
        start_x = cx - 1 if cx > 0 else 0
        start_y = cy - 1 if cy > 0 else 0
        end_x = cx + 1 if cx < g_x - 1 else g_x - 1
        end_y = cy + 1 if cy < g_y - 1 else g_y - 1
        for gx in range(start_x, end_x + 1):
            for gy in range(start_y, end_y + 1):
                ax = poly_min[0] + gx * step - _CELL_MARGIN
                ay = poly_min[1] + gy * step - _CELL_MARGIN
                bx = poly_min[0] + (gx + 1) * step + _CELL_MARGIN
                by = poly_min[1] + (gy + 1) * step + _CELL_MARGIN
                if ax < px < bx and ay < py < by:
                    cells[gx][gy].append(i)
    return [cell for column in cells for cell in column]


def _face_frame(vertices: Sequence[Vec3], indices: Sequence[int]) -> np.ndarray | None:
    v0, v1, v2 = (np.asarray(vertices[i], dtype=float) for i in indices[:3])
    ab = v1 - v0
    n = np.cross(ab, v2 - v0)
    ab_len, n_len = np.linalg.norm(ab), np.linalg.norm(n)
    if ab_len == 0 or n_len == 0:
        return None
    u = ab / ab_len
    v = np.cross(u, n / n_len)
    return np.array([u, v, n])


def generate_lod(
    vertices: Sequence[Vec3],
    tex_coords: Sequence[Vec2],
    objects: Sequence[ObjObject],
    step: float = 1.0,
) -> list[MeshData]:
    """Cut every face of every object into a grid of cells ``step`` wide and triangulate them."""
    meshes: list[MeshData] = []
    for obj in objects:
        mesh = MeshData(obj.name, material=obj.material)
        for face in obj.faces:
            if len(face.indices) < 3:
                continue
            frame = _face_frame(vertices, face.indices)
            if frame is None:
                log.warning("Degenerate face in %r, skip", obj.name)
                continue
            frame_inv = np.linalg.inv(frame)

            projected = [frame @ np.asarray(vertices[i], dtype=float) for i in face.indices]
            poly: list[Vec2] = [(float(p[0]), float(p[1])) for p in projected]
            key = float(projected[0][2])

            poly_min = (min(p[0] for p in poly), min(p[1] for p in poly))
            poly_max = (max(p[0] for p in poly), max(p[1] for p in poly))
            poly_center = ((poly_min[0] + poly_max[0]) / 2, (poly_min[1] + poly_max[1]) / 2)

            order = _angle_sorted(range(len(poly)), poly, poly_center)
            triangles: list[_Triangle] = []
            for prev, cur in zip(order[1:], order[2:]):
                corners = (order[0], prev, cur)
                tri = _Triangle(tuple(poly[c] for c in corners))  # type: ignore[arg-type]
                if face.tex_indices:
                    tri.tex = tuple(  # type: ignore[assignment]
                        tuple(tex_coords[face.tex_indices[c]]) for c in corners
                    )
                if face.light_tex:
                    tri.light_tex = tuple(  # type: ignore[assignment]
                        tuple(face.light_tex[c]) for c in corners
                    )
                triangles.append(tri)

            grid = _grid_points(poly, poly_min, poly_max, step)
            g_x = math.ceil((poly_max[0] - poly_min[0]) / step)
            g_y = math.ceil((poly_max[1] - poly_min[1]) / step)
            if g_x <= 0 or g_y <= 0:
                continue

            for cell in _cells(grid, poly_min, g_x, g_y, step):
                if len(cell) < 3:
                    continue
                xs = [grid[i][0] for i in cell]
                ys = [grid[i][1] for i in cell]
                center = ((min(xs) + max(xs)) / 2, (min(ys) + max(ys)) / 2)
                cell = _angle_sorted(cell, grid, center)
                for prev, cur in zip(cell[1:], cell[2:]):
                    for point_index in (cell[0], prev, cur):
                        px, py = grid[point_index]
                        mesh.indices.append(len(mesh.vertices) // 3)
                        world = frame_inv @ np.array([px, py, key])
                        mesh.vertices.extend(float(c) for c in world)
                        found = _uvs_at((px, py), triangles)
                        if found is not None:
                            mesh.uv.extend(found[0])
                            mesh.light_uv.extend(found[1])
                    mesh.normals.extend(list(face.normal) * 3)

        coords = [mesh.vertices[axis::3] for axis in range(3)]
        low = [min([_FLOAT_MAX, *c]) for c in coords]
        high = [max([_FLOAT_MIN_POSITIVE, *c]) for c in coords]
        center3 = tuple((lo + hi) / 2.0 for lo, hi in zip(low, high))
        mesh.vertices = [v - center3[i % 3] for i, v in enumerate(mesh.vertices)]
        mesh.position = center3  # type: ignore[assignment]
        meshes.append(mesh)
    return meshes


def sort_vertices_ccw(vertices: Sequence[Vec3], normal: Vec3) -> list[Vec3]:
    """The vertices ordered by descending angle around their centroid, seen along ``normal``."""
    if not vertices:
        return []
    points = np.asarray(vertices, dtype=float)
    n = np.asarray(normal, dtype=float)
    centroid = points.mean(axis=0)
    up = np.array([0.0, 1.0, 0.0]) if abs(n[0]) > 0.0001 else np.array([1.0, 0.0, 0.0])
    with np.errstate(invalid="ignore", divide="ignore"):
        tangent = np.cross(up, n)
        tangent = tangent / np.linalg.norm(tangent)
        bitangent = np.cross(n, tangent)
        bitangent = bitangent / np.linalg.norm(bitangent)
    relative = points - centroid
    angles = [
        math.atan2(float(r @ bitangent), float(r @ tangent)) for r in relative
    ]
    order = sorted(range(len(vertices)), key=lambda i: angles[i], reverse=True)
    return [tuple(vertices[i]) for i in order]  # type: ignore[misc]


def generate_collision(
    vertices: Sequence[Vec3], objects: Sequence[ObjObject]
) -> list[ConvexHull]:
    """One convex hull per object, built from its faces."""
    hulls: list[ConvexHull] = []
    for obj in objects:
        hull = ConvexHull()
        vertex_map: dict[int, int] = {}
        for face in obj.faces:
            originals = [tuple(vertices[i]) for i in face.indices]
            ordered = [
                face.indices[originals.index(v)]
                for v in sort_vertices_ccw(originals, face.normal)
            ]
            face_indices: list[int] = []
            for index in ordered:
                if index not in vertex_map:
                    vertex_map[index] = len(hull.vertices) // 3
                    x, y, z = vertices[index]
                    hull.vertices.extend((z, y, x))
                face_indices.append(vertex_map[index])
            hull.faces.append(face_indices)
        hulls.append(hull)
    return hulls