"""Helpers that decompose closed solids into primitive surfaces.

Each helper appends its faces to the scene, outward facing, and returns the
new surface ids in insertion order. Radiative properties are the surface
defaults (black, diffuse); scenes needing gray faces can build the faces
directly with :class:`graytrace.surface.Surface`.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, List

import numpy as np

from .geometry import Vector, as_unit, as_vec3
from .surface import Surface

if TYPE_CHECKING:
    from .scene import Scene


def add_box(scene: "Scene", translation: Vector, scale: Vector,
            axis_x: Vector, axis_y: Vector) -> List[int]:
    """Six rectangles bounding a box, ordered +x, -x, +y, -y, +z, -z.

    ``scale`` gives the edge lengths along ``axis_x``, ``axis_y`` and their
    cross product.
    """
    c = as_vec3(translation)
    sx, sy, sz = (float(v) for v in as_vec3(scale))
    i = as_unit(axis_x)
    j = as_unit(axis_y)
    k = as_unit(np.cross(i, j))

    faces = [
        Surface.rectangle(c + i * sx / 2.0, sy, sz, i, j),
        Surface.rectangle(c - i * sx / 2.0, sy, sz, -i, j),
        Surface.rectangle(c + j * sy / 2.0, sx, sz, j, i),
        Surface.rectangle(c - j * sy / 2.0, sx, sz, -j, i),
        Surface.rectangle(c + k * sz / 2.0, sx, sy, k, i),
        Surface.rectangle(c - k * sz / 2.0, sx, sy, -k, -i),
    ]
    return [scene.add_surface(f) for f in faces]


def add_closed_cylinder(scene: "Scene", translation: Vector, axis: Vector,
                        height: float, radius: float) -> List[int]:
    """Top disk, bottom disk and lateral surface of a capped cylinder
    centred on ``translation``."""
    c = as_vec3(translation)
    a = as_unit(axis)
    faces = [
        Surface.disk(c + a * height / 2.0, radius, a),
        Surface.disk(c - a * height / 2.0, radius, -a),
        Surface.cylinder(c, radius, height, a),
    ]
    return [scene.add_surface(f) for f in faces]


def add_closed_cone(scene: "Scene", translation: Vector, axis: Vector,
                    height: float, radius: float) -> List[int]:
    """Base disk (facing ``-axis``) and lateral surface of a cone whose base
    is centred on ``translation``."""
    c = as_vec3(translation)
    a = as_unit(axis)
    faces = [
        Surface.disk(c, radius, -a),
        Surface.cone(c, radius, height, a),
    ]
    return [scene.add_surface(f) for f in faces]


__all__ = ["add_box", "add_closed_cylinder", "add_closed_cone"]
