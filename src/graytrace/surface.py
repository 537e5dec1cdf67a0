from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional

import numpy as np

from .geometry import Hit, Ray, SurfaceSample, Vector, as_unit, as_vec3
from .transform import Transform
from .utils import colliders
from .utils.tracer import surface_intersect, surface_sample
from .utils.vec import any_orthonormal


class Collider(IntEnum):
    """Primitive kind. Values are the tags used by the compiled kernels."""
    SPHERE = colliders.SPHERE
    DISK = colliders.DISK
    CYLINDER = colliders.CYLINDER
    RECTANGLE = colliders.RECTANGLE
    CONE = colliders.CONE


class Reflection(IntEnum):
    DIFFUSE = 0
    SPECULAR = 1


@dataclass(frozen=True)
class Surface:
    """A placed primitive with gray-body radiative properties.

    Surfaces are immutable: ``gray_body``, ``specular`` and ``diffuse`` return
    modified copies, to be applied before the surface is added to a scene.
    New surfaces are black (``emissivity=1``) and diffuse.
    """
    transform: Transform
    collider: Collider
    emissivity: float = 1.0
    reflection: Reflection = Reflection.DIFFUSE

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.emissivity) <= 1.0:
            raise ValueError(f"emissivity must lie in [0, 1] (got {self.emissivity!r})")
        object.__setattr__(self, "emissivity", float(self.emissivity))
        object.__setattr__(self, "collider", Collider(self.collider))
        object.__setattr__(self, "reflection", Reflection(self.reflection))

    # Radiative properties

    def gray_body(self, emissivity: float) -> "Surface":
        return replace(self, emissivity=emissivity)

    def specular(self) -> "Surface":
        return replace(self, reflection=Reflection.SPECULAR)

    def diffuse(self) -> "Surface":
        return replace(self, reflection=Reflection.DIFFUSE)

    @property
    def is_specular(self) -> bool:
        return self.reflection == Reflection.SPECULAR

    # Geometry

    def intersect(self, ray: Ray) -> Optional[Hit]:
        """Nearest forward hit of a world-space ray, or None."""
        t = self.transform
        hit, t_hit, p, n = surface_intersect(
            int(self.collider), t.m, t.m_inv, t.m_inv_trans, ray.origin, ray.direction
        )
        if not hit:
            return None
        return Hit(normal=n, position=p, t=t_hit)

    def sample(self, rng: Optional[np.random.Generator] = None) -> SurfaceSample:
        """Draw a world-space emission point and its outward normal."""
        rng = np.random.default_rng(rng)
        t = self.transform
        p, n = surface_sample(int(self.collider), t.m, t.m_inv_trans, rng)
        return SurfaceSample(position=p, normal=n)

    # Constructors in world units

    @classmethod
    def sphere(cls, position: Vector, radius: float) -> "Surface":
        transform = Transform(position, np.full(3, float(radius)), [0.0, 0.0, 1.0], [1.0, 0.0, 0.0])
        return cls(transform, Collider.SPHERE)

    @classmethod
    def disk(cls, position: Vector, radius: float, normal: Vector) -> "Surface":
        normal = as_unit(normal)
        transform = Transform(position, np.full(3, float(radius)), normal, any_orthonormal(normal))
        return cls(transform, Collider.DISK)

    @classmethod
    def cylinder(cls, position: Vector, radius: float, height: float, axis: Vector) -> "Surface":
        axis = as_unit(axis)
        scale = np.array([radius, radius, height], np.float64)
        transform = Transform(position, scale, axis, any_orthonormal(axis))
        return cls(transform, Collider.CYLINDER)

    @classmethod
    def rectangle(cls, position: Vector, width: float, height: float,
                  normal: Vector, axis_x: Vector) -> "Surface":
        """Rectangle of ``width`` along ``axis_x`` and ``height`` along
        ``normal x axis_x``, centred on ``position``."""
        scale = np.array([width, height, 1.0], np.float64)
        transform = Transform(position, scale, normal, as_vec3(axis_x))
        return cls(transform, Collider.RECTANGLE)

    @classmethod
    def cone(cls, position: Vector, radius: float, height: float, axis: Vector) -> "Surface":
        """Cone lateral surface with its base centred on ``position`` and the
        apex at ``position + height * axis``."""
        axis = as_unit(axis)
        scale = np.array([radius, radius, height], np.float64)
        transform = Transform(position, scale, axis, any_orthonormal(axis))
        return cls(transform, Collider.CONE)


__all__ = ["Surface", "Collider", "Reflection"]
