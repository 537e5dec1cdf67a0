from __future__ import annotations
import math

import numpy as np

from .geometry import Hit, Ray, SurfaceSample, Vector, as_unit, as_vec3
from .utils.vec import any_orthonormal, apply_normal, apply_point, apply_vector

_EYE3 = np.eye(3, dtype=np.float64)
_X = np.array([1.0, 0.0, 0.0])
_Z = np.array([0.0, 0.0, 1.0])


def _skew(v: np.ndarray) -> np.ndarray:
    return np.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0],
    ])


def rotation_arc(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Shortest-arc rotation matrix taking unit vector ``a`` onto unit vector ``b``."""
    c = float(np.dot(a, b))
    axis = np.cross(a, b)
    s = float(np.linalg.norm(axis))
    if s < 1e-12:
        if c > 0.0:
            return _EYE3.copy()
        # Antiparallel: half turn about any axis perpendicular to a
        u = any_orthonormal(a)
        return 2.0 * np.outer(u, u) - _EYE3
    # axis-angle form stays orthogonal near the antiparallel case
    return rotation_about(axis / s, math.atan2(s, c))


def rotation_about(axis: np.ndarray, angle: float) -> np.ndarray:
    """Rodrigues rotation by ``angle`` radians about the unit ``axis``."""
    k = _skew(axis)
    return _EYE3 + math.sin(angle) * k + (1.0 - math.cos(angle)) * (k @ k)


class Transform:
    """Affine placement of a canonical primitive in world space.

    Local +Z is mapped onto ``axis_z`` (the surface orientation), then the
    frame is spun about that axis so local +X lands on ``axis_x`` projected
    into the plane orthogonal to ``axis_z``. The full map is
    ``m = translation @ rotation @ scale``.

    Parameters
    ----------
    translation : (3,) array-like
        World position of the local origin.
    scale : (3,) array-like
        Per-axis scale. All components must be non-zero.
    axis_z : (3,) array-like
        World direction of local +Z. Need not be normalized.
    axis_x : (3,) array-like
        World direction of local +X. Must not be parallel to ``axis_z``.
    """

    def __init__(self, translation: Vector, scale: Vector, axis_z: Vector, axis_x: Vector):
        translation = as_vec3(translation)
        scale = as_vec3(scale)
        z = as_unit(axis_z)
        x = as_vec3(axis_x)
        if np.any(scale == 0.0):
            raise ValueError(f"scale components must be non-zero (got {scale!r})")

        r1 = rotation_arc(_Z, z)

        x_proj = x - np.dot(x, z) * z
        if float(np.linalg.norm(x_proj)) < 1e-9:
            raise ValueError(
                f"axis_x {x!r} is degenerate or parallel to axis_z {z!r}"
            )
        x_proj = x_proj / np.linalg.norm(x_proj)
        x_rot = r1 @ _X
        angle = math.atan2(float(np.dot(np.cross(x_rot, x_proj), z)), float(np.dot(x_rot, x_proj)))
        rotation = rotation_about(z, angle) @ r1

        m = np.eye(4, dtype=np.float64)
        m[:3, :3] = rotation * scale[None, :]
        m[:3, 3] = translation

        self.m = np.ascontiguousarray(m)
        self.m_inv = np.ascontiguousarray(np.linalg.inv(m))
        self.m_inv_trans = np.ascontiguousarray(np.linalg.inv(m[:3, :3]).T)
        # Inverse of the normal map, used for world -> local normals
        self._m_lin_t = np.ascontiguousarray(m[:3, :3].T)

    @classmethod
    def identity(cls) -> "Transform":
        return cls(np.zeros(3), np.ones(3), _Z, _X)

    @property
    def translation(self) -> np.ndarray:
        return self.m[:3, 3].copy()

    @property
    def scale(self) -> np.ndarray:
        return np.linalg.norm(self.m[:3, :3], axis=0)

    # Points, vectors, normals

    def point_local_to_world(self, point: Vector) -> np.ndarray:
        return apply_point(self.m, as_vec3(point))

    def point_world_to_local(self, point: Vector) -> np.ndarray:
        return apply_point(self.m_inv, as_vec3(point))

    def vec_local_to_world(self, vector: Vector) -> np.ndarray:
        return apply_vector(self.m, as_vec3(vector))

    def vec_world_to_local(self, vector: Vector) -> np.ndarray:
        return apply_vector(self.m_inv, as_vec3(vector))

    def normal_local_to_world(self, normal: Vector) -> np.ndarray:
        return apply_normal(self.m_inv_trans, as_vec3(normal))

    def normal_world_to_local(self, normal: Vector) -> np.ndarray:
        return apply_normal(self._m_lin_t, as_vec3(normal))

    # Composite values

    def ray_local_to_world(self, ray: Ray) -> Ray:
        return Ray(self.point_local_to_world(ray.origin), self.vec_local_to_world(ray.direction))

    def ray_world_to_local(self, ray: Ray) -> Ray:
        return Ray(self.point_world_to_local(ray.origin), self.vec_world_to_local(ray.direction))

    def hit_local_to_world(self, hit: Hit) -> Hit:
        return Hit(
            normal=self.normal_local_to_world(hit.normal),
            position=self.point_local_to_world(hit.position),
            t=hit.t,
        )

    def surface_sample_local_to_world(self, sample: SurfaceSample) -> SurfaceSample:
        return SurfaceSample(
            position=self.point_local_to_world(sample.position),
            normal=self.normal_local_to_world(sample.normal),
        )

    def __repr__(self) -> str:
        return f"Transform(translation={self.translation!r}, scale={self.scale!r})"


__all__ = ["Transform", "rotation_arc", "rotation_about"]
