"""Compiled kernels.

Re-exports the entry points so callers can do:
    from graytrace.utils import cast_ray, trace_path, diffuse_direction

Everything here is numba ``njit`` code working on float64 arrays; the
object-level API in :mod:`graytrace.scene` and :mod:`graytrace.surface`
wraps it.
"""
from __future__ import annotations

from .colliders import collider_intersect, collider_sample  # noqa: F401
from .sampling import diffuse_direction, specular_direction  # noqa: F401
from .tracer import (  # noqa: F401
    accumulate_view_factors,
    cast_ray,
    surface_intersect,
    surface_sample,
    trace_path,
)

__all__ = [
    "collider_intersect",
    "collider_sample",
    "diffuse_direction",
    "specular_direction",
    "accumulate_view_factors",
    "cast_ray",
    "surface_intersect",
    "surface_sample",
    "trace_path",
]
