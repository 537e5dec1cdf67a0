from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

Vector = Union[np.ndarray, Sequence[float]]

UNIT_TOL = 1e-6


def as_vec3(v: Vector) -> np.ndarray:
    """Return ``v`` as a contiguous float64 array of shape (3,)."""
    a = np.ascontiguousarray(v, dtype=np.float64)
    if a.shape != (3,):
        raise ValueError(f"expected a 3-vector (got shape {a.shape})")
    return a


def as_unit(v: Vector) -> np.ndarray:
    """Return ``v`` normalized. Zero-length input is a caller error."""
    a = as_vec3(v)
    n = float(np.linalg.norm(a))
    if n == 0.0 or not np.isfinite(n):
        raise ValueError(f"cannot normalize degenerate vector {a!r}")
    return a / n


def check_unit(v: Vector) -> np.ndarray:
    """Return ``v`` unchanged after asserting it is already unit length."""
    a = as_vec3(v)
    if abs(float(np.linalg.norm(a)) - 1.0) > UNIT_TOL:
        raise ValueError(f"normal must be unit length (got |n| = {np.linalg.norm(a)!r})")
    return a


@dataclass
class Ray:
    origin: np.ndarray
    direction: np.ndarray

    def __post_init__(self) -> None:
        self.origin = as_vec3(self.origin)
        self.direction = as_vec3(self.direction)

    def at(self, t: float) -> np.ndarray:
        return self.origin + t * self.direction


@dataclass
class Hit:
    """Intersection result. ``normal`` is the outward unit normal."""
    normal: np.ndarray
    position: np.ndarray
    t: float

    def __post_init__(self) -> None:
        self.normal = check_unit(self.normal)
        self.position = as_vec3(self.position)
        self.t = float(self.t)


@dataclass
class SurfaceSample:
    """Emission point on a surface with its outward unit normal."""
    position: np.ndarray
    normal: np.ndarray

    def __post_init__(self) -> None:
        self.position = as_vec3(self.position)
        self.normal = check_unit(self.normal)


__all__ = [
    "Vector",
    "Ray",
    "Hit",
    "SurfaceSample",
    "as_vec3",
    "as_unit",
    "check_unit",
]
