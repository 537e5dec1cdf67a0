from __future__ import annotations
import math
import numpy as np
import numba as nb


@nb.njit(inline="always", cache=True)
def _dot(a, b):
    return a[0]*b[0] + a[1]*b[1] + a[2]*b[2]


@nb.njit(inline="always", cache=True)
def _cross(a, b):
    out = np.empty(3, np.float64)
    out[0] = a[1]*b[2] - a[2]*b[1]
    out[1] = a[2]*b[0] - a[0]*b[2]
    out[2] = a[0]*b[1] - a[1]*b[0]
    return out


@nb.njit(cache=True)
def normalize(v):
    """Return ``v / |v|`` as a new float64 array."""
    n = math.sqrt(v[0]*v[0] + v[1]*v[1] + v[2]*v[2])
    out = np.empty(3, np.float64)
    out[0] = v[0] / n
    out[1] = v[1] / n
    out[2] = v[2] / n
    return out


@nb.njit(cache=True)
def any_orthonormal(n):
    """Return a unit vector perpendicular to the unit vector ``n``."""
    u = np.zeros(3, np.float64)
    if abs(n[0]) < 0.9:
        u[0] = 1.0
    else:
        u[1] = 1.0
    return normalize(_cross(u, n))


@nb.njit(cache=True)
def apply_point(m, p):
    """Apply the 4x4 affine matrix ``m`` to point ``p``."""
    out = np.empty(3, np.float64)
    for i in range(3):
        out[i] = m[i, 0]*p[0] + m[i, 1]*p[1] + m[i, 2]*p[2] + m[i, 3]
    return out


@nb.njit(cache=True)
def apply_vector(m, v):
    """Apply the linear part of ``m`` (3x3 or 4x4) to the free vector ``v``."""
    out = np.empty(3, np.float64)
    for i in range(3):
        out[i] = m[i, 0]*v[0] + m[i, 1]*v[1] + m[i, 2]*v[2]
    return out


@nb.njit(cache=True)
def apply_normal(m_it, n):
    """Map a normal with an inverse-transpose matrix and re-normalize."""
    return normalize(apply_vector(m_it, n))


__all__ = [
    "normalize",
    "any_orthonormal",
    "apply_point",
    "apply_vector",
    "apply_normal",
]
