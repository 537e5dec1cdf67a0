from __future__ import annotations
import math
import numpy as np
import numba as nb

from .vec import _cross, _dot, any_orthonormal, normalize

TWO_PI = 6.283185307179586


@nb.njit(nogil=True)
def diffuse_direction(n, rng):
    """Cosine-weighted direction about the unit normal ``n`` (Malley's method).

    A point is drawn area-uniformly on the unit disk (polar angle
    ``g = asin(sqrt(U))``, azimuth uniform) and lifted onto the hemisphere.
    The result has unit length.
    """
    g = math.asin(math.sqrt(rng.random()))
    phi = TWO_PI * rng.random()

    # Local frame from the normal
    t1 = any_orthonormal(n)
    t2 = normalize(_cross(t1, n))

    cos_g = math.cos(g)
    sin_g = math.sin(g)
    a = sin_g * math.cos(phi)
    b = sin_g * math.sin(phi)

    out = np.empty(3, np.float64)
    for i in range(3):
        out[i] = n[i] * cos_g + t1[i] * a + t2[i] * b
    return out


@nb.njit(cache=True, nogil=True)
def specular_direction(d, n):
    """Mirror ``d`` about the unit normal ``n``: ``d - 2 (d.n) n``."""
    k = 2.0 * _dot(d, n)
    out = np.empty(3, np.float64)
    for i in range(3):
        out[i] = d[i] - k * n[i]
    return out


__all__ = ["diffuse_direction", "specular_direction", "TWO_PI"]
