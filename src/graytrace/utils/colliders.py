"""Local-space intersection and sampling kernels for the primitive kinds.

Every primitive lives in a canonical unit frame:

* sphere    - unit sphere at the origin
* disk      - unit disk in the z=0 plane, normal +Z
* cylinder  - lateral surface, radius 1, z in [-0.5, 0.5], axis Z
* rectangle - [-0.5, 0.5]^2 in the z=0 plane, normal +Z
* cone      - lateral surface, base radius 1 at z=0, apex at z=1

Intersection kernels return ``(hit, t, position, normal)``; when ``hit`` is
False the remaining fields are zeros and must not be read. Sampling kernels
return ``(position, normal)``.
"""
from __future__ import annotations
import math
import numpy as np
import numba as nb

from .sampling import TWO_PI
from .vec import _dot, normalize

SPHERE = 0
DISK = 1
CYLINDER = 2
RECTANGLE = 3
CONE = 4

T_EPS = 1e-4       # self-intersection guard on the ray parameter
SPHERE_T_MAX = 100.0
A_EPS = 1e-12      # quadratic coefficient treated as zero


@nb.njit(inline="always", cache=True)
def _miss():
    return False, 0.0, np.zeros(3, np.float64), np.zeros(3, np.float64)


@nb.njit(inline="always", cache=True)
def _at(o, d, t):
    p = np.empty(3, np.float64)
    p[0] = o[0] + t * d[0]
    p[1] = o[1] + t * d[1]
    p[2] = o[2] + t * d[2]
    return p


@nb.njit(inline="always", cache=True)
def _unit_z():
    n = np.zeros(3, np.float64)
    n[2] = 1.0
    return n


# --------------------------------------------------------------------------
# Intersection
# --------------------------------------------------------------------------

@nb.njit(cache=True, nogil=True)
def sphere_intersect(o, d):
    a = _dot(d, d)
    if a == 0.0:
        return _miss()
    half_b = _dot(o, d)
    c = _dot(o, o) - 1.0
    disc = half_b * half_b - a * c
    if disc < 0.0:
        return _miss()

    sq = math.sqrt(disc)
    root = (-half_b - sq) / a
    if root <= T_EPS or root >= SPHERE_T_MAX:
        root = (-half_b + sq) / a
        if root <= T_EPS or root >= SPHERE_T_MAX:
            return _miss()

    p = _at(o, d, root)
    return True, root, p, normalize(p)


@nb.njit(inline="always", cache=True)
def _plane_t(o, d):
    # Ray parameter where the ray meets z=0, or -1 when parallel
    if d[2] == 0.0:
        return -1.0
    return -o[2] / d[2]


@nb.njit(cache=True, nogil=True)
def disk_intersect(o, d):
    t = _plane_t(o, d)
    if t <= T_EPS:
        return _miss()
    p = _at(o, d, t)
    if p[0]*p[0] + p[1]*p[1] < 1.0:
        return True, t, p, _unit_z()
    return _miss()


@nb.njit(cache=True, nogil=True)
def rectangle_intersect(o, d):
    t = _plane_t(o, d)
    if t <= T_EPS:
        return _miss()
    p = _at(o, d, t)
    if -0.5 < p[0] < 0.5 and -0.5 < p[1] < 0.5:
        return True, t, p, _unit_z()
    return _miss()


@nb.njit(cache=True, nogil=True)
def cylinder_intersect(o, d):
    a = d[0]*d[0] + d[1]*d[1]
    if a < A_EPS:
        return _miss()
    b = 2.0 * (o[0]*d[0] + o[1]*d[1])
    c = o[0]*o[0] + o[1]*o[1] - 1.0
    disc = b*b - 4.0*a*c
    if disc < 0.0:
        return _miss()

    sq = math.sqrt(disc)
    t_near = (-b - sq) / (2.0 * a)
    t_far = (-b + sq) / (2.0 * a)
    for k in range(2):
        t = t_near if k == 0 else t_far
        if t <= T_EPS:
            continue
        p = _at(o, d, t)
        if -0.5 <= p[2] <= 0.5:
            n = np.zeros(3, np.float64)
            n[0] = p[0]
            n[1] = p[1]
            return True, t, p, normalize(n)
    return _miss()


@nb.njit(cache=True, nogil=True)
def cone_intersect(o, d):
    # (1 - z)^2 = x^2 + y^2
    a = d[2]*d[2] - d[0]*d[0] - d[1]*d[1]
    if abs(a) < A_EPS:
        return _miss()
    b = 2.0 * (o[2]*d[2] - d[2] - o[0]*d[0] - o[1]*d[1])
    c = o[2]*o[2] - 2.0*o[2] + 1.0 - o[0]*o[0] - o[1]*o[1]
    disc = b*b - 4.0*a*c
    if disc < 0.0:
        return _miss()

    sq = math.sqrt(disc)
    r1 = (-b - sq) / (2.0 * a)
    r2 = (-b + sq) / (2.0 * a)
    t_near = min(r1, r2)
    t_far = max(r1, r2)
    for k in range(2):
        t = t_near if k == 0 else t_far
        if t <= T_EPS:
            continue
        p = _at(o, d, t)
        if 0.0 < p[2] < 1.0:
            n = np.empty(3, np.float64)
            n[0] = p[0]
            n[1] = p[1]
            n[2] = 1.0 - p[2]
            return True, t, p, normalize(n)
    return _miss()


# --------------------------------------------------------------------------
# Sampling
# --------------------------------------------------------------------------

@nb.njit(nogil=True)
def sphere_sample(rng):
    phi = TWO_PI * rng.random()
    u = 2.0 * rng.random() - 1.0
    s = math.sqrt(max(0.0, 1.0 - u*u))
    p = np.empty(3, np.float64)
    p[0] = math.cos(phi) * s
    p[1] = math.sin(phi) * s
    p[2] = u
    return p, normalize(p)


@nb.njit(nogil=True)
def disk_sample(rng):
    theta = TWO_PI * rng.random()
    r = math.sqrt(rng.random())
    p = np.zeros(3, np.float64)
    p[0] = r * math.cos(theta)
    p[1] = r * math.sin(theta)
    return p, _unit_z()


@nb.njit(nogil=True)
def rectangle_sample(rng):
    p = np.zeros(3, np.float64)
    p[0] = rng.random() - 0.5
    p[1] = rng.random() - 0.5
    return p, _unit_z()


@nb.njit(nogil=True)
def cylinder_sample(rng):
    theta = TWO_PI * rng.random()
    p = np.empty(3, np.float64)
    p[0] = math.cos(theta)
    p[1] = math.sin(theta)
    p[2] = rng.random() - 0.5
    n = np.zeros(3, np.float64)
    n[0] = p[0]
    n[1] = p[1]
    return p, normalize(n)


@nb.njit(nogil=True)
def cone_sample(rng):
    theta = TWO_PI * rng.random()
    r = math.sqrt(rng.random())
    p = np.empty(3, np.float64)
    p[0] = r * math.cos(theta)
    p[1] = r * math.sin(theta)
    p[2] = 1.0 - r
    if r == 0.0:
        # apex: gradient vanishes, fall back to the axis
        return p, _unit_z()
    n = np.empty(3, np.float64)
    n[0] = p[0]
    n[1] = p[1]
    n[2] = r
    return p, normalize(n)


# --------------------------------------------------------------------------
# Dispatch on the collider tag
# --------------------------------------------------------------------------

@nb.njit(cache=True, nogil=True)
def collider_intersect(kind, o, d):
    if kind == SPHERE:
        return sphere_intersect(o, d)
    elif kind == DISK:
        return disk_intersect(o, d)
    elif kind == CYLINDER:
        return cylinder_intersect(o, d)
    elif kind == RECTANGLE:
        return rectangle_intersect(o, d)
    elif kind == CONE:
        return cone_intersect(o, d)
    raise ValueError("unknown collider kind")


@nb.njit(nogil=True)
def collider_sample(kind, rng):
    if kind == SPHERE:
        return sphere_sample(rng)
    elif kind == DISK:
        return disk_sample(rng)
    elif kind == CYLINDER:
        return cylinder_sample(rng)
    elif kind == RECTANGLE:
        return rectangle_sample(rng)
    elif kind == CONE:
        return cone_sample(rng)
    raise ValueError("unknown collider kind")


__all__ = [
    "SPHERE",
    "DISK",
    "CYLINDER",
    "RECTANGLE",
    "CONE",
    "T_EPS",
    "collider_intersect",
    "collider_sample",
    "sphere_intersect",
    "disk_intersect",
    "rectangle_intersect",
    "cylinder_intersect",
    "cone_intersect",
]
