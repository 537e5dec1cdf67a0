"""Scene-level kernels over packed surface arrays.

A scene is flattened into parallel arrays indexed by surface id:

kinds      int64[n]        collider tag
m          float64[n,4,4]  local -> world
m_inv      float64[n,4,4]  world -> local
m_it       float64[n,3,3]  inverse transpose of the linear part (normals)
emissivity float64[n]
specular   bool[n]
"""
from __future__ import annotations
import numpy as np
import numba as nb

from .colliders import collider_intersect, collider_sample
from .sampling import diffuse_direction, specular_direction
from .vec import apply_normal, apply_point, apply_vector


@nb.njit(cache=True, nogil=True)
def surface_intersect(kind, m, m_inv, m_it, o, d):
    """Intersect a world-space ray with one placed surface."""
    lo = apply_point(m_inv, o)
    ld = apply_vector(m_inv, d)
    hit, t, p, n = collider_intersect(kind, lo, ld)
    if not hit:
        return hit, t, p, n
    return True, t, apply_point(m, p), apply_normal(m_it, n)


@nb.njit(nogil=True)
def surface_sample(kind, m, m_it, rng):
    """Draw a world-space ``(position, normal)`` from one placed surface."""
    p, n = collider_sample(kind, rng)
    return apply_point(m, p), apply_normal(m_it, n)


@nb.njit(cache=True, nogil=True)
def cast_ray(o, d, kinds, m, m_inv, m_it):
    """Brute-force nearest hit. Returns ``(surface_id, t, position, normal)``
    with ``surface_id == -1`` on a miss."""
    best = -1
    best_t = np.inf
    best_p = np.zeros(3, np.float64)
    best_n = np.zeros(3, np.float64)
    for i in range(kinds.shape[0]):
        hit, t, p, n = surface_intersect(kinds[i], m[i], m_inv[i], m_it[i], o, d)
        if hit and t < best_t:
            best = i
            best_t = t
            best_p = p
            best_n = n
    return best, best_t, best_p, best_n


@nb.njit(nogil=True)
def trace_path(o, d, kinds, m, m_inv, m_it, emissivity, specular,
               rng, max_reflections, min_energy,
               out_sid, out_energy, out_point):
    """Follow one ray through absorbing/reflecting bounces.

    Bounce data is written to ``out_sid``, ``out_energy`` and ``out_point``,
    which must hold at least ``max_reflections + 1`` entries.

    Returns
    -------
    count : int
        Number of bounces written.
    terminated : bool
        True when the path was cut by the reflection cap or the energy floor,
        False when it escaped the scene.
    origin, direction : float64[3]
        The last ray segment.
    """
    energy = 1.0
    reflections = 0
    count = 0
    terminated = False
    ro = o.copy()
    rd = d.copy()

    while True:
        sid, t, p, n = cast_ray(ro, rd, kinds, m, m_inv, m_it)
        if sid < 0:
            break

        absorbed = energy * emissivity[sid]
        reflections += 1
        energy -= absorbed

        if specular[sid]:
            rd = specular_direction(rd, n)
        else:
            rd = diffuse_direction(n, rng)
        ro = p

        out_sid[count] = sid
        out_energy[count] = absorbed
        out_point[count, 0] = p[0]
        out_point[count, 1] = p[1]
        out_point[count, 2] = p[2]
        count += 1

        if reflections > max_reflections or energy < min_energy:
            terminated = True
            break

    return count, terminated, ro, rd


@nb.njit(nogil=True)
def accumulate_view_factors(source, n_samples, kinds, m, m_inv, m_it,
                            emissivity, specular, rng,
                            max_reflections, min_energy, totals):
    """Emit ``n_samples`` diffuse rays from ``source`` and add the energy
    absorbed at every bounce into ``totals[surface_id]`` (unnormalized)."""
    size = max_reflections + 1
    sids = np.empty(size, np.int64)
    energies = np.empty(size, np.float64)
    points = np.empty((size, 3), np.float64)

    for _ in range(n_samples):
        p, n = surface_sample(kinds[source], m[source], m_it[source], rng)
        # emission is always Lambertian
        d = diffuse_direction(n, rng)
        count, _terminated, _o, _d = trace_path(
            p, d, kinds, m, m_inv, m_it, emissivity, specular,
            rng, max_reflections, min_energy, sids, energies, points,
        )
        for k in range(count):
            totals[sids[k]] += energies[k]


__all__ = [
    "surface_intersect",
    "surface_sample",
    "cast_ray",
    "trace_path",
    "accumulate_view_factors",
]
