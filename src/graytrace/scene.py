from __future__ import annotations
import time
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import List, Optional, Tuple, Union

import numpy as np
from numba import get_num_threads

from .geometry import Hit, Ray
from .params import TraceParams
from .surface import Surface
from .trace_record import TraceRecord
from .utils.sampling import diffuse_direction
from .utils.tracer import accumulate_view_factors, cast_ray, surface_sample, trace_path

RngLike = Union[np.random.Generator, int, None]


def _log(msg: str) -> None:
    print(msg, flush=True)


class Scene:
    """Ordered, append-only collection of surfaces.

    The position of a surface in the scene is its permanent ``surface_id``;
    view-factor vectors are index-aligned with it. Once estimation starts the
    scene is only read, so one instance can be shared by all workers.
    """

    def __init__(self, params: Optional[TraceParams] = None):
        self.params = params if params is not None else TraceParams()
        self._surfaces: List[Surface] = []
        self._packed: Optional[Tuple[np.ndarray, ...]] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_surface(self, surface: Surface) -> int:
        """Append ``surface`` and return its id."""
        if not isinstance(surface, Surface):
            raise TypeError(f"expected a Surface (got {type(surface).__name__})")
        self._surfaces.append(surface)
        self._packed = None
        return len(self._surfaces) - 1

    @property
    def surfaces(self) -> Tuple[Surface, ...]:
        return tuple(self._surfaces)

    def __len__(self) -> int:
        return len(self._surfaces)

    def __getitem__(self, surface_id: int) -> Surface:
        return self._surfaces[surface_id]

    def _arrays(self) -> Tuple[np.ndarray, ...]:
        """Flatten the surfaces into the arrays consumed by the tracer kernels."""
        if self._packed is None:
            n = len(self._surfaces)
            kinds = np.empty(n, np.int64)
            m = np.empty((n, 4, 4), np.float64)
            m_inv = np.empty((n, 4, 4), np.float64)
            m_it = np.empty((n, 3, 3), np.float64)
            emissivity = np.empty(n, np.float64)
            specular = np.empty(n, np.bool_)
            for i, s in enumerate(self._surfaces):
                kinds[i] = int(s.collider)
                m[i] = s.transform.m
                m_inv[i] = s.transform.m_inv
                m_it[i] = s.transform.m_inv_trans
                emissivity[i] = s.emissivity
                specular[i] = s.is_specular
            self._packed = (kinds, m, m_inv, m_it, emissivity, specular)
        return self._packed

    def _check_surface_id(self, surface_id: int) -> None:
        if not 0 <= surface_id < len(self._surfaces):
            raise IndexError(
                f"surface_id {surface_id} out of range for a scene of {len(self._surfaces)} surfaces"
            )

    def _rng(self, rng: RngLike) -> np.random.Generator:
        return np.random.default_rng(self.params.seed if rng is None else rng)

    # ------------------------------------------------------------------
    # Ray queries
    # ------------------------------------------------------------------

    def cast_ray(self, ray: Ray) -> Optional[Tuple[int, Hit]]:
        """Nearest surface hit by ``ray`` as ``(surface_id, hit)``, or None."""
        if not self._surfaces:
            return None
        kinds, m, m_inv, m_it, _, _ = self._arrays()
        sid, t, p, n = cast_ray(ray.origin, ray.direction, kinds, m, m_inv, m_it)
        if sid < 0:
            return None
        return int(sid), Hit(normal=n, position=p, t=t)

    def trace_ray(self, ray: Ray, rng: RngLike = None) -> TraceRecord:
        """Follow ``ray`` through the scene, absorbing and reflecting.

        At each hit the surface absorbs ``emissivity`` of the remaining energy
        and the ray continues diffusely or specularly from the hit point. The
        path ends when a cast misses every surface, or is cut (and flagged
        ``terminated_early``) after ``max_reflections`` bounces or once the
        remaining energy falls below ``min_energy``.
        """
        record = TraceRecord(ray)
        if not self._surfaces:
            return record

        kinds, m, m_inv, m_it, emissivity, specular = self._arrays()
        size = self.params.max_reflections + 1
        sids = np.empty(size, np.int64)
        energies = np.empty(size, np.float64)
        points = np.empty((size, 3), np.float64)

        count, terminated, o_last, d_last = trace_path(
            ray.origin, ray.direction, kinds, m, m_inv, m_it, emissivity, specular,
            self._rng(rng), self.params.max_reflections, float(self.params.min_energy),
            sids, energies, points,
        )

        for k in range(count):
            # outgoing segment: towards the next bounce, or the final ray
            if k + 1 < count:
                out = Ray(points[k], points[k + 1] - points[k])
            else:
                out = Ray(o_last, d_last)
            record.add_entry(out, int(sids[k]), points[k].copy(), float(energies[k]))
        if terminated:
            record.terminate_early()
        return record

    def _emission_ray(self, surface_id: int, rng: np.random.Generator) -> Ray:
        kinds, m, _, m_it, _, _ = self._arrays()
        p, n = surface_sample(kinds[surface_id], m[surface_id], m_it[surface_id], rng)
        return Ray(p, diffuse_direction(n, rng))

    def trace_rays_from_surface(self, surface_id: int, sample_count: int,
                                rng: RngLike = None) -> List[TraceRecord]:
        """Trace ``sample_count`` emission rays from a surface and keep every
        record (for inspection or rendering)."""
        self._check_surface_id(surface_id)
        rng = self._rng(rng)
        return [self.trace_ray(self._emission_ray(surface_id, rng), rng) for _ in range(sample_count)]

    # ------------------------------------------------------------------
    # View factors
    # ------------------------------------------------------------------

    def _estimate(self, surface_id: int, sample_count: int,
                  rng: np.random.Generator) -> np.ndarray:
        kinds, m, m_inv, m_it, emissivity, specular = self._arrays()
        totals = np.zeros(len(self._surfaces), np.float64)
        accumulate_view_factors(
            surface_id, sample_count, kinds, m, m_inv, m_it, emissivity, specular,
            rng, self.params.max_reflections, float(self.params.min_energy), totals,
        )
        return totals / float(sample_count)

    def view_factors_for_surface(self, surface_id: int, sample_count: int,
                                 rng: RngLike = None) -> np.ndarray:
        """Monte-Carlo gray-body view factors from one surface.

        Parameters
        ----------
        surface_id : int
            Emitting surface.
        sample_count : int
            Number of emission rays.
        rng : numpy.random.Generator or int, optional
            Randomness source (or a seed for one). Defaults to
            ``params.seed``.

        Returns
        -------
        numpy.ndarray
            ``float64[len(scene)]``; entry ``j`` is the fraction of the energy
            emitted by ``surface_id`` that is finally absorbed by surface
            ``j``, directly or after reflections.
        """
        self._check_surface_id(surface_id)
        if sample_count < 1:
            raise ValueError(f"sample_count must be >= 1 (got {sample_count!r})")

        t0 = time.time()
        result = self._estimate(surface_id, sample_count, self._rng(rng))
        if self.params.verbose:
            _log(f"[surface {surface_id}] {sample_count:,} rays -> "
                 f"{time.time() - t0:0.3f}s  (workers=1)")
        return result

    def view_factors_for_surface_parallel(self, surface_id: int, sample_count: int,
                                          seed: Optional[int] = None,
                                          workers: Optional[int] = None) -> np.ndarray:
        """Parallel version of :meth:`view_factors_for_surface`.

        Every worker runs the sequential estimator with
        ``sample_count // workers`` rays and its own generator spawned from
        one ``SeedSequence``; the per-worker means are summed and divided by
        the worker count. The remainder of the division is not traced.

        Parameters
        ----------
        seed : int, optional
            Root seed for the per-worker generators. Defaults to
            ``params.seed``.
        workers : int, optional
            Worker count. Defaults to ``params.workers``, then to the numba
            thread count. Reduced to ``sample_count`` when larger.
        """
        self._check_surface_id(surface_id)
        if sample_count < 1:
            raise ValueError(f"sample_count must be >= 1 (got {sample_count!r})")
        n_workers = workers if workers is not None else (self.params.workers or get_num_threads())
        if n_workers < 1:
            raise ValueError(f"workers must be >= 1 (got {n_workers!r})")
        n_workers = min(n_workers, sample_count)
        rays_per_thread = sample_count // n_workers

        root = np.random.SeedSequence(self.params.seed if seed is None else seed)
        rngs = [np.random.default_rng(s) for s in root.spawn(n_workers)]

        t0 = time.time()
        self._arrays()  # pack once before the workers share it
        with ThreadPoolExecutor(max_workers=n_workers) as pool:
            parts = list(pool.map(
                lambda rng: self._estimate(surface_id, rays_per_thread, rng), rngs
            ))

        zero = np.zeros(len(self._surfaces), np.float64)
        result = reduce(np.add, parts, zero) / float(n_workers)
        if self.params.verbose:
            _log(f"[surface {surface_id}] {n_workers * rays_per_thread:,} rays -> "
                 f"{time.time() - t0:0.3f}s  (workers={n_workers})")
        return result


__all__ = ["Scene"]
