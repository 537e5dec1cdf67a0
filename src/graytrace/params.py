from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class TraceParams:
    """Configuration for path tracing and view-factor estimation.

    Parameters
    ----------
    max_reflections : int
        A path is cut (and flagged as terminated early) once its bounce count
        exceeds this value.
    min_energy : float
        A path is cut once its remaining energy drops below this value.
    seed : int, optional
        Base seed. The sequential estimator builds one generator from it, the
        parallel estimator spawns one independent generator per worker. None
        draws fresh OS entropy.
    workers : int, optional
        Worker count for the parallel estimator. None uses the numba thread
        count.
    verbose : bool
        Print one progress line per estimator run.
    """
    max_reflections: int = 100
    min_energy: float = 1e-3
    seed: Optional[int] = None
    workers: Optional[int] = None
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.max_reflections < 0:
            raise ValueError(f"max_reflections must be >= 0 (got {self.max_reflections!r})")
        if not 0.0 <= self.min_energy <= 1.0:
            raise ValueError(f"min_energy must lie in [0, 1] (got {self.min_energy!r})")
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be >= 1 (got {self.workers!r})")

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["TraceParams"]
