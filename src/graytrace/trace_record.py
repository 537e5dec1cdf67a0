from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .geometry import Ray

Segment = Tuple[np.ndarray, np.ndarray, float]


@dataclass
class TraceRecordEntry:
    surface_id: int
    energy_absorbed: float
    point: np.ndarray


@dataclass
class TraceRecord:
    """Bounce log of one traced path.

    ``origin`` is the emitted ray, ``last_ray`` the most recent outgoing
    segment. ``terminated_early`` separates a path cut by the reflection cap
    or energy floor from one that escaped the scene.
    """
    origin: Ray
    last_ray: Optional[Ray] = None
    entries: List[TraceRecordEntry] = field(default_factory=list)
    terminated_early: bool = False

    def __post_init__(self) -> None:
        if self.last_ray is None:
            self.last_ray = self.origin

    def add_entry(self, ray: Ray, surface_id: int, point: np.ndarray, energy_absorbed: float) -> None:
        """Log one bounce; ``ray`` is the segment leaving ``point``."""
        self.last_ray = ray
        self.entries.append(TraceRecordEntry(surface_id, float(energy_absorbed), point))

    def terminate_early(self) -> None:
        self.terminated_early = True

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def total_absorbed(self) -> float:
        return float(sum(e.energy_absorbed for e in self.entries))

    @property
    def remaining_energy(self) -> float:
        energy = 1.0
        for e in self.entries:
            energy -= e.energy_absorbed
        return max(energy, 0.0)

    def segments(self, escape_length: float = 10.0) -> List[Segment]:
        """Line segments of the path as ``(start, end, energy_carried)``.

        ``energy_carried`` is the energy travelling along the segment, i.e.
        before the absorption at its end point. A ray that hit nothing is
        drawn from its origin out to ``escape_length``; an escaping last
        segment is extended the same way. Paths cut early end at their last
        hit point.
        """
        origin = self.origin.origin
        if not self.entries:
            return [(origin, self.origin.at(escape_length), 1.0)]

        segs: List[Segment] = []
        energy = 1.0
        start = origin
        for e in self.entries:
            segs.append((start, e.point, energy))
            energy -= e.energy_absorbed
            start = e.point

        if not self.terminated_early:
            segs.append((self.last_ray.origin, self.last_ray.at(escape_length), max(energy, 0.0)))
        return segs


__all__ = ["TraceRecord", "TraceRecordEntry", "Segment"]
