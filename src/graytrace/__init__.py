from .geometry import Ray, Hit, SurfaceSample
from .params import TraceParams
from .primitives import add_box, add_closed_cone, add_closed_cylinder
from .scene import Scene
from .surface import Collider, Reflection, Surface
from .trace_record import TraceRecord, TraceRecordEntry
from .transform import Transform

__all__ = [
    "Ray",
    "Hit",
    "SurfaceSample",
    "TraceParams",
    "Scene",
    "Surface",
    "Collider",
    "Reflection",
    "TraceRecord",
    "TraceRecordEntry",
    "Transform",
    "add_box",
    "add_closed_cylinder",
    "add_closed_cone",
]
