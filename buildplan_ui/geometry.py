from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class CoordinatePoint:
    x: float
    y: float
    frame: str | None = None


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float
    frame: str | None = None

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("BoundingBox width/height must be >= 0")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def edge_distance(self, x: float, y: float) -> float:
        """Distance from a point to the nearest edge; 0 when inside."""
        dx = max(self.x - x, 0.0, x - self.right)
        dy = max(self.y - y, 0.0, y - self.bottom)
        return math.hypot(dx, dy)


PointerLike = Union[CoordinatePoint, tuple[float, float]]


def coerce_point(pointer: PointerLike) -> CoordinatePoint | None:
    """Normalize host pointer input; returns None for unusable frames."""

    if isinstance(pointer, CoordinatePoint):
        point = pointer
    elif isinstance(pointer, tuple) and len(pointer) == 2:
        try:
            point = CoordinatePoint(x=float(pointer[0]), y=float(pointer[1]))
        except (TypeError, ValueError):
            return None
    else:
        return None
    if not (math.isfinite(point.x) and math.isfinite(point.y)):
        return None
    return point


def parse_coordinate_notation(notation: str, default_frame: str | None = None) -> CoordinatePoint:
    """Parse `x,y` or `frame:x,y` into a CoordinatePoint."""

    raw = notation.strip()
    if not raw:
        raise ValueError("coordinate notation must be non-empty")
    frame: str | None = default_frame
    coords = raw
    if ":" in raw:
        maybe_frame, maybe_coords = raw.split(":", 1)
        if not maybe_frame.strip():
            raise ValueError("coordinate frame name must be non-empty")
        frame = maybe_frame.strip()
        coords = maybe_coords
    parts = [p.strip() for p in coords.split(",")]
    if len(parts) != 2:
        raise ValueError("coordinates must use `x,y` format")
    return CoordinatePoint(x=float(parts[0]), y=float(parts[1]), frame=frame)
