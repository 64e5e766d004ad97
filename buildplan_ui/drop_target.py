from __future__ import annotations

from typing import Sequence

import numpy as np

from .geometry import BoundingBox, PointerLike, coerce_point


def resolve_candidate_index(pointer: PointerLike, item_bounds: Sequence[BoundingBox]) -> int | None:
    """Map a pointer to the list slot it is over, or the nearest one.

    A box containing the pointer wins; otherwise the box with the smallest
    edge distance is chosen, lower index first on ties. Empty lists and
    unusable pointers resolve to None.
    """

    point = coerce_point(pointer)
    if point is None or not item_bounds:
        return None

    boxes = np.array(
        [(b.x, b.y, b.right, b.bottom) for b in item_bounds],
        dtype=np.float64,
    )
    x0, y0, x1, y1 = boxes[:, 0], boxes[:, 1], boxes[:, 2], boxes[:, 3]

    inside = (x0 <= point.x) & (point.x <= x1) & (y0 <= point.y) & (point.y <= y1)
    hits = np.flatnonzero(inside)
    if hits.size:
        return int(hits[0])

    dx = np.maximum(np.maximum(x0 - point.x, point.x - x1), 0.0)
    dy = np.maximum(np.maximum(y0 - point.y, point.y - y1), 0.0)
    return int(np.argmin(np.hypot(dx, dy)))


def is_outside_bounds(pointer: PointerLike, container_bounds: BoundingBox) -> bool:
    point = coerce_point(pointer)
    if point is None:
        return True
    return not container_bounds.contains(point.x, point.y)


def stacked_row_bounds(
    count: int,
    *,
    row_height: float,
    width: float,
    x: float = 0.0,
    y: float = 0.0,
    gap: float = 0.0,
) -> tuple[BoundingBox, ...]:
    """Bounds of a vertical task list with uniform rows."""

    if count < 0:
        raise ValueError("count must be >= 0")
    if row_height <= 0:
        raise ValueError("row_height must be > 0")
    return tuple(
        BoundingBox(x=x, y=y + index * (row_height + gap), width=width, height=row_height)
        for index in range(count)
    )


def enclosing_bounds(item_bounds: Sequence[BoundingBox]) -> BoundingBox | None:
    if not item_bounds:
        return None
    left = min(b.x for b in item_bounds)
    top = min(b.y for b in item_bounds)
    right = max(b.right for b in item_bounds)
    bottom = max(b.bottom for b in item_bounds)
    return BoundingBox(x=left, y=top, width=right - left, height=bottom - top)
