"""Drag-and-drop reordering, drop targeting and schedule exports for Buildplan."""

from .drag_session import (
    CancelDrag,
    DragEvent,
    DragOutcome,
    DragPhase,
    DragSessionController,
    DragState,
    Drop,
    PointerLeaveBounds,
    PointerMove,
    StartDrag,
    move_item,
)
from .drop_target import enclosing_bounds, is_outside_bounds, resolve_candidate_index, stacked_row_bounds
from .exporters import ScheduleExportBundle, export_schedule_bundle, render_schedule_csv
from .gantt_renderer import GanttRenderConfig, render_schedule_ascii, render_schedule_markdown
from .geometry import BoundingBox, CoordinatePoint, coerce_point, parse_coordinate_notation

__all__ = [
    "BoundingBox",
    "CancelDrag",
    "CoordinatePoint",
    "DragEvent",
    "DragOutcome",
    "DragPhase",
    "DragSessionController",
    "DragState",
    "Drop",
    "GanttRenderConfig",
    "PointerLeaveBounds",
    "PointerMove",
    "ScheduleExportBundle",
    "StartDrag",
    "coerce_point",
    "enclosing_bounds",
    "export_schedule_bundle",
    "is_outside_bounds",
    "move_item",
    "parse_coordinate_notation",
    "render_schedule_ascii",
    "render_schedule_csv",
    "render_schedule_markdown",
    "resolve_candidate_index",
    "stacked_row_bounds",
]
