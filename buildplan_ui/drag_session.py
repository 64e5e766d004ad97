from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, Literal, Sequence, TypeAlias, TypeVar

from buildplan_core.calendar import ScheduleCalendar
from buildplan_core.recalculator import RecalculationResult, recalculate
from buildplan_core.schema import ScheduleSummary, Task
from buildplan_core.validation import OrderViolation, require_valid_task_collection, validate_order

from .drop_target import is_outside_bounds, resolve_candidate_index
from .geometry import BoundingBox, PointerLike


LOGGER = logging.getLogger(__name__)

DragPhase = Literal["idle", "dragging", "valid_candidate", "invalid_candidate"]
OutcomeKind = Literal["dropped", "forced", "cancelled"]
RecalculateCallback = Callable[[tuple[Task, ...], tuple[str, ...]], None]

T = TypeVar("T")


@dataclass(frozen=True)
class StartDrag:
    task_id: str
    from_index: int | None = None


@dataclass(frozen=True)
class PointerMove:
    position: PointerLike
    item_bounds: tuple[BoundingBox, ...]
    container_bounds: BoundingBox | None = None


@dataclass(frozen=True)
class PointerLeaveBounds:
    pass


@dataclass(frozen=True)
class Drop:
    force: bool = False


@dataclass(frozen=True)
class CancelDrag:
    reason: str = "cancel"


DragEvent: TypeAlias = StartDrag | PointerMove | PointerLeaveBounds | Drop | CancelDrag


@dataclass(frozen=True)
class DragState:
    phase: DragPhase = "idle"
    dragged_item_id: str | None = None
    dragged_from_index: int | None = None
    candidate_index: int | None = None
    is_valid_drop: bool = False
    violations: tuple[OrderViolation, ...] = ()


@dataclass(frozen=True)
class DragOutcome:
    kind: OutcomeKind
    tasks: tuple[Task, ...]
    summary: ScheduleSummary | None = None
    warnings: tuple[str, ...] = ()
    reason: str = ""

    @property
    def applied(self) -> bool:
        return self.kind in ("dropped", "forced")


def move_item(items: Sequence[T], from_index: int, to_index: int) -> tuple[T, ...]:
    """Remove the item at `from_index` and reinsert it so it ends at `to_index`."""

    if not 0 <= from_index < len(items):
        raise IndexError(f"from_index {from_index} out of range for {len(items)} items")
    if not 0 <= to_index < len(items):
        raise IndexError(f"to_index {to_index} out of range for {len(items)} items")
    out = list(items)
    moved = out.pop(from_index)
    out.insert(to_index, moved)
    return tuple(out)


class DragSessionController:
    """Finite state machine for reordering a task list by drag and drop.

    Events go through `dispatch`; the convenience methods wrap it. Only a
    drop may replace the task sequence, and it does so with a new tuple so
    earlier snapshots held by callers never change.
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        *,
        on_recalculate: RecalculateCallback | None = None,
        project_start: dt.date | None = None,
        calendar: ScheduleCalendar | None = None,
    ) -> None:
        require_valid_task_collection(tasks)
        self._tasks: tuple[Task, ...] = tuple(tasks)
        self._on_recalculate = on_recalculate
        self._project_start = project_start
        self._calendar = calendar
        self._state = DragState()
        self._last_result: RecalculationResult | None = None

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def last_result(self) -> RecalculationResult | None:
        return self._last_result

    def current_order(self) -> tuple[str, ...]:
        return tuple(task.task_id for task in self._tasks)

    def preview_order(self) -> tuple[str, ...]:
        """Order the list would take if the current candidate were dropped."""

        state = self._state
        if state.candidate_index is None or state.dragged_from_index is None:
            return self.current_order()
        return move_item(self.current_order(), state.dragged_from_index, state.candidate_index)

    def replace_tasks(self, tasks: Sequence[Task]) -> None:
        require_valid_task_collection(tasks)
        self._tasks = tuple(tasks)
        self._state = DragState()
        self._last_result = None

    def dispatch(self, event: DragEvent) -> DragOutcome | None:
        if isinstance(event, StartDrag):
            self._start(event)
            return None
        if isinstance(event, PointerMove):
            self._move(event)
            return None
        if isinstance(event, PointerLeaveBounds):
            self._leave_bounds()
            return None
        if isinstance(event, Drop):
            return self._drop(event)
        if isinstance(event, CancelDrag):
            return self._cancel(event.reason)
        raise TypeError(f"Unsupported drag event: {type(event)!r}")

    def start_drag(self, task_id: str, from_index: int | None = None) -> None:
        self.dispatch(StartDrag(task_id=task_id, from_index=from_index))

    def pointer_move(
        self,
        position: PointerLike,
        item_bounds: Sequence[BoundingBox],
        container_bounds: BoundingBox | None = None,
    ) -> DragState:
        self.dispatch(PointerMove(position=position, item_bounds=tuple(item_bounds), container_bounds=container_bounds))
        return self._state

    def pointer_leave_bounds(self) -> DragState:
        self.dispatch(PointerLeaveBounds())
        return self._state

    def drop(self, *, force: bool = False) -> DragOutcome | None:
        return self.dispatch(Drop(force=force))

    def cancel(self, reason: str = "cancel") -> DragOutcome | None:
        return self.dispatch(CancelDrag(reason=reason))

    def _start(self, event: StartDrag) -> None:
        if self._state.phase != "idle":
            LOGGER.debug("Ignoring StartDrag(%s) while %s", event.task_id, self._state.phase)
            return
        order = self.current_order()
        if event.task_id not in order:
            LOGGER.warning("Ignoring StartDrag for unknown task `%s`", event.task_id)
            return
        index = order.index(event.task_id)
        if event.from_index is not None and event.from_index != index:
            LOGGER.warning(
                "StartDrag index %d does not match task `%s` at %d; using %d",
                event.from_index,
                event.task_id,
                index,
                index,
            )
        self._state = DragState(phase="dragging", dragged_item_id=event.task_id, dragged_from_index=index)
        LOGGER.debug("Drag started for `%s` at index %d", event.task_id, index)

    def _move(self, event: PointerMove) -> None:
        if self._state.phase == "idle":
            return
        if event.container_bounds is not None and is_outside_bounds(event.position, event.container_bounds):
            self._leave_bounds()
            return

        candidate = resolve_candidate_index(event.position, event.item_bounds)
        if candidate is None or not self._tasks:
            self._leave_bounds()
            return
        candidate = min(candidate, len(self._tasks) - 1)
        if candidate == self._state.candidate_index:
            return

        from_index = self._state.dragged_from_index
        assert from_index is not None
        proposed = move_item(self.current_order(), from_index, candidate)
        validation = validate_order(self._tasks, proposed)
        self._state = dataclasses.replace(
            self._state,
            phase="valid_candidate" if validation.is_valid else "invalid_candidate",
            candidate_index=candidate,
            is_valid_drop=validation.is_valid,
            violations=validation.violations,
        )

    def _leave_bounds(self) -> None:
        if self._state.phase == "idle":
            return
        self._state = dataclasses.replace(
            self._state,
            phase="dragging",
            candidate_index=None,
            is_valid_drop=False,
            violations=(),
        )

    def _drop(self, event: Drop) -> DragOutcome | None:
        state = self._state
        if state.phase == "idle":
            LOGGER.debug("Ignoring Drop while idle")
            return None
        if state.phase == "dragging" or state.candidate_index is None:
            return self._cancel("no drop target")
        if state.candidate_index == state.dragged_from_index:
            return self._cancel("dropped at original position")
        if state.phase == "invalid_candidate" and not event.force:
            return self._cancel("drop violates dependency order")

        assert state.dragged_from_index is not None
        reordered = move_item(self._tasks, state.dragged_from_index, state.candidate_index)
        result = recalculate(reordered, project_start=self._project_start, calendar=self._calendar)

        kind: OutcomeKind = "dropped" if state.is_valid_drop else "forced"
        if kind == "forced":
            LOGGER.warning(
                "Forced drop of `%s` to index %d with %d warning(s)",
                state.dragged_item_id,
                state.candidate_index,
                len(result.warnings),
            )
        self._tasks = result.tasks
        self._last_result = result
        self._state = DragState()

        if self._on_recalculate is not None:
            self._on_recalculate(result.tasks, result.warnings)
        return DragOutcome(kind=kind, tasks=result.tasks, summary=result.summary, warnings=result.warnings)

    def _cancel(self, reason: str) -> DragOutcome | None:
        if self._state.phase == "idle":
            return None
        LOGGER.debug("Drag of `%s` cancelled: %s", self._state.dragged_item_id, reason)
        self._state = DragState()
        summary = self._last_result.summary if self._last_result is not None else None
        return DragOutcome(kind="cancelled", tasks=self._tasks, summary=summary, reason=reason)
