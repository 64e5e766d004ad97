from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Sequence

from .calendar import ElapsedDayCalendar, ScheduleCalendar
from .schema import ProjectSchedule, ScheduleSummary, Task
from .validation import describe_unmet_dependencies, require_valid_task_collection


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecalculationResult:
    tasks: tuple[Task, ...]
    summary: ScheduleSummary
    warnings: tuple[str, ...]
    project_start: dt.date

    def task_lookup(self) -> dict[str, Task]:
        return {task.task_id: task for task in self.tasks}

    def as_schedule(self, title: str) -> ProjectSchedule:
        return ProjectSchedule(title=title, project_start=self.project_start, tasks=self.tasks)


def recalculate(
    tasks_in_new_order: Sequence[Task],
    *,
    project_start: dt.date | None = None,
    calendar: ScheduleCalendar | None = None,
) -> RecalculationResult:
    """Forward-pass the sequence and return a freshly dated snapshot.

    Tasks are dated in sequence order. A dependency that has not been dated
    yet (it sits later in the sequence) is treated as satisfied at day 0 and
    reported with one warning per affected task. Input tasks are never
    mutated; the result holds new Task instances.
    """

    require_valid_task_collection(tasks_in_new_order)
    start = project_start if project_start is not None else dt.date.today()
    cal = calendar or ElapsedDayCalendar()

    names = {task.task_id: task.name for task in tasks_in_new_order}
    index_of = {task.task_id: index for index, task in enumerate(tasks_in_new_order)}
    end_days: dict[str, float] = {}
    drivers: dict[str, tuple[str, ...]] = {}
    dated: list[Task] = []
    warnings: list[str] = []

    for task in tasks_in_new_order:
        satisfied = tuple(dep for dep in task.distinct_dependencies if dep in end_days)
        unmet = tuple(dep for dep in task.distinct_dependencies if dep not in end_days)
        if unmet:
            warnings.append(describe_unmet_dependencies(task.task_id, task.name, unmet, names))

        start_day = max((end_days[dep] for dep in satisfied), default=0.0)
        end_day = start_day + task.duration_days
        end_days[task.task_id] = end_day
        drivers[task.task_id] = satisfied
        dated.append(
            dataclasses.replace(
                task,
                start_day=start_day,
                end_day=end_day,
                start_date=cal.date_at(start, start_day),
                end_date=cal.date_at(start, end_day),
            )
        )

    critical_path = _critical_path(dated, end_days, drivers, index_of)
    total_duration = end_days[critical_path[-1]] if critical_path else 0.0
    summary = ScheduleSummary(
        total_duration_days=total_duration,
        total_cost=sum(task.cost for task in tasks_in_new_order),
        critical_path=critical_path,
    )
    if warnings:
        LOGGER.warning("Recalculated with %d unmet dependency ordering(s)", len(warnings))
    return RecalculationResult(
        tasks=tuple(dated),
        summary=summary,
        warnings=tuple(warnings),
        project_start=start,
    )


def recalculate_schedule(
    schedule: ProjectSchedule,
    *,
    calendar: ScheduleCalendar | None = None,
) -> RecalculationResult:
    return recalculate(schedule.tasks, project_start=schedule.project_start, calendar=calendar)


def _critical_path(
    dated: Sequence[Task],
    end_days: dict[str, float],
    drivers: dict[str, tuple[str, ...]],
    index_of: dict[str, int],
) -> tuple[str, ...]:
    if not dated:
        return ()

    # max() keeps the first maximum, so iterating in sequence order breaks ties low.
    terminal = max(dated, key=lambda task: end_days[task.task_id]).task_id
    path = [terminal]
    current = terminal
    while drivers[current]:
        ordered = sorted(drivers[current], key=lambda dep: index_of[dep])
        current = max(ordered, key=lambda dep: end_days[dep])
        path.append(current)
    path.reverse()
    return tuple(path)
