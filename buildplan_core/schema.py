from __future__ import annotations

import datetime as dt
import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

TASK_STATUSES: tuple[str, ...] = ("planned", "in_progress", "completed")

STATUS_LABELS: dict[str, str] = {
    "planned": "Planned",
    "in_progress": "In Progress",
    "completed": "Completed",
}

STATUS_COLORS: dict[str, str] = {
    "planned": "#94A3B8",
    "in_progress": "#2563EB",
    "completed": "#16A34A",
}


@dataclass(frozen=True)
class Task:
    task_id: str
    name: str
    duration_days: float
    cost: float = 0.0
    category: str = ""
    status: str = "planned"
    dependencies: tuple[str, ...] = ()
    assignee: str | None = None
    start_day: float | None = None
    end_day: float | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None

    def __post_init__(self) -> None:
        if not self.task_id.strip():
            raise ValueError("Task.task_id must be non-empty")
        if not self.name.strip():
            raise ValueError("Task.name must be non-empty")
        if not math.isfinite(self.duration_days) or self.duration_days <= 0:
            raise ValueError(f"Task `{self.task_id}` duration_days must be a finite number > 0")
        if not math.isfinite(self.cost) or self.cost < 0:
            raise ValueError(f"Task `{self.task_id}` cost must be a finite number >= 0")
        if self.status not in TASK_STATUSES:
            raise ValueError(f"Unsupported task status: {self.status}")

    @property
    def is_scheduled(self) -> bool:
        return self.start_day is not None and self.end_day is not None

    @property
    def distinct_dependencies(self) -> tuple[str, ...]:
        """Dependency ids in first-seen order, repeats dropped."""
        return tuple(dict.fromkeys(self.dependencies))


@dataclass(frozen=True)
class ScheduleSummary:
    total_duration_days: float = 0.0
    total_cost: float = 0.0
    critical_path: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectSchedule:
    """An ordered task sequence plus the day-0 reference it is dated from."""

    title: str
    project_start: dt.date
    tasks: tuple[Task, ...] = ()

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("ProjectSchedule.title must be non-empty")

    def task_ids(self) -> tuple[str, ...]:
        return tuple(task.task_id for task in self.tasks)

    def task_lookup(self) -> dict[str, Task]:
        return {task.task_id: task for task in self.tasks}


SCHEDULE_JSON_SCHEMA: dict[str, object] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://buildplan.dev/schemas/project_schedule.schema.json",
    "title": "Buildplan Project Schedule",
    "type": "object",
    "required": ["tasks"],
    "properties": {
        "title": {"type": "string"},
        "project_start": {"type": "string", "format": "date"},
        "tasks": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "name", "duration"],
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "duration": {"type": "number", "exclusiveMinimum": 0},
                    "cost": {"type": "number", "minimum": 0},
                    "category": {"type": "string"},
                    "status": {"type": "string", "enum": list(TASK_STATUSES)},
                    "dependencies": {"type": "array", "items": {"type": "string"}},
                    "assignee": {"type": ["string", "object", "null"]},
                    "startDate": {"type": "string", "format": "date"},
                    "endDate": {"type": "string", "format": "date"},
                },
            },
        },
    },
}


def schedule_json_schema() -> dict[str, object]:
    return json.loads(json.dumps(SCHEDULE_JSON_SCHEMA))


def task_from_dict(raw: Mapping[str, Any]) -> Task:
    """Build a Task from a dashboard task record.

    Stored `startDate`/`endDate` values are ignored: dates are derived from
    durations and dependencies on every recalculation.
    """

    duration = raw.get("durationDays", raw.get("duration_days", raw.get("duration")))
    if duration is None:
        raise ValueError(f"Task `{raw.get('id')}` is missing a duration")
    return Task(
        task_id=str(raw["id"]),
        name=str(raw["name"]),
        duration_days=_coerce_number(duration, "duration"),
        cost=_coerce_number(raw.get("cost", 0), "cost"),
        category=str(raw.get("category") or ""),
        status=str(raw.get("status") or "planned"),
        dependencies=_coerce_string_tuple(raw.get("dependencies") or raw.get("deps")),
        assignee=_coerce_assignee(raw.get("assignee")),
    )


def schedule_from_dict(payload: Mapping[str, object]) -> ProjectSchedule:
    title = str(payload.get("title") or "Project Schedule")
    raw_start = payload.get("project_start") or payload.get("projectStart")
    project_start = dt.date.fromisoformat(str(raw_start)) if raw_start else dt.date.today()

    raw_tasks = payload.get("tasks")
    if not isinstance(raw_tasks, list):
        raise TypeError("`tasks` must be a list")

    tasks: list[Task] = []
    for raw in raw_tasks:
        if not isinstance(raw, Mapping):
            raise TypeError("Each task must be a mapping")
        tasks.append(task_from_dict(raw))

    return ProjectSchedule(title=title, project_start=project_start, tasks=tuple(tasks))


def load_schedule(schedule_path: str | Path) -> ProjectSchedule:
    schedule = Path(schedule_path)
    payload = json.loads(schedule.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise TypeError("Schedule payload must be a JSON object")
    return schedule_from_dict(payload)


def task_to_dict(task: Task) -> dict[str, object]:
    out: dict[str, object] = {
        "id": task.task_id,
        "name": task.name,
        "duration": task.duration_days,
        "cost": task.cost,
        "category": task.category,
        "status": task.status,
        "dependencies": list(task.dependencies),
    }
    if task.assignee is not None:
        out["assignee"] = task.assignee
    if task.is_scheduled:
        out["startDay"] = task.start_day
        out["endDay"] = task.end_day
    if task.start_date is not None:
        out["startDate"] = task.start_date.isoformat()
    if task.end_date is not None:
        out["endDate"] = task.end_date.isoformat()
    return out


def schedule_to_dict(
    schedule: ProjectSchedule,
    *,
    summary: ScheduleSummary | None = None,
) -> dict[str, object]:
    """Payload handed back to the project store after a recalculation."""

    out: dict[str, object] = {
        "title": schedule.title,
        "project_start": schedule.project_start.isoformat(),
        "tasks": [task_to_dict(task) for task in schedule.tasks],
    }
    if summary is not None:
        out["totalDuration"] = summary.total_duration_days
        out["totalCost"] = summary.total_cost
        out["criticalPath"] = list(summary.critical_path)
    return out


def _coerce_number(raw: object, label: str) -> float:
    if isinstance(raw, bool):
        raise TypeError(f"`{label}` must be a number")
    if isinstance(raw, (int, float)):
        return raw
    try:
        return float(str(raw).strip())
    except ValueError as exc:
        raise TypeError(f"`{label}` must be a number, got {raw!r}") from exc


def _coerce_assignee(raw: object) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        raw = raw.get("name")
        if raw is None:
            return None
    text = str(raw).strip()
    return text if text else None


def _coerce_string_tuple(raw: object) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        text = raw.strip()
        return (text,) if text else ()
    if isinstance(raw, Iterable):
        out: list[str] = []
        for item in raw:
            value = str(item).strip()
            if value:
                out.append(value)
        return tuple(out)
    raise TypeError("Expected string or iterable of strings")
