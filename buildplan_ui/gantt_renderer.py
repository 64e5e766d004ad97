from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass

from buildplan_core.calendar import ElapsedDayCalendar, ScheduleCalendar
from buildplan_core.recalculator import RecalculationResult
from buildplan_core.schema import STATUS_COLORS, STATUS_LABELS, Task

STATUS_FILL: dict[str, str] = {
    "planned": "~",
    "in_progress": "#",
    "completed": "=",
}


@dataclass(frozen=True)
class GanttRenderConfig:
    day_column_width: int = 2
    max_columns: int = 60
    show_dependency_lines: bool = True
    highlight_critical_path: bool = True

    def __post_init__(self) -> None:
        if self.day_column_width < 1:
            raise ValueError("day_column_width must be >= 1")
        if self.max_columns < 1:
            raise ValueError("max_columns must be >= 1")


def render_schedule_ascii(
    result: RecalculationResult,
    *,
    title: str = "Project Schedule",
    config: GanttRenderConfig | None = None,
    calendar: ScheduleCalendar | None = None,
) -> str:
    cfg = config or GanttRenderConfig()
    cal = calendar or ElapsedDayCalendar()
    summary = result.summary
    total_days = max(1, math.ceil(summary.total_duration_days))
    days_per_column = max(1, math.ceil(total_days / cfg.max_columns))
    columns = math.ceil(total_days / days_per_column)
    critical = set(summary.critical_path) if cfg.highlight_critical_path else set()

    lines: list[str] = []
    lines.append(title)
    lines.append(
        f"Project start: {result.project_start.isoformat()} | duration={_fmt_days(summary.total_duration_days)} days"
        f" | cost={summary.total_cost:.2f} | days/column={days_per_column}"
    )
    lines.append("Status colors: " + ", ".join(f"{STATUS_LABELS[k]}={v}" for k, v in STATUS_COLORS.items()))
    lines.append(_build_day_header(columns, days_per_column, cfg.day_column_width))
    lines.append(_build_date_header(result, cal, columns, days_per_column, cfg.day_column_width))

    if result.tasks:
        label_width = max(len(_task_label(task)) for task in result.tasks)
        for task in result.tasks:
            marker = "*" if task.task_id in critical else " "
            bar = _render_bar(task, columns, days_per_column, cfg.day_column_width)
            suffix = f"{STATUS_LABELS[task.status]} {_fmt_date_span(task)} cost={task.cost:.2f}"
            if task.dependencies:
                suffix = f"{suffix} deps={','.join(task.distinct_dependencies)}"
            lines.append(f"{marker}{_task_label(task).ljust(label_width)} |{bar}| {suffix}")
    else:
        lines.append("  (no tasks)")

    if critical:
        lines.append("")
        lines.append("Critical path: " + " -> ".join(summary.critical_path))

    if cfg.show_dependency_lines:
        lines.append("")
        lines.append("Dependency lines:")
        dep_lines = _render_dependency_lines(result, columns, days_per_column, cfg.day_column_width)
        if dep_lines:
            lines.extend(dep_lines)
        else:
            lines.append("  (none)")

    if result.warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"  - {warning}" for warning in result.warnings)

    return "\n".join(lines) + "\n"


def render_schedule_markdown(result: RecalculationResult, *, title: str = "Project Schedule") -> str:
    summary = result.summary
    critical = set(summary.critical_path)
    lines = [
        f"# {title}",
        "",
        f"- Project start: {result.project_start.isoformat()}",
        f"- Total duration: {_fmt_days(summary.total_duration_days)} days",
        f"- Total cost: {summary.total_cost:.2f}",
        f"- Critical path: {' -> '.join(summary.critical_path) or '(none)'}",
        "",
        "| # | Task | Start | End | Duration | Cost | Status | Critical |",
        "|---|------|-------|-----|----------|------|--------|----------|",
    ]
    for index, task in enumerate(result.tasks, start=1):
        lines.append(
            f"| {index} | {task.task_id} {task.name} | {_fmt_date(task.start_date)} | {_fmt_date(task.end_date)}"
            f" | {_fmt_days(task.duration_days)} | {task.cost:.2f} | {STATUS_LABELS[task.status]}"
            f" | {'yes' if task.task_id in critical else ''} |"
        )
    if result.warnings:
        lines.append("")
        lines.append("## Warnings")
        lines.append("")
        lines.extend(f"- {warning}" for warning in result.warnings)
    return "\n".join(lines) + "\n"


def _task_label(task: Task) -> str:
    return f"{task.task_id} {task.name}"


def _render_bar(task: Task, columns: int, days_per_column: int, width: int) -> str:
    cells = [" " * width for _ in range(columns)]
    if not task.is_scheduled:
        return "".join(cells)
    first, last = _column_span(task.start_day, task.end_day, columns, days_per_column)
    fill = STATUS_FILL[task.status]
    for col in range(first, last + 1):
        cells[col] = fill * width
    return "".join(cells)


def _column_span(start_day: float, end_day: float, columns: int, days_per_column: int) -> tuple[int, int]:
    first = min(columns - 1, int(start_day // days_per_column))
    last = min(columns - 1, max(first, math.ceil(end_day / days_per_column) - 1))
    return first, last


def _render_dependency_lines(
    result: RecalculationResult, columns: int, days_per_column: int, width: int
) -> list[str]:
    lookup = result.task_lookup()
    lines: list[str] = []
    for target in result.tasks:
        for dep_id in target.distinct_dependencies:
            source = lookup.get(dep_id)
            if source is None or not source.is_scheduled or not target.is_scheduled:
                continue
            cells = [" " * width for _ in range(columns)]
            source_col, _ = _column_span(source.end_day, source.end_day, columns, days_per_column)
            target_col, _ = _column_span(target.start_day, target.start_day, columns, days_per_column)
            for col in range(min(source_col, target_col), max(source_col, target_col) + 1):
                cells[col] = "-" * width
            cells[target_col] = ">" + "-" * (width - 1)
            marker = "overlap" if target.start_day < source.end_day else "ok"
            lines.append(f"  {dep_id:>6} -> {target.task_id:<6} |{''.join(cells)}| {marker}")
    return lines


def _label_step(width: int) -> int:
    return max(5, math.ceil(6 / width))


def _build_day_header(columns: int, days_per_column: int, width: int) -> str:
    chars = [" "] * (columns * width)
    for col in range(0, columns, _label_step(width)):
        label = str(col * days_per_column)
        pos = col * width
        if pos + len(label) <= len(chars):
            chars[pos : pos + len(label)] = list(label)
    return "Days:   " + "".join(chars)


def _build_date_header(
    result: RecalculationResult,
    calendar: ScheduleCalendar,
    columns: int,
    days_per_column: int,
    width: int,
) -> str:
    chars = [" "] * (columns * width)
    for col in range(0, columns, _label_step(width)):
        label = calendar.date_at(result.project_start, col * days_per_column).strftime("%m/%d")
        pos = col * width
        if pos + len(label) <= len(chars):
            chars[pos : pos + len(label)] = list(label)
    return "Dates:  " + "".join(chars)


def _fmt_date_span(task: Task) -> str:
    return f"{_fmt_date(task.start_date)}..{_fmt_date(task.end_date)}"


def _fmt_date(value: dt.date | None) -> str:
    return value.isoformat() if value is not None else "-"


def _fmt_days(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"
