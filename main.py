from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
from pathlib import Path
from typing import Sequence

from buildplan_core import (
    BusinessDayCalendar,
    ElapsedDayCalendar,
    ProjectSchedule,
    ScheduleCalendar,
    ScheduleStructureError,
    load_schedule,
    order_violation_messages,
    recalculate,
    require_valid_task_collection,
    schedule_to_dict,
    validate_order,
)
from buildplan_ui import (
    DragSessionController,
    GanttRenderConfig,
    enclosing_bounds,
    export_schedule_bundle,
    parse_coordinate_notation,
    render_schedule_ascii,
    stacked_row_bounds,
)


LOGGER = logging.getLogger("buildplan")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="buildplan")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    recalc = sub.add_parser("recalculate", help="Recalculate dates, cost and critical path for a schedule JSON.")
    _add_schedule_args(recalc)
    recalc.add_argument("--json-out", type=Path, default=None, help="Write the recalculated payload here.")
    recalc.add_argument("--max-columns", type=int, default=60)

    check = sub.add_parser("check-order", help="Check a proposed task order against dependencies.")
    check.add_argument("schedule", type=Path)
    check.add_argument("--order", required=True, help="Comma-separated task ids in the proposed order.")

    export = sub.add_parser("export", help="Write ASCII, Markdown, CSV and PNG exports of a schedule.")
    _add_schedule_args(export)
    export.add_argument("--out-dir", type=Path, required=True)
    export.add_argument("--prefix", default="schedule")

    drag = sub.add_parser("drag", help="Simulate dragging one task to a pointer position in a stacked list.")
    _add_schedule_args(drag)
    drag.add_argument("--task", required=True, help="Id of the task being dragged.")
    drag.add_argument("--pointer", required=True, help="Drop position as `x,y`.")
    drag.add_argument("--row-height", type=float, default=32.0)
    drag.add_argument("--row-width", type=float, default=480.0)
    drag.add_argument("--force", action="store_true", help="Apply the drop even if it breaks dependency order.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        schedule = load_schedule(args.schedule)
        if args.command == "check-order":
            return _check_order(schedule, args.order)
        calendar = _build_calendar(args)
        if args.start is not None:
            schedule = ProjectSchedule(title=schedule.title, project_start=args.start, tasks=schedule.tasks)
        if args.command == "recalculate":
            return _recalculate(schedule, calendar, args.json_out, args.max_columns)
        if args.command == "export":
            return _export(schedule, calendar, args.out_dir, args.prefix)
        if args.command == "drag":
            return _drag(schedule, calendar, args)
    except ScheduleStructureError as exc:
        LOGGER.error("%s", exc)
        return 2
    raise ValueError(f"Unknown command: {args.command}")


def _add_schedule_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("schedule", type=Path)
    parser.add_argument("--start", type=dt.date.fromisoformat, default=None, help="Project start (YYYY-MM-DD).")
    parser.add_argument("--business-days", action="store_true", help="Skip weekends when mapping dates.")
    parser.add_argument(
        "--holiday",
        action="append",
        type=dt.date.fromisoformat,
        default=[],
        help="Non-working date (YYYY-MM-DD); repeatable, implies --business-days.",
    )


def _build_calendar(args: argparse.Namespace) -> ScheduleCalendar:
    if args.business_days or args.holiday:
        return BusinessDayCalendar(holidays=tuple(args.holiday))
    return ElapsedDayCalendar()


def _check_order(schedule: ProjectSchedule, raw_order: str) -> int:
    require_valid_task_collection(schedule.tasks)
    order = [item.strip() for item in raw_order.split(",") if item.strip()]
    validation = validate_order(schedule.tasks, order)
    if validation.is_valid:
        print("Order is valid.")
        return 0
    for issue in validation.issues:
        print(f"issue: {issue}")
    for message in order_violation_messages(validation, schedule.tasks):
        print(f"violation: {message}")
    return 1


def _recalculate(
    schedule: ProjectSchedule,
    calendar: ScheduleCalendar,
    json_out: Path | None,
    max_columns: int,
) -> int:
    result = recalculate(schedule.tasks, project_start=schedule.project_start, calendar=calendar)
    print(
        render_schedule_ascii(
            result,
            title=schedule.title,
            config=GanttRenderConfig(max_columns=max_columns),
            calendar=calendar,
        ),
        end="",
    )
    if json_out is not None:
        payload = schedule_to_dict(result.as_schedule(schedule.title), summary=result.summary)
        json_out.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        LOGGER.info("Wrote recalculated schedule to %s", json_out)
    return 0


def _export(schedule: ProjectSchedule, calendar: ScheduleCalendar, out_dir: Path, prefix: str) -> int:
    result = recalculate(schedule.tasks, project_start=schedule.project_start, calendar=calendar)
    bundle = export_schedule_bundle(result, out_dir=out_dir, prefix=prefix, title=schedule.title, calendar=calendar)
    print(json.dumps(bundle.as_dict(), indent=2))
    return 0


def _drag(schedule: ProjectSchedule, calendar: ScheduleCalendar, args: argparse.Namespace) -> int:
    controller = DragSessionController(schedule.tasks, project_start=schedule.project_start, calendar=calendar)
    rows = stacked_row_bounds(len(schedule.tasks), row_height=args.row_height, width=args.row_width)
    container = enclosing_bounds(rows)

    controller.start_drag(args.task)
    if controller.state.phase == "idle":
        print(f"Unknown task: {args.task}")
        return 2
    state = controller.pointer_move(parse_coordinate_notation(args.pointer), rows, container)
    print(f"candidate={state.candidate_index} phase={state.phase}")
    outcome = controller.drop(force=args.force)
    if outcome is None or not outcome.applied:
        reason = outcome.reason if outcome is not None else "no active drag"
        print(f"Drop cancelled: {reason}")
        return 1
    print(f"Drop {outcome.kind}: {', '.join(task.task_id for task in outcome.tasks)}")
    for warning in outcome.warnings:
        print(f"warning: {warning}")
    if outcome.summary is not None:
        print(
            f"total_duration={outcome.summary.total_duration_days:g} total_cost={outcome.summary.total_cost:.2f}"
            f" critical_path={' -> '.join(outcome.summary.critical_path)}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
