"""Task model, dependency validation and schedule recalculation for Buildplan."""

from .calendar import BusinessDayCalendar, ElapsedDayCalendar, ScheduleCalendar
from .recalculator import RecalculationResult, recalculate, recalculate_schedule
from .schema import (
    SCHEDULE_JSON_SCHEMA,
    STATUS_COLORS,
    STATUS_LABELS,
    TASK_STATUSES,
    ProjectSchedule,
    ScheduleSummary,
    Task,
    load_schedule,
    schedule_from_dict,
    schedule_json_schema,
    schedule_to_dict,
    task_from_dict,
    task_to_dict,
)
from .validation import (
    OrderValidation,
    OrderViolation,
    ScheduleStructureError,
    ValidationReport,
    order_violation_messages,
    require_valid_task_collection,
    validate_order,
    validate_task_collection,
)

__all__ = [
    "BusinessDayCalendar",
    "ElapsedDayCalendar",
    "OrderValidation",
    "OrderViolation",
    "ProjectSchedule",
    "RecalculationResult",
    "SCHEDULE_JSON_SCHEMA",
    "STATUS_COLORS",
    "STATUS_LABELS",
    "ScheduleCalendar",
    "ScheduleStructureError",
    "ScheduleSummary",
    "TASK_STATUSES",
    "Task",
    "ValidationReport",
    "load_schedule",
    "order_violation_messages",
    "recalculate",
    "recalculate_schedule",
    "require_valid_task_collection",
    "schedule_from_dict",
    "schedule_json_schema",
    "schedule_to_dict",
    "task_from_dict",
    "task_to_dict",
    "validate_order",
    "validate_task_collection",
]
