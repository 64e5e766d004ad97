from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Sequence

from .schema import Task


class ScheduleStructureError(ValueError):
    pass


@dataclass(frozen=True)
class ValidationReport:
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class OrderViolation:
    task_id: str
    missing_dependency_id: str


@dataclass(frozen=True)
class OrderValidation:
    is_valid: bool
    violations: tuple[OrderViolation, ...] = ()
    issues: tuple[str, ...] = ()

    def violated_task_ids(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for violation in self.violations:
            seen.setdefault(violation.task_id, None)
        return tuple(seen)


def validate_order(tasks: Sequence[Task], proposed_order: Sequence[str]) -> OrderValidation:
    """Check that every dependency sits strictly earlier in `proposed_order`.

    Runs on every candidate position of a drag, so it only compares positions
    and never walks the graph. Malformed orders (omitted, duplicated or
    unknown ids) fail closed instead of raising.
    """

    known_ids = [task.task_id for task in tasks]
    issues: list[str] = []

    counts = Counter(proposed_order)
    duplicates = sorted(task_id for task_id, count in counts.items() if count > 1)
    if duplicates:
        issues.append(f"Proposed order repeats task ids: {', '.join(duplicates)}")
    known = set(known_ids)
    unknown = sorted(task_id for task_id in counts if task_id not in known)
    if unknown:
        issues.append(f"Proposed order references unknown task ids: {', '.join(unknown)}")
    omitted = [task_id for task_id in known_ids if task_id not in counts]
    if omitted:
        issues.append(f"Proposed order omits task ids: {', '.join(omitted)}")

    position: dict[str, int] = {}
    for index, task_id in enumerate(proposed_order):
        position.setdefault(task_id, index)

    lookup = {task.task_id: task for task in tasks}
    violations: list[OrderViolation] = []
    for index, task_id in enumerate(proposed_order):
        task = lookup.get(task_id)
        if task is None or position[task_id] != index:
            continue
        for dep_id in task.distinct_dependencies:
            dep_index = position.get(dep_id)
            if dep_index is None or dep_index >= index:
                violations.append(OrderViolation(task_id=task_id, missing_dependency_id=dep_id))

    return OrderValidation(
        is_valid=not issues and not violations,
        violations=tuple(violations),
        issues=tuple(issues),
    )


def order_violation_messages(validation: OrderValidation, tasks: Iterable[Task]) -> tuple[str, ...]:
    """One human-readable line per violated task, naming its unmet dependencies."""

    names = {task.task_id: task.name for task in tasks}
    grouped: dict[str, list[str]] = {}
    for violation in validation.violations:
        grouped.setdefault(violation.task_id, []).append(violation.missing_dependency_id)
    return tuple(
        describe_unmet_dependencies(task_id, names.get(task_id, task_id), dep_ids, names)
        for task_id, dep_ids in grouped.items()
    )


def describe_unmet_dependencies(
    task_id: str,
    task_name: str,
    dep_ids: Sequence[str],
    names: dict[str, str],
) -> str:
    deps = ", ".join(f"`{dep_id}` ({names.get(dep_id, dep_id)})" for dep_id in dep_ids)
    noun = "dependency" if len(dep_ids) == 1 else "dependencies"
    return f"Task `{task_id}` ({task_name}) is ordered before its {noun} {deps}"


def validate_task_collection(tasks: Sequence[Task]) -> ValidationReport:
    errors: list[str] = []
    warnings: list[str] = []

    counts = Counter(task.task_id for task in tasks)
    duplicates = sorted(task_id for task_id, count in counts.items() if count > 1)
    if duplicates:
        errors.append(f"Duplicate task ids: {', '.join(duplicates)}")

    task_ids = set(counts)
    edges: dict[str, tuple[str, ...]] = {}
    for task in tasks:
        if task.task_id in task.dependencies:
            errors.append(f"Task `{task.task_id}` depends on itself")
        missing = tuple(dep for dep in task.distinct_dependencies if dep not in task_ids)
        if missing:
            errors.append(f"Task `{task.task_id}` has unresolved dependencies: {', '.join(missing)}")
        repeated = sorted(dep for dep, count in Counter(task.dependencies).items() if count > 1)
        if repeated:
            warnings.append(f"Task `{task.task_id}` lists dependencies more than once: {', '.join(repeated)}")
        resolved = tuple(dep for dep in task.distinct_dependencies if dep in task_ids and dep != task.task_id)
        edges[task.task_id] = edges.get(task.task_id, ()) + resolved

    cycle = _find_dependency_cycle(edges)
    if cycle:
        names = {task.task_id: task.name for task in tasks}
        steps = " -> ".join(f"`{task_id}` ({names[task_id]})" for task_id in cycle)
        errors.append(f"Task dependency cycle detected: {steps}")

    return ValidationReport(errors=tuple(errors), warnings=tuple(warnings))


def require_valid_task_collection(tasks: Sequence[Task]) -> ValidationReport:
    report = validate_task_collection(tasks)
    if report.errors:
        joined = "; ".join(report.errors)
        raise ScheduleStructureError(f"Task collection rejected: {joined}")
    return report


def _find_dependency_cycle(edges: dict[str, tuple[str, ...]]) -> tuple[str, ...] | None:
    """Walk each task's dependency chain and return the first loop found.

    The loop is reported closed, e.g. ``("A", "B", "A")``.
    """

    finished: set[str] = set()
    for root in sorted(edges):
        if root in finished:
            continue
        chain = [root]
        pending = [iter(edges[root])]
        while pending:
            dep = next(pending[-1], None)
            if dep is None:
                finished.add(chain.pop())
                pending.pop()
            elif dep in chain:
                return tuple(chain[chain.index(dep) :]) + (dep,)
            elif dep not in finished:
                chain.append(dep)
                pending.append(iter(edges.get(dep, ())))
    return None
