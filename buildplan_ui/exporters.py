from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from buildplan_core.calendar import ScheduleCalendar
from buildplan_core.recalculator import RecalculationResult
from buildplan_core.schema import STATUS_LABELS

from .gantt_renderer import GanttRenderConfig, render_schedule_ascii, render_schedule_markdown

CSV_HEADERS: tuple[str, ...] = (
    "Task",
    "Start date",
    "End date",
    "Duration (days)",
    "Cost",
    "Status",
    "Category",
    "Assignee",
)


@dataclass(frozen=True)
class ScheduleExportBundle:
    ascii_gantt: Path
    markdown_overview: Path
    csv_table: Path
    png_overview: Path

    def as_dict(self) -> dict[str, str]:
        return {
            "ascii_gantt": str(self.ascii_gantt),
            "markdown_overview": str(self.markdown_overview),
            "csv_table": str(self.csv_table),
            "png_overview": str(self.png_overview),
        }


def export_schedule_bundle(
    result: RecalculationResult,
    *,
    out_dir: str | Path,
    prefix: str = "schedule",
    title: str = "Project Schedule",
    config: GanttRenderConfig | None = None,
    calendar: ScheduleCalendar | None = None,
) -> ScheduleExportBundle:
    root = Path(out_dir)
    root.mkdir(parents=True, exist_ok=True)

    gantt = render_schedule_ascii(result, title=title, config=config, calendar=calendar)
    markdown = render_schedule_markdown(result, title=title)

    path_gantt = root / f"{prefix}_gantt.txt"
    path_markdown = root / f"{prefix}_overview.md"
    path_csv = root / f"{prefix}.csv"
    path_png = root / f"{prefix}_overview.png"

    path_gantt.write_text(gantt, encoding="utf-8")
    path_markdown.write_text(markdown, encoding="utf-8")
    # BOM so spreadsheet apps pick up UTF-8 task names.
    path_csv.write_text(render_schedule_csv(result), encoding="utf-8-sig")
    _render_text_png(text=gantt, out_path=path_png)

    return ScheduleExportBundle(
        ascii_gantt=path_gantt,
        markdown_overview=path_markdown,
        csv_table=path_csv,
        png_overview=path_png,
    )


def render_schedule_csv(result: RecalculationResult, *, delimiter: str = ";") -> str:
    """Task table followed by a blank line and the project summary rows."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for task in result.tasks:
        writer.writerow(
            (
                task.name,
                task.start_date.isoformat() if task.start_date else "",
                task.end_date.isoformat() if task.end_date else "",
                f"{task.duration_days:g}",
                f"{task.cost:.2f}",
                STATUS_LABELS[task.status],
                task.category,
                task.assignee or "Unassigned",
            )
        )
    summary = result.summary
    writer.writerow(())
    writer.writerow(("Project summary",))
    writer.writerow(("Total tasks", len(result.tasks)))
    writer.writerow(("Total duration", f"{summary.total_duration_days:g} days"))
    writer.writerow(("Total cost", f"{summary.total_cost:.2f}"))
    writer.writerow(("Critical path", " > ".join(summary.critical_path)))
    return buffer.getvalue()


def _render_text_png(
    *,
    text: str,
    out_path: Path,
    padding: int = 16,
    line_spacing: int = 4,
    bg: tuple[int, int, int] = (17, 24, 39),
    fg: tuple[int, int, int] = (226, 232, 240),
    critical_fg: tuple[int, int, int] = (249, 115, 22),
) -> None:
    # Gantt rows for critical tasks start with `*`.
    lines = text.rstrip("\n").split("\n") or [""]
    font = ImageFont.load_default()

    measure = ImageDraw.Draw(Image.new("RGB", (8, 8), color=bg))
    boxes = [measure.textbbox((0, 0), line, font=font) for line in lines]
    text_width = max((x1 - x0 for x0, _, x1, _ in boxes), default=0)
    line_height = max(12, max((y1 - y0 for _, y0, _, y1 in boxes), default=0))

    size = (
        max(320, text_width + padding * 2),
        max(120, len(lines) * (line_height + line_spacing) + padding * 2),
    )
    image = Image.new("RGB", size, color=bg)
    draw = ImageDraw.Draw(image)
    for row, line in enumerate(lines):
        y = padding + row * (line_height + line_spacing)
        draw.text((padding, y), line, fill=critical_fg if line.startswith("*") else fg, font=font)
    image.save(out_path)
