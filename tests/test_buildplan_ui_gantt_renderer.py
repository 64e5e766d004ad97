from __future__ import annotations

import csv
import datetime as dt
import io
import tempfile
import unittest
from pathlib import Path

from buildplan_core.calendar import BusinessDayCalendar
from buildplan_core.recalculator import recalculate
from buildplan_core.schema import Task
from buildplan_ui.exporters import export_schedule_bundle, render_schedule_csv
from buildplan_ui.gantt_renderer import GanttRenderConfig, render_schedule_ascii, render_schedule_markdown

START = dt.date(2026, 3, 2)


def _tasks() -> tuple[Task, ...]:
    return (
        Task(task_id="A", name="Site preparation", duration_days=2, cost=1000.0, status="completed"),
        Task(task_id="B", name="Foundations", duration_days=3, cost=5000.0, dependencies=("A",), assignee="Rui"),
        Task(task_id="C", name="Temporary fencing", duration_days=1, cost=250.0, dependencies=("A",), category="site"),
    )


class GanttRendererTests(unittest.TestCase):
    def test_ascii_render_has_axes_bars_and_critical_marker(self) -> None:
        result = recalculate(_tasks(), project_start=START)
        text = render_schedule_ascii(result, title="Lot 7")
        lines = text.splitlines()
        self.assertEqual(lines[0], "Lot 7")
        self.assertIn("Days:", text)
        self.assertIn("Dates:", text)
        self.assertIn("Critical path: A -> B", text)

        row_a = next(line for line in lines if line.startswith("*A "))
        self.assertIn("|====      |", row_a)
        row_c = next(line for line in lines if line[1:].startswith("C "))
        self.assertTrue(row_c.startswith(" "))
        self.assertIn("|    ~~    |", row_c)

    def test_ascii_render_is_deterministic(self) -> None:
        result = recalculate(_tasks(), project_start=START)
        self.assertEqual(render_schedule_ascii(result), render_schedule_ascii(result))

    def test_forced_order_shows_overlap_and_warnings(self) -> None:
        a, b, c = _tasks()
        result = recalculate((c, a, b), project_start=START)
        text = render_schedule_ascii(result)
        self.assertIn("overlap", text)
        self.assertIn("Warnings:", text)

    def test_long_schedules_are_bucketed_into_columns(self) -> None:
        tasks = (Task(task_id="L", name="Long haul", duration_days=200),)
        result = recalculate(tasks, project_start=START)
        text = render_schedule_ascii(result, config=GanttRenderConfig(max_columns=50, day_column_width=1))
        self.assertIn("days/column=4", text)
        row = next(line for line in text.splitlines() if line.startswith("*L "))
        self.assertIn("|" + "~" * 50 + "|", row)

    def test_business_calendar_labels_dates(self) -> None:
        result = recalculate(_tasks(), project_start=START, calendar=BusinessDayCalendar())
        text = render_schedule_ascii(result, calendar=BusinessDayCalendar())
        self.assertIn("03/02", text)

    def test_config_rejects_bad_widths(self) -> None:
        with self.assertRaises(ValueError):
            GanttRenderConfig(day_column_width=0)
        with self.assertRaises(ValueError):
            GanttRenderConfig(max_columns=0)

    def test_markdown_table_lists_every_task(self) -> None:
        result = recalculate(_tasks(), project_start=START)
        markdown = render_schedule_markdown(result, title="Lot 7")
        self.assertTrue(markdown.startswith("# Lot 7"))
        self.assertIn("| 2 | B Foundations | 2026-03-04 | 2026-03-07 | 3 | 5000.00 | Planned | yes |", markdown)
        self.assertIn("- Total cost: 6250.00", markdown)


class ExportersTests(unittest.TestCase):
    def test_csv_has_task_rows_and_summary_footer(self) -> None:
        result = recalculate(_tasks(), project_start=START)
        rows = list(csv.reader(io.StringIO(render_schedule_csv(result)), delimiter=";"))
        self.assertEqual(rows[0][0], "Task")
        self.assertEqual(rows[2][:3], ["Foundations", "2026-03-04", "2026-03-07"])
        self.assertEqual(rows[2][7], "Rui")
        self.assertEqual(rows[1][7], "Unassigned")
        self.assertEqual(rows[4], [])
        self.assertIn(["Total duration", "5 days"], rows)
        self.assertIn(["Total cost", "6250.00"], rows)
        self.assertIn(["Critical path", "A > B"], rows)

    def test_export_bundle_writes_every_format(self) -> None:
        result = recalculate(_tasks(), project_start=START)
        with tempfile.TemporaryDirectory() as tmp:
            bundle = export_schedule_bundle(result, out_dir=Path(tmp) / "out", prefix="unit", title="Lot 7")
            for path in (bundle.ascii_gantt, bundle.markdown_overview, bundle.csv_table, bundle.png_overview):
                self.assertTrue(path.exists(), path)
            self.assertGreater(bundle.png_overview.stat().st_size, 0)
            self.assertTrue(bundle.csv_table.read_bytes().startswith(b"\xef\xbb\xbf"))
            self.assertEqual(set(bundle.as_dict()), {"ascii_gantt", "markdown_overview", "csv_table", "png_overview"})


if __name__ == "__main__":
    unittest.main()
