from __future__ import annotations

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

import main as buildplan_main


PAYLOAD = {
    "title": "Lot 7",
    "project_start": "2026-03-02",
    "tasks": [
        {"id": "A", "name": "Site preparation", "duration": 2, "cost": 1000},
        {"id": "B", "name": "Foundations", "duration": 3, "cost": 5000, "dependencies": ["A"]},
        {"id": "C", "name": "Temporary fencing", "duration": 1, "cost": 250, "dependencies": ["A"]},
    ],
}


class MainCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.schedule = self.root / "schedule.json"
        self.schedule.write_text(json.dumps(PAYLOAD), encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = buildplan_main.main(list(argv))
        return code, out.getvalue()

    def test_recalculate_prints_gantt_and_writes_payload(self) -> None:
        json_out = self.root / "recalculated.json"
        code, out = self._run("recalculate", str(self.schedule), "--json-out", str(json_out))
        self.assertEqual(code, 0)
        self.assertIn("Critical path: A -> B", out)
        payload = json.loads(json_out.read_text(encoding="utf-8"))
        self.assertEqual(payload["totalDuration"], 5)
        self.assertEqual(payload["tasks"][2]["startDate"], "2026-03-04")

    def test_check_order_reports_violation(self) -> None:
        code, out = self._run("check-order", str(self.schedule), "--order", "C,A,B")
        self.assertEqual(code, 1)
        self.assertIn("violation:", out)
        code, out = self._run("check-order", str(self.schedule), "--order", "A,C,B")
        self.assertEqual(code, 0)
        self.assertIn("Order is valid.", out)

    def test_drag_valid_and_forced(self) -> None:
        # Rows are 32px tall; y=40 is over row 1.
        code, out = self._run("drag", str(self.schedule), "--task", "C", "--pointer", "10,40")
        self.assertEqual(code, 0)
        self.assertIn("Drop dropped: A, C, B", out)

        code, out = self._run("drag", str(self.schedule), "--task", "C", "--pointer", "10,5")
        self.assertEqual(code, 1)
        self.assertIn("Drop cancelled", out)

        code, out = self._run("drag", str(self.schedule), "--task", "C", "--pointer", "10,5", "--force")
        self.assertEqual(code, 0)
        self.assertIn("Drop forced: C, A, B", out)
        self.assertIn("warning:", out)

    def test_export_writes_bundle(self) -> None:
        out_dir = self.root / "exports"
        code, out = self._run(
            "export", str(self.schedule), "--out-dir", str(out_dir), "--business-days", "--start", "2026-03-06"
        )
        self.assertEqual(code, 0)
        manifest = json.loads(out)
        self.assertTrue(Path(manifest["csv_table"]).exists())

    def test_structural_error_exits_with_code_two(self) -> None:
        bad = dict(PAYLOAD, tasks=[{"id": "A", "name": "Walls", "duration": 1, "dependencies": ["A"]}])
        self.schedule.write_text(json.dumps(bad), encoding="utf-8")
        code, _ = self._run("recalculate", str(self.schedule))
        self.assertEqual(code, 2)

    def test_check_order_rejects_structurally_invalid_schedules(self) -> None:
        cyclic = dict(
            PAYLOAD,
            tasks=[
                {"id": "A", "name": "Walls", "duration": 1, "dependencies": ["B"]},
                {"id": "B", "name": "Roof", "duration": 1, "dependencies": ["A"]},
            ],
        )
        self.schedule.write_text(json.dumps(cyclic), encoding="utf-8")
        code, out = self._run("check-order", str(self.schedule), "--order", "A,B")
        self.assertEqual(code, 2)
        self.assertNotIn("violation:", out)

        dangling = dict(PAYLOAD, tasks=[{"id": "A", "name": "Walls", "duration": 1, "dependencies": ["Z"]}])
        self.schedule.write_text(json.dumps(dangling), encoding="utf-8")
        code, _ = self._run("check-order", str(self.schedule), "--order", "A")
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
