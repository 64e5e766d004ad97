from __future__ import annotations

import unittest

from buildplan_ui.drop_target import (
    enclosing_bounds,
    is_outside_bounds,
    resolve_candidate_index,
    stacked_row_bounds,
)
from buildplan_ui.geometry import BoundingBox, CoordinatePoint, coerce_point, parse_coordinate_notation


class DropTargetTests(unittest.TestCase):
    def setUp(self) -> None:
        self.rows = stacked_row_bounds(4, row_height=30, width=200, x=10, y=20, gap=4)

    def test_stacked_rows_are_laid_out_top_down(self) -> None:
        self.assertEqual(self.rows[0], BoundingBox(x=10, y=20, width=200, height=30))
        self.assertEqual(self.rows[3].y, 20 + 3 * 34)

    def test_pointer_inside_row_resolves_to_that_row(self) -> None:
        self.assertEqual(resolve_candidate_index(CoordinatePoint(x=50, y=25), self.rows), 0)
        self.assertEqual(resolve_candidate_index((50.0, 90.0), self.rows), 2)

    def test_pointer_in_gap_resolves_to_nearest_edge(self) -> None:
        # Row 0 ends at y=50, row 1 starts at y=54.
        self.assertEqual(resolve_candidate_index((50.0, 51.0), self.rows), 0)
        self.assertEqual(resolve_candidate_index((50.0, 53.5), self.rows), 1)

    def test_equidistant_pointer_prefers_lower_index(self) -> None:
        self.assertEqual(resolve_candidate_index((50.0, 52.0), self.rows), 0)

    def test_pointer_beyond_list_snaps_to_last_row(self) -> None:
        self.assertEqual(resolve_candidate_index((50.0, 900.0), self.rows), 3)
        self.assertEqual(resolve_candidate_index((-100.0, -100.0), self.rows), 0)

    def test_empty_list_or_bad_pointer_has_no_candidate(self) -> None:
        self.assertIsNone(resolve_candidate_index((5.0, 5.0), ()))
        self.assertIsNone(resolve_candidate_index((float("nan"), 5.0), self.rows))
        self.assertIsNone(resolve_candidate_index(("x", "y"), self.rows))

    def test_outside_container_detection(self) -> None:
        container = enclosing_bounds(self.rows)
        assert container is not None
        self.assertEqual((container.x, container.y, container.right), (10, 20, 210))
        self.assertFalse(is_outside_bounds((100.0, 60.0), container))
        self.assertTrue(is_outside_bounds((100.0, 400.0), container))
        self.assertTrue(is_outside_bounds((float("inf"), 60.0), container))
        self.assertIsNone(enclosing_bounds(()))

    def test_row_layout_rejects_bad_sizes(self) -> None:
        with self.assertRaises(ValueError):
            stacked_row_bounds(3, row_height=0, width=100)
        with self.assertRaises(ValueError):
            stacked_row_bounds(-1, row_height=10, width=100)


class GeometryTests(unittest.TestCase):
    def test_bounding_box_edge_distance(self) -> None:
        box = BoundingBox(x=0, y=0, width=10, height=10)
        self.assertEqual(box.edge_distance(5, 5), 0)
        self.assertEqual(box.edge_distance(13, 14), 5)
        with self.assertRaises(ValueError):
            BoundingBox(x=0, y=0, width=-1, height=1)

    def test_parse_coordinate_notation(self) -> None:
        self.assertEqual(parse_coordinate_notation("12, 40"), CoordinatePoint(x=12.0, y=40.0))
        self.assertEqual(parse_coordinate_notation("list:3,4").frame, "list")
        with self.assertRaises(ValueError):
            parse_coordinate_notation("12")

    def test_coerce_point_accepts_tuples(self) -> None:
        self.assertEqual(coerce_point((1, 2)), CoordinatePoint(x=1.0, y=2.0))
        self.assertIsNone(coerce_point([1, 2]))


if __name__ == "__main__":
    unittest.main()
