"""
Unit tests for date projection and schedule resolution.

Projection rule: anchor minus 7 days, then the next strictly-later
occurrence of the weekday.
"""

import unittest
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from colloscope.dates import WEEKDAY_CODES, next_occurrence, project_date
from colloscope.errors import UnknownColleIdError, WeekRangeError
from colloscope.resolve import next_instances, resolve_dataset

PARIS = ZoneInfo("Europe/Paris")

CATALOG = """M4 Dupont Lu 8h-10h (207)
P1 Jean Martin Ma 14h-15h (B12)
A2 Dupont Je 17h-18h (Labo langues)
"""

WEEKS = """S1 05-09-2024
S2 12-09-2024
S3 19-09-2024
"""

GRID = """1-2 3
M4+P1 A2
P1 M4
"""


def _summary(group):
    return [(i.colle_id.compact(), i.start.date(), i.week) for i in group.instances]


class TestProjectDate(unittest.TestCase):
    def test_documented_example(self) -> None:
        # 05-09-2024 - 7 days = 29-08-2024 (Thursday), next Monday = 02-09-2024
        self.assertEqual(project_date([date(2024, 9, 5)], 1, WEEKDAY_CODES["Lu"]), date(2024, 9, 2))

    def test_anchor_weekday_selects_the_anchor_itself(self) -> None:
        # the anchor is a Thursday: stepping back a week then forward lands on it
        self.assertEqual(project_date([date(2024, 9, 5)], 1, WEEKDAY_CODES["Je"]), date(2024, 9, 5))

    def test_weekday_always_matches(self) -> None:
        anchors = [date(2024, 9, 1) + timedelta(days=k) for k in range(14)]
        for week in range(1, len(anchors) + 1):
            for weekday in range(7):
                with self.subTest(week=week, weekday=weekday):
                    day = project_date(anchors, week, weekday)
                    self.assertEqual(day.weekday(), weekday)
                    anchor = anchors[week - 1]
                    self.assertTrue(anchor - timedelta(days=7) < day <= anchor)

    def test_week_out_of_range(self) -> None:
        anchors = [date(2024, 9, 5)]
        for week in (0, 2, -1):
            with self.subTest(week=week):
                with self.assertRaises(WeekRangeError):
                    project_date(anchors, week, 0)

    def test_next_occurrence_is_strictly_later(self) -> None:
        monday = date(2024, 9, 2)
        self.assertEqual(next_occurrence(monday, 0), date(2024, 9, 9))
        self.assertEqual(next_occurrence(monday, 1), date(2024, 9, 3))


class TestResolveDataset(unittest.TestCase):
    def setUp(self) -> None:
        self.groups = resolve_dataset(CATALOG, WEEKS, GRID, tz=PARIS)

    def test_group_ids_follow_file_order(self) -> None:
        self.assertEqual([g.group_id for g in self.groups], [1, 2])

    def test_cross_product_sorted_by_start(self) -> None:
        self.assertEqual(
            _summary(self.groups[0]),
            [
                ("M4", date(2024, 9, 2), 1),
                ("P1", date(2024, 9, 3), 1),
                ("M4", date(2024, 9, 9), 2),
                ("P1", date(2024, 9, 10), 2),
                ("A2", date(2024, 9, 19), 3),
            ],
        )
        self.assertEqual(
            _summary(self.groups[1]),
            [
                ("P1", date(2024, 9, 3), 1),
                ("P1", date(2024, 9, 10), 2),
                ("M4", date(2024, 9, 16), 3),
            ],
        )

    def test_documented_four_instance_example(self) -> None:
        groups = resolve_dataset(CATALOG, "05-09-2024\n12-09-2024\n", "1-2\nM4+P1\n", tz=PARIS)
        self.assertEqual(
            [(i.colle_id.compact(), i.week) for i in groups[0].instances],
            [("M4", 1), ("P1", 1), ("M4", 2), ("P1", 2)],
        )

    def test_instances_are_non_decreasing(self) -> None:
        for group in self.groups:
            starts = [i.start for i in group.instances]
            self.assertEqual(starts, sorted(starts))

    def test_cross_product_sizes(self) -> None:
        grid = "1-2-3 1\nM4+P1+A2 A2\n"
        groups = resolve_dataset(CATALOG, WEEKS, grid, tz=PARIS)
        self.assertEqual(len(groups[0].instances), 3 * 3 + 1 * 1)

    def test_hours_and_timezone(self) -> None:
        first = self.groups[0].instances[0]
        self.assertEqual(first.start, datetime(2024, 9, 2, 8, tzinfo=PARIS))
        self.assertEqual(first.end, datetime(2024, 9, 2, 10, tzinfo=PARIS))
        self.assertEqual(first.hours(), "8h-10h")
        self.assertEqual(first.room, "207")
        self.assertEqual(first.instructor.name, "Dupont")

    def test_instructor_identity_shared_across_groups(self) -> None:
        m4 = self.groups[0].instances[0]
        a2 = self.groups[0].instances[-1]
        self.assertIs(m4.instructor, a2.instructor)

    def test_unknown_id_aborts_everything(self) -> None:
        with self.assertRaises(UnknownColleIdError):
            resolve_dataset(CATALOG, WEEKS, "1-2 3\nM4 A2\nM4 A7\n", tz=PARIS)

    def test_week_beyond_anchor_table_aborts(self) -> None:
        with self.assertRaises(WeekRangeError):
            resolve_dataset(CATALOG, WEEKS, "1-4\nM4\n", tz=PARIS)

    def test_default_timezone_is_aware(self) -> None:
        groups = resolve_dataset(CATALOG, WEEKS, GRID)
        self.assertIsNotNone(groups[0].instances[0].start.tzinfo)


class TestNextInstances(unittest.TestCase):
    def setUp(self) -> None:
        self.group = resolve_dataset(CATALOG, WEEKS, GRID, tz=PARIS)[0]

    def test_first_limit_not_ended(self) -> None:
        now = datetime(2024, 9, 3, 14, 30, tzinfo=PARIS)
        upcoming = next_instances(self.group, now, 2)
        self.assertEqual(
            [(i.colle_id.compact(), i.start.date()) for i in upcoming],
            [("P1", date(2024, 9, 3)), ("M4", date(2024, 9, 9))],
        )

    def test_ended_exactly_now_is_excluded(self) -> None:
        now = datetime(2024, 9, 3, 15, 0, tzinfo=PARIS)
        upcoming = next_instances(self.group, now, 1)
        self.assertEqual(upcoming[0].start.date(), date(2024, 9, 9))

    def test_fewer_than_limit_is_clamped(self) -> None:
        now = datetime(2024, 9, 3, 16, 0, tzinfo=PARIS)
        self.assertEqual(len(next_instances(self.group, now, 10)), 3)

    def test_nothing_left(self) -> None:
        now = datetime(2025, 1, 1, tzinfo=PARIS)
        self.assertEqual(next_instances(self.group, now, 5), [])

    def test_non_positive_limit(self) -> None:
        now = datetime(2024, 9, 1, tzinfo=PARIS)
        self.assertEqual(next_instances(self.group, now, 0), [])

    def test_count_is_min_of_limit_and_qualifying(self) -> None:
        now = datetime(2024, 9, 1, tzinfo=PARIS)
        for limit in range(1, 8):
            with self.subTest(limit=limit):
                self.assertEqual(len(next_instances(self.group, now, limit)), min(limit, 5))


if __name__ == "__main__":
    unittest.main()
