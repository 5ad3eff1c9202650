import unittest
from dataclasses import replace

from gradetrack.domain.models import GradebookSnapshot
from gradetrack.services.gradebook_service import GradebookService, GradebookServiceError

from factories import actual, period, planned, subject, when


class GradebookServiceTests(unittest.TestCase):
    def setUp(self):
        self.service = GradebookService(default_scale="20", recent_limit=2)
        self.t1 = period("t1", when(2024, 9, 2), when(2024, 12, 20))
        self.t2 = period("t2", when(2025, 1, 6), when(2025, 3, 28), goal=15)
        self.snapshot = GradebookSnapshot(
            subjects=(subject("math", coefficient=2, goal=14), subject("french", coefficient=1, goal=11)),
            periods=(self.t1, self.t2),
            evaluations=(
                actual("math", 12, date=when(2024, 10, 1)),
                actual("math", 16, date=when(2024, 10, 15)),
                actual("french", 8, date=when(2024, 10, 8)),
                planned("french", date=when(2024, 11, 20)),
                actual("math", 20, period_id="t2", date=when(2025, 2, 3)),
            ),
            active_period_id="t1",
        )

    def test_dashboard(self):
        d = self.service.dashboard(self.snapshot, now=when(2024, 10, 20))

        self.assertEqual(d.active_period, self.t1)
        self.assertAlmostEqual(d.overall_average, (14 * 2 + 8) / 3)
        self.assertAlmostEqual(d.period_goal, (28 + 11) / 3)
        self.assertAlmostEqual(d.calculated_period_goal, (28 + 11) / 3)

        self.assertEqual(d.annual.school_year, "2024-2025")
        # math 16 over both terms, french 8
        self.assertAlmostEqual(d.annual.average, (16 * 2 + 8) / 3)

        statuses = {entry.subject.id: entry.status for entry in d.roadmap}
        self.assertEqual(statuses, {"math": "achieved", "french": "in_progress"})
        french = [entry for entry in d.roadmap if entry.subject.id == "french"][0]
        # one planned evaluation left
        self.assertAlmostEqual(french.required_average, 14.0)

        self.assertEqual(d.chart.max_x, 2)
        self.assertEqual(d.statistics.type_counts, {"Control": 3})
        self.assertEqual([row.subject.id for row in d.performance], ["math", "french"])
        self.assertEqual([e.date for e in d.recent], [when(2024, 11, 20), when(2024, 10, 15)])

    def test_dashboard_uses_period_goal_override(self):
        snapshot = GradebookSnapshot(
            subjects=self.snapshot.subjects,
            periods=self.snapshot.periods,
            evaluations=self.snapshot.evaluations,
            active_period_id="t2",
        )
        d = self.service.dashboard(snapshot, scale="combined", now=when(2025, 2, 10))
        self.assertEqual(d.period_goal, 15)
        self.assertAlmostEqual(d.overall_average, 20.0)

    def test_empty_gradebook(self):
        d = self.service.dashboard(GradebookSnapshot())
        self.assertIsNone(d.active_period)
        self.assertEqual(d.overall_average, 0.0)
        self.assertEqual(d.period_goal, 0.0)
        self.assertEqual(d.roadmap, ())
        self.assertEqual(d.chart.max_x, 0)
        self.assertIsNone(d.statistics)

    def test_rejects_unknown_scale(self):
        with self.assertRaises(GradebookServiceError):
            self.service.dashboard(self.snapshot, scale="15")

    def test_rejects_dangling_references(self):
        snapshot = GradebookSnapshot(
            subjects=self.snapshot.subjects,
            periods=self.snapshot.periods,
            evaluations=(actual("history", 10),),
            active_period_id="t1",
        )
        with self.assertRaises(GradebookServiceError):
            self.service.dashboard(snapshot)

    def test_rejects_invalid_records(self):
        snapshot = GradebookSnapshot(
            subjects=self.snapshot.subjects,
            periods=self.snapshot.periods,
            evaluations=(actual("math", 25),),
            active_period_id="t1",
        )
        with self.assertRaises(GradebookServiceError):
            self.service.dashboard(snapshot)

    def test_stale_active_period_falls_back_to_current(self):
        snapshot = replace(self.snapshot, active_period_id="t7")
        d = self.service.dashboard(snapshot, now=when(2025, 2, 10))
        self.assertEqual(d.active_period, self.t2)
        self.assertAlmostEqual(d.overall_average, 20.0)

    def test_stale_active_period_falls_back_to_first(self):
        snapshot = replace(self.snapshot, active_period_id="t7")
        d = self.service.dashboard(snapshot, now=when(2025, 7, 14))
        self.assertEqual(d.active_period, self.t1)

    def test_missing_active_period_uses_period_containing_now(self):
        snapshot = replace(self.snapshot, active_period_id=None)
        d = self.service.dashboard(snapshot, now=when(2024, 10, 20))
        self.assertEqual(d.active_period, self.t1)

    def test_recent_bands(self):
        d = self.service.dashboard(self.snapshot, now=when(2024, 10, 20))
        # planned french, then math 16 against goal 14
        self.assertEqual(d.recent_bands, (None, "goal_met"))

    def test_required_grade_resolves_active_period(self):
        snapshot = replace(self.snapshot, active_period_id=None)
        # math in t2: one 20, goal 14 -> 14 * 2 - 20
        result = self.service.required_grade(snapshot, "math", 20, now=when(2025, 2, 10))
        self.assertEqual(result.status, "possible")
        self.assertAlmostEqual(result.score, 8.0)

    def test_required_grade_uses_active_period(self):
        result = self.service.required_grade(self.snapshot, "french", 20)
        self.assertEqual(result.status, "possible")
        self.assertAlmostEqual(result.score, 14.0)

        result = self.service.required_grade(self.snapshot, "math", 10)
        self.assertEqual(result.status, "possible")
        self.assertAlmostEqual(result.score, 7.0)

    def test_required_grade_unknown_subject(self):
        result = self.service.required_grade(self.snapshot, "history", 20)
        self.assertEqual(result.status, "impossible")
        self.assertIsNone(result.score)

    def test_required_grade_rejects_bad_scale(self):
        with self.assertRaises(GradebookServiceError):
            self.service.required_grade(self.snapshot, "math", 0)


if __name__ == "__main__":
    unittest.main()
