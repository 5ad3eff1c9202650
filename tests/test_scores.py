import unittest

from gradetrack.core.scores import clamp_0_20, normalize, normalized_score, rescale

from factories import actual, planned


class NormalizeTests(unittest.TestCase):
    def test_formula(self):
        self.assertAlmostEqual(normalize(15, 20), 15.0)
        self.assertAlmostEqual(normalize(7, 10), 14.0)
        self.assertAlmostEqual(normalize(8, 10, 1), 18.0)
        self.assertAlmostEqual(normalize(30, 40, 2.5), min(32.5, 40) / 40 * 20)

    def test_boundaries(self):
        for max_grade in (5, 10, 20, 100):
            self.assertEqual(normalize(max_grade, max_grade, 0), 20.0)
            self.assertEqual(normalize(0, max_grade, 0), 0.0)

    def test_bonus_is_capped_at_max_grade(self):
        self.assertEqual(normalize(20, 20, 5), normalize(20, 20, 0))
        self.assertEqual(normalize(18, 20, 5), 20.0)

    def test_missing_bonus_counts_as_zero(self):
        self.assertEqual(normalize(12, 20, None), normalize(12, 20))

    def test_rejects_non_positive_scale(self):
        with self.assertRaises(ValueError):
            normalize(5, 0)

    def test_normalized_score_of_evaluation(self):
        self.assertAlmostEqual(normalized_score(actual("math", 9, max_grade=10, bonus=0.5)), 19.0)

    def test_planned_evaluation_has_no_score(self):
        with self.assertRaises(ValueError):
            normalized_score(planned("math"))

    def test_rescale_and_clamp(self):
        self.assertAlmostEqual(rescale(16, 10), 8.0)
        self.assertAlmostEqual(rescale(16, 20), 16.0)
        self.assertEqual(clamp_0_20(-3), 0.0)
        self.assertEqual(clamp_0_20(27), 20.0)
        self.assertEqual(clamp_0_20(11.5), 11.5)


if __name__ == "__main__":
    unittest.main()
