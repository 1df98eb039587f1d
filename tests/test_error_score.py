import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from health_tracking.domain.models import ErrorCounts, HealthSettings
from health_tracking.services.error_score import compute_appreciation_score, compute_error_score
from health_tracking.services.rating import classify_rating


class ErrorScoreTests(unittest.TestCase):
    def test_severity_weighted_deduction(self) -> None:
        result = compute_error_score(ErrorCounts(high=3, medium=1), HealthSettings())
        self.assertEqual(result, {"high": 3, "medium": 1, "low": 0, "score": -53})

    def test_low_severity_and_custom_weights(self) -> None:
        settings = HealthSettings(error_low_deduction=1)
        self.assertEqual(compute_error_score(ErrorCounts(low=4), settings)["score"], -4)

    def test_no_errors(self) -> None:
        self.assertEqual(compute_error_score(ErrorCounts(), HealthSettings())["score"], 0)

    def test_appreciation_bonus(self) -> None:
        self.assertEqual(compute_appreciation_score(4, HealthSettings()), {"count": 4, "score": 20})


class RatingTests(unittest.TestCase):
    def test_bands_have_inclusive_lower_bounds(self) -> None:
        settings = HealthSettings()
        self.assertEqual(classify_rating(300, settings), ("TOP RATED", "green"))
        self.assertEqual(classify_rating(299, settings), ("AVERAGE", "orange"))
        self.assertEqual(classify_rating(200, settings), ("AVERAGE", "orange"))
        self.assertEqual(classify_rating(199.5, settings), ("BELOW STANDARD", "red"))
        self.assertEqual(classify_rating(-40, settings), ("BELOW STANDARD", "red"))

    def test_equal_thresholds_skip_average(self) -> None:
        settings = HealthSettings(top_rated_threshold=100, average_threshold=100)
        self.assertEqual(classify_rating(100, settings)[0], "TOP RATED")
        self.assertEqual(classify_rating(99, settings)[0], "BELOW STANDARD")


if __name__ == "__main__":
    unittest.main()
