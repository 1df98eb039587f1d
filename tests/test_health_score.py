import sys
import threading
import unittest
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from health_tracking.domain.errors import CollaboratorError, NotFoundError
from health_tracking.domain.models import Employee, ErrorCounts, HealthSettings, Task, TaskHistoryEvent
from health_tracking.services.health_score import compute_health_score

TODAY = date(2026, 10, 18)
FULL_MONTHS = {"2026-07": 1000.0, "2026-08": 1000.0, "2026-09": 1000.0}
FULL_PRESENCE = {"2026-07": 31, "2026-08": 31, "2026-09": 30}


class FakeDataSource:
    def __init__(self, **overrides) -> None:
        self.calls: list[str] = []
        self.employee = overrides.get("employee", Employee(id="12", name="Asha Rao"))
        self.tasks = overrides.get("tasks", [])
        self.events = overrides.get("events", [])
        self.hours = overrides.get("hours", FULL_MONTHS)
        self.presence = overrides.get("presence", FULL_PRESENCE)
        self.errors = overrides.get("errors", ErrorCounts(high=3, medium=1))
        self.appreciations = overrides.get("appreciations", 2)
        self.failing = set(overrides.get("failing", ()))

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failing:
            raise CollaboratorError(f"{name} unavailable")

    def get_employee(self, employee_id):
        self._record("get_employee")
        if self.employee is None:
            raise NotFoundError(employee_id)
        return self.employee

    def find_tasks_assigned_to(self, employee_name):
        self._record("find_tasks_assigned_to")
        return self.tasks

    def find_completion_events(self, task_ids, window):
        self._record("find_completion_events")
        return self.events

    def sum_attendance_hours_by_month(self, employee_id, window):
        self._record("sum_attendance_hours_by_month")
        return self.hours

    def count_present_days_by_month(self, employee_id, window):
        self._record("count_present_days_by_month")
        return self.presence

    def count_errors_by_severity(self, employee_id, window):
        self._record("count_errors_by_severity")
        return self.errors

    def count_appreciations(self, employee_id, window):
        self._record("count_appreciations")
        return self.appreciations

    def get_health_settings(self):
        self._record("get_health_settings")
        return {}


class BarrierDataSource(FakeDataSource):
    """Every component blocks until all five are fetching at once."""

    def __init__(self, **overrides) -> None:
        super().__init__(**overrides)
        self.barrier = threading.Barrier(5, timeout=5)

    def _record(self, name: str) -> None:
        super()._record(name)
        if name not in ("get_employee", "find_completion_events"):
            self.barrier.wait()


class ComputeHealthScoreTests(unittest.TestCase):
    def test_admin_short_circuits_without_data_calls(self) -> None:
        source = FakeDataSource()
        result = compute_health_score("admin", TODAY, source, HealthSettings())

        self.assertEqual(source.calls, [])
        self.assertEqual(result.health_score, 0)
        self.assertEqual(result.message, "Admin user - no health data available")
        self.assertEqual(result.calculations["tasks"]["score"], 0)
        self.assertEqual(result.cycles["task"].end, date(2026, 10, 16))
        self.assertIn("message", result.to_dict())

    def test_aggregates_component_scores(self) -> None:
        result = compute_health_score(12, TODAY, FakeDataSource(), HealthSettings())

        self.assertEqual(result.employee_id, "12")
        self.assertEqual(result.employee_name, "Asha Rao")
        self.assertEqual(result.calculations["tasks"]["score"], 0)
        self.assertEqual(result.calculations["hours"]["score"], 24)
        self.assertEqual(result.calculations["errors"]["score"], -53)
        self.assertEqual(result.calculations["appreciations"]["score"], 10)
        self.assertEqual(result.calculations["attendance"]["score"], 0)
        self.assertEqual(result.health_score, -19)
        self.assertEqual((result.rating, result.rating_color), ("BELOW STANDARD", "red"))
        self.assertEqual(result.failed_components, ())

    def test_warning_letters_are_reported_but_not_applied(self) -> None:
        result = compute_health_score("12", TODAY, FakeDataSource(), HealthSettings())
        self.assertEqual(result.calculations["warningLetters"]["score"], 0)
        self.assertEqual(
            result.health_score,
            sum(result.calculations[name]["score"] for name in ("tasks", "hours", "errors", "appreciations", "attendance")),
        )

    def test_task_score_and_top_rating(self) -> None:
        tasks = [Task(id="5", title="Daily Task")]
        events = [
            TaskHistoryEvent(task_id="5", action="Status changed", new_value="Completed", created_at=f"2026-{month:02d}-{day:02d}T06:00:00Z")
            for month in (8, 9)
            for day in range(1, 29)
        ]
        settings = HealthSettings(task_points_per_day=10, top_rated_threshold=500, average_threshold=100)
        result = compute_health_score("12", TODAY, FakeDataSource(tasks=tasks, events=events), settings)

        self.assertEqual(result.calculations["tasks"]["completed"], 56)
        self.assertEqual(result.calculations["tasks"]["score"], 560)
        self.assertEqual(result.health_score, 560 + 24 - 53 + 10)
        self.assertEqual(result.rating, "TOP RATED")

    def test_no_tasks_skips_history_fetch(self) -> None:
        source = FakeDataSource()
        compute_health_score("12", TODAY, source, HealthSettings())
        self.assertIn("find_tasks_assigned_to", source.calls)
        self.assertNotIn("find_completion_events", source.calls)

    def test_failed_component_scores_zero(self) -> None:
        source = FakeDataSource(failing={"count_errors_by_severity"})
        result = compute_health_score("12", TODAY, source, HealthSettings())

        self.assertEqual(result.failed_components, ("errors",))
        self.assertEqual(result.calculations["errors"], {"high": 0, "medium": 0, "low": 0, "score": 0})
        self.assertEqual(result.health_score, 24 + 10)
        self.assertIn("count_appreciations", source.calls)

    def test_unexpected_component_error_is_isolated(self) -> None:
        class BrokenTasks(FakeDataSource):
            def find_tasks_assigned_to(self, employee_name):
                raise RuntimeError("task service exploded")

        with self.assertLogs("health_tracking.services.health_score", level="ERROR") as logs:
            result = compute_health_score("12", TODAY, BrokenTasks(), HealthSettings())

        self.assertEqual(result.failed_components, ("tasks",))
        self.assertEqual(result.calculations["tasks"]["score"], 0)
        self.assertEqual(result.health_score, -19)
        self.assertTrue(any("tasks" in line for line in logs.output))

    def test_every_component_failing_still_returns(self) -> None:
        failing = {
            "find_tasks_assigned_to",
            "sum_attendance_hours_by_month",
            "count_present_days_by_month",
            "count_errors_by_severity",
            "count_appreciations",
        }
        result = compute_health_score("12", TODAY, FakeDataSource(failing=failing), HealthSettings())
        self.assertEqual(result.health_score, 0)
        self.assertEqual(set(result.failed_components), {"tasks", "hours", "errors", "appreciations", "attendance"})

    def test_missing_employee_propagates(self) -> None:
        with self.assertRaises(NotFoundError):
            compute_health_score("404", TODAY, FakeDataSource(employee=None), HealthSettings())

    def test_employee_hours_override(self) -> None:
        employee = Employee(id="12", name="Asha Rao", expected_hours_per_day=1)
        hours = {"2026-07": 40.0, "2026-08": 40.0, "2026-09": 40.0}
        result = compute_health_score("12", TODAY, FakeDataSource(employee=employee, hours=hours), HealthSettings())
        self.assertEqual(result.calculations["hours"]["score"], 24)

    def test_components_fetch_concurrently(self) -> None:
        result = compute_health_score("12", TODAY, BarrierDataSource(), HealthSettings())
        self.assertEqual(result.failed_components, ())
        self.assertEqual(result.health_score, -19)

    def test_same_inputs_same_result(self) -> None:
        first = compute_health_score("12", TODAY, FakeDataSource(), HealthSettings())
        second = compute_health_score("12", TODAY, FakeDataSource(), HealthSettings())
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_to_dict_payload(self) -> None:
        payload = compute_health_score("12", TODAY, FakeDataSource(), HealthSettings()).to_dict()
        self.assertEqual(payload["employeeId"], "12")
        self.assertEqual(payload["period"], {"start": "2026-07-01", "end": "2026-10-18"})
        self.assertEqual(payload["cycles"]["data"]["end"], "2026-10-19")
        self.assertEqual(set(payload["cycles"]), {"hr", "data", "task"})
        self.assertNotIn("message", payload)


if __name__ == "__main__":
    unittest.main()
