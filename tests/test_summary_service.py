import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import (
    ProgramRepository,
    WorkoutDayRepository,
    ExerciseRepository,
    DayExerciseRepository,
    SessionRepository,
    ExerciseLogRepository,
    SetLogRepository,
    timestamp,
)
from summary_service import WorkoutSummaryService
from workout_service import WorkoutSessionService


class SummaryServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_summary_service.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.programs = ProgramRepository(self.db_path)
        self.days = WorkoutDayRepository(self.db_path)
        self.exercises = ExerciseRepository(self.db_path)
        self.day_exercises = DayExerciseRepository(self.db_path)
        self.sessions = SessionRepository(self.db_path)
        self.logs = ExerciseLogRepository(self.db_path)
        self.sets = SetLogRepository(self.db_path)
        self.workouts = WorkoutSessionService(
            self.programs,
            self.days,
            self.exercises,
            self.day_exercises,
            self.sessions,
            self.logs,
            self.sets,
        )
        self.summaries = WorkoutSummaryService(
            self.sessions, self.logs, self.sets, self.day_exercises
        )
        program_id = self.programs.create("Strength")
        self.day_id = self.days.create(program_id, "Push")
        self.bench_id = self.exercises.ensure("Bench Press")
        self.press_id = self.exercises.ensure("Overhead Press")
        self.exercises.set_unit_preference(self.press_id, "lbs")
        self.day_exercises.add(self.day_id, self.bench_id, 2)
        self.day_exercises.add(self.day_id, self.press_id, 2)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def _session_logs(self, session_id):
        return self.workouts.session_detail(session_id)["exercise_logs"]

    def _bench_session(self, weight: float, reps: int = 5) -> int:
        session = self.workouts.start(self.day_id)
        bench = self._session_logs(session["id"])[0]
        self.workouts.update_set(bench["sets"][0]["id"], {"weight": weight, "reps": reps})
        self.workouts.complete(session["id"])
        return session["id"]

    def test_summary_counts_and_volume(self) -> None:
        session = self.workouts.start(self.day_id)
        bench, press = self._session_logs(session["id"])
        self.workouts.update_set(bench["sets"][0]["id"], {"weight": 100.0, "reps": 5})
        self.workouts.update_set(bench["sets"][1]["id"], {"weight": 100.0, "reps": 5})
        self.workouts.update_set(press["sets"][0]["id"], {"weight": 45.0, "reps": 10})
        # weighted set without reps adds a set but no volume
        self.workouts.update_set(press["sets"][1]["id"], {"weight": 50.0})
        self.workouts.complete(session["id"])

        summary = self.summaries.summary(session["id"])
        self.assertEqual(summary["program_name"], "Strength")
        self.assertEqual(summary["day_name"], "Push")
        self.assertEqual(summary["total_exercises"], 2)
        self.assertEqual(summary["completed_exercises"], 2)
        self.assertEqual(summary["skipped_exercises"], 0)
        self.assertEqual(summary["total_sets"], 4)
        self.assertEqual(summary["total_volume"], round(1000 + 45 * 0.453592 * 10, 2))

    def test_summary_excludes_adhoc_from_counts(self) -> None:
        session = self.workouts.start(self.day_id)
        bench = self._session_logs(session["id"])[0]
        self.workouts.update_set(bench["sets"][0]["id"], {"weight": 60.0, "reps": 8})
        adhoc = self.workouts.add_adhoc_exercise(session["id"], "Face Pull")
        adhoc_set = self.sets.fetch_for_log(adhoc["id"])[0]
        self.workouts.update_set(adhoc_set["id"], {"weight": 20.0, "reps": 12})
        self.workouts.complete(session["id"])

        summary = self.summaries.summary(session["id"])
        self.assertEqual(summary["total_exercises"], 2)
        self.assertEqual(summary["completed_exercises"], 1)
        self.assertEqual(summary["skipped_exercises"], 1)
        self.assertEqual(summary["total_sets"], 2)
        self.assertEqual(summary["total_volume"], 720.0)

    def test_summary_duration(self) -> None:
        session_id = self._bench_session(80.0)
        completed = datetime.datetime.fromisoformat(
            self.sessions.fetch_detail(session_id)["completed_at"]
        )
        self.sessions.set_started_at(
            session_id, timestamp(completed - datetime.timedelta(minutes=45, seconds=20))
        )
        self.assertEqual(self.summaries.summary(session_id)["duration_minutes"], 45)

    def test_summary_missing_session(self) -> None:
        self.assertIsNone(self.summaries.summary(99))

    def test_personal_records_progression(self) -> None:
        first = self._bench_session(80.0)
        self.assertEqual(
            self.summaries.summary(first)["prs"],
            [{"exercise_name": "Bench Press", "weight": 80.0, "reps": 5, "unit": "kg"}],
        )

        second = self._bench_session(75.0)
        self.assertEqual(self.summaries.summary(second)["prs"], [])

        third = self._bench_session(85.0, reps=3)
        prs = self.summaries.summary(third)["prs"]
        self.assertEqual(len(prs), 1)
        self.assertEqual(prs[0]["weight"], 85.0)
        self.assertEqual(prs[0]["reps"], 3)

    def test_tie_is_not_a_record(self) -> None:
        self._bench_session(80.0)
        tied = self._bench_session(80.0)
        self.assertEqual(self.summaries.summary(tied)["prs"], [])

    def test_skipped_exercise_has_no_record(self) -> None:
        session = self.workouts.start(self.day_id)
        bench, press = self._session_logs(session["id"])
        self.workouts.update_set(bench["sets"][0]["id"], {"weight": 80.0, "reps": 5})
        self.workouts.update_set(press["sets"][0]["id"], {"weight": 40.0, "reps": 5})
        self.workouts.skip(press["id"])
        self.workouts.complete(session["id"])
        names = [p["exercise_name"] for p in self.summaries.summary(session["id"])["prs"]]
        self.assertEqual(names, ["Bench Press"])

    def test_previous_and_max_performance(self) -> None:
        self.assertIsNone(self.summaries.previous_performance(self.bench_id))
        self.assertIsNone(self.summaries.max_performance(self.bench_id))

        self._bench_session(90.0, reps=3)
        self._bench_session(70.0, reps=10)

        previous = self.summaries.previous_performance(self.bench_id)
        self.assertEqual(previous["sets"], [{"weight": 70.0, "reps": 10, "unit": "kg"}])
        best = self.summaries.max_performance(self.bench_id)
        self.assertEqual((best["weight"], best["reps"], best["unit"]), (90.0, 3, "kg"))

    def test_prescribed_set_counts(self) -> None:
        session = self.workouts.start(self.day_id)
        bench, press = self._session_logs(session["id"])
        self.workouts.add_set(bench["id"])
        counts = self.summaries.prescribed_set_counts(session["id"])
        self.assertEqual(counts, {bench["id"]: 2, press["id"]: 2})

    def test_history_pagination(self) -> None:
        ids = [self._bench_session(60.0 + i) for i in range(3)]
        page = self.summaries.history(page=1, limit=2)
        self.assertEqual(page["total"], 3)
        self.assertEqual(len(page["sessions"]), 2)
        self.assertEqual(page["sessions"][0]["exercise_count"], 2)
        self.assertEqual(page["sessions"][0]["completed_count"], 1)
        self.assertEqual(page["sessions"][0]["skipped_count"], 1)
        rest = self.summaries.history(page=2, limit=2)
        returned = {s["id"] for s in page["sessions"] + rest["sessions"]}
        self.assertEqual(returned, set(ids))
        with self.assertRaises(ValueError):
            self.summaries.history(page=0)

    def test_completed_dates(self) -> None:
        self._bench_session(60.0)
        today = datetime.date.today()
        self.assertEqual(self.summaries.completed_dates(today), [today.isoformat()])
        self.assertEqual(
            self.summaries.completed_dates(today + datetime.timedelta(days=1)), []
        )


if __name__ == "__main__":
    unittest.main()
