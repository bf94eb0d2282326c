from __future__ import annotations

import datetime
from typing import Dict, List, Optional

from db import (
    DayExerciseRepository,
    SessionRepository,
    ExerciseLogRepository,
    SetLogRepository,
)
from exceptions import NotFoundError
from algorithms import WeightConverter


class WorkoutSummaryService:
    """Summaries, personal records and past performance for sessions."""

    def __init__(
        self,
        session_repo: SessionRepository,
        log_repo: ExerciseLogRepository,
        set_repo: SetLogRepository,
        day_exercise_repo: DayExerciseRepository | None = None,
    ) -> None:
        self.sessions = session_repo
        self.logs = log_repo
        self.sets = set_repo
        self.day_exercises = day_exercise_repo

    @staticmethod
    def _parse_timestamp(ts: str) -> datetime.datetime:
        return datetime.datetime.fromisoformat(ts)

    def summary(self, session_id: int) -> Optional[Dict]:
        """Return the aggregated summary of a session or ``None`` if missing."""
        try:
            session = self.sessions.fetch_detail(session_id)
        except NotFoundError:
            return None
        logs = self.logs.fetch_for_session(session_id)

        planned = [l for l in logs if not l["is_adhoc"]]
        skipped = [l for l in planned if l["status"] == "skipped"]

        weighted = self.sets.fetch_weighted_for_session(session_id)
        volume = 0.0
        for weight, reps, unit in weighted:
            volume += WeightConverter.to_kg(float(weight), unit) * (reps or 0)

        duration = None
        if session["completed_at"] and session["started_at"]:
            delta = self._parse_timestamp(session["completed_at"]) - self._parse_timestamp(
                session["started_at"]
            )
            duration = round(delta.total_seconds() / 60)

        return {
            "session_id": session["id"],
            "program_name": session["program_name"],
            "day_name": session["day_name"],
            "started_at": session["started_at"],
            "completed_at": session["completed_at"],
            "total_exercises": len(planned),
            "completed_exercises": len(planned) - len(skipped),
            "skipped_exercises": len(skipped),
            "total_sets": len(weighted),
            "total_volume": round(volume, 2),
            "duration_minutes": duration,
            "prs": self.personal_records(session_id, logs),
        }

    def personal_records(
        self, session_id: int, logs: Optional[List[dict]] = None
    ) -> List[Dict]:
        """Return PR entries of ``session_id``.

        The heaviest set of each logged exercise is compared against the
        heaviest set from any other completed session. Ties do not count.
        """
        if logs is None:
            logs = self.logs.fetch_for_session(session_id)
        prs: List[Dict] = []
        for log in logs:
            if log["status"] != "logged" or log["exercise_id"] is None:
                continue
            heaviest = self.sets.heaviest_for_log(log["id"])
            if heaviest is None:
                continue
            previous = self.sets.max_weight_excluding(log["exercise_id"], session_id)
            if previous is None or heaviest["weight"] > previous:
                prs.append(
                    {
                        "exercise_name": log["exercise_name"],
                        "weight": heaviest["weight"],
                        "reps": heaviest["reps"] or 0,
                        "unit": heaviest["unit"],
                    }
                )
        return prs

    def previous_performance(self, exercise_id: int) -> Optional[Dict]:
        last = self.sets.last_completed_log(exercise_id)
        if last is None:
            return None
        log_id, completed_at = last
        sets = [
            {"weight": s["weight"], "reps": s["reps"] or 0, "unit": s["unit"]}
            for s in self.sets.fetch_for_log(log_id)
            if s["weight"] is not None
        ]
        if not sets:
            return None
        return {"date": completed_at, "sets": sets}

    def max_performance(self, exercise_id: int) -> Optional[Dict]:
        row = self.sets.heaviest_for_exercise(exercise_id)
        if row is None:
            return None
        weight, reps, unit, completed_at = row
        return {"weight": weight, "reps": reps or 0, "unit": unit, "date": completed_at}

    def prescribed_set_counts(self, session_id: int) -> Dict[int, int]:
        """Map each exercise log of the session to its prescribed set count."""
        session = self.sessions.fetch_detail(session_id)
        if self.day_exercises is None or session["workout_day_id"] is None:
            return {}
        prescribed = {
            exercise_id: sets_count
            for exercise_id, _name, _unit, sets_count, _order in self.day_exercises.fetch_for_day(
                session["workout_day_id"]
            )
        }
        return {
            log["id"]: prescribed[log["exercise_id"]]
            for log in self.logs.fetch_for_session(session_id)
            if log["exercise_id"] in prescribed
        }

    def history(self, page: int = 1, limit: int = 20) -> Dict:
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")
        sessions = self.sessions.fetch_completed(limit, (page - 1) * limit)
        for session in sessions:
            logs = self.logs.fetch_for_session(session["id"])
            skipped = sum(1 for l in logs if l["status"] == "skipped")
            session["exercise_count"] = len(logs)
            session["completed_count"] = len(logs) - skipped
            session["skipped_count"] = skipped
        return {"sessions": sessions, "total": self.sessions.count_completed()}

    def completed_dates(self, since: datetime.date) -> List[str]:
        return self.sessions.completed_dates(since.isoformat())
