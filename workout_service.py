from __future__ import annotations

import datetime
import logging

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
from exceptions import ConflictError

logger = logging.getLogger(__name__)

STALE_WORKOUT_HOURS = 4
ADHOC_SET_COUNT = 3


class WorkoutSessionService:
    """Owns the lifecycle of the single in-progress workout session."""

    def __init__(
        self,
        program_repo: ProgramRepository,
        day_repo: WorkoutDayRepository,
        exercise_repo: ExerciseRepository,
        day_exercise_repo: DayExerciseRepository,
        session_repo: SessionRepository,
        log_repo: ExerciseLogRepository,
        set_repo: SetLogRepository,
        stale_hours: float = STALE_WORKOUT_HOURS,
    ) -> None:
        self.programs = program_repo
        self.days = day_repo
        self.exercises = exercise_repo
        self.day_exercises = day_exercise_repo
        self.sessions = session_repo
        self.logs = log_repo
        self.sets = set_repo
        self.stale_hours = stale_hours

    def in_progress(self) -> dict | None:
        return self.sessions.fetch_in_progress()

    def start(self, day_id: int) -> dict:
        """Start a session for ``day_id`` pre-populated with empty sets."""
        if self.sessions.fetch_in_progress() is not None:
            raise ConflictError("A workout is already in progress")
        _did, program_id, day_name, _order = self.days.fetch_detail(day_id)
        _pid, program_name = self.programs.fetch_detail(program_id)

        session_id = self.sessions.create(program_id, day_id, program_name, day_name)
        for exercise_id, name, unit, sets_count, sort_order in self.day_exercises.fetch_for_day(day_id):
            log_id = self.logs.add(session_id, exercise_id, name, sort_order)
            self.sets.bulk_add_empty(log_id, sets_count, unit)
        logger.info(
            "Started session %s for %s / %s", session_id, program_name, day_name
        )
        return self.sessions.fetch_detail(session_id)

    def session_detail(self, session_id: int) -> dict:
        session = self.sessions.fetch_detail(session_id)
        logs = self.logs.fetch_for_session(session_id)
        for log in logs:
            log["sets"] = self.sets.fetch_for_log(log["id"])
        session["exercise_logs"] = logs
        return session

    def update_set(
        self, set_log_id: int, fields: dict, exercise_id: int | None = None
    ) -> dict:
        """Partially update a set.

        Keys missing from ``fields`` stay untouched while an explicit ``None``
        clears the value. When a unit is given along with ``exercise_id`` the
        exercise's unit preference is updated as a separate write.
        """
        updated = self.sets.update(set_log_id, fields)
        if fields.get("unit") is not None and exercise_id is not None:
            self.update_unit_preference(exercise_id, fields["unit"])
        return updated

    def update_unit_preference(self, exercise_id: int, unit: str) -> None:
        self.exercises.set_unit_preference(exercise_id, unit)

    def skip(self, exercise_log_id: int) -> dict:
        self.logs.set_status(exercise_log_id, "skipped")
        return self.logs.fetch_detail(exercise_log_id)

    def unskip(self, exercise_log_id: int) -> dict:
        self.logs.set_status(exercise_log_id, "logged")
        return self.logs.fetch_detail(exercise_log_id)

    def add_adhoc_exercise(self, session_id: int, name: str) -> dict:
        exercise_id = self.exercises.ensure(name)
        _eid, exercise_name, unit = self.exercises.fetch_detail(exercise_id)
        last = self.logs.max_position(session_id)
        position = last + 1 if last is not None else 0
        log_id = self.logs.add(
            session_id, exercise_id, exercise_name, position, is_adhoc=True
        )
        self.sets.bulk_add_empty(log_id, ADHOC_SET_COUNT, unit)
        logger.debug("Added ad-hoc exercise %r to session %s", name, session_id)
        return self.logs.fetch_detail(log_id)

    def add_set(self, exercise_log_id: int) -> dict:
        log = self.logs.fetch_detail(exercise_log_id)
        last = self.sets.max_set_number(exercise_log_id)
        set_number = last + 1 if last is not None else 1
        unit = self.exercises.unit_preference(log["exercise_id"])
        set_id = self.sets.add(exercise_log_id, set_number, unit)
        return self.sets.fetch_detail(set_id)

    def remove_set(self, set_log_id: int) -> None:
        self.sets.remove(set_log_id)

    def complete(self, session_id: int) -> dict:
        """Finish a session, or delete it when nothing was performed.

        Exercises without a single set carrying reps are marked skipped. A
        set with a weight but no reps does not count as performed; reps
        without a weight do. If no exercise is left logged the session and
        all of its logs are removed and ``{"cancelled": True}`` is returned.
        """
        self.sessions.fetch_detail(session_id)
        for log in self.logs.fetch_for_session(session_id, status="logged"):
            if self.sets.count_with_reps(log["id"]) == 0:
                self.logs.set_status(log["id"], "skipped")

        if not self.logs.fetch_for_session(session_id, status="logged"):
            self.sets.delete_for_session(session_id)
            self.logs.delete_for_session(session_id)
            self.sessions.delete(session_id)
            logger.info("Cancelled session %s: no exercise was performed", session_id)
            return {"cancelled": True, "session_id": session_id}

        self.sessions.mark_completed(session_id)
        logger.info("Completed session %s", session_id)
        session = self.sessions.fetch_detail(session_id)
        session["cancelled"] = False
        return session

    def close_stale(self, now: datetime.datetime | None = None) -> int:
        """Complete every in-progress session older than the staleness window."""
        now = now or datetime.datetime.now()
        cutoff = timestamp(now - datetime.timedelta(hours=self.stale_hours))
        stale = self.sessions.fetch_stale(cutoff)
        for session_id in stale:
            result = self.complete(session_id)
            logger.info(
                "Closed stale session %s (%s)",
                session_id,
                "cancelled" if result["cancelled"] else "completed",
            )
        return len(stale)
