import datetime
import logging
import threading
from typing import Any
from fastapi import FastAPI, HTTPException, Body
from fastapi.responses import JSONResponse

from config import load_settings
from db import (
    ProgramRepository,
    WorkoutDayRepository,
    ExerciseRepository,
    DayExerciseRepository,
    SessionRepository,
    ExerciseLogRepository,
    SetLogRepository,
)
from exceptions import ConflictError, NotFoundError
from summary_service import WorkoutSummaryService
from sync_schemas import ActionKind, ActionPayload, parse_action
from workout_service import WorkoutSessionService

logger = logging.getLogger(__name__)


class StaleSessionSweeper(threading.Thread):
    """Background thread closing sessions left in progress for too long."""

    def __init__(self, api: "WorkoutAPI", interval_minutes: float = 15) -> None:
        super().__init__(daemon=True)
        self.api = api
        self.interval = interval_minutes * 60
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.api.close_stale_sessions()
            except Exception:
                logger.exception("Stale session sweep failed")
            self._stop_event.wait(self.interval)

    def stop(self) -> None:
        self._stop_event.set()


class WorkoutAPI:
    """Provides the sync mutation endpoint and workout session routes."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
        *,
        start_sweeper: bool = False,
    ) -> None:
        self.db_path = db_path
        self.settings = load_settings(yaml_path)
        self.programs = ProgramRepository(db_path)
        self.days = WorkoutDayRepository(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.day_exercises = DayExerciseRepository(db_path)
        self.sessions = SessionRepository(db_path)
        self.exercise_logs = ExerciseLogRepository(db_path)
        self.set_logs = SetLogRepository(db_path)
        self.workouts = WorkoutSessionService(
            self.programs,
            self.days,
            self.exercises,
            self.day_exercises,
            self.sessions,
            self.exercise_logs,
            self.set_logs,
            stale_hours=self.settings.stale_workout_hours,
        )
        self.summaries = WorkoutSummaryService(
            self.sessions,
            self.exercise_logs,
            self.set_logs,
            self.day_exercises,
        )
        # one mutation at a time keeps set numbering and positions consistent
        self._mutation_lock = threading.Lock()
        self.app = FastAPI(
            title="Workout API",
            description="Workout session tracking with offline sync",
        )
        self.sweeper: StaleSessionSweeper | None = None
        if start_sweeper:
            self.sweeper = StaleSessionSweeper(
                self, self.settings.sweep_interval_minutes
            )
            self.sweeper.start()
        self._setup_routes()

    def close_stale_sessions(self, now: datetime.datetime | None = None) -> int:
        with self._mutation_lock:
            return self.workouts.close_stale(now)

    def apply_action(self, kind: ActionKind, payload: ActionPayload) -> None:
        """Forward a validated sync action to the session state machine."""
        service = self.workouts
        if kind is ActionKind.UPDATE_SET:
            service.update_set(
                payload.set_log_id, payload.fields(), payload.unit_exercise_id()
            )
        elif kind is ActionKind.SKIP_EXERCISE:
            service.skip(payload.exercise_log_id)
        elif kind is ActionKind.UNSKIP_EXERCISE:
            service.unskip(payload.exercise_log_id)
        elif kind is ActionKind.COMPLETE_WORKOUT:
            service.complete(payload.session_id)
        elif kind is ActionKind.ADD_ADHOC:
            service.add_adhoc_exercise(payload.session_id, payload.exercise_name)
        elif kind is ActionKind.ADD_SET:
            service.add_set(payload.exercise_log_id)
        elif kind is ActionKind.REMOVE_SET:
            service.remove_set(payload.set_log_id)
        elif kind is ActionKind.UPDATE_UNIT:
            service.update_unit_preference(payload.exercise_id, payload.unit)
        elif kind is ActionKind.SAVE_EXERCISE:
            unit = None
            for item in payload.sets:
                if item.is_placeholder():
                    continue
                fields = {"weight": item.weight, "reps": item.reps}
                if item.unit is not None:
                    fields["unit"] = item.unit
                service.update_set(item.set_log_id, fields)
                unit = item.unit
            if unit and payload.exercise_id is not None and payload.exercise_id > 0:
                service.update_unit_preference(payload.exercise_id, unit)

    def _setup_routes(self) -> None:
        @self.app.get("/health")
        def health():
            """Return API and database connection status."""
            try:
                self.sessions.fetch_in_progress()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.post("/api/sync")
        def sync_action(body: Any = Body(None)):
            if not isinstance(body, dict):
                return JSONResponse(
                    {"success": False, "error": "request body must be an object"},
                    status_code=400,
                )
            try:
                kind, payload = parse_action(
                    body.get("action"), body.get("payload") or {}
                )
            except ValueError as e:
                return JSONResponse(
                    {"success": False, "error": str(e)}, status_code=400
                )
            if payload.is_placeholder():
                logger.debug("Skipping %s for offline placeholder", kind.value)
                return {"success": True}
            try:
                with self._mutation_lock:
                    self.apply_action(kind, payload)
            except NotFoundError as e:
                return JSONResponse(
                    {"success": False, "error": str(e)}, status_code=404
                )
            except Exception as e:
                logger.exception("Sync action %s failed", kind.value)
                return JSONResponse(
                    {"success": False, "error": str(e)}, status_code=500
                )
            return {"success": True}

        @self.app.post("/programs")
        def create_program(name: str):
            return {"id": self.programs.create(name)}

        @self.app.post("/programs/{program_id}/days")
        def create_day(program_id: int, name: str):
            try:
                self.programs.fetch_detail(program_id)
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"id": self.days.create(program_id, name)}

        @self.app.post("/days/{day_id}/exercises")
        def add_day_exercise(day_id: int, name: str, sets_count: int = 3):
            try:
                self.days.fetch_detail(day_id)
                exercise_id = self.exercises.ensure(name)
                de_id = self.day_exercises.add(day_id, exercise_id, sets_count)
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": de_id, "exercise_id": exercise_id}

        @self.app.post("/workouts/start")
        def start_workout(day_id: int):
            try:
                with self._mutation_lock:
                    self.workouts.close_stale()
                    return self.workouts.start(day_id)
            except ConflictError as e:
                raise HTTPException(status_code=409, detail=str(e))
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @self.app.get("/workouts/in_progress")
        def in_progress_workout():
            self.close_stale_sessions()
            return {"session": self.workouts.in_progress()}

        @self.app.get("/workouts/{session_id}")
        def get_workout(session_id: int):
            try:
                detail = self.workouts.session_detail(session_id)
                detail["prescribed_set_counts"] = self.summaries.prescribed_set_counts(
                    session_id
                )
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return detail

        @self.app.post("/workouts/{session_id}/complete")
        def complete_workout(session_id: int):
            try:
                with self._mutation_lock:
                    return self.workouts.complete(session_id)
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @self.app.get("/workouts/{session_id}/summary")
        def workout_summary(session_id: int):
            summary = self.summaries.summary(session_id)
            if summary is None:
                raise HTTPException(status_code=404, detail="workout session not found")
            return summary

        @self.app.get("/history")
        def history(page: int = 1, limit: int = 20):
            try:
                return self.summaries.history(page, limit)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.get("/exercises/{exercise_id}/performance")
        def exercise_performance(exercise_id: int):
            return {
                "previous": self.summaries.previous_performance(exercise_id),
                "max": self.summaries.max_performance(exercise_id),
            }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(WorkoutAPI(start_sweeper=True).app)
