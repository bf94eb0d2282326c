import sqlite3
import aiosqlite
import datetime
from contextlib import contextmanager, asynccontextmanager
from typing import List, Tuple, Optional

from exceptions import NotFoundError

UNITS = ("kg", "lbs")
EXERCISE_STATUSES = ("logged", "skipped")


def timestamp(moment: Optional[datetime.datetime] = None) -> str:
    """Return ``moment`` (default now) in the ISO format stored in the database."""
    return (moment or datetime.datetime.now()).isoformat(timespec="seconds")


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "programs": (
            """CREATE TABLE programs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );""",
            ["id", "name", "created_at"],
        ),
        "workout_days": (
            """CREATE TABLE workout_days (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    program_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    sort_order INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(program_id) REFERENCES programs(id) ON DELETE CASCADE
                );""",
            ["id", "program_id", "name", "sort_order"],
        ),
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    unit_preference TEXT NOT NULL DEFAULT 'kg'
                );""",
            ["id", "name", "unit_preference"],
        ),
        "day_exercises": (
            """CREATE TABLE day_exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_day_id INTEGER NOT NULL,
                    exercise_id INTEGER NOT NULL,
                    sets_count INTEGER NOT NULL DEFAULT 3,
                    sort_order INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(workout_day_id) REFERENCES workout_days(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id)
                );""",
            ["id", "workout_day_id", "exercise_id", "sets_count", "sort_order"],
        ),
        "workout_sessions": (
            """CREATE TABLE workout_sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    program_id INTEGER,
                    workout_day_id INTEGER,
                    program_name TEXT NOT NULL,
                    day_name TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'in_progress',
                    started_at TEXT NOT NULL,
                    completed_at TEXT,
                    FOREIGN KEY(program_id) REFERENCES programs(id) ON DELETE SET NULL,
                    FOREIGN KEY(workout_day_id) REFERENCES workout_days(id) ON DELETE SET NULL
                );""",
            [
                "id",
                "program_id",
                "workout_day_id",
                "program_name",
                "day_name",
                "status",
                "started_at",
                "completed_at",
            ],
        ),
        "exercise_logs": (
            """CREATE TABLE exercise_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id INTEGER NOT NULL,
                    exercise_id INTEGER,
                    exercise_name TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'logged',
                    is_adhoc INTEGER NOT NULL DEFAULT 0,
                    sort_order INTEGER NOT NULL,
                    FOREIGN KEY(session_id) REFERENCES workout_sessions(id) ON DELETE CASCADE,
                    FOREIGN KEY(exercise_id) REFERENCES exercises(id) ON DELETE SET NULL
                );""",
            [
                "id",
                "session_id",
                "exercise_id",
                "exercise_name",
                "status",
                "is_adhoc",
                "sort_order",
            ],
        ),
        "set_logs": (
            """CREATE TABLE set_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    exercise_log_id INTEGER NOT NULL,
                    set_number INTEGER NOT NULL,
                    weight REAL,
                    reps INTEGER,
                    unit TEXT NOT NULL DEFAULT 'kg',
                    FOREIGN KEY(exercise_log_id) REFERENCES exercise_logs(id) ON DELETE CASCADE
                );""",
            ["id", "exercise_log_id", "set_number", "weight", "reps", "unit"],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        connection.execute("PRAGMA foreign_keys=on;")
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            cursor.execute("PRAGMA foreign_keys=on;")

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col in ("unit", "unit_preference"):
                        return "'kg'"
                    if col == "status":
                        return "'logged'" if table == "exercise_logs" else "'in_progress'"
                    if col in ("sort_order", "is_adhoc", "retry_count"):
                        return "0"
                    if col == "sets_count":
                        return "3"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


class AsyncDatabase(Database):
    """Provides asynchronous connection management."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
            await conn.commit()
        finally:
            await conn.close()


class AsyncBaseRepository(AsyncDatabase):
    """Asynchronous variant of BaseRepository using aiosqlite."""

    async def execute(self, query: str, params: Tuple = ()) -> int:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.lastrowid

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return rows

    async def _delete_all(self, table: str) -> None:
        await self.execute(f"DELETE FROM {table};")


class ProgramRepository(BaseRepository):
    """Repository for training programs."""

    def create(self, name: str) -> int:
        return self.execute(
            "INSERT INTO programs (name, created_at) VALUES (?, ?);",
            (name, timestamp()),
        )

    def fetch_detail(self, program_id: int) -> Tuple[int, str]:
        rows = self.fetch_all(
            "SELECT id, name FROM programs WHERE id = ?;", (program_id,)
        )
        if not rows:
            raise NotFoundError("program not found")
        return rows[0]

    def rename(self, program_id: int, name: str) -> None:
        self.fetch_detail(program_id)
        self.execute("UPDATE programs SET name = ? WHERE id = ?;", (name, program_id))

    def delete(self, program_id: int) -> None:
        self.fetch_detail(program_id)
        self.execute("DELETE FROM programs WHERE id = ?;", (program_id,))


class WorkoutDayRepository(BaseRepository):
    """Repository for the days of a program."""

    def create(self, program_id: int, name: str, sort_order: int | None = None) -> int:
        if sort_order is None:
            rows = self.fetch_all(
                "SELECT COALESCE(MAX(sort_order), -1) + 1 FROM workout_days WHERE program_id = ?;",
                (program_id,),
            )
            sort_order = int(rows[0][0])
        return self.execute(
            "INSERT INTO workout_days (program_id, name, sort_order) VALUES (?, ?, ?);",
            (program_id, name, sort_order),
        )

    def fetch_detail(self, day_id: int) -> Tuple[int, int, str, int]:
        rows = self.fetch_all(
            "SELECT id, program_id, name, sort_order FROM workout_days WHERE id = ?;",
            (day_id,),
        )
        if not rows:
            raise NotFoundError("workout day not found")
        return rows[0]


class ExerciseRepository(BaseRepository):
    """Repository for the exercise library."""

    def ensure(self, name: str) -> int:
        """Return the id of exercise ``name``, creating it when missing."""
        name = name.strip()
        if not name:
            raise ValueError("exercise name must be a non-empty string")
        self.execute("INSERT OR IGNORE INTO exercises (name) VALUES (?);", (name,))
        rows = self.fetch_all("SELECT id FROM exercises WHERE name = ?;", (name,))
        return int(rows[0][0])

    def fetch_by_name(self, name: str) -> Optional[Tuple[int, str, str]]:
        rows = self.fetch_all(
            "SELECT id, name, unit_preference FROM exercises WHERE name = ?;",
            (name,),
        )
        return rows[0] if rows else None

    def fetch_detail(self, exercise_id: int) -> Tuple[int, str, str]:
        rows = self.fetch_all(
            "SELECT id, name, unit_preference FROM exercises WHERE id = ?;",
            (exercise_id,),
        )
        if not rows:
            raise NotFoundError("exercise not found")
        return rows[0]

    def unit_preference(self, exercise_id: int | None) -> str:
        if exercise_id is None:
            return "kg"
        rows = self.fetch_all(
            "SELECT unit_preference FROM exercises WHERE id = ?;", (exercise_id,)
        )
        return rows[0][0] if rows else "kg"

    def set_unit_preference(self, exercise_id: int, unit: str) -> None:
        if unit not in UNITS:
            raise ValueError("unit must be kg or lbs")
        self.execute(
            "UPDATE exercises SET unit_preference = ? WHERE id = ?;",
            (unit, exercise_id),
        )

    def rename(self, exercise_id: int, name: str) -> None:
        self.fetch_detail(exercise_id)
        self.execute("UPDATE exercises SET name = ? WHERE id = ?;", (name, exercise_id))

    def delete(self, exercise_id: int) -> None:
        self.fetch_detail(exercise_id)
        self.execute("DELETE FROM day_exercises WHERE exercise_id = ?;", (exercise_id,))
        self.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,))


class DayExerciseRepository(BaseRepository):
    """Repository for the exercises prescribed on a workout day."""

    def add(
        self,
        day_id: int,
        exercise_id: int,
        sets_count: int = 3,
        sort_order: int | None = None,
    ) -> int:
        if sets_count < 0:
            raise ValueError("sets_count must be non-negative")
        if sort_order is None:
            rows = self.fetch_all(
                "SELECT COALESCE(MAX(sort_order), -1) + 1 FROM day_exercises WHERE workout_day_id = ?;",
                (day_id,),
            )
            sort_order = int(rows[0][0])
        return self.execute(
            "INSERT INTO day_exercises (workout_day_id, exercise_id, sets_count, sort_order) VALUES (?, ?, ?, ?);",
            (day_id, exercise_id, sets_count, sort_order),
        )

    def fetch_for_day(self, day_id: int) -> List[Tuple[int, str, str, int, int]]:
        """Return ``(exercise_id, name, unit_preference, sets_count, sort_order)`` rows."""
        return self.fetch_all(
            "SELECT de.exercise_id, e.name, e.unit_preference, de.sets_count, de.sort_order "
            "FROM day_exercises de JOIN exercises e ON e.id = de.exercise_id "
            "WHERE de.workout_day_id = ? ORDER BY de.sort_order, de.id;",
            (day_id,),
        )


class SessionRepository(BaseRepository):
    """Repository for workout sessions."""

    _COLUMNS = (
        "id",
        "program_id",
        "workout_day_id",
        "program_name",
        "day_name",
        "status",
        "started_at",
        "completed_at",
    )

    def _to_dict(self, row: Tuple) -> dict:
        return dict(zip(self._COLUMNS, row))

    def create(
        self,
        program_id: int | None,
        workout_day_id: int | None,
        program_name: str,
        day_name: str,
        started_at: str | None = None,
    ) -> int:
        return self.execute(
            "INSERT INTO workout_sessions (program_id, workout_day_id, program_name, day_name, status, started_at) "
            "VALUES (?, ?, ?, ?, 'in_progress', ?);",
            (program_id, workout_day_id, program_name, day_name, started_at or timestamp()),
        )

    def fetch_detail(self, session_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {', '.join(self._COLUMNS)} FROM workout_sessions WHERE id = ?;",
            (session_id,),
        )
        if not rows:
            raise NotFoundError("workout session not found")
        return self._to_dict(rows[0])

    def fetch_in_progress(self) -> dict | None:
        rows = self.fetch_all(
            f"SELECT {', '.join(self._COLUMNS)} FROM workout_sessions "
            "WHERE status = 'in_progress' ORDER BY id LIMIT 1;"
        )
        return self._to_dict(rows[0]) if rows else None

    def fetch_stale(self, cutoff: str) -> List[int]:
        rows = self.fetch_all(
            "SELECT id FROM workout_sessions WHERE status = 'in_progress' AND started_at < ? ORDER BY id;",
            (cutoff,),
        )
        return [int(r[0]) for r in rows]

    def set_started_at(self, session_id: int, started_at: str) -> None:
        self.execute(
            "UPDATE workout_sessions SET started_at = ? WHERE id = ?;",
            (started_at, session_id),
        )

    def mark_completed(self, session_id: int, completed_at: str | None = None) -> None:
        self.execute(
            "UPDATE workout_sessions SET status = 'completed', completed_at = ? WHERE id = ?;",
            (completed_at or timestamp(), session_id),
        )

    def delete(self, session_id: int) -> None:
        self.execute("DELETE FROM workout_sessions WHERE id = ?;", (session_id,))

    def fetch_completed(self, limit: int = 20, offset: int = 0) -> List[dict]:
        rows = self.fetch_all(
            f"SELECT {', '.join(self._COLUMNS)} FROM workout_sessions WHERE status = 'completed' "
            "ORDER BY completed_at DESC, id DESC LIMIT ? OFFSET ?;",
            (limit, offset),
        )
        return [self._to_dict(r) for r in rows]

    def count_completed(self) -> int:
        rows = self.fetch_all(
            "SELECT COUNT(*) FROM workout_sessions WHERE status = 'completed';"
        )
        return int(rows[0][0])

    def completed_dates(self, since: str) -> List[str]:
        rows = self.fetch_all(
            "SELECT substr(completed_at, 1, 10) FROM workout_sessions "
            "WHERE status = 'completed' AND completed_at IS NOT NULL AND completed_at >= ? "
            "ORDER BY completed_at;",
            (since,),
        )
        return [r[0] for r in rows]


class ExerciseLogRepository(BaseRepository):
    """Repository for the exercises performed within a session."""

    _COLUMNS = (
        "id",
        "session_id",
        "exercise_id",
        "exercise_name",
        "status",
        "is_adhoc",
        "sort_order",
    )

    def _to_dict(self, row: Tuple) -> dict:
        data = dict(zip(self._COLUMNS, row))
        data["is_adhoc"] = bool(data["is_adhoc"])
        return data

    def add(
        self,
        session_id: int,
        exercise_id: int | None,
        exercise_name: str,
        sort_order: int,
        is_adhoc: bool = False,
    ) -> int:
        return self.execute(
            "INSERT INTO exercise_logs (session_id, exercise_id, exercise_name, status, is_adhoc, sort_order) "
            "VALUES (?, ?, ?, 'logged', ?, ?);",
            (session_id, exercise_id, exercise_name, int(is_adhoc), sort_order),
        )

    def fetch_detail(self, log_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {', '.join(self._COLUMNS)} FROM exercise_logs WHERE id = ?;",
            (log_id,),
        )
        if not rows:
            raise NotFoundError("exercise log not found")
        return self._to_dict(rows[0])

    def fetch_for_session(self, session_id: int, status: str | None = None) -> List[dict]:
        query = f"SELECT {', '.join(self._COLUMNS)} FROM exercise_logs WHERE session_id = ?"
        params: list = [session_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY sort_order, id;"
        return [self._to_dict(r) for r in self.fetch_all(query, tuple(params))]

    def set_status(self, log_id: int, status: str) -> None:
        if status not in EXERCISE_STATUSES:
            raise ValueError("status must be logged or skipped")
        self.fetch_detail(log_id)
        self.execute(
            "UPDATE exercise_logs SET status = ? WHERE id = ?;", (status, log_id)
        )

    def max_position(self, session_id: int) -> int | None:
        rows = self.fetch_all(
            "SELECT MAX(sort_order) FROM exercise_logs WHERE session_id = ?;",
            (session_id,),
        )
        return int(rows[0][0]) if rows and rows[0][0] is not None else None

    def delete_for_session(self, session_id: int) -> None:
        self.execute("DELETE FROM exercise_logs WHERE session_id = ?;", (session_id,))


class SetLogRepository(BaseRepository):
    """Repository for the sets of an exercise log."""

    _COLUMNS = ("id", "exercise_log_id", "set_number", "weight", "reps", "unit")
    _UPDATABLE = ("weight", "reps", "unit")

    def _to_dict(self, row: Tuple) -> dict:
        return dict(zip(self._COLUMNS, row))

    def add(
        self,
        exercise_log_id: int,
        set_number: int,
        unit: str = "kg",
        weight: float | None = None,
        reps: int | None = None,
    ) -> int:
        return self.execute(
            "INSERT INTO set_logs (exercise_log_id, set_number, weight, reps, unit) VALUES (?, ?, ?, ?, ?);",
            (exercise_log_id, set_number, weight, reps, unit),
        )

    def bulk_add_empty(self, exercise_log_id: int, count: int, unit: str) -> list[int]:
        return [self.add(exercise_log_id, number, unit) for number in range(1, count + 1)]

    def fetch_detail(self, set_id: int) -> dict:
        rows = self.fetch_all(
            f"SELECT {', '.join(self._COLUMNS)} FROM set_logs WHERE id = ?;",
            (set_id,),
        )
        if not rows:
            raise NotFoundError("set not found")
        return self._to_dict(rows[0])

    def fetch_for_log(self, exercise_log_id: int) -> List[dict]:
        rows = self.fetch_all(
            f"SELECT {', '.join(self._COLUMNS)} FROM set_logs WHERE exercise_log_id = ? "
            "ORDER BY set_number, id;",
            (exercise_log_id,),
        )
        return [self._to_dict(r) for r in rows]

    def update(self, set_id: int, fields: dict) -> dict:
        """Apply a partial update; keys absent from ``fields`` are left untouched."""
        unknown = set(fields) - set(self._UPDATABLE)
        if unknown:
            raise ValueError(f"unknown set fields: {', '.join(sorted(unknown))}")
        if "unit" in fields and fields["unit"] not in UNITS:
            raise ValueError("unit must be kg or lbs")
        self.fetch_detail(set_id)
        if fields:
            assignments = ", ".join(f"{col} = ?" for col in fields)
            self.execute(
                f"UPDATE set_logs SET {assignments} WHERE id = ?;",
                tuple(fields.values()) + (set_id,),
            )
        return self.fetch_detail(set_id)

    def remove(self, set_id: int) -> None:
        self.fetch_detail(set_id)
        self.execute("DELETE FROM set_logs WHERE id = ?;", (set_id,))

    def max_set_number(self, exercise_log_id: int) -> int | None:
        rows = self.fetch_all(
            "SELECT MAX(set_number) FROM set_logs WHERE exercise_log_id = ?;",
            (exercise_log_id,),
        )
        return int(rows[0][0]) if rows and rows[0][0] is not None else None

    def count_with_reps(self, exercise_log_id: int) -> int:
        rows = self.fetch_all(
            "SELECT COUNT(*) FROM set_logs WHERE exercise_log_id = ? AND reps IS NOT NULL;",
            (exercise_log_id,),
        )
        return int(rows[0][0])

    def delete_for_session(self, session_id: int) -> None:
        self.execute(
            "DELETE FROM set_logs WHERE exercise_log_id IN "
            "(SELECT id FROM exercise_logs WHERE session_id = ?);",
            (session_id,),
        )

    def fetch_weighted_for_session(self, session_id: int) -> List[Tuple[float, int | None, str]]:
        """Return ``(weight, reps, unit)`` of weighted sets in logged exercises."""
        return self.fetch_all(
            "SELECT s.weight, s.reps, s.unit FROM set_logs s "
            "JOIN exercise_logs l ON l.id = s.exercise_log_id "
            "WHERE l.session_id = ? AND l.status = 'logged' AND s.weight IS NOT NULL "
            "ORDER BY l.sort_order, s.set_number;",
            (session_id,),
        )

    def heaviest_for_log(self, exercise_log_id: int) -> dict | None:
        rows = self.fetch_all(
            f"SELECT {', '.join(self._COLUMNS)} FROM set_logs "
            "WHERE exercise_log_id = ? AND weight IS NOT NULL "
            "ORDER BY weight DESC, set_number LIMIT 1;",
            (exercise_log_id,),
        )
        return self._to_dict(rows[0]) if rows else None

    def max_weight_excluding(self, exercise_id: int, session_id: int) -> float | None:
        """Heaviest weight for ``exercise_id`` in completed sessions other than ``session_id``."""
        rows = self.fetch_all(
            "SELECT MAX(s.weight) FROM set_logs s "
            "JOIN exercise_logs l ON l.id = s.exercise_log_id "
            "JOIN workout_sessions w ON w.id = l.session_id "
            "WHERE l.exercise_id = ? AND l.status = 'logged' AND w.status = 'completed' "
            "AND s.weight IS NOT NULL AND w.id != ?;",
            (exercise_id, session_id),
        )
        return float(rows[0][0]) if rows and rows[0][0] is not None else None

    def heaviest_for_exercise(self, exercise_id: int) -> Tuple | None:
        """Return ``(weight, reps, unit, completed_at)`` of the heaviest completed set."""
        rows = self.fetch_all(
            "SELECT s.weight, s.reps, s.unit, w.completed_at FROM set_logs s "
            "JOIN exercise_logs l ON l.id = s.exercise_log_id "
            "JOIN workout_sessions w ON w.id = l.session_id "
            "WHERE l.exercise_id = ? AND l.status = 'logged' AND w.status = 'completed' "
            "AND s.weight IS NOT NULL ORDER BY s.weight DESC, w.completed_at DESC LIMIT 1;",
            (exercise_id,),
        )
        return rows[0] if rows else None

    def last_completed_log(self, exercise_id: int) -> Tuple[int, str] | None:
        """Return ``(exercise_log_id, completed_at)`` of the latest completed performance."""
        rows = self.fetch_all(
            "SELECT l.id, w.completed_at FROM exercise_logs l "
            "JOIN workout_sessions w ON w.id = l.session_id "
            "WHERE l.exercise_id = ? AND l.status = 'logged' AND w.status = 'completed' "
            "AND w.completed_at IS NOT NULL "
            "ORDER BY w.completed_at DESC, w.id DESC LIMIT 1;",
            (exercise_id,),
        )
        return rows[0] if rows else None
