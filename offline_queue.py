"""Durable client-side log of mutations waiting to reach the server."""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import List

from db import AsyncBaseRepository
from sync_schemas import ActionKind

logger = logging.getLogger(__name__)


@dataclass
class QueuedAction:
    """A mutation the user performed that the server has not confirmed yet."""

    action: ActionKind
    payload: dict
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))
    retry_count: int = 0


class ActionQueue(AsyncBaseRepository):
    """Persistent, ordered queue of :class:`QueuedAction` records.

    Records live in their own SQLite file so they survive restarts. Ordering
    is by creation timestamp, then insertion order.
    """

    _TABLE_DEFINITIONS = {
        "queued_actions": (
            """CREATE TABLE queued_actions (
                    id TEXT PRIMARY KEY,
                    timestamp INTEGER NOT NULL,
                    action TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    retry_count INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "timestamp", "action", "payload", "retry_count"],
        ),
    }

    def __init__(self, db_path: str = "offline_queue.db") -> None:
        super().__init__(db_path)

    async def enqueue(self, kind: ActionKind | str, payload: dict) -> str:
        entry = QueuedAction(ActionKind(kind), dict(payload))
        await self.execute(
            "INSERT INTO queued_actions (id, timestamp, action, payload, retry_count) VALUES (?, ?, ?, ?, 0);",
            (entry.id, entry.timestamp, entry.action.value, json.dumps(entry.payload)),
        )
        logger.debug("Queued %s as %s", entry.action.value, entry.id)
        return entry.id

    async def list_all(self) -> List[QueuedAction]:
        rows = await self.fetch_all(
            "SELECT id, timestamp, action, payload, retry_count FROM queued_actions "
            "ORDER BY timestamp, rowid;"
        )
        return [
            QueuedAction(
                action=ActionKind(action),
                payload=json.loads(payload),
                id=aid,
                timestamp=int(ts),
                retry_count=int(retries),
            )
            for aid, ts, action, payload, retries in rows
        ]

    async def remove(self, action_id: str) -> None:
        await self.execute("DELETE FROM queued_actions WHERE id = ?;", (action_id,))

    async def increment_retry(self, action_id: str) -> int:
        """Bump the retry counter and return its new value (0 if the id is gone)."""
        await self.execute(
            "UPDATE queued_actions SET retry_count = retry_count + 1 WHERE id = ?;",
            (action_id,),
        )
        rows = await self.fetch_all(
            "SELECT retry_count FROM queued_actions WHERE id = ?;", (action_id,)
        )
        return int(rows[0][0]) if rows else 0

    async def count(self) -> int:
        rows = await self.fetch_all("SELECT COUNT(*) FROM queued_actions;")
        return int(rows[0][0])

    async def clear(self) -> None:
        await self._delete_all("queued_actions")
