"""Replays queued mutations against the server's sync endpoint."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable, Dict, List, Optional

from offline_queue import ActionQueue, QueuedAction
from sync_schemas import ActionKind

logger = logging.getLogger(__name__)

MAX_RETRY_COUNT = 10
SYNC_INTERVAL_SECONDS = 30.0


class SyncEngine:
    """Drain an :class:`ActionQueue` through a transport, one cycle at a time.

    ``transport`` is any object with a blocking ``send_action(action, payload)``
    returning a response that carries ``status_code``, such as
    :class:`client.WorkoutClient`. Calls run in a worker thread so the event
    loop stays responsive, but actions are sent strictly one after another.
    """

    def __init__(
        self,
        queue: ActionQueue,
        transport: Any,
        *,
        max_retries: int = MAX_RETRY_COUNT,
        interval: float = SYNC_INTERVAL_SECONDS,
        online: bool = True,
    ) -> None:
        self.queue = queue
        self.transport = transport
        self.max_retries = max_retries
        self.interval = interval
        self.pending_count = 0
        self._online = online
        self._syncing = False
        self._listeners: List[Callable[[int], None]] = []
        self._periodic_task: Optional[asyncio.Task] = None

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    @property
    def is_online(self) -> bool:
        return self._online

    def on_pending_change(self, callback: Callable[[int], None]) -> Callable[[], None]:
        """Register ``callback`` for pending count updates; returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _publish_pending(self) -> None:
        self.pending_count = await self.queue.count()
        for callback in list(self._listeners):
            callback(self.pending_count)

    @staticmethod
    def succeeded(outcome: Any) -> bool:
        """Classify a transport outcome; exceptions and non-2xx are both failures."""
        if isinstance(outcome, BaseException):
            return False
        status = getattr(outcome, "status_code", None)
        return status is not None and 200 <= int(status) < 300

    async def _send(self, action: QueuedAction) -> Any:
        try:
            return await asyncio.to_thread(
                self.transport.send_action, action.action.value, action.payload
            )
        except Exception as e:
            return e

    async def _process(self, action: QueuedAction, report: Dict[str, int]) -> None:
        outcome = await self._send(action)
        if self.succeeded(outcome):
            await self.queue.remove(action.id)
            report["synced"] += 1
            logger.debug("Synced %s %s", action.action.value, action.id)
            return
        retries = await self.queue.increment_retry(action.id)
        if retries > self.max_retries:
            await self.queue.remove(action.id)
            report["discarded"] += 1
            logger.warning(
                "Discarding %s %s after %d failed attempts",
                action.action.value,
                action.id,
                retries,
            )
        else:
            report["retried"] += 1
            logger.debug(
                "Sync of %s %s failed (%s), retry %d",
                action.action.value,
                action.id,
                outcome,
                retries,
            )

    async def sync(self) -> Optional[Dict[str, int]]:
        """Run one drain cycle; returns ``None`` when skipped by the guard.

        Only actions present when the cycle starts are processed, oldest
        first. A failing action never stops the ones behind it.
        """
        if self._syncing or not self._online:
            return None
        self._syncing = True
        report = {"synced": 0, "retried": 0, "discarded": 0}
        try:
            snapshot = await self.queue.list_all()
            await self._publish_pending()
            for action in snapshot:
                await self._process(action, report)
                await self._publish_pending()
        finally:
            self._syncing = False
        await self._publish_pending()
        if snapshot:
            logger.info(
                "Sync cycle finished: %d synced, %d retried, %d discarded",
                report["synced"],
                report["retried"],
                report["discarded"],
            )
        return report

    async def submit(self, kind: ActionKind | str, payload: dict) -> str:
        """Durably queue a mutation, then make a best-effort attempt to send it."""
        action_id = await self.queue.enqueue(kind, payload)
        await self._publish_pending()
        await self.sync()
        return action_id

    async def set_online(self, online: bool) -> None:
        was_online = self._online
        self._online = online
        if online and not was_online:
            logger.info("Connectivity restored, syncing queued actions")
            await self.sync()

    async def _run_periodic(self) -> None:
        while True:
            try:
                await self.sync()
            except Exception:
                logger.exception("Periodic sync failed")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Start the periodic sync task on the running event loop."""
        if self._periodic_task is None:
            self._periodic_task = asyncio.get_running_loop().create_task(
                self._run_periodic()
            )

    async def stop(self) -> None:
        task, self._periodic_task = self._periodic_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
