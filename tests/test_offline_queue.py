import os
import sys
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from offline_queue import ActionQueue
from sync_schemas import ActionKind


@pytest.mark.asyncio
async def test_queue_preserves_order(tmp_path):
    queue = ActionQueue(str(tmp_path / "queue.db"))
    first = await queue.enqueue(ActionKind.UPDATE_SET, {"setLogId": 1, "reps": 5})
    second = await queue.enqueue("SKIP_EXERCISE", {"exerciseLogId": 2})
    third = await queue.enqueue(ActionKind.COMPLETE_WORKOUT, {"sessionId": 3})

    actions = await queue.list_all()
    assert [a.id for a in actions] == [first, second, third]
    assert actions[0].action is ActionKind.UPDATE_SET
    assert actions[0].payload == {"setLogId": 1, "reps": 5}
    assert actions[1].action is ActionKind.SKIP_EXERCISE
    assert all(a.retry_count == 0 for a in actions)
    assert len({a.id for a in actions}) == 3
    assert await queue.count() == 3


@pytest.mark.asyncio
async def test_queue_survives_restart(tmp_path):
    path = str(tmp_path / "queue.db")
    queue = ActionQueue(path)
    action_id = await queue.enqueue(ActionKind.ADD_SET, {"exerciseLogId": 7})
    await queue.increment_retry(action_id)

    reopened = ActionQueue(path)
    actions = await reopened.list_all()
    assert len(actions) == 1
    assert actions[0].id == action_id
    assert actions[0].retry_count == 1


@pytest.mark.asyncio
async def test_increment_remove_and_clear(tmp_path):
    queue = ActionQueue(str(tmp_path / "queue.db"))
    action_id = await queue.enqueue(ActionKind.REMOVE_SET, {"setLogId": 4})
    assert await queue.increment_retry(action_id) == 1
    assert await queue.increment_retry(action_id) == 2

    await queue.remove(action_id)
    assert await queue.count() == 0
    assert await queue.increment_retry(action_id) == 0

    await queue.enqueue(ActionKind.ADD_SET, {"exerciseLogId": 1})
    await queue.enqueue(ActionKind.ADD_SET, {"exerciseLogId": 2})
    await queue.clear()
    assert await queue.list_all() == []


@pytest.mark.asyncio
async def test_unknown_action_is_rejected(tmp_path):
    queue = ActionQueue(str(tmp_path / "queue.db"))
    with pytest.raises(ValueError):
        await queue.enqueue("DROP_TABLES", {})
    assert await queue.count() == 0
