import unittest
import sys
import os
import requests

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from client import WorkoutClient


class FakeResponse:
    def __init__(self, status_code=200, data=None):
        self.status_code = status_code
        self.ok = status_code < 400
        self._data = data or {}

    def json(self):
        return self._data

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(str(self.status_code))


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.requests = []

    def post(self, url, **kwargs):
        self.requests.append(("POST", url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        self.requests.append(("GET", url, kwargs))
        if self.error:
            raise self.error
        return self.response


class ClientTest(unittest.TestCase):
    def test_send_action_posts_envelope(self) -> None:
        session = FakeSession(FakeResponse(200, {"success": True}))
        client = WorkoutClient("http://testserver/", timeout=3, session=session)
        resp = client.send_action("ADD_SET", {"exerciseLogId": 4})
        self.assertEqual(resp.status_code, 200)
        method, url, kwargs = session.requests[0]
        self.assertEqual((method, url), ("POST", "http://testserver/api/sync"))
        self.assertEqual(kwargs["json"], {"action": "ADD_SET", "payload": {"exerciseLogId": 4}})
        self.assertEqual(kwargs["timeout"], 3)

    def test_health(self) -> None:
        self.assertTrue(WorkoutClient(session=FakeSession()).health())
        self.assertFalse(WorkoutClient(session=FakeSession(FakeResponse(500))).health())
        offline = FakeSession(error=requests.ConnectionError("down"))
        self.assertFalse(WorkoutClient(session=offline).health())

    def test_in_progress(self) -> None:
        session = FakeSession(FakeResponse(200, {"session": {"id": 7}}))
        self.assertEqual(WorkoutClient(session=session).in_progress(), {"id": 7})

    def test_start_conflict_raises(self) -> None:
        session = FakeSession(FakeResponse(409))
        with self.assertRaises(requests.HTTPError):
            WorkoutClient(session=session).start_workout(1)


if __name__ == "__main__":
    unittest.main()
