import requests
from typing import Optional


class WorkoutClient:
    """Simple REST client for the workout API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def send_action(self, action: str, payload: dict) -> requests.Response:
        """Post one mutation to the sync endpoint and return the raw response."""
        return self.http.post(
            f"{self.base_url}/api/sync",
            json={"action": action, "payload": payload},
            timeout=self.timeout,
        )

    def health(self) -> bool:
        try:
            resp = self.http.get(f"{self.base_url}/health", timeout=self.timeout)
        except requests.RequestException:
            return False
        return resp.ok

    def start_workout(self, day_id: int) -> dict:
        resp = self.http.post(
            f"{self.base_url}/workouts/start",
            params={"day_id": day_id},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def in_progress(self) -> Optional[dict]:
        resp = self.http.get(f"{self.base_url}/workouts/in_progress", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()["session"]

    def workout(self, session_id: int) -> dict:
        resp = self.http.get(f"{self.base_url}/workouts/{session_id}", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def summary(self, session_id: int) -> dict:
        resp = self.http.get(
            f"{self.base_url}/workouts/{session_id}/summary", timeout=self.timeout
        )
        resp.raise_for_status()
        return resp.json()
