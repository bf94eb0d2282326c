from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    db_path: str = "workout.db"
    queue_path: str = "offline_queue.db"
    server_url: str = "http://localhost:8000"
    request_timeout: float = Field(default=10.0, gt=0)
    sync_interval_seconds: float = Field(default=30.0, gt=0)
    max_retry_count: int = Field(default=10, ge=0)
    stale_workout_hours: float = Field(default=4.0, gt=0)
    sweep_interval_minutes: float = Field(default=15.0, gt=0)
    log_level: str = "INFO"


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
