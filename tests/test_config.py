import os
import sys
import pytest
import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig, load_settings


def test_defaults_when_file_missing(tmp_path):
    settings = load_settings(str(tmp_path / "missing.yaml"))
    assert settings.sync_interval_seconds == 30
    assert settings.max_retry_count == 10
    assert settings.stale_workout_hours == 4
    assert settings.server_url == "http://localhost:8000"


def test_yaml_overrides(tmp_path):
    path = str(tmp_path / "settings.yaml")
    YamlConfig(path).save({"max_retry_count": 3, "server_url": "http://gym.local"})
    settings = load_settings(path)
    assert settings.max_retry_count == 3
    assert settings.server_url == "http://gym.local"
    assert settings.db_path == "workout.db"
    with open(path, encoding="utf-8") as f:
        assert yaml.safe_load(f)["max_retry_count"] == 3


def test_invalid_settings_raise(tmp_path):
    path = str(tmp_path / "settings.yaml")
    YamlConfig(path).save({"sync_interval_seconds": 0})
    with pytest.raises(ValueError):
        load_settings(path)
