import pytest
from pydantic import ValidationError

from run import logging_config
from taskboard.config import Config


def test_defaults():
    config = Config.from_env({})
    assert config.port == 8000
    assert config.api_prefix == "/api"
    assert config.storage == "memory"
    assert config.log_file is None


def test_reads_prefixed_variables():
    config = Config.from_env({
        "TASKBOARD_PORT": "9090",
        "TASKBOARD_STORAGE": "sqlite",
        "TASKBOARD_DB_PATH": "/tmp/board.db",
        "TASKBOARD_API_PREFIX": "v1/",
        "TASKBOARD_LOG_LEVEL": "debug",
        "PORT": "1",
    })
    assert config.port == 9090
    assert config.storage == "sqlite"
    assert config.db_path == "/tmp/board.db"
    assert config.api_prefix == "/v1"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("env", [
    {"TASKBOARD_PORT": "http"},
    {"TASKBOARD_STORAGE": "postgres"},
    {"TASKBOARD_API_PREFIX": "/"},
])
def test_invalid_values_rejected(env):
    with pytest.raises(ValidationError):
        Config.from_env(env)


def test_logging_config_file_handler_optional(tmp_path):
    assert list(logging_config(Config())["handlers"]) == ["console"]

    config = Config(log_file=str(tmp_path / "app.log"), log_level="WARNING")
    handlers = logging_config(config)["handlers"]
    assert handlers["file"]["filename"] == str(tmp_path / "app.log")
    assert handlers["console"]["level"] == "WARNING"
