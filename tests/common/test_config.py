import json
import logging
import os

import pytest

from s3bridge.common import config
from s3bridge.common.config import Settings, get_settings
from s3bridge.common.logging import JsonFormatter, setup_logging


def test_defaults(clean_env):
    settings = get_settings()

    assert settings.AWS_REGION is None
    assert settings.LOCALSTACK_HOSTNAME is None
    assert settings.EDGE_PORT == "4566"
    assert settings.S3_READ_CHUNK_SIZE == 64 * 1024
    assert settings.LOG_LEVEL == "INFO"


def test_reads_environment(clean_env):
    clean_env.setenv("AWS_DEFAULT_REGION", "ap-southeast-2")
    clean_env.setenv("LOCALSTACK_HOSTNAME", "localstack")
    clean_env.setenv("EDGE_PORT", "4510")
    clean_env.setenv("S3_READ_CHUNK_SIZE", "1024")
    clean_env.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.AWS_REGION == "ap-southeast-2"
    assert settings.LOCALSTACK_HOSTNAME == "localstack"
    assert settings.EDGE_PORT == "4510"
    assert settings.S3_READ_CHUNK_SIZE == 1024
    assert settings.LOG_LEVEL == "DEBUG"


def test_aws_region_wins_over_default_region(clean_env):
    clean_env.setenv("AWS_REGION", "eu-west-1")
    clean_env.setenv("AWS_DEFAULT_REGION", "ap-southeast-2")

    assert get_settings().AWS_REGION == "eu-west-1"


def test_settings_are_cached(clean_env):
    first = get_settings()
    clean_env.setenv("EDGE_PORT", "1234")

    assert get_settings() is first


def test_env_file_does_not_override_environment(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local overrides\nLOCALSTACK_HOSTNAME='from-file'\nEDGE_PORT=4999\nnot a pair\n",
        encoding="utf-8",
    )
    clean_env.setattr(config, "ENV_FILE", env_file)
    clean_env.setenv("EDGE_PORT", "4566")

    settings = Settings.from_environment()

    assert settings.LOCALSTACK_HOSTNAME == "from-file"
    assert settings.EDGE_PORT == "4566"
    assert os.environ["LOCALSTACK_HOSTNAME"] == "from-file"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("S3_READ_CHUNK_SIZE", "lots"),
        ("S3_READ_CHUNK_SIZE", "0"),
        ("LOCALSTACK_WAIT_TIMEOUT", "-5"),
        ("LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_values(clean_env, key, value):
    clean_env.setenv(key, value)

    with pytest.raises(ValueError, match=key):
        Settings.from_environment()


def test_json_formatter_merges_extra():
    record = logging.LogRecord("storage", logging.WARNING, __file__, 1, "failed", None, None)
    record.extra = {"bucket": "test-bucket", "code": "NoSuchBucket"}

    payload = json.loads(JsonFormatter().format(record))

    assert payload == {
        "level": "WARNING",
        "logger": "storage",
        "message": "failed",
        "bucket": "test-bucket",
        "code": "NoSuchBucket",
    }


def test_setup_logging_uses_configured_level(clean_env):
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    clean_env.setenv("LOG_LEVEL", "WARNING")
    try:
        setup_logging()
        assert root.level == logging.WARNING
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
