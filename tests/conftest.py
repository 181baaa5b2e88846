from __future__ import annotations

import boto3
import pytest
from botocore.stub import Stubber

from s3bridge.common import config
from s3bridge.common.config import get_settings

CONFIG_KEYS = (
    "AWS_REGION",
    "AWS_DEFAULT_REGION",
    "LOCALSTACK_HOSTNAME",
    "EDGE_PORT",
    "S3_READ_CHUNK_SIZE",
    "LOCALSTACK_WAIT_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Environment with none of the settings variables and no .env file."""
    for key in CONFIG_KEYS:
        # setenv first so that teardown removes anything a test or .env adds
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.setattr(config, "ENV_FILE", tmp_path / ".env")
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield monkeypatch
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def s3():
    """A real boto3 S3 client; pair it with ``stubber`` to script responses."""
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(s3):
    with Stubber(s3) as stub:
        yield stub
        stub.assert_no_pending_responses()
