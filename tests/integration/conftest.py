"""LocalStack-backed fixtures.

These tests only run when ``LOCALSTACK_HOSTNAME`` is set, e.g.::

    docker run --rm -p 4566:4566 localstack/localstack
    LOCALSTACK_HOSTNAME=localhost pytest tests/integration
"""

from __future__ import annotations

import os

import pytest

from s3bridge.common.config import get_settings
from s3bridge.infra.storage import get_client
from s3bridge.infra.storage.localstack import wait_for_localstack
from scripts.seed_localstack import localstack_environment, seed


@pytest.fixture(scope="session")
def localstack_client():
    if not os.environ.get("LOCALSTACK_HOSTNAME"):
        pytest.skip("LOCALSTACK_HOSTNAME is not set")

    with localstack_environment():
        get_settings.cache_clear()  # type: ignore[attr-defined]
        settings = get_settings()
        wait_for_localstack(settings)
        client = get_client(settings)
        seed(client)
        yield client
    get_settings.cache_clear()  # type: ignore[attr-defined]
