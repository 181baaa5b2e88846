#!/usr/bin/env python3
"""Create the buckets and objects the LocalStack integration tests expect.

Usage:
  LOCALSTACK_HOSTNAME=localhost .venv/bin/python scripts/seed_localstack.py
  LOCALSTACK_HOSTNAME=localhost .venv/bin/python scripts/seed_localstack.py --skip-wait

Layout:
  test-bucket/test.txt                              "test data\\n"
  test-bucket/some-prefix/prefixed.txt              14 bytes
  test-bucket/some-prefix/nested-prefix/nested.txt  12 bytes
  test-bucket/multi-page/00000.txt ... 02499.txt    2500 objects
  empty-bucket                                      no objects
"""

from __future__ import annotations

import argparse
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Iterator

from s3bridge.common.config import get_settings
from s3bridge.common.logging import setup_logging
from s3bridge.infra.storage import S3Object, create_bucket, get_client
from s3bridge.infra.storage.localstack import wait_for_localstack

TEST_BUCKET = "test-bucket"
EMPTY_BUCKET = "empty-bucket"
MULTI_PAGE_PREFIX = "multi-page/"
MULTI_PAGE_COUNT = 2500

FIXTURE_OBJECTS: dict[S3Object, bytes] = {
    S3Object(TEST_BUCKET, "test.txt"): b"test data\n",
    S3Object(TEST_BUCKET, "some-prefix/prefixed.txt"): b"prefixed data\n",
    S3Object(TEST_BUCKET, "some-prefix/nested-prefix/nested.txt"): b"nested data\n",
}

# LocalStack accepts any credentials
LOCALSTACK_ENV_DEFAULTS = {
    "AWS_ACCESS_KEY_ID": "test",
    "AWS_SECRET_ACCESS_KEY": "test",
    "AWS_DEFAULT_REGION": "us-east-1",
}

logger = logging.getLogger("s3bridge.startup")


def multi_page_objects() -> list[S3Object]:
    return [
        S3Object(TEST_BUCKET, f"{MULTI_PAGE_PREFIX}{index:05d}.txt")
        for index in range(MULTI_PAGE_COUNT)
    ]


@contextmanager
def localstack_environment() -> Iterator[None]:
    """Fill in unset LocalStack credentials and region; restore os.environ on exit."""
    added = [name for name in LOCALSTACK_ENV_DEFAULTS if name not in os.environ]
    for name in added:
        os.environ[name] = LOCALSTACK_ENV_DEFAULTS[name]
    try:
        yield
    finally:
        for name in added:
            os.environ.pop(name, None)


def seed(client: Any, *, workers: int = 16) -> int:
    """Create both buckets and upload every fixture object. Returns the object count."""
    create_bucket(client, TEST_BUCKET)
    create_bucket(client, EMPTY_BUCKET)

    uploads = dict(FIXTURE_OBJECTS)
    for obj in multi_page_objects():
        uploads[obj] = obj.key.encode("utf-8")

    def _put(item: tuple[S3Object, bytes]) -> None:
        obj, body = item
        client.put_object(Bucket=obj.bucket, Key=obj.key, Body=body)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        # list() re-raises the first upload failure
        list(pool.map(_put, uploads.items()))
    return len(uploads)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed LocalStack S3 fixtures")
    parser.add_argument(
        "--skip-wait",
        action="store_true",
        help="Do not poll the LocalStack health endpoint first",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=16,
        help="Concurrent uploads (default: 16)",
    )
    args = parser.parse_args()

    setup_logging()
    settings = get_settings()
    if not args.skip_wait:
        wait_for_localstack(settings)
    with localstack_environment():
        count = seed(get_client(settings), workers=args.workers)
    logger.info("Seeded %d objects into s3://%s and s3://%s", count, TEST_BUCKET, EMPTY_BUCKET)


if __name__ == "__main__":
    main()
