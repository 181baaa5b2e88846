"""S3 client construction, bucket listing and object retrieval.

Every request is delegated to boto3; this module only reshapes what comes
back (paginated listings into one flat iterator, response bodies into
readable byte streams) and maps SDK errors onto the storage taxonomy.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Any, Iterator, Mapping

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, HTTPClientError
from botocore.exceptions import ConnectionError as BotoConnectionError
from botocore.exceptions import (
    NoCredentialsError,
    NoRegionError,
    ParamValidationError,
    PartialCredentialsError,
)

from s3bridge.common.config import get_settings
from s3bridge.infra.observability.metrics import ERRORS, LIST_PAGES, LISTED_OBJECTS
from s3bridge.infra.storage.client import (
    ObjectDescriptor,
    StorageConfigError,
    StorageServiceError,
    service_error,
)
from s3bridge.infra.storage.localstack import get_endpoint_url
from s3bridge.infra.storage.streams import (
    ByteChunkStream,
    ChunkStreamReader,
    FlatPageStream,
)

if TYPE_CHECKING:
    from s3bridge.common.config import Settings

DEFAULT_REGION = "us-east-1"

# Raised by botocore before anything is sent.
_CONFIG_ERRORS = (
    NoCredentialsError,
    PartialCredentialsError,
    NoRegionError,
    ParamValidationError,
)
_TRANSPORT_ERRORS = (BotoConnectionError, HTTPClientError)
_REQUEST_ERRORS = _CONFIG_ERRORS + _TRANSPORT_ERRORS

logger = logging.getLogger("storage")


def get_client(settings: "Settings | None" = None) -> Any:
    """Create a boto3 S3 client.

    When ``LOCALSTACK_HOSTNAME`` is configured the client talks to that
    LocalStack instance (port ``EDGE_PORT``, default 4566) with path-style
    addressing.

    Raises:
        StorageConfigError: If the LocalStack endpoint cannot be built.
    """
    settings = settings or get_settings()
    endpoint_url = get_endpoint_url(settings)

    kwargs: dict[str, Any] = {}
    if settings.AWS_REGION:
        kwargs["region_name"] = settings.AWS_REGION
    if endpoint_url is not None:
        kwargs["endpoint_url"] = endpoint_url
        kwargs["config"] = Config(s3={"addressing_style": "path"})

    client = boto3.client("s3", **kwargs)
    logger.info(
        "s3 client configured",
        extra={
            "extra": {
                "endpoint_url": endpoint_url,
                "region": settings.AWS_REGION,
                "path_style": endpoint_url is not None,
            }
        },
    )
    return client


def list_objects(
    client: Any,
    bucket: str,
    prefix: str | None = None,
    *,
    page_size: int | None = None,
) -> Iterator[ObjectDescriptor]:
    """Lazily list every object in ``bucket`` whose key starts with ``prefix``.

    Pages are requested one at a time as the iterator is consumed. The prefix
    is a literal string match done by the service, so ``"some-prefix"``
    matches ``"some-prefix/a.txt"`` as well as ``"some-prefix-2.txt"``.

    Raises (while iterating):
        BucketNotFoundError: If the bucket does not exist.
        StorageServiceError: For any other service failure.
        StorageConfigError: If botocore cannot build the request (missing
            credentials or region, invalid parameters).
        OSError: If a page request fails below the service level.
    """
    params: dict[str, Any] = {"Bucket": bucket}
    if prefix is not None:
        params["Prefix"] = prefix
    pagination: dict[str, Any] = {}
    if page_size is not None:
        pagination["PageSize"] = int(page_size)
    return FlatPageStream(_list_pages(client, params, pagination), _page_entries)


def _list_pages(
    client: Any, params: dict[str, Any], pagination: dict[str, Any]
) -> Iterator[Mapping[str, Any]]:
    paginator = client.get_paginator("list_objects_v2")
    try:
        for number, page in enumerate(
            paginator.paginate(PaginationConfig=pagination, **params), start=1
        ):
            LIST_PAGES.inc()
            logger.debug(
                "listing page fetched",
                extra={
                    "extra": {
                        "bucket": params["Bucket"],
                        "page": number,
                        "key_count": page.get("KeyCount"),
                    }
                },
            )
            yield page
    except ClientError as exc:
        raise _service_failure("ListObjectsV2", params, exc) from exc
    except _REQUEST_ERRORS as exc:
        raise _request_failure("ListObjectsV2", exc) from exc


def _page_entries(page: Mapping[str, Any]) -> list[ObjectDescriptor]:
    entries = [ObjectDescriptor.from_listing(item) for item in page.get("Contents", ())]
    LISTED_OBJECTS.inc(len(entries))
    return entries


def get_object(
    client: Any,
    bucket: str,
    key: str,
    *,
    chunk_size: int | None = None,
) -> io.BufferedReader:
    """Fetch an object and return its body as a buffered binary reader.

    The body is streamed: nothing beyond the current chunk is held in memory.
    Wrap the result in ``io.TextIOWrapper`` to read text.

    Raises:
        BucketNotFoundError: If the bucket does not exist.
        ObjectNotFoundError: If the key does not exist.
        StorageServiceError: For any other service failure.
        StorageConfigError: If botocore cannot build the request.
        ValueError: If ``chunk_size`` is not positive. No request is sent.
        OSError: If the request fails below the service level. Failures while
            reading the body are raised as ``OSError`` by the reader.
    """
    if chunk_size is None:
        chunk_size = get_settings().S3_READ_CHUNK_SIZE
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got: {chunk_size}")

    params = {"Bucket": bucket, "Key": key}
    try:
        response = client.get_object(**params)
    except ClientError as exc:
        raise _service_failure("GetObject", params, exc) from exc
    except _REQUEST_ERRORS as exc:
        raise _request_failure("GetObject", exc) from exc

    body = response["Body"]
    try:
        chunks = ByteChunkStream(body, chunk_size)
        return io.BufferedReader(ChunkStreamReader(chunks), buffer_size=chunk_size)
    except Exception:
        body.close()
        raise


def create_bucket(client: Any, bucket: str, *, region: str | None = None) -> None:
    """Create ``bucket`` unless this account already owns it."""
    region = region or client.meta.region_name or DEFAULT_REGION
    params: dict[str, Any] = {"Bucket": bucket}
    if region != DEFAULT_REGION:
        params["CreateBucketConfiguration"] = {"LocationConstraint": region}
    try:
        client.create_bucket(**params)
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") == "BucketAlreadyOwnedByYou":
            logger.debug("bucket already exists", extra={"extra": {"bucket": bucket}})
            return
        raise _service_failure("CreateBucket", params, exc) from exc
    logger.info("bucket created", extra={"extra": {"bucket": bucket, "region": region}})


def _service_failure(
    operation: str, params: Mapping[str, Any], exc: ClientError
) -> StorageServiceError:
    error = service_error(operation, exc)
    ERRORS.labels(operation=operation, kind="service").inc()
    logger.warning(
        "storage request failed",
        extra={
            "extra": {
                "operation": operation,
                "bucket": params.get("Bucket"),
                "key": params.get("Key"),
                "code": error.code,
                "status_code": error.status_code,
            }
        },
    )
    return error


def _request_failure(operation: str, exc: Exception) -> Exception:
    if isinstance(exc, _CONFIG_ERRORS):
        ERRORS.labels(operation=operation, kind="config").inc()
        return StorageConfigError(f"{operation} request could not be built: {exc}")
    ERRORS.labels(operation=operation, kind="transport").inc()
    return OSError(f"{operation} request failed: {exc}")
