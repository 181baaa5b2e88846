"""Storage data types and error taxonomy.

Every failure this package raises is a ``StorageError`` except body read
failures, which surface as ``OSError`` so that ``io`` readers and their
callers handle them like any other I/O failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from botocore.exceptions import ClientError

S3_SCHEME = "s3"


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class StorageConfigError(StorageError):
    """Raised when the storage client cannot be configured."""


class StorageServiceError(StorageError):
    """A structured failure returned by the storage service.

    The original ``botocore.exceptions.ClientError`` is always available as
    ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        code: str | None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.code = code
        self.status_code = status_code


class BucketNotFoundError(StorageServiceError):
    """The requested bucket does not exist."""


class ObjectNotFoundError(StorageServiceError):
    """The requested key does not exist in the bucket."""


_ERRORS_BY_CODE: dict[str, type[StorageServiceError]] = {
    "NoSuchBucket": BucketNotFoundError,
    "NoSuchKey": ObjectNotFoundError,
}


def service_error(operation: str, exc: ClientError) -> StorageServiceError:
    """Map a ``ClientError`` onto the storage error taxonomy.

    The caller is expected to ``raise service_error(...) from exc``.
    """
    error = exc.response.get("Error", {})
    code = error.get("Code")
    status_code = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    error_cls = _ERRORS_BY_CODE.get(code or "", StorageServiceError)
    message = error.get("Message") or str(exc)
    return error_cls(
        f"{operation} failed ({code}): {message}",
        operation=operation,
        code=code,
        status_code=status_code,
    )


@dataclass(frozen=True, slots=True)
class ObjectDescriptor:
    """One entry of a bucket listing."""

    key: str
    size: int | None
    etag: str | None = None
    last_modified: datetime | None = None

    @classmethod
    def from_listing(cls, entry: Mapping[str, Any]) -> "ObjectDescriptor":
        size = entry.get("Size")
        return cls(
            key=entry["Key"],
            size=int(size) if size is not None else None,
            etag=entry.get("ETag"),
            last_modified=entry.get("LastModified"),
        )


@dataclass(frozen=True, slots=True)
class S3Object:
    """Address of a single object, convertible to and from ``s3://`` URLs."""

    bucket: str
    key: str

    @classmethod
    def from_url(cls, url: str) -> "S3Object":
        # Keys may contain "?" and "#", so no generic URL parsing here.
        scheme, sep, rest = url.partition("://")
        if not sep or scheme.lower() != S3_SCHEME:
            raise ValueError(f"Expected an s3:// URL, got: {url!r}")
        bucket, _, key = rest.partition("/")
        if not bucket:
            raise ValueError(f"S3 URL has no bucket: {url!r}")
        return cls(bucket=bucket, key=key)

    def __str__(self) -> str:
        return f"{S3_SCHEME}://{self.bucket}/{self.key}"
