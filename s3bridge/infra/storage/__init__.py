"""Object storage helpers over boto3.

This package adapts botocore's listing paginators and response bodies to
plain Python iterators and ``io`` readers, and builds S3 clients that can be
pointed at a LocalStack instance.
"""

from .client import (
    BucketNotFoundError,
    ObjectDescriptor,
    ObjectNotFoundError,
    S3Object,
    StorageConfigError,
    StorageError,
    StorageServiceError,
)
from .s3_client import create_bucket, get_client, get_object, list_objects
from .streams import ByteChunkStream, ChunkStreamReader, FlatPageStream

__all__ = [
    "BucketNotFoundError",
    "ByteChunkStream",
    "ChunkStreamReader",
    "FlatPageStream",
    "ObjectDescriptor",
    "ObjectNotFoundError",
    "S3Object",
    "StorageConfigError",
    "StorageError",
    "StorageServiceError",
    "create_bucket",
    "get_client",
    "get_object",
    "list_objects",
]
