from prometheus_client import Counter

# No bucket or key labels: both are unbounded.
LIST_PAGES = Counter(
    "s3_list_pages_total",
    "ListObjectsV2 pages fetched",
)

LISTED_OBJECTS = Counter(
    "s3_listed_objects_total",
    "Object descriptors yielded by bucket listings",
)

READ_BYTES = Counter(
    "s3_read_bytes_total",
    "Object body bytes handed to callers",
)

ERRORS = Counter(
    "s3_errors_total",
    "Storage failures by operation and kind",
    ["operation", "kind"],
)
