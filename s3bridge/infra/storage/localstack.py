"""LocalStack endpoint resolution and readiness polling."""

from __future__ import annotations

import logging
import time
from urllib.parse import urlsplit

import requests

from s3bridge.common.config import Settings
from s3bridge.infra.storage.client import StorageConfigError

HEALTH_PATH = "/_localstack/health"
READY_STATES = frozenset({"running", "available"})
_FORBIDDEN_HOST_CHARS = frozenset("/?#@ \t\r\n")

logger = logging.getLogger("storage")


def get_endpoint_url(settings: Settings) -> str | None:
    """Return the LocalStack edge URL, or None when no hostname is configured.

    Raises:
        StorageConfigError: If the hostname/port pair is not a valid endpoint.
    """
    host = settings.LOCALSTACK_HOSTNAME
    if host is None:
        return None
    host = host.strip()
    if not host or _FORBIDDEN_HOST_CHARS.intersection(host):
        raise StorageConfigError(f"Invalid LOCALSTACK_HOSTNAME: {host!r}")

    raw_port = (settings.EDGE_PORT or "").strip()
    if not raw_port.isdigit():
        raise StorageConfigError(f"Invalid EDGE_PORT: {settings.EDGE_PORT!r}")

    url = f"http://{host}:{raw_port}"
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise StorageConfigError(f"Invalid LocalStack endpoint {url!r}: {exc}") from exc
    if not parts.hostname or port is None or not 0 < port < 65536:
        raise StorageConfigError(f"Invalid LocalStack endpoint: {url!r}")
    return url


def wait_for_localstack(
    settings: Settings,
    *,
    timeout: float | None = None,
    interval: float = 1.0,
) -> None:
    """Block until LocalStack reports S3 as ready.

    Raises:
        StorageConfigError: If no LocalStack hostname is configured.
        TimeoutError: If S3 is not ready within ``timeout`` seconds.
    """
    endpoint = get_endpoint_url(settings)
    if endpoint is None:
        raise StorageConfigError("LOCALSTACK_HOSTNAME is not set")
    if timeout is None:
        timeout = settings.LOCALSTACK_WAIT_TIMEOUT

    deadline = time.monotonic() + timeout
    last_state: str | None = None
    while True:
        try:
            resp = requests.get(f"{endpoint}{HEALTH_PATH}", timeout=interval * 2)
            if resp.ok:
                last_state = resp.json().get("services", {}).get("s3")
                if last_state in READY_STATES:
                    logger.info(
                        "localstack ready",
                        extra={"extra": {"endpoint": endpoint, "s3": last_state}},
                    )
                    return
        except (requests.RequestException, ValueError) as exc:
            last_state = type(exc).__name__
        if time.monotonic() >= deadline:
            raise TimeoutError(
                f"LocalStack at {endpoint} not ready after {timeout}s (s3: {last_state})"
            )
        time.sleep(interval)
