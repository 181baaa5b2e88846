from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

DEFAULT_EDGE_PORT = "4566"
DEFAULT_READ_CHUNK_SIZE = 64 * 1024
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_int(name: str, value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got: {value!r}") from exc


def _as_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class Settings:
    AWS_REGION: str | None = None
    # Set by LocalStack inside its Lambda containers; set it by hand to reach
    # a LocalStack instance from the host.
    LOCALSTACK_HOSTNAME: str | None = None
    # Kept as text; parsed together with the hostname when the endpoint is built.
    EDGE_PORT: str = DEFAULT_EDGE_PORT
    S3_READ_CHUNK_SIZE: int = DEFAULT_READ_CHUNK_SIZE
    LOCALSTACK_WAIT_TIMEOUT: int = 60
    LOG_LEVEL: str = "INFO"

    def __post_init__(self) -> None:
        if self.S3_READ_CHUNK_SIZE <= 0:
            raise ValueError(
                f"S3_READ_CHUNK_SIZE must be positive, got: {self.S3_READ_CHUNK_SIZE}"
            )
        if self.LOCALSTACK_WAIT_TIMEOUT < 0:
            raise ValueError(
                "LOCALSTACK_WAIT_TIMEOUT must not be negative, "
                f"got: {self.LOCALSTACK_WAIT_TIMEOUT}"
            )
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        if self.LOG_LEVEL not in LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got: {self.LOG_LEVEL}"
            )

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        region = _as_optional(os.environ.get("AWS_REGION")) or _as_optional(
            os.environ.get("AWS_DEFAULT_REGION")
        )
        return cls(
            AWS_REGION=region,
            LOCALSTACK_HOSTNAME=os.environ.get("LOCALSTACK_HOSTNAME"),
            EDGE_PORT=os.environ.get("EDGE_PORT", cls.EDGE_PORT),
            S3_READ_CHUNK_SIZE=_as_int(
                "S3_READ_CHUNK_SIZE",
                os.environ.get("S3_READ_CHUNK_SIZE"),
                cls.S3_READ_CHUNK_SIZE,
            ),
            LOCALSTACK_WAIT_TIMEOUT=_as_int(
                "LOCALSTACK_WAIT_TIMEOUT",
                os.environ.get("LOCALSTACK_WAIT_TIMEOUT"),
                cls.LOCALSTACK_WAIT_TIMEOUT,
            ),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
