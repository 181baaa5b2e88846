"""Adapters from botocore stream types to Python's iterator and ``io`` protocols.

Each adapter forwards one pull to one read on the wrapped object. None of
them retries, reads ahead, or spawns work of its own.
"""

from __future__ import annotations

import io
from typing import Any, Callable, Generic, Iterable, Iterator, TypeVar

from botocore.exceptions import BotoCoreError

from s3bridge.common.config import DEFAULT_READ_CHUNK_SIZE
from s3bridge.infra.observability.metrics import ERRORS, READ_BYTES

P = TypeVar("P")
T = TypeVar("T")


class ByteChunkStream(Iterator[bytes]):
    """Iterate over a ``StreamingBody`` one chunk at a time.

    Transport failures are raised once as ``OSError`` chained to the
    botocore exception; the stream is finished afterwards.
    """

    def __init__(self, body: Any, chunk_size: int = DEFAULT_READ_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got: {chunk_size}")
        self._body = body
        self._chunk_size = chunk_size
        self._finished = False

    def __iter__(self) -> "ByteChunkStream":
        return self

    def __next__(self) -> bytes:
        if self._finished:
            raise StopIteration
        try:
            chunk = self._body.read(self._chunk_size)
        except BotoCoreError as exc:
            self._finished = True
            ERRORS.labels(operation="GetObject", kind="transport").inc()
            raise OSError(f"Failed to read object body: {exc}") from exc
        if not chunk:
            self._finished = True
            raise StopIteration
        READ_BYTES.inc(len(chunk))
        return chunk

    def close(self) -> None:
        self._finished = True
        self._body.close()


class ChunkStreamReader(io.RawIOBase):
    """Raw binary reader over an iterator of ``bytes`` chunks.

    Wrap it in ``io.BufferedReader`` for ``readline`` and friends.
    """

    def __init__(self, chunks: Iterator[bytes]) -> None:
        super().__init__()
        self._chunks = chunks
        self._pending = memoryview(b"")

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        while not self._pending:
            try:
                chunk = next(self._chunks)
            except StopIteration:
                return 0
            self._pending = memoryview(chunk)
        view = memoryview(buffer).cast("B")
        size = min(len(view), len(self._pending))
        view[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            self._pending = memoryview(b"")
            close = getattr(self._chunks, "close", None)
            if close is not None:
                close()
        super().close()


class FlatPageStream(Iterator[T], Generic[P, T]):
    """Flatten an iterable of pages into an iterator of entries.

    ``entries`` maps a page to its entries. The next page is only fetched
    once the current one is used up. An exception from the page source or
    from ``entries`` ends the stream.
    """

    def __init__(self, pages: Iterable[P], entries: Callable[[P], Iterable[T]]) -> None:
        self._pages = iter(pages)
        self._entries = entries
        self._current: Iterator[T] = iter(())
        self._finished = False

    def __iter__(self) -> "FlatPageStream[P, T]":
        return self

    def __next__(self) -> T:
        while not self._finished:
            try:
                return next(self._current)
            except StopIteration:
                pass
            try:
                page = next(self._pages)
                self._current = iter(self._entries(page))
            except StopIteration:
                self._finished = True
                break
            except Exception:
                self._finished = True
                raise
        raise StopIteration
