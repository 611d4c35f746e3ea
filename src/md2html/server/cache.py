"""Shared holder for the most recently rendered document."""

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Writers waiting for the lock block new readers, so a steady stream of
    readers cannot starve a writer.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    @contextmanager
    def read_lock(self) -> Iterator[None]:
        """Hold the lock in shared mode."""
        with self._cond:
            while self._writing or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        """Hold the lock exclusively."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class RenderCache:
    """Holds the current rendered document for concurrent readers.

    ``write`` swaps a single reference under the exclusive lock, so readers
    see either the previous document or the new one in full.
    """

    def __init__(self, document: bytes = b"") -> None:
        self._lock = ReadWriteLock()
        self._document = bytes(document)
        self._version = 1 if document else 0
        self._updated_at = time.time()

    def read(self) -> bytes:
        """Return the current rendered document."""
        with self._lock.read_lock():
            return self._document

    def write(self, document: bytes) -> None:
        """Replace the rendered document."""
        document = bytes(document)
        with self._lock.write_lock():
            self._document = document
            self._version += 1
            self._updated_at = time.time()

    @property
    def version(self) -> int:
        """Number of documents written so far."""
        with self._lock.read_lock():
            return self._version

    @property
    def updated_at(self) -> float:
        """Timestamp of the last write."""
        with self._lock.read_lock():
            return self._updated_at
