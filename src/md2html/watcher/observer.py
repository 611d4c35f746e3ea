"""Watch a single Markdown file with watchdog."""

import logging
import os
import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from md2html.config.models import WatcherEvent
from md2html.config.settings import RECREATE_TIMEOUT_SECONDS
from md2html.errors import WatchError

logger = logging.getLogger(__name__)

EventCallback = Callable[[WatcherEvent], None]


def _as_path(raw: bytes | str) -> Path:
    return Path(os.path.abspath(os.fsdecode(raw)))


class DocumentEventHandler(FileSystemEventHandler):
    """Turns watchdog events for one file into ``WatcherEvent`` callbacks.

    watchdog watches directories, so every event in the parent directory
    arrives here; only those that touch the document path are forwarded,
    one callback per event.
    """

    def __init__(self, document_path: Path, callback: EventCallback) -> None:
        super().__init__()
        self.document_path = document_path
        self._callback = callback

    def _matches(self, raw: bytes | str) -> bool:
        return bool(raw) and _as_path(raw) == self.document_path

    def _emit(self, event_type: str) -> None:
        logger.debug(f"{self.document_path} {event_type}")
        self._callback(WatcherEvent(event_type, self.document_path, time.time()))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._emit("modified")

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._emit("created")

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._emit("deleted")

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        # Atomic saves write a temporary file and rename it over the document
        if self._matches(event.dest_path):
            self._emit("replaced")
        elif self._matches(event.src_path):
            self._emit("moved")


class FileObserver:
    """Watches one file and reports changes through a callback.

    The callback runs on the watchdog observer thread and must not block.
    """

    def __init__(
        self,
        watch_path: Path,
        callback: EventCallback,
        recreate_timeout: float = RECREATE_TIMEOUT_SECONDS,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        """
        Initialize the observer.

        Args:
            watch_path: Markdown file to watch
            callback: Called with a WatcherEvent for each change
            recreate_timeout: Seconds ``rewatch`` waits for a removed file to reappear
            observer_factory: watchdog observer class to use
        """
        self.watch_path = watch_path.resolve()
        self.recreate_timeout = recreate_timeout
        self._handler = DocumentEventHandler(self.watch_path, callback)
        self._observer = observer_factory()
        self._watch: ObservedWatch | None = None
        self._lock = threading.Lock()

    @property
    def is_alive(self) -> bool:
        return self._observer.is_alive()

    def _schedule(self) -> None:
        if not self.watch_path.is_file():
            raise WatchError(f"Cannot watch {self.watch_path}: no such file")
        try:
            self._watch = self._observer.schedule(
                self._handler, str(self.watch_path.parent), recursive=False
            )
        except OSError as e:
            raise WatchError(f"Cannot watch {self.watch_path}: {e}") from e

    def start(self) -> None:
        """
        Establish the watch and start the observer thread.

        Raises:
            WatchError: If the file cannot be watched
        """
        with self._lock:
            self._schedule()
            try:
                self._observer.start()
            except OSError as e:
                raise WatchError(f"Cannot start watcher for {self.watch_path}: {e}") from e
        logger.info(f"Watching {self.watch_path}")

    def rewatch(self) -> None:
        """
        Re-establish the watch after the file was removed or replaced.

        Waits up to ``recreate_timeout`` seconds for the path to exist again.

        Raises:
            WatchError: If the file does not reappear or cannot be watched
        """
        deadline = time.monotonic() + self.recreate_timeout
        while not self.watch_path.is_file():
            if time.monotonic() >= deadline:
                raise WatchError(
                    f"{self.watch_path} was removed and not recreated within "
                    f"{self.recreate_timeout:g}s"
                )
            time.sleep(0.05)

        with self._lock:
            if self._watch is not None:
                try:
                    self._observer.unschedule(self._watch)
                except KeyError:
                    # Emitter already dropped by watchdog after the removal
                    pass
                self._watch = None
            self._schedule()
        logger.debug(f"Watch re-established on {self.watch_path}")

    def stop(self) -> None:
        """Stop the observer thread."""
        with self._lock:
            if self._observer.is_alive():
                self._observer.stop()
                self._observer.join()
        logger.info(f"Stopped watching {self.watch_path}")
