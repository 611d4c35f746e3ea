"""Re-render the document when it changes and tell browsers to reload."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from md2html.config.models import WatcherEvent
from md2html.errors import RenderError, WatchError
from md2html.renderer import RendererClient
from md2html.server.cache import RenderCache
from md2html.server.websocket import Notifier
from md2html.watcher import FileObserver

logger = logging.getLogger(__name__)


class LiveReloader:
    """Consumes file change events and owns the re-render sequence.

    The watcher thread only enqueues events; a single task on the event loop
    takes them in order, re-renders, writes the cache and then notifies
    subscribers. That task is the only writer of the cache.
    """

    def __init__(
        self,
        document_path: Path,
        renderer: RendererClient,
        cache: RenderCache,
        notifier: Notifier,
        observer: FileObserver | None = None,
        on_fatal: Callable[[BaseException], None] | None = None,
        served_at: str | None = None,
    ) -> None:
        """
        Initialize the reloader.

        Args:
            document_path: Markdown file being served
            renderer: Client used for re-rendering
            cache: Cache holding the served document
            notifier: Fans out reload messages after each update
            observer: Watcher to use; one is created for document_path if omitted
            on_fatal: Called when the watch is lost for good
            served_at: URL logged after each update
        """
        self.document_path = document_path
        self.renderer = renderer
        self.cache = cache
        self.notifier = notifier
        self.observer = observer
        self.on_fatal = on_fatal
        self.served_at = served_at
        self.fatal_error: WatchError | None = None
        self._queue: asyncio.Queue[WatcherEvent] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """
        Start watching and processing changes.

        Raises:
            WatchError: If the initial watch cannot be established
        """
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        if self.observer is None:
            self.observer = FileObserver(self.document_path, callback=self.enqueue)
        try:
            self.observer.start()
        except WatchError as e:
            logger.critical(f"Cannot watch {self.document_path}: {e}")
            self.fatal_error = e
            raise
        self._task = asyncio.create_task(self._consume(), name="md2html-reloader")

    async def stop(self) -> None:
        """Stop processing and release the watcher."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self.observer is not None:
            await asyncio.to_thread(self.observer.stop)

    def enqueue(self, event: WatcherEvent) -> None:
        """Hand an event from the watcher thread to the consumer task."""
        if self._loop is None or self._queue is None or self._loop.is_closed():
            logger.warning(f"Dropping {event.event_type} event: reloader not running")
            return
        self._loop.call_soon_threadsafe(self._queue.put_nowait, event)

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            try:
                if not await self.handle_event(event):
                    break
            finally:
                self._queue.task_done()

    async def handle_event(self, event: WatcherEvent) -> bool:
        """
        Process one change event.

        Returns:
            False once the watch is lost and no further events can arrive
        """
        logger.info(f"{event.file_path} modified")

        if event.requires_rewatch() and self.observer is not None:
            try:
                await asyncio.to_thread(self.observer.rewatch)
            except WatchError as e:
                logger.critical(f"Lost watch on {event.file_path}: {e}")
                self.fatal_error = e
                if self.on_fatal is not None:
                    self.on_fatal(e)
                return False

        await self.refresh()
        return True

    async def refresh(self) -> bool:
        """
        Re-render the document, update the cache and notify subscribers.

        A failed render is logged and the previous document stays served.

        Returns:
            True if a new document was rendered
        """
        try:
            rendered = await asyncio.to_thread(self.renderer.render_file, self.document_path)
        except RenderError as e:
            logger.error(f"Re-render failed, keeping previous version: {e}")
            return False

        self.cache.write(rendered)
        delivered = await self.notifier.notify_all()
        if self.served_at:
            logger.info(f"HTML updated at {self.served_at} ({delivered} clients notified)")
        else:
            logger.info(f"HTML updated ({delivered} clients notified)")
        return True
