"""FastAPI application factory."""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request

from md2html import __version__
from md2html.config.models import ServerConfig
from md2html.renderer import RendererClient
from md2html.server.cache import RenderCache
from md2html.server.reloader import LiveReloader
from md2html.server.routers.v1 import document, ws
from md2html.server.websocket import Notifier, SubscriberRegistry

logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig,
    renderer: RendererClient,
    cache: RenderCache,
    on_fatal: Callable[[BaseException], None] | None = None,
    reloader: LiveReloader | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    The cache must already hold the initial render; the application only
    serves it and, with reload enabled, keeps it up to date.

    Args:
        config: Server configuration
        renderer: Client used for re-rendering
        cache: Cache holding the rendered document
        on_fatal: Called if the file watch is lost for good
        reloader: Reloader to use instead of one built from the arguments

    Returns:
        Configured FastAPI app
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Start the watcher with the server and stop it on shutdown."""
        live_reloader: LiveReloader | None = app.state.reloader
        if live_reloader is not None:
            await live_reloader.start()

        yield

        if live_reloader is not None:
            await live_reloader.stop()

    app = FastAPI(
        title="md2html",
        description="Preview a Markdown file rendered by GitHub, with live reload",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.config = config
    app.state.renderer = renderer
    app.state.cache = cache
    app.state.notifier = reloader.notifier if reloader else Notifier(SubscriberRegistry())
    app.state.registry = app.state.notifier.registry
    app.state.reloader = None

    if config.reload_enabled:
        app.state.reloader = reloader or LiveReloader(
            document_path=config.document_path,
            renderer=renderer,
            cache=cache,
            notifier=app.state.notifier,
            on_fatal=on_fatal,
            served_at=config.base_url,
        )

    @app.middleware("http")
    async def add_headers(request: Request, call_next):  # type: ignore
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        if "text/html" in response.headers.get("content-type", ""):
            # HTML pages: no cache (always fresh)
            response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response

    app.include_router(document.router)
    if config.reload_enabled:
        app.include_router(ws.router)

    return app
