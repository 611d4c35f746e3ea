"""FastAPI server components for md2html."""

from .app import create_app
from .cache import RenderCache
from .reloader import LiveReloader
from .websocket import Notifier, SubscriberRegistry, websocket_endpoint

__all__ = [
    "create_app",
    "RenderCache",
    "LiveReloader",
    "Notifier",
    "SubscriberRegistry",
    "websocket_endpoint",
]
