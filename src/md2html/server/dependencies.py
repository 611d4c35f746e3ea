"""FastAPI dependencies exposing objects stored on ``app.state``."""

from fastapi import Request, WebSocket

from md2html.config.models import ServerConfig
from md2html.server.cache import RenderCache
from md2html.server.websocket import SubscriberRegistry


def get_config(request: Request) -> ServerConfig:
    return request.app.state.config


def get_cache(request: Request) -> RenderCache:
    return request.app.state.cache


def get_registry(websocket: WebSocket) -> SubscriberRegistry:
    return websocket.app.state.registry
