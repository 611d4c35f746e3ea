"""WebSocket router for live reload functionality.

This router handles the WebSocket endpoint for pushing live reload
notifications to connected clients.
"""

from fastapi import APIRouter, Depends, WebSocket

from md2html.server.dependencies import get_registry
from md2html.server.websocket import SubscriberRegistry, websocket_endpoint

router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def websocket_route(
    websocket: WebSocket,
    registry: SubscriberRegistry = Depends(get_registry),
) -> None:
    """WebSocket endpoint for live reload notifications.

    Clients connect to this endpoint and receive a ``reload`` text frame
    whenever the document has been re-rendered.

    Args:
        websocket: WebSocket connection
        registry: Subscriber registry (injected)
    """
    await websocket_endpoint(websocket, registry)
