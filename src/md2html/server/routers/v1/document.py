"""Router serving the rendered document.

Every request reads the current document from the render cache; the
live reload bootstrap script is appended when reload is enabled.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from md2html.config.models import ServerConfig
from md2html.server.cache import RenderCache
from md2html.server.dependencies import get_cache, get_config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["document"])

LIVE_RELOAD_SCRIPT = """
<script>
let socket = new WebSocket("ws://" + location.hostname + ":%d/ws");

socket.onmessage = function(event) {
    if (event.data === "reload") {
        location.reload();
    }
};

socket.onerror = function(event) {
    console.error("WebSocket error observed:", event);
};

socket.onclose = function(event) {
    if (event.wasClean) {
        console.log('Closed cleanly, code=' + event.code + ', reason=' + event.reason);
    } else {
        console.error('Connection died');
    }
};
</script>
"""


def live_reload_script(port: int) -> bytes:
    """Bootstrap script that opens the push channel back to this server."""
    return (LIVE_RELOAD_SCRIPT % port).encode("utf-8")


@router.get("/", response_class=Response)
async def document(
    config: ServerConfig = Depends(get_config),
    cache: RenderCache = Depends(get_cache),
) -> Response:
    """Serve the current rendered document.

    Args:
        config: Server configuration (injected)
        cache: Render cache (injected)

    Returns:
        The rendered HTML
    """
    body = cache.read()
    if config.reload_enabled:
        body += live_reload_script(config.port)
    return Response(content=body, media_type="text/html")
