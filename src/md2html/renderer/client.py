"""Client for the remote Markdown rendering API."""

import logging
from pathlib import Path
from types import TracebackType

import httpx

from md2html.config.settings import ACCEPT_HEADER, DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS
from md2html.errors import RenderError

logger = logging.getLogger(__name__)


class RendererClient:
    """Renders Markdown to HTML by delegating to GitHub's markdown API.

    The response body is returned verbatim; the service is trusted to return
    complete HTML. No retries are attempted.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: Rendering endpoint accepting ``{"text": ...}``
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the endpoint
        """
        self.api_url = api_url
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"accept": ACCEPT_HEADER},
        )

    def render(self, document: bytes) -> bytes:
        """
        Render a Markdown document.

        Args:
            document: Raw Markdown bytes (UTF-8)

        Returns:
            Rendered HTML bytes

        Raises:
            RenderError: If the document is not UTF-8, the request fails or
                the service answers with an error status
        """
        try:
            text = document.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RenderError(f"Document is not valid UTF-8: {e}") from e

        logger.info("Sending API request ...")
        try:
            response = self._client.post(self.api_url, json={"text": text})
            body = response.read()
        except httpx.HTTPError as e:
            raise RenderError(f"Request to {self.api_url} failed: {e}") from e

        if not response.is_success:
            raise RenderError(
                f"Rendering service returned {response.status_code}: "
                f"{body[:200].decode('utf-8', errors='replace')}"
            )
        return body

    def render_file(self, path: Path) -> bytes:
        """
        Read a Markdown file and render it.

        Args:
            path: Markdown file to read

        Returns:
            Rendered HTML bytes

        Raises:
            RenderError: If the file cannot be read or rendering fails
        """
        try:
            document = path.read_bytes()
        except OSError as e:
            raise RenderError(f"Cannot read {path}: {e}") from e
        return self.render(document)

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def __enter__(self) -> "RendererClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
