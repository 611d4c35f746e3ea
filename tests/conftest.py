"""Shared test fixtures for md2html."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from md2html.config.models import ServerConfig
from md2html.renderer import RendererClient

API_URL = "https://render.test/markdown"


class FakeRenderService:
    """Stand-in for the remote markdown API behind an httpx.MockTransport."""

    def __init__(self, html: bytes = b"<h1>Hello</h1>") -> None:
        self.html = html
        self.requests: list[httpx.Request] = []
        self.fail_with: Exception | None = None
        self.status_code = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        return httpx.Response(self.status_code, content=self.html)

    @property
    def texts(self) -> list[str]:
        return [json.loads(r.content)["text"] for r in self.requests]


@pytest.fixture
def service() -> FakeRenderService:
    return FakeRenderService()


@pytest.fixture
def renderer(service: FakeRenderService) -> RendererClient:
    client = RendererClient(api_url=API_URL, transport=httpx.MockTransport(service))
    yield client
    client.close()


@pytest.fixture
def document(tmp_path: Path) -> Path:
    """A Markdown file in a temporary directory."""
    path = tmp_path / "README.md"
    path.write_text("# Hello\n")
    return path


@pytest.fixture
def make_config(document: Path) -> Callable[..., ServerConfig]:
    def _make(**overrides: object) -> ServerConfig:
        values: dict[str, object] = {
            "document_path": document,
            "host": "127.0.0.1",
            "port": 8080,
            "api_url": API_URL,
        }
        values.update(overrides)
        return ServerConfig(**values)  # type: ignore[arg-type]

    return _make
