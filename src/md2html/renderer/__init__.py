"""Remote Markdown rendering for md2html."""

from .client import RendererClient

__all__ = ["RendererClient"]
