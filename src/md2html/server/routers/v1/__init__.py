"""Routers for the document and live reload endpoints."""

from . import document, ws

__all__ = ["document", "ws"]
