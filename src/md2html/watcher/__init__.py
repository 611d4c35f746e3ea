"""File system watching components for md2html."""

from .observer import DocumentEventHandler, FileObserver

__all__ = ["DocumentEventHandler", "FileObserver"]
