"""md2html: preview a Markdown file rendered by GitHub, with live reload."""

__version__ = "0.1.0"
__author__ = "md2html contributors"
__license__ = "MIT"

from md2html.config.models import ServerConfig, WatcherEvent
from md2html.errors import Md2HtmlError, RenderError, WatchError

__all__ = [
    "ServerConfig",
    "WatcherEvent",
    "Md2HtmlError",
    "RenderError",
    "WatchError",
    "__version__",
]
