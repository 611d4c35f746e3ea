"""Core data models for md2html."""

from dataclasses import dataclass
from pathlib import Path

from md2html.config.settings import (
    DEFAULT_API_URL,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Event types that may leave the watch detached from the document path
REWATCH_EVENT_TYPES = frozenset({"deleted", "moved", "replaced"})


@dataclass
class ServerConfig:
    """Configuration for the preview server."""

    document_path: Path = Path("README.md")  # Markdown file to render
    host: str = DEFAULT_HOST  # Bind address
    port: int = DEFAULT_PORT  # Port number
    reload_enabled: bool = True  # Watch the file and push reloads
    open_browser: bool = False  # Open a browser tab once serving
    log_level: str = DEFAULT_LOG_LEVEL  # Logging level
    api_url: str = DEFAULT_API_URL  # Rendering endpoint
    timeout: float = DEFAULT_TIMEOUT_SECONDS  # Rendering request timeout in seconds

    @property
    def base_url(self) -> str:
        """URL the rendered document is served at."""
        return f"http://{self.host}:{self.port}"

    def validate(self) -> None:
        """Validate configuration values."""
        if not (1 <= self.port <= 65535):
            raise ValueError("Port must be 1-65535")
        if not self.document_path.is_file():
            raise ValueError(f"Not a file: {self.document_path}")
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")


@dataclass(frozen=True)
class WatcherEvent:
    """A change to the watched document reported by the file watcher."""

    event_type: str  # modified, created, deleted, moved, replaced
    file_path: Path  # Absolute path to the watched document
    timestamp: float  # Event timestamp

    def requires_rewatch(self) -> bool:
        """Whether the watch must be re-established before re-rendering.

        Editors that save by writing a new file and renaming it over the
        original, or by moving the original away first, can detach the
        watch from the path.
        """
        return self.event_type in REWATCH_EVENT_TYPES
