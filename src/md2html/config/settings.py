"""Application settings and defaults."""

# Server defaults
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"

# Remote rendering
DEFAULT_API_URL = "https://api.github.com/markdown"
DEFAULT_TIMEOUT_SECONDS = 30.0
ACCEPT_HEADER = "application/vnd.github+json"

# How long to wait for a removed document to be recreated before giving up
RECREATE_TIMEOUT_SECONDS = 2.0

# Push channel payload understood by the bootstrap script
RELOAD_MESSAGE = "reload"

USAGE = "Usage: md2html [-p port] file.md"

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "ACCEPT_HEADER",
    "RECREATE_TIMEOUT_SECONDS",
    "RELOAD_MESSAGE",
    "USAGE",
]
