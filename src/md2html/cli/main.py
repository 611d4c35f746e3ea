"""CLI main entry point using Typer."""

import logging
import socket
import threading
import time
import webbrowser
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler

from md2html.config.models import ServerConfig
from md2html.config.settings import (
    DEFAULT_API_URL,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
    USAGE,
)
from md2html.errors import RenderError

app = typer.Typer(
    name="md2html",
    help="Preview a Markdown file rendered by GitHub, with live reload",
    add_completion=False,
)

console = Console(stderr=True)

EXIT_CONFIG = 2
EXIT_READ = 3
EXIT_RENDER = 4
EXIT_PORT_IN_USE = 5
EXIT_WATCH = 6


def _fail(message: str, code: int) -> typer.Exit:
    console.print(f"[red]✗[/red] {message}", style="bold")
    return typer.Exit(code=code)


def setup_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket before the server starts."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


@app.command()
def serve(
    paths: Optional[list[Path]] = typer.Argument(
        None,
        help="Markdown file to serve",
        show_default=False,
    ),
    port: int = typer.Option(
        DEFAULT_PORT,
        "--port",
        "-p",
        help="Port to bind server",
    ),
    host: str = typer.Option(
        DEFAULT_HOST,
        "--host",
        "-h",
        help="Host to bind server",
    ),
    no_reload: bool = typer.Option(
        False,
        "--no-reload",
        help="Disable file watching and live reload",
    ),
    open_browser: bool = typer.Option(
        False,
        "--open",
        help="Open the document in a browser once serving",
    ),
    api_url: str = typer.Option(
        DEFAULT_API_URL,
        "--api-url",
        help="Markdown rendering endpoint",
    ),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT_SECONDS,
        "--timeout",
        help="Rendering request timeout in seconds",
    ),
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL,
        "--log-level",
        "--log",
        "-l",
        help="Logging level (DEBUG/INFO/WARNING/ERROR)",
    ),
) -> None:
    """Render a Markdown file and serve it with live reload."""
    if not paths or len(paths) != 1:
        typer.echo(USAGE)
        raise typer.Exit(code=0)

    config = ServerConfig(
        document_path=paths[0].absolute(),
        host=host,
        port=port,
        reload_enabled=not no_reload,
        open_browser=open_browser,
        log_level=log_level.upper(),
        api_url=api_url,
        timeout=timeout,
    )
    if not config.document_path.exists():
        raise _fail(f"Path not found: {paths[0]}", EXIT_READ)
    try:
        config.validate()
    except ValueError as e:
        raise _fail(f"Configuration error: {e}", EXIT_CONFIG)

    setup_logging(config.log_level)
    run(config)


def run(config: ServerConfig) -> None:
    """Render once, then serve until interrupted or the watch is lost."""
    from md2html.renderer import RendererClient
    from md2html.server.app import create_app
    from md2html.server.banner import print_banner
    from md2html.server.cache import RenderCache

    try:
        document = config.document_path.read_bytes()
    except OSError as e:
        raise _fail(f"Cannot read {config.document_path}: {e}", EXIT_READ)

    with RendererClient(api_url=config.api_url, timeout=config.timeout) as renderer:
        try:
            cache = RenderCache(renderer.render(document))
        except RenderError as e:
            raise _fail(f"Initial render failed: {e}", EXIT_RENDER)

        try:
            sock = bind_socket(config.host, config.port)
        except OSError as e:
            if "address already in use" in str(e).lower():
                raise _fail(f"Port {config.port} is already in use", EXIT_PORT_IN_USE)
            raise _fail(f"Error: {e}", 1)

        server: uvicorn.Server | None = None

        def stop_server(exc: BaseException) -> None:
            if server is not None:
                server.should_exit = True

        server_app = create_app(config, renderer, cache, on_fatal=stop_server)
        server = uvicorn.Server(
            uvicorn.Config(server_app, log_level=config.log_level.lower())
        )

        print_banner(
            url=config.base_url,
            document_path=config.document_path,
            api_url=config.api_url,
            reload_enabled=config.reload_enabled,
            console=console,
        )

        if config.open_browser:

            def open_browser_delayed() -> None:
                time.sleep(1.5)  # Wait for server to start
                webbrowser.open(config.base_url)

            threading.Thread(target=open_browser_delayed, daemon=True).start()

        try:
            server.run(sockets=[sock])
        except KeyboardInterrupt:
            console.print("\n[yellow]Server stopped[/yellow]")
        finally:
            sock.close()

    reloader = server_app.state.reloader
    if reloader is not None and reloader.fatal_error is not None:
        raise _fail(f"Watch failed: {reloader.fatal_error}", EXIT_WATCH)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
