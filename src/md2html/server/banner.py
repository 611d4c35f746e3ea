"""Startup banner printed by the CLI."""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from md2html import __version__


def print_banner(
    url: str,
    document_path: Path,
    api_url: str,
    reload_enabled: bool,
    console: Console | None = None,
) -> None:
    """Print where the document is served and how it is kept up to date."""
    console = console or Console(stderr=True)

    table = Table.grid(padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Serving", f"[link={url}]{url}[/link]")
    table.add_row("Document", str(document_path))
    table.add_row("Renderer", api_url)
    table.add_row(
        "Live reload",
        "[green]on[/green]" if reload_enabled else "[yellow]off[/yellow]",
    )

    console.print(
        Panel(table, title=f"[bold blue]md2html[/bold blue] {__version__}", expand=False)
    )
