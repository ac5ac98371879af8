"""Rich-powered console output for promptpack."""

from __future__ import annotations

import logging

from rich.console import Console as RichConsole
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from promptpack import __version__
from promptpack.context.models import AssembledPrompt, ContextStats, SourceKind, SourceUnit


class Console:
    """Terminal output for promptpack using Rich."""

    def __init__(self, stderr: bool = False) -> None:
        self.console = RichConsole(stderr=stderr)

    def banner(self) -> None:
        self.console.print(
            Panel(
                f"[bold cyan]promptpack[/bold cyan] [dim]v{__version__}[/dim]\n"
                "[dim]Budgeted prompt context for your codebase[/dim]",
                border_style="cyan",
                padding=(1, 2),
            )
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def code(self, text: str, language: str = "text") -> None:
        """Render syntax-highlighted text."""
        self.console.print(Syntax(text, language, theme="monokai", line_numbers=False))

    def enable_logging(self, level: int = logging.INFO) -> None:
        """Route promptpack's loggers through Rich."""
        handler = RichHandler(console=self.console, show_path=False)
        logger = logging.getLogger("promptpack")
        logger.setLevel(level)
        logger.addHandler(handler)

    def show_stats(self, stats: ContextStats) -> None:
        table = Table(title="Context Statistics", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right", style="cyan")

        table.add_row("Source files", str(stats.source_files))
        table.add_row("Reference files", str(stats.reference_files))
        table.add_row("Total size (chars)", f"{stats.total_size:,}")

        self.console.print(table)

    def show_ranked_files(self, ranked: list[tuple[SourceUnit, int]]) -> None:
        """Display units in packing order with their priority."""
        if not ranked:
            self.console.print("[dim]No files in context.[/dim]")
            return

        table = Table(title="Context Files (packing order)", border_style="cyan")
        table.add_column("#", justify="right", style="dim")
        table.add_column("File", style="bold")
        table.add_column("Kind")
        table.add_column("Priority", justify="right", style="cyan")
        table.add_column("Chars", justify="right")

        for i, (unit, score) in enumerate(ranked, 1):
            kind_style = "magenta" if unit.kind == SourceKind.REFERENCE else "green"
            table.add_row(
                str(i),
                unit.name,
                f"[{kind_style}]{unit.kind.value}[/{kind_style}]",
                str(score),
                f"{len(unit.content):,}",
            )

        self.console.print(table)

    def show_prompt_summary(self, result: AssembledPrompt) -> None:
        self.console.print(
            Panel(result.summary(), title="[bold]Prompt[/bold]", border_style="green")
        )
