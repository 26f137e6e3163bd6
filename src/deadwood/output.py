"""Leveled console output."""

from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from deadwood.models import BranchCandidate

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def warn(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def log(message: str) -> None:
    console.print(f"[blue]>[/blue] {escape(message)}")


def success(message: str) -> None:
    console.print(f"[green]{escape(message)}[/green]")


def candidate_table(candidates: Iterable[BranchCandidate], title: str = "Stale Branches") -> Table:
    """Build the numbered candidate table, local branches first."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("#", style="bold", justify="right", no_wrap=True)
    table.add_column("Branch", style="cyan", no_wrap=True)
    table.add_column("Last Commit", style="yellow", no_wrap=True)
    table.add_column("Author", style="magenta")
    table.add_column("Where", justify="center", no_wrap=True)

    for index, candidate in enumerate(candidates, start=1):
        where = "[bright_yellow]remote[/bright_yellow]" if candidate.is_remote else "local"
        table.add_row(
            str(index),
            escape(candidate.name),
            candidate.last_commit_date.isoformat(),
            escape(candidate.last_commit_author),
            where,
        )
    return table
