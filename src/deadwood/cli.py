"""Command line interface for deadwood."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from deadwood import __version__, output
from deadwood.cleaner import Cleaner, RepoResult
from deadwood.config import Settings, load_settings
from deadwood.errors import DeadwoodError

app = typer.Typer(help="Find and delete stale git branches, locally and on GitHub")

ReposArg = Annotated[Optional[list[Path]], typer.Argument(help="Repositories to scan (default: current directory)")]
DaysOpt = Annotated[Optional[int], typer.Option("--days", "-d", help="Days without commits before a branch is stale")]
CheckPrsOpt = Annotated[
    Optional[bool], typer.Option("--check-prs/--no-check-prs", help="Keep branches that have an open pull request")
]
RemoteOpt = Annotated[Optional[bool], typer.Option("--remote/--no-remote", help="Also scan branches on GitHub")]
TokenOpt = Annotated[Optional[str], typer.Option("--token", envvar="GITHUB_TOKEN", help="GitHub API token")]
DryRunOpt = Annotated[Optional[bool], typer.Option("--dry-run/--no-dry-run", help="Show what would be deleted")]
ExcludeOpt = Annotated[
    Optional[str], typer.Option("--exclude", "-e", help="Regex of branch names never offered for deletion")
]
ConfigOpt = Annotated[Optional[Path], typer.Option("--config", help="Path to a KEY=value config file")]


def version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool, typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit")
    ] = False,
) -> None:
    """Find and delete stale git branches."""


def get_settings(
    config: Optional[Path],
    repos: Optional[list[Path]],
    **overrides: object,
) -> Settings:
    """Merge config file, environment and flags into Settings."""
    try:
        return load_settings(config, repos=repos or None, **overrides)
    except DeadwoodError as err:
        output.error(str(err))
        raise typer.Exit(code=1) from err


def run_cleaner(settings: Settings, interactive: bool) -> list[RepoResult]:
    try:
        return Cleaner(settings).run(interactive=interactive)
    except DeadwoodError as err:
        output.error(str(err))
        raise typer.Exit(code=1) from err


def exit_code(results: list[RepoResult]) -> int:
    """1 when any path was not a repository, otherwise 0 even if deletions failed."""
    return 0 if all(result.ok for result in results) else 1


@app.command()
def clean(
    repos: ReposArg = None,
    days: DaysOpt = None,
    check_prs: CheckPrsOpt = None,
    remote: RemoteOpt = None,
    token: TokenOpt = None,
    dry_run: DryRunOpt = None,
    exclude: ExcludeOpt = None,
    config: ConfigOpt = None,
) -> None:
    """Select stale branches and delete them after confirmation."""
    settings = get_settings(
        config,
        repos,
        stale_days=days,
        check_prs=check_prs,
        scan_remote=remote,
        token=token,
        dry_run=dry_run,
        exclude=exclude,
    )
    results = run_cleaner(settings, interactive=True)

    deleted = sum(len(report.deleted) for result in results for report in result.reports)
    failed = sum(len(report.failed) for result in results for report in result.reports)
    if deleted or failed:
        output.log(f"Done: {deleted} deleted, {failed} failed")
    raise typer.Exit(code=exit_code(results))


@app.command("list")
def list_branches(
    repos: ReposArg = None,
    days: DaysOpt = None,
    check_prs: CheckPrsOpt = None,
    remote: RemoteOpt = None,
    token: TokenOpt = None,
    exclude: ExcludeOpt = None,
    config: ConfigOpt = None,
) -> None:
    """List stale branches without deleting anything."""
    settings = get_settings(
        config,
        repos,
        stale_days=days,
        check_prs=check_prs,
        scan_remote=remote,
        token=token,
        exclude=exclude,
    )
    results = run_cleaner(settings, interactive=False)
    raise typer.Exit(code=exit_code(results))


if __name__ == "__main__":
    app()
