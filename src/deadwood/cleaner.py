"""Per-repository scan, select and delete pipeline."""

import shutil
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from deadwood import output
from deadwood.config import Settings
from deadwood.dates import Cutoff, compute_cutoff
from deadwood.errors import GitError, MissingToolError, SelectionError
from deadwood.executor import delete_local, delete_remote
from deadwood.git import GitRepo
from deadwood.github import GitHubClient
from deadwood.models import BranchCandidate, DeletionReport, RepositoryContext, SelectionPlan
from deadwood.scanner import scan_repository
from deadwood.selection import order_candidates, resolve

SELECT_PROMPT = "Select branches to delete (e.g. 1,3 or 2-4, 'all' or 'none'): "
CONFIRM_PROMPT = "Type 'yes' to delete {count} branch(es): "


@dataclass
class RepoResult:
    """What happened to one repository."""

    context: RepositoryContext
    ok: bool = True
    candidates: list[BranchCandidate] = field(default_factory=list)
    plan: SelectionPlan = field(default_factory=SelectionPlan)
    reports: list[DeletionReport] = field(default_factory=list)


def require_git() -> None:
    """Raises MissingToolError when git is not on PATH."""
    if shutil.which("git") is None:
        raise MissingToolError("git is required but was not found in PATH")


class Cleaner:
    """Runs the pipeline for each repository in turn."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[GitHubClient] = None,
        ask: Callable[[str], str] = input,
    ) -> None:
        self.settings = settings
        self.ask = ask
        if client is None and settings.token and (settings.scan_remote or settings.check_prs):
            client = GitHubClient(settings.token)
        self.client = client

    def _prompt(self, message: str) -> str:
        try:
            return self.ask(message)
        except EOFError:
            return ""

    def candidates(self, repo: GitRepo, context: RepositoryContext, cutoff: Cutoff) -> list[BranchCandidate]:
        try:
            repo.fetch()
        except GitError as err:
            output.warn(str(err))
        context.identity = repo.identity()
        return order_candidates(scan_repository(repo, self.settings, cutoff, self.client, context.identity))

    def process(self, path: Path, cutoff: Cutoff, interactive: bool = True) -> RepoResult:
        """Scan one repository and, if interactive, offer its stale branches for deletion."""
        result = RepoResult(RepositoryContext(path))
        try:
            repo = GitRepo(path)
        except GitError as err:
            output.error(str(err))
            result.ok = False
            return result

        output.log(f"Scanning {path} for branches older than {self.settings.stale_days} days")
        result.candidates = self.candidates(repo, result.context, cutoff)
        if not result.candidates:
            output.success(f"Nothing to delete in {path}")
            return result

        output.console.print(output.candidate_table(result.candidates, title=f"Stale Branches in {path}"))
        if not interactive:
            return result

        try:
            result.plan = resolve(result.candidates, self._prompt(SELECT_PROMPT))
        except SelectionError as err:
            output.warn(str(err))
            return result

        if not result.plan:
            output.log("No branches selected")
            return result

        if self.settings.dry_run:
            output.log(
                f"Dry run: would delete {len(result.plan.local)} local and {len(result.plan.remote)} remote branches"
            )
            return result

        if self._prompt(CONFIRM_PROMPT.format(count=len(result.plan))).strip() != "yes":
            output.log("Operation cancelled")
            return result

        if result.plan.local:
            result.reports.append(delete_local(repo, result.plan.local))
        if result.plan.remote:
            result.reports.append(
                delete_remote(self.client, result.context.identity, result.plan.remote, self.settings.token)
            )
        return result

    def run(self, paths: Optional[Sequence[Path]] = None, interactive: bool = True) -> list[RepoResult]:
        """Check whole-run preconditions, then process repositories one at a time.

        Raises:
            MissingToolError: If git is not installed
            ConfigError: If the settings are unusable
            StalenessError: If the cutoff cannot be computed
        """
        require_git()
        self.settings.validate()
        cutoff = compute_cutoff(self.settings.stale_days)
        return [self.process(path, cutoff, interactive) for path in (paths or self.settings.repos)]
