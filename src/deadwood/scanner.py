"""Stale branch discovery."""

from typing import Any, Optional

from deadwood import output
from deadwood.config import Settings
from deadwood.dates import Cutoff, is_stale_day, is_stale_instant, parse_timestamp, to_day
from deadwood.errors import GitError, GitHubError
from deadwood.git import GitRepo
from deadwood.github import PER_PAGE, GitHubClient
from deadwood.models import BranchCandidate, Origin, RepoIdentity


def scan_local(repo: GitRepo, settings: Settings, cutoff: Cutoff) -> list[BranchCandidate]:
    """Local branches older than the cutoff that are not excluded."""
    candidates = []
    for branch in repo.local_branches():
        # Exclusion wins regardless of age
        if settings.is_excluded(branch.name):
            continue
        if not is_stale_day(branch.day, cutoff):
            continue
        try:
            day = to_day(branch.day)
        except ValueError:
            continue
        candidates.append(BranchCandidate(branch.name, Origin.LOCAL, day, branch.author))
    return candidates


def _field(data: Any, key: str) -> dict[str, Any]:
    """Nested JSON object under ``key``, empty when missing or not an object."""
    value = data.get(key) if isinstance(data, dict) else None
    return value if isinstance(value, dict) else {}


def _committer(details: Any) -> tuple[Optional[str], str]:
    committer = _field(details, "committer")
    date, name = committer.get("date"), committer.get("name")
    return date, name if isinstance(name, str) else ""


def _commit_fields(entry: dict[str, Any]) -> tuple[Optional[str], Optional[str], str]:
    """Pull (sha, date, author) out of a branch listing entry."""
    commit = _field(entry, "commit")
    sha = commit.get("sha")
    date, author = _committer(_field(commit, "commit"))
    return sha if isinstance(sha, str) else None, date, author


class RemoteScanner:
    """Find stale branches that only exist on GitHub."""

    def __init__(self, client: GitHubClient, settings: Settings, per_page: int = PER_PAGE) -> None:
        self.client = client
        self.settings = settings
        self.per_page = per_page

    def _branch_entries(self, identity: RepoIdentity) -> list[dict[str, Any]]:
        """Collect listing pages until a short page or an error."""
        entries: list[dict[str, Any]] = []
        page = 1
        while True:
            try:
                batch = self.client.list_branches(identity.owner, identity.name, page=page, per_page=self.per_page)
            except GitHubError as err:
                if page == 1:
                    output.error(f"Failed to list branches of {identity}: {err}")
                else:
                    output.warn(f"Stopped listing branches of {identity} at page {page}: {err}")
                break
            entries.extend(batch)
            if len(batch) < self.per_page:
                break
            page += 1
        return entries

    def _resolve_commit(self, identity: RepoIdentity, entry: dict[str, Any]) -> tuple[Optional[str], str]:
        sha, date, author = _commit_fields(entry)
        if date or not sha:
            return date, author
        try:
            details = self.client.commit_details(identity.owner, identity.name, sha)
        except GitHubError:
            return None, author
        date, name = _committer(_field(details, "commit"))
        return date, name or author

    def scan(self, repo: GitRepo, identity: RepoIdentity, cutoff: Cutoff) -> list[BranchCandidate]:
        """Stale, non-excluded branches with no local branch of the same name.

        Entries without a usable name or commit date are skipped.
        """
        candidates = []
        for entry in self._branch_entries(identity):
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            if not isinstance(name, str) or not name:
                continue
            if self.settings.is_excluded(name):
                continue
            if repo.has_local_branch(name):
                continue

            date, author = self._resolve_commit(identity, entry)
            try:
                moment = parse_timestamp(date)
            except (TypeError, ValueError):
                continue
            if not is_stale_instant(moment, cutoff):
                continue
            candidates.append(BranchCandidate(name, Origin.REMOTE, moment.date(), author))
        return candidates


def scan_remote(
    repo: GitRepo,
    settings: Settings,
    cutoff: Cutoff,
    client: Optional[GitHubClient],
    identity: Optional[RepoIdentity],
) -> list[BranchCandidate]:
    """Remote-only stale branches, or nothing when remote scanning is off or impossible."""
    if not settings.scan_remote or not settings.token or client is None:
        return []
    if identity is None:
        output.warn(f"{repo.path} is not a GitHub repository, skipping remote branches")
        return []
    return RemoteScanner(client, settings).scan(repo, identity, cutoff)


class PullRequestGuard:
    """Veto candidates that still have an open pull request.

    Lookup failures count as "no open pull request" so that a flaky API
    never hides a deletable branch.
    """

    def __init__(self, client: Optional[GitHubClient], settings: Settings, identity: Optional[RepoIdentity]) -> None:
        self.client = client
        self.identity = identity
        self.enabled = bool(settings.check_prs and settings.token and client is not None and identity is not None)

    def has_open_pr(self, branch: str) -> bool:
        """Whether GitHub reports an open pull request with ``branch`` as head."""
        if not self.enabled:
            return False
        try:
            pulls = self.client.open_pull_requests(self.identity.owner, self.identity.name, branch)
        except GitHubError as err:
            output.warn(f"Could not check pull requests for {branch}: {err}")
            return False
        return len(pulls) > 0

    def filter(self, candidates: list[BranchCandidate]) -> list[BranchCandidate]:
        """Candidates without an open pull request, in their original order."""
        kept = []
        for candidate in candidates:
            if self.has_open_pr(candidate.name):
                output.log(f"Skipping {candidate.name}: open pull request")
                continue
            kept.append(candidate)
        return kept


def scan_repository(
    repo: GitRepo,
    settings: Settings,
    cutoff: Cutoff,
    client: Optional[GitHubClient] = None,
    identity: Optional[RepoIdentity] = None,
) -> list[BranchCandidate]:
    """All candidates for one repository: local first, then remote, PR guarded."""
    try:
        candidates = scan_local(repo, settings, cutoff)
    except GitError as err:
        output.error(str(err))
        candidates = []
    candidates.extend(scan_remote(repo, settings, cutoff, client, identity))
    return PullRequestGuard(client, settings, identity).filter(candidates)
