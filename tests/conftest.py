"""Test configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pytest
from git import Actor, Repo

from deadwood.errors import GitHubError

AUTHOR = Actor("Test User", "test@example.com")


def git_date(days_ago: float) -> str:
    """Raw git date ``<unix> +0000`` for a moment ``days_ago`` days in the past."""
    moment = datetime.now(timezone.utc) - timedelta(days=days_ago)
    return f"{int(moment.timestamp())} +0000"


def iso_date(days_ago: float) -> str:
    """GitHub style timestamp ``days_ago`` days in the past."""
    moment = datetime.now(timezone.utc) - timedelta(days=days_ago)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def commit_file(repo: Repo, name: str, content: str, days_ago: float) -> None:
    """Write, stage and commit a file with a back-dated commit."""
    path = Path(repo.working_tree_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([name])
    date = git_date(days_ago)
    repo.index.commit(
        f"Add {name}",
        author=AUTHOR,
        committer=AUTHOR,
        author_date=date,
        commit_date=date,
    )


@pytest.fixture
def make_branch() -> Callable[[Repo, str, float], None]:
    """Create a branch off main whose only new commit is ``days_ago`` old."""

    def create_branch(repo: Repo, name: str, days_ago: float) -> None:
        main_branch = repo.heads.main
        branch = repo.create_head(name, main_branch.commit)
        branch.checkout()
        commit_file(repo, f"{name.replace('/', '_')}.txt", f"{name} content", days_ago)
        main_branch.checkout()

    return create_branch


@pytest.fixture
def test_env(tmp_path: Path, make_branch: Callable[[Repo, str, float], None]) -> Generator[tuple[Path, Path], None, None]:
    """Create a local repository with a bare origin.

    Local branches: ``main`` (fresh), ``feat-a`` (40 days old), ``feat-b`` (5 days old).

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)
    local_repo.config_writer().set_value("user", "name", AUTHOR.name).release()
    local_repo.config_writer().set_value("user", "email", AUTHOR.email).release()

    commit_file(local_repo, "README.md", "# Test Repository", days_ago=0)
    # Whatever the default branch is called, name it main
    local_repo.git.branch("-M", "main")

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")

    make_branch(local_repo, "feat-a", 40)
    make_branch(local_repo, "feat-b", 5)

    yield local_path, remote_path


class FakeGitHub:
    """Stand-in for GitHubClient that records calls."""

    def __init__(
        self,
        pages: Optional[list[Any]] = None,
        pulls: Optional[dict[str, Any]] = None,
        commits: Optional[dict[str, dict[str, Any]]] = None,
        delete_results: Optional[dict[str, Any]] = None,
    ) -> None:
        # A page entry or a pull/delete result that is an exception gets raised
        self.pages = pages or []
        self.pulls = pulls or {}
        self.commits = commits or {}
        self.delete_results = delete_results or {}
        self.calls: list[tuple[str, ...]] = []

    def list_branches(self, owner: str, name: str, page: int = 1, per_page: int = 100) -> list[dict[str, Any]]:
        self.calls.append(("list_branches", owner, name, str(page)))
        if page > len(self.pages):
            return []
        result = self.pages[page - 1]
        if isinstance(result, Exception):
            raise result
        return result

    def commit_details(self, owner: str, name: str, sha: str) -> dict[str, Any]:
        self.calls.append(("commit_details", owner, name, sha))
        if sha not in self.commits:
            raise GitHubError("Not Found", status=404)
        return self.commits[sha]

    def open_pull_requests(self, owner: str, name: str, branch: str) -> list[dict[str, Any]]:
        self.calls.append(("open_pull_requests", owner, name, branch))
        result = self.pulls.get(branch, [])
        if isinstance(result, Exception):
            raise result
        return result

    def delete_branch(self, owner: str, name: str, branch: str) -> bool:
        self.calls.append(("delete_branch", owner, name, branch))
        result = self.delete_results.get(branch, True)
        if isinstance(result, Exception):
            raise result
        return result

    def calls_to(self, method: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == method]


def branch_entry(name: str, days_ago: Optional[float] = None, author: str = "Remote Dev", date: Optional[str] = None) -> dict[str, Any]:
    """A branch listing entry in the shape GitHub returns."""
    if date is None and days_ago is not None:
        date = iso_date(days_ago)
    return {
        "name": name,
        "commit": {
            "sha": f"sha-{name}",
            "commit": {"committer": {"name": author, "date": date}},
        },
    }


@pytest.fixture
def fake_github() -> type[FakeGitHub]:
    """The FakeGitHub class, for tests to instantiate."""
    return FakeGitHub


@pytest.fixture
def make_entry() -> Callable[..., dict[str, Any]]:
    return branch_entry
