"""Git repository operations."""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from deadwood.errors import GitError
from deadwood.models import RepoIdentity

# git@github.com:owner/name.git, https://github.com/owner/name, ssh://git@github.com/owner/name.git
GITHUB_URL_PATTERN = re.compile(r"github\.com[:/](?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$")

# Field separator for for-each-ref output; cannot appear in a ref name
_SEP = "\x1f"
_REF_FORMAT = _SEP.join(
    [
        "%(refname:short)",
        "%(committerdate:short)",
        "%(authorname)",
    ]
)


@dataclass(frozen=True)
class LocalBranch:
    """A local branch with its last commit metadata."""

    name: str
    day: str
    author: str


def parse_repo_identity(url: str) -> Optional[RepoIdentity]:
    """Extract owner and name from a GitHub remote URL, or None if it is not one."""
    match = GITHUB_URL_PATTERN.search(url.strip())
    if not match:
        return None
    return RepoIdentity(match.group("owner"), match.group("name"))


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path) -> None:
        """Initialize repository."""
        self.path = path
        try:
            self.repo: Repo = Repo(path)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository {path}: {err}") from err

    def remote_url(self, remote: str = "origin") -> Optional[str]:
        """Configured URL of a remote, or None if there is no such remote."""
        try:
            return self.repo.remote(remote).url
        except (ValueError, GitCommandError):
            return None

    def identity(self) -> Optional[RepoIdentity]:
        """GitHub owner and name of the origin remote."""
        url = self.remote_url()
        if not url:
            return None
        return parse_repo_identity(url)

    def fetch(self) -> None:
        """Fetch all remotes and prune deleted remote-tracking refs."""
        try:
            for remote in self.repo.remotes:
                remote.fetch(prune=True)
        except GitCommandError as err:
            raise GitError(f"Failed to fetch from remotes: {err}") from err

    def current_branch(self) -> str:
        """Get current branch name, empty when HEAD is detached."""
        try:
            return self.repo.active_branch.name
        except TypeError:
            return ""

    def local_branches(self) -> Iterator[LocalBranch]:
        """Local branches with last commit date and author, in ref order."""
        try:
            output = self.repo.git.for_each_ref(f"--format={_REF_FORMAT}", "refs/heads")
        except GitCommandError as err:
            raise GitError(f"Failed to list branches: {err}") from err

        for line in output.splitlines():
            parts = line.split(_SEP)
            if len(parts) != 3:
                continue
            name, day, author = parts
            yield LocalBranch(name=name, day=day, author=author)

    def has_local_branch(self, name: str) -> bool:
        """Whether ``refs/heads/<name>`` exists."""
        try:
            self.repo.git.show_ref("--verify", "--quiet", f"refs/heads/{name}")
            return True
        except GitCommandError:
            return False

    def delete_branch(self, name: str) -> bool:
        """Force delete a local branch. Returns True if successful."""
        try:
            self.repo.git.branch("-D", name)
            return True
        except GitCommandError:
            return False
