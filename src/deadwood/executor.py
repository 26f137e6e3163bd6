"""Branch deletion."""

from collections.abc import Sequence
from typing import Optional

from deadwood import output
from deadwood.errors import GitHubError
from deadwood.git import GitRepo
from deadwood.github import GitHubClient
from deadwood.models import DeletionReport, Origin, RepoIdentity


def delete_local(repo: GitRepo, branches: Sequence[str]) -> DeletionReport:
    """Force delete local branches one by one, continuing past failures."""
    report = DeletionReport(Origin.LOCAL, requested=list(branches))
    current = repo.current_branch()
    for branch in branches:
        if branch == current:
            report.failed.append(branch)
            output.error(f"Failed to delete local branch {branch}: it is checked out")
        elif repo.delete_branch(branch):
            report.deleted.append(branch)
            output.success(f"Deleted local branch {branch}")
        else:
            report.failed.append(branch)
            output.error(f"Failed to delete local branch {branch}")
    output.log(report.summary)
    return report


def delete_remote(
    client: Optional[GitHubClient],
    identity: Optional[RepoIdentity],
    branches: Sequence[str],
    token: Optional[str] = None,
) -> DeletionReport:
    """Delete GitHub branches one by one.

    Without a credential or a repository identity nothing is attempted.
    """
    report = DeletionReport(Origin.REMOTE, requested=list(branches))
    if not branches:
        return report
    if client is None or not token:
        report.aborted = "a GitHub token is required to delete remote branches"
    elif identity is None:
        report.aborted = "the GitHub repository could not be determined"
    if report.aborted:
        output.error(f"Cannot delete remote branches: {report.aborted}")
        output.log(report.summary)
        return report

    for branch in branches:
        reason = ""
        try:
            deleted = client.delete_branch(identity.owner, identity.name, branch)
        except GitHubError as err:
            deleted = False
            reason = f": {err}"

        if deleted:
            report.deleted.append(branch)
            output.success(f"Deleted remote branch {branch}")
        else:
            report.failed.append(branch)
            output.error(f"Failed to delete remote branch {branch}{reason}")
    output.log(report.summary)
    return report
