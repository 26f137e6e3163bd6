"""Tests for branch deletion."""

from pathlib import Path

import pytest

from deadwood.errors import GitHubError
from deadwood.executor import delete_local, delete_remote
from deadwood.git import GitRepo
from deadwood.models import Origin, RepoIdentity

IDENTITY = RepoIdentity("octo", "widgets")


def test_delete_local_continues_past_failures(test_env: tuple[Path, Path], capsys: pytest.CaptureFixture[str]) -> None:
    """Test that the checked out branch fails while the rest of the batch is still deleted."""
    local_path, _ = test_env
    repo = GitRepo(local_path)
    repo.repo.heads["feat-a"].checkout()

    report = delete_local(repo, ["feat-a", "feat-b", "nonexistent"])
    assert report.origin is Origin.LOCAL
    assert report.deleted == ["feat-b"]
    assert report.failed == ["feat-a", "nonexistent"]
    assert report.summary == "Deleted 1 out of 3 local branches"
    assert repo.has_local_branch("feat-a")
    assert not repo.has_local_branch("feat-b")
    assert "checked out" in capsys.readouterr().err


def test_delete_remote(fake_github: type) -> None:
    """Test per-branch outcomes of remote deletion."""
    client = fake_github(delete_results={"locked": False, "flaky": GitHubError("Server Error", 500)})
    report = delete_remote(client, IDENTITY, ["old", "locked", "flaky", "older"], token="t")
    assert report.deleted == ["old", "older"]
    assert report.failed == ["locked", "flaky"]
    assert report.summary == "Deleted 2 out of 4 remote branches"
    assert [call[3] for call in client.calls_to("delete_branch")] == ["old", "locked", "flaky", "older"]


def test_delete_remote_without_token(fake_github: type, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that the batch aborts before any request without a credential and still reports a tally."""
    client = fake_github()
    report = delete_remote(client, IDENTITY, ["old", "older"], token=None)
    assert report.aborted
    assert report.deleted == []
    assert client.calls == []
    assert report.summary == "Deleted 0 out of 2 remote branches"
    captured = capsys.readouterr()
    assert "token" in captured.err
    assert "Deleted 0 out of 2 remote branches" in captured.out
    assert delete_remote(None, IDENTITY, ["old"], token="t").aborted


def test_delete_remote_without_identity(fake_github: type) -> None:
    """Test that the batch aborts before any request without a repository."""
    client = fake_github()
    report = delete_remote(client, None, ["old"], token="t")
    assert report.aborted
    assert client.calls == []


def test_delete_remote_empty_batch(fake_github: type) -> None:
    """Test that nothing happens for an empty batch."""
    report = delete_remote(None, None, [])
    assert report.aborted is None
    assert report.summary == "Deleted 0 out of 0 remote branches"
