"""Data types shared across the pipeline."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Optional


class Origin(Enum):
    """Where a branch lives."""

    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class RepoIdentity:
    """Owner and name of a GitHub repository."""

    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class BranchCandidate:
    """A stale branch that may be offered for deletion."""

    name: str
    origin: Origin
    last_commit_date: date
    last_commit_author: str

    @property
    def is_remote(self) -> bool:
        return self.origin is Origin.REMOTE


@dataclass
class RepositoryContext:
    """One repository being scanned and cleaned."""

    path: Path
    identity: Optional[RepoIdentity] = None


@dataclass
class SelectionPlan:
    """Branch names chosen for deletion, split by origin."""

    local: list[str] = field(default_factory=list)
    remote: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.local) + len(self.remote)


@dataclass
class DeletionReport:
    """Outcome of one deletion batch."""

    origin: Origin
    requested: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    aborted: Optional[str] = None

    @property
    def summary(self) -> str:
        return f"Deleted {len(self.deleted)} out of {len(self.requested)} {self.origin.value} branches"
