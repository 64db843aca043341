"""Branch cleanup data model."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class Scope(Enum):
    """Where a branch ref lives."""

    LOCAL = "local"
    REMOTE = "remote"


class ErrorKind(Enum):
    """Why an operation did not succeed."""

    NOT_A_REPOSITORY = "not-a-repository"
    QUERY_FAILED = "query-failed"
    NOT_MERGED = "not-merged"
    DELETION_FAILED = "deletion-failed"


class GitError(Exception):
    """Git operation error."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.QUERY_FAILED) -> None:
        """Initialize error.

        Args:
            message: Error message
            kind: Category of the failure
        """
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True)
class BranchRef:
    """A local branch or a remote-tracking branch.

    For remote refs ``name`` has the remote prefix stripped, so
    ``origin/feature/x`` becomes remote ``origin`` and name ``feature/x``.
    """

    name: str
    scope: Scope = Scope.LOCAL
    remote_name: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.scope is Scope.REMOTE) != (self.remote_name is not None):
            raise ValueError("remote_name must be set exactly when scope is REMOTE")

    @classmethod
    def local(cls, name: str) -> "BranchRef":
        return cls(name)

    @classmethod
    def remote(cls, remote_name: str, name: str) -> "BranchRef":
        return cls(name, Scope.REMOTE, remote_name)

    @classmethod
    def parse_remote(cls, short_name: str) -> "BranchRef":
        """Split ``remote/branch`` on the first separator."""
        remote_name, _, name = short_name.partition("/")
        return cls.remote(remote_name, name)

    @property
    def full_name(self) -> str:
        if self.scope is Scope.REMOTE:
            return f"{self.remote_name}/{self.name}"
        return self.name

    def to_dict(self) -> dict[str, Any]:
        if self.scope is Scope.REMOTE:
            return {"remote": self.remote_name, "branch": self.name, "full_name": self.full_name}
        return {"branch": self.name}


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Outcome of a read-only query.

    ``value`` always holds something usable: on failure it is the fail-closed
    default (empty list, ``None`` or ``False``) and ``error`` carries git's
    message. Callers that only look at ``value`` cannot tell an empty answer
    from a failed one; ``reason`` is ``ErrorKind.QUERY_FAILED`` for failures.
    """

    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def reason(self) -> Optional[ErrorKind]:
        return ErrorKind.QUERY_FAILED if self.failed else None


@dataclass(frozen=True)
class RepositoryState:
    """Snapshot of the branch topology for one invocation."""

    is_repo: bool
    default_branch: str
    current_branch: Optional[str] = None
    local_branches: list[str] = field(default_factory=list)
    remote_branches: list[BranchRef] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "default": self.default_branch,
            "current": self.current_branch,
            "local": list(self.local_branches),
            "remote": [ref.to_dict() for ref in self.remote_branches],
        }


@dataclass(frozen=True)
class CleanupOptions:
    """Caller choices for building a cleanup plan."""

    extra_protected: frozenset[str] = frozenset()
    include_remote: bool = False


@dataclass(frozen=True)
class CleanupPlan:
    """Protected branches and the candidates left for deletion."""

    protected_branches: frozenset[str]
    local_candidates: list[str] = field(default_factory=list)
    remote_candidates: list[BranchRef] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.local_candidates and not self.remote_candidates

    def to_dict(self) -> dict[str, Any]:
        return {
            "protected": sorted(self.protected_branches),
            "local": list(self.local_candidates),
            "remote": [ref.to_dict() for ref in self.remote_candidates],
        }


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of one deletion attempt."""

    branch: BranchRef
    succeeded: bool
    reason: Optional[ErrorKind] = None
    message: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"branch": self.branch.full_name, "success": self.succeeded}
        if not self.succeeded:
            result["reason"] = self.reason.value if self.reason else None
            result["error"] = self.message
        return result


@dataclass
class CleanupReport:
    """Outcomes of a cleanup run, in processing order."""

    outcomes: list[DeletionOutcome] = field(default_factory=list)

    def add(self, outcome: DeletionOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def deleted(self) -> list[DeletionOutcome]:
        return [outcome for outcome in self.outcomes if outcome.succeeded]

    @property
    def skipped(self) -> list[DeletionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    def to_dict(self) -> dict[str, Any]:
        return {
            "deleted": len(self.deleted),
            "skipped": len(self.skipped),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }
