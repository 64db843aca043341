"""Git repository operations."""

import logging
from pathlib import Path
from typing import Optional, Union

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from branchsweep.models import (
    BranchRef,
    CleanupPlan,
    CleanupReport,
    DeletionOutcome,
    ErrorKind,
    GitError,
    QueryResult,
    RepositoryState,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

ORIGIN_HEAD = "refs/remotes/origin/HEAD"
ORIGIN_PREFIX = "refs/remotes/origin/"
FALLBACK_DEFAULT_BRANCH = "main"
DEFAULT_BRANCH_NAMES = ("main", "master")

# Raised by GitPython when the path or the repository cannot be used
REPO_ERRORS = (GitCommandError, InvalidGitRepositoryError, NoSuchPathError)


def _open(path: Path) -> Repo:
    return Repo(path, search_parent_directories=True)


def _describe(err: Exception) -> str:
    """Return git's own diagnostic for a failed command when there is one."""
    stderr = (getattr(err, "stderr", "") or "").strip()
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:") :].strip().strip("'").strip()
    return stderr or str(err)


class RepositoryInspector:
    """Read-only queries against a working tree.

    Every query opens the repository, asks git, and closes it again. Failures
    never propagate: the returned ``QueryResult`` holds the fail-closed value
    and the error text.
    """

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)

    def is_repository(self) -> bool:
        """Check whether the path is inside a non-bare working tree."""
        try:
            with _open(self.path) as repo:
                return not repo.bare
        except REPO_ERRORS:
            return False

    def default_branch(self) -> str:
        """Resolve the default branch.

        Order: the branch ``origin/HEAD`` points at, then an existing branch
        named exactly ``main`` or ``master`` (local or on any remote), then
        ``main``.
        """
        try:
            with _open(self.path) as repo:
                target = repo.git.symbolic_ref(ORIGIN_HEAD).strip()
            if target.startswith(ORIGIN_PREFIX):
                return target[len(ORIGIN_PREFIX) :]
        except REPO_ERRORS as err:
            logger.debug("origin/HEAD not resolvable in %s: %s", self.path, _describe(err))

        known = set(self.list_local_branches().value)
        known.update(ref.name for ref in self.list_remote_branches().value)
        for name in DEFAULT_BRANCH_NAMES:
            if name in known:
                logger.debug("Using existing branch %r as default", name)
                return name

        logger.debug("No main or master branch found, assuming %r", FALLBACK_DEFAULT_BRANCH)
        return FALLBACK_DEFAULT_BRANCH

    def current_branch(self) -> QueryResult[Optional[str]]:
        """Get the checked-out branch, ``None`` on a detached HEAD."""
        try:
            with _open(self.path) as repo:
                try:
                    return QueryResult(repo.active_branch.name)
                except TypeError:
                    # Detached HEAD is not a failure, there is just no branch
                    return QueryResult(None)
        except (ValueError, *REPO_ERRORS) as err:
            logger.debug("Failed to get current branch: %s", _describe(err))
            return QueryResult(None, _describe(err))

    def list_local_branches(self) -> QueryResult[list[str]]:
        """List local branch names in git's order."""
        try:
            with _open(self.path) as repo:
                output = repo.git.for_each_ref("--format=%(refname:lstrip=2)", "refs/heads")
        except REPO_ERRORS as err:
            logger.debug("Failed to list local branches: %s", _describe(err))
            return QueryResult([], _describe(err))

        branches: list[str] = []
        for line in output.splitlines():
            name = line.strip()
            if name and name not in branches:
                branches.append(name)
        return QueryResult(branches)

    def list_remote_branches(self) -> QueryResult[list[BranchRef]]:
        """List remote-tracking branches, skipping symbolic refs such as ``origin/HEAD``."""
        try:
            with _open(self.path) as repo:
                output = repo.git.for_each_ref("--format=%(refname:lstrip=2)%09%(symref)", "refs/remotes")
        except REPO_ERRORS as err:
            logger.debug("Failed to list remote branches: %s", _describe(err))
            return QueryResult([], _describe(err))

        branches: list[BranchRef] = []
        for line in output.splitlines():
            short_name, _, symref = line.partition("\t")
            short_name = short_name.strip()
            if not short_name or symref.strip() or "/" not in short_name:
                continue
            branches.append(BranchRef.parse_remote(short_name))
        return QueryResult(branches)

    def is_merged(self, branch_name: str) -> QueryResult[bool]:
        """Check whether a branch tip is reachable from the default branch tip."""
        default = self.default_branch()
        if branch_name == default:
            return QueryResult(True)

        try:
            with _open(self.path) as repo:
                output = repo.git.for_each_ref("--merged", default, "--format=%(refname:lstrip=2)", "refs/heads")
        except REPO_ERRORS as err:
            logger.debug("Failed to check whether %s is merged into %s: %s", branch_name, default, _describe(err))
            return QueryResult(False, _describe(err))

        merged = {line.strip() for line in output.splitlines()}
        return QueryResult(branch_name in merged)

    def state(self) -> RepositoryState:
        """Gather everything the classifier needs."""
        if not self.is_repository():
            return RepositoryState(is_repo=False, default_branch=FALLBACK_DEFAULT_BRANCH)

        return RepositoryState(
            is_repo=True,
            default_branch=self.default_branch(),
            current_branch=self.current_branch().value,
            local_branches=self.list_local_branches().value,
            remote_branches=self.list_remote_branches().value,
        )


class DeletionExecutor:
    """Branch deletion, one branch per call.

    Failures come back as a ``DeletionOutcome``; nothing is retried and
    nothing is raised for git errors.
    """

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)

    def delete_local(self, branch_name: str, force: bool = False) -> DeletionOutcome:
        """Delete a local branch.

        Without ``force`` git refuses branches whose tip is not merged into the
        current checkout.
        """
        branch = BranchRef.local(branch_name)
        try:
            with _open(self.path) as repo:
                repo.git.branch("-D" if force else "-d", branch_name)
        except (InvalidGitRepositoryError, NoSuchPathError) as err:
            return DeletionOutcome(branch, False, ErrorKind.NOT_A_REPOSITORY, _describe(err))
        except GitCommandError as err:
            message = _describe(err)
            reason = ErrorKind.NOT_MERGED if "not fully merged" in message else ErrorKind.DELETION_FAILED
            logger.info("Could not delete %s: %s", branch_name, message)
            return DeletionOutcome(branch, False, reason, message)

        logger.info("Deleted local branch %s%s", branch_name, " (forced)" if force else "")
        return DeletionOutcome(branch, True)

    def delete_remote(self, remote_name: str, branch_name: str) -> DeletionOutcome:
        """Ask the remote to drop its copy of a branch.

        No local ancestry check happens here; the remote decides.
        """
        branch = BranchRef.remote(remote_name, branch_name)
        try:
            with _open(self.path) as repo:
                repo.git.push(remote_name, "--delete", branch_name)
        except (InvalidGitRepositoryError, NoSuchPathError) as err:
            return DeletionOutcome(branch, False, ErrorKind.NOT_A_REPOSITORY, _describe(err))
        except GitCommandError as err:
            message = _describe(err)
            logger.info("Could not delete %s: %s", branch.full_name, message)
            return DeletionOutcome(branch, False, ErrorKind.DELETION_FAILED, message)

        logger.info("Deleted remote branch %s", branch.full_name)
        return DeletionOutcome(branch, True)

    def execute(self, plan: CleanupPlan, force: bool = False) -> CleanupReport:
        """Delete every candidate in plan order, local branches first."""
        report = CleanupReport()
        for branch_name in plan.local_candidates:
            report.add(self.delete_local(branch_name, force=force))
        for ref in plan.remote_candidates:
            report.add(self.delete_remote(ref.remote_name, ref.name))
        return report


def open_repository(path: PathLike) -> RepositoryInspector:
    """Get an inspector for a path that must be a repository."""
    inspector = RepositoryInspector(path)
    if not inspector.is_repository():
        raise GitError(f"Not a git repository: {path}", kind=ErrorKind.NOT_A_REPOSITORY)
    return inspector


def is_repository(path: PathLike) -> bool:
    """Check whether ``path`` is inside a git working tree."""
    return RepositoryInspector(path).is_repository()


def default_branch(path: PathLike) -> str:
    """Resolve the default branch of the repository at ``path``."""
    return RepositoryInspector(path).default_branch()


def current_branch(path: PathLike) -> Optional[str]:
    """Get the checked-out branch, ``None`` when detached or on failure."""
    return RepositoryInspector(path).current_branch().value


def list_local_branches(path: PathLike) -> list[str]:
    """List local branch names, empty on failure."""
    return RepositoryInspector(path).list_local_branches().value


def list_remote_branches(path: PathLike) -> list[BranchRef]:
    """List remote-tracking branches, empty on failure."""
    return RepositoryInspector(path).list_remote_branches().value


def is_merged(branch_name: str, path: PathLike) -> bool:
    """Check whether a branch is merged into the default branch, ``False`` on failure."""
    return RepositoryInspector(path).is_merged(branch_name).value


def delete_local(branch_name: str, path: PathLike, force: bool = False) -> DeletionOutcome:
    """Delete a local branch, safely unless ``force`` is set."""
    return DeletionExecutor(path).delete_local(branch_name, force=force)


def delete_remote(remote_name: str, branch_name: str, path: PathLike) -> DeletionOutcome:
    """Delete a branch on the named remote."""
    return DeletionExecutor(path).delete_remote(remote_name, branch_name)
