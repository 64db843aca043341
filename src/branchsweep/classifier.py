"""Split branches into protected ones and cleanup candidates."""

import logging
from collections.abc import Iterable

from branchsweep.git import PathLike, RepositoryInspector
from branchsweep.models import CleanupOptions, CleanupPlan, RepositoryState

logger = logging.getLogger(__name__)


def protected_branches(state: RepositoryState, extra_protected: Iterable[str] = ()) -> frozenset[str]:
    """Default branch, current branch and anything the caller asked for."""
    if isinstance(extra_protected, str):
        extra_protected = (extra_protected,)
    names = [state.default_branch, state.current_branch, *extra_protected]
    return frozenset(name for name in names if name)


def plan(state: RepositoryState, options: CleanupOptions = CleanupOptions()) -> CleanupPlan:
    """Build a cleanup plan from a repository snapshot.

    Remote branches are protected by branch name alone, on every remote, so
    protecting ``feature-x`` also keeps ``origin/feature-x`` and
    ``upstream/feature-x``.
    """
    protected = protected_branches(state, options.extra_protected)

    local = [name for name in state.local_branches if name not in protected]
    remote = []
    if options.include_remote:
        remote = [ref for ref in state.remote_branches if ref.name not in protected]

    logger.debug(
        "Protected %s, %d local and %d remote candidate(s)",
        sorted(protected),
        len(local),
        len(remote),
    )
    return CleanupPlan(protected_branches=protected, local_candidates=local, remote_candidates=remote)


def plan_cleanup(path: PathLike, protect: Iterable[str] = (), include_remote: bool = False) -> CleanupPlan:
    """Inspect the repository at ``path`` and plan its cleanup."""
    if isinstance(protect, str):
        protect = (protect,)
    state = RepositoryInspector(path).state()
    options = CleanupOptions(extra_protected=frozenset(protect), include_remote=include_remote)
    return plan(state, options)
