"""Tests for cleanup planning."""

from pathlib import Path

import pytest
from git import Repo

from branchsweep.classifier import plan, plan_cleanup, protected_branches
from branchsweep.models import BranchRef, CleanupOptions, RepositoryState


@pytest.fixture
def state() -> RepositoryState:
    """Snapshot with local feature branches and two remotes."""
    return RepositoryState(
        is_repo=True,
        default_branch="main",
        current_branch="main",
        local_branches=["feature-1", "feature-2", "main"],
        remote_branches=[
            BranchRef.remote("origin", "feature-1"),
            BranchRef.remote("origin", "feature/nested"),
            BranchRef.remote("origin", "main"),
            BranchRef.remote("upstream", "feature-1"),
        ],
    )


def test_default_and_current_are_protected(state: RepositoryState) -> None:
    """Test that the default and current branch are never candidates."""
    cleanup_plan = plan(state)

    assert cleanup_plan.protected_branches == frozenset({"main"})
    assert cleanup_plan.local_candidates == ["feature-1", "feature-2"]


def test_current_branch_is_protected() -> None:
    """Test that a checked-out feature branch is protected."""
    state = RepositoryState(
        is_repo=True,
        default_branch="main",
        current_branch="feature-2",
        local_branches=["feature-1", "feature-2", "main"],
    )

    cleanup_plan = plan(state)

    assert cleanup_plan.protected_branches == frozenset({"main", "feature-2"})
    assert cleanup_plan.local_candidates == ["feature-1"]


def test_detached_head_protects_only_default() -> None:
    """Test that a missing current branch is dropped from the protected set."""
    state = RepositoryState(is_repo=True, default_branch="main", local_branches=["main", "topic"])

    assert protected_branches(state) == frozenset({"main"})
    assert plan(state).local_candidates == ["topic"]


@pytest.mark.parametrize(
    "protect",
    [
        {"feature-1"},
        {"feature-1", "release"},
        {"feature-1", "main"},
    ],
)
def test_extra_protection(state: RepositoryState, protect: set[str]) -> None:
    """Test that explicitly protected branches leave the candidates."""
    cleanup_plan = plan(state, CleanupOptions(extra_protected=frozenset(protect)))

    assert "feature-1" in cleanup_plan.protected_branches
    assert cleanup_plan.local_candidates == ["feature-2"]


def test_empty_protected_names_are_ignored(state: RepositoryState) -> None:
    """Test that empty names do not end up in the protected set."""
    assert protected_branches(state, ["", "feature-1"]) == frozenset({"main", "feature-1"})


def test_remote_branches_excluded_by_default(state: RepositoryState) -> None:
    """Test that remote branches are only planned when asked for."""
    assert plan(state).remote_candidates == []


def test_remote_candidates(state: RepositoryState) -> None:
    """Test that protected names are kept on remotes too."""
    cleanup_plan = plan(state, CleanupOptions(include_remote=True))

    assert cleanup_plan.remote_candidates == [
        BranchRef.remote("origin", "feature-1"),
        BranchRef.remote("origin", "feature/nested"),
        BranchRef.remote("upstream", "feature-1"),
    ]


def test_protection_applies_to_every_remote(state: RepositoryState) -> None:
    """Test that protecting a name keeps that branch on all remotes."""
    options = CleanupOptions(extra_protected=frozenset({"feature-1"}), include_remote=True)

    cleanup_plan = plan(state, options)

    assert cleanup_plan.remote_candidates == [BranchRef.remote("origin", "feature/nested")]


def test_plan_keeps_invariants(state: RepositoryState) -> None:
    """Test that candidates and protected branches never overlap."""
    cleanup_plan = plan(state, CleanupOptions(extra_protected=frozenset({"feature-2"}), include_remote=True))

    assert not set(cleanup_plan.local_candidates) & cleanup_plan.protected_branches
    assert not {ref.name for ref in cleanup_plan.remote_candidates} & cleanup_plan.protected_branches
    assert state.default_branch in cleanup_plan.protected_branches
    assert state.current_branch in cleanup_plan.protected_branches


def test_plan_cleanup(feature_repo: Path) -> None:
    """Test planning against a real repository."""
    cleanup_plan = plan_cleanup(feature_repo)

    assert cleanup_plan.local_candidates == ["feature-1", "feature-2"]
    assert cleanup_plan.remote_candidates == []


def test_plan_cleanup_with_protection(feature_repo: Path) -> None:
    """Test that protecting feature-1 keeps feature-2 as the only candidate."""
    cleanup_plan = plan_cleanup(feature_repo, protect=["feature-1"])

    assert cleanup_plan.local_candidates == ["feature-2"]


def test_plan_cleanup_protects_checked_out_branch(feature_repo: Path) -> None:
    """Test that switching branches protects the new current branch."""
    Repo(feature_repo).heads["feature-1"].checkout()

    cleanup_plan = plan_cleanup(feature_repo)

    assert cleanup_plan.local_candidates == ["feature-2"]


def test_plan_cleanup_with_remote(test_env: tuple[Path, Path]) -> None:
    """Test that remote candidates come from remote-tracking branches."""
    local_path, _ = test_env

    cleanup_plan = plan_cleanup(local_path, protect=["feature/shared"], include_remote=True)

    assert cleanup_plan.local_candidates == []
    assert cleanup_plan.remote_candidates == [BranchRef.remote("origin", "feature/remote-only")]
    assert cleanup_plan.to_dict()["remote"] == [
        {"remote": "origin", "branch": "feature/remote-only", "full_name": "origin/feature/remote-only"}
    ]


def test_plan_cleanup_accepts_single_name(feature_repo: Path) -> None:
    """Test that a bare branch name is protected as a whole, not per character."""
    cleanup_plan = plan_cleanup(feature_repo, protect="feature-1")

    assert "feature-1" in cleanup_plan.protected_branches
    assert cleanup_plan.local_candidates == ["feature-2"]


def test_protected_branches_accepts_single_name(state: RepositoryState) -> None:
    """Test that a bare string passed as extra protection is one name."""
    assert protected_branches(state, "feature-1") == frozenset({"main", "feature-1"})
