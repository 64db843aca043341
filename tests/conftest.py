"""Test configuration and fixtures."""

from pathlib import Path
from typing import Callable, Generator

import pytest
from git import Actor, Repo

AUTHOR = Actor("Test User", "test@example.com")


def commit_file(repo: Repo, name: str, content: str) -> None:
    """Write a file in the working tree and commit it on the current branch."""
    path = Path(repo.working_tree_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([name])
    repo.index.commit(f"Add {name}", author=AUTHOR, committer=AUTHOR)


def add_unmerged_commit(path: Path, branch: str) -> None:
    """Give ``branch`` a commit that ``main`` does not have, then return to ``main``."""
    repo = Repo(path)
    repo.heads[branch].checkout()
    commit_file(repo, f"{branch}.txt", f"{branch} content")
    repo.heads.main.checkout()


@pytest.fixture
def diverge() -> Callable[[Path, str], None]:
    """Helper that gives a branch a commit main does not have."""
    return add_unmerged_commit


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    """Create a repository with a single commit on ``main``."""
    path = tmp_path / "local"
    path.mkdir()

    repo = Repo.init(path)
    with repo.config_writer() as config:
        config.set_value("user", "name", AUTHOR.name)
        config.set_value("user", "email", AUTHOR.email)

    commit_file(repo, "README.md", "# Test Repository")
    repo.git.branch("-M", "main")
    return path


@pytest.fixture
def feature_repo(repo_path: Path) -> Path:
    """Repository on ``main`` with ``feature-1`` and ``feature-2`` at the same commit."""
    repo = Repo(repo_path)
    repo.create_head("feature-1")
    repo.create_head("feature-2")
    return repo_path


@pytest.fixture
def test_env(repo_path: Path, tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    remote_path.mkdir()
    Repo.init(remote_path, bare=True)

    local_repo = Repo(repo_path)
    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    local_repo.heads.main.set_tracking_branch(origin.refs.main)

    # Branch that exists locally and on the remote
    shared = local_repo.create_head("feature/shared")
    shared.checkout()
    commit_file(local_repo, "shared.txt", "Shared branch content")
    origin.push("feature/shared")

    # Branch that only exists on the remote
    local_repo.heads.main.checkout()
    remote_only = local_repo.create_head("feature/remote-only")
    remote_only.checkout()
    commit_file(local_repo, "remote_only.txt", "Remote branch content")
    origin.push("feature/remote-only")
    local_repo.heads.main.checkout()
    local_repo.delete_head("feature/remote-only", force=True)

    local_repo.git.remote("set-head", "origin", "main")

    yield repo_path, remote_path
