from __future__ import annotations

import subprocess

import pytest


def _git(cwd, *args):
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(tmp_path):
    """A repository with one branch, remote, tag and other ref over one commit."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    (repo / "README").write_text("hello\n")
    _git(repo, "add", "README")
    _git(repo, "commit", "-q", "-m", "initial")
    _git(repo, "tag", "-a", "v1", "-m", "first release")
    _git(repo, "update-ref", "refs/remotes/origin/main", "HEAD")
    _git(repo, "update-ref", "refs/notes/extra", "HEAD")
    return repo


@pytest.fixture
def bare_repo(tmp_path):
    repo = tmp_path / "bare.git"
    _git(tmp_path, "init", "-q", "--bare", str(repo))
    return repo
