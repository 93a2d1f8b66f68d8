from __future__ import annotations

import shutil
import subprocess  # noqa: S404
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def git(cwd: Path, *args: str) -> str:
    out = subprocess.run(  # noqa: S603
        [  # noqa: S607
            "git",
            "-c",
            "user.name=Test",
            "-c",
            "user.email=test@example.com",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=str(cwd),
        text=True,
        capture_output=True,
        check=True,
    )
    return out.stdout


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A repository on `master` with two commits of `app.py`, used as working directory."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/master")
    app = repo / "app.py"
    app.write_text("a = 1\nb = 2\n", encoding="utf-8")
    git(repo, "add", "app.py")
    git(repo, "commit", "-q", "-m", "initial")
    app.write_text("a = 1\nb = 3\n", encoding="utf-8")
    git(repo, "commit", "-q", "-am", "change b")
    monkeypatch.chdir(repo)
    return repo


@pytest.fixture
def ten_lines(tmp_path: Path) -> Path:
    path = tmp_path / "ten.py"
    path.write_text("".join(f"line{i}\n" for i in range(1, 11)), encoding="utf-8")
    return path


@pytest.fixture
def git_cmd() -> Callable[..., str]:
    """Run a git command in a given directory, with a test identity."""
    return git
