from __future__ import annotations

import os
import subprocess  # noqa: S404
from pathlib import Path
from typing import TYPE_CHECKING

from extract_code.exceptions import DiffError, GitCommandError, RefError, RepoError
from extract_code.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence


def run_git(args: Sequence[str], cwd: Path | None = None) -> str:
    """Run a git command and return its standard output.

    Args:
        args (Sequence[str]): the git arguments, without the leading "git"
        cwd (Path | None): the directory to run git in; defaults to the current directory

    Raises:
        GitCommandError: if git exits with a non-zero status
        FileNotFoundError: if the git executable is not installed

    Returns:
        str: the captured standard output
    """
    command = ["git", *args]
    logger.debug("git_command", command=" ".join(command), cwd=str(cwd or Path.cwd()))
    out = subprocess.run(  # noqa: S603
        command,
        cwd=str(cwd) if cwd else None,
        text=True,
        encoding="utf-8",
        errors="replace",
        capture_output=True,
        check=False,
    )
    if out.returncode != 0:
        raise GitCommandError(
            message="git command failed",
            command=" ".join(command),
            returncode=out.returncode,
            stdout=out.stdout,
            stderr=out.stderr,
        )
    return out.stdout


def ensure_git_repository(cwd: Path) -> None:
    """Check that `cwd` is inside a git work tree.

    Raises:
        RepoError: if it is not, or if git is not available
    """
    try:
        run_git(["rev-parse", "--git-dir"], cwd=cwd)
    except (GitCommandError, FileNotFoundError) as e:
        logger.debug("not_a_git_repository", cwd=str(cwd), error=str(e))
        raise RepoError(folder=cwd) from e


def split_git_refs(diff_range: str) -> list[str]:
    """Split a git range into the refs it names.

    "master" gives ["master"], "master..HEAD" gives ["master", "HEAD"] and an
    open side such as "..HEAD" is dropped. A symmetric "A...B" range is split
    on the three dots.

    Args:
        diff_range (str): the git range

    Returns:
        list[str]: the refs to validate, in order
    """
    if "..." in diff_range:
        return [ref for ref in diff_range.split("...") if ref]
    if ".." in diff_range:
        return [ref for ref in diff_range.split("..") if ref]
    return [diff_range]


def validate_git_refs(refs: Sequence[str], cwd: Path) -> None:
    """Check that every ref resolves to a git object.

    Raises:
        RefError: naming the first ref that does not resolve
    """
    for ref in refs:
        # never let a ref be read as a git option
        if ref.startswith("-"):
            raise RefError(ref=ref)
        try:
            run_git(["rev-parse", "--verify", "--quiet", ref], cwd=cwd)
        except GitCommandError as e:
            raise RefError(ref=ref) from e


def validate_diff_range(diff_range: str, cwd: Path) -> None:
    """Check the repository and every ref of `diff_range` before any diff is run.

    Raises:
        RepoError: if `cwd` is not inside a git repository
        RefError: if a ref of the range does not resolve
    """
    ensure_git_repository(cwd)
    validate_git_refs(split_git_refs(diff_range), cwd)


def git_toplevel(cwd: Path) -> Path:
    """Return the root of the work tree containing `cwd`."""
    return Path(run_git(["rev-parse", "--show-toplevel"], cwd=cwd).strip())


def read_diff(path: Path, diff_range: str, cwd: Path) -> str:
    """Read the unified diff of a single file for a ref or range.

    The repository and refs are validated again here, independently of the
    batch validation pass.

    Args:
        path (Path): absolute path of the file
        diff_range (str): a ref ("master", "HEAD~3") or a range ("master..HEAD")
        cwd (Path): the invocation directory, which selects the repository

    Raises:
        RepoError: if `cwd` is not inside a git repository
        RefError: if a ref of the range does not resolve
        DiffError: if git fails to produce the diff

    Returns:
        str: the raw `git diff` output, possibly empty
    """
    validate_diff_range(diff_range, cwd)
    try:
        root = git_toplevel(cwd)
        rel = Path(os.path.relpath(path.resolve(), root.resolve())).as_posix()
        return run_git(["diff", diff_range, "--", rel], cwd=root)
    except (GitCommandError, OSError, ValueError) as e:
        raise DiffError(message=str(e)) from e
