from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from extract_code.config import DiffSelector, LineRangeSelector, guess_file_type, guess_language
from extract_code.exceptions import FileProcessingError, NotFoundError, RangeExceededError
from extract_code.git import read_diff
from extract_code.logging import logger
from extract_code.output_construction import (
    format_code_block,
    format_diff_block,
    no_changes_placeholder,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from extract_code.config import FileSpec, LineRange


def resolve_path(path: Path, cwd: Path) -> Path:
    """Make `path` absolute by joining relative paths onto `cwd`.

    The path is not normalized through symlinks, so the header shows what the
    user asked for.
    """
    return path if path.is_absolute() else cwd / path


def file_language(path: Path) -> str:
    """Determine the code fence language of a file.

    Args:
        path (Path): the file path to analyze

    Returns:
        str: a language tag such as "python" or "csharp", "text" if unknown
    """
    return guess_language(guess_file_type(path))


def find_case_insensitive_match(path: Path) -> str | None:
    """Look for a sibling whose name differs from `path` only by letter casing.

    Returns:
        str | None: the sibling's name, or None if there is none or the parent
            directory cannot be listed
    """
    parent = path.parent
    target = path.name.lower()
    try:
        for entry in parent.iterdir():
            if entry.name.lower() == target and entry.name != path.name:
                return entry.name
    except OSError:
        return None
    return None


def not_found_hint(path: Path) -> str:
    """Build the suggestion appended to a "file not found" message."""
    hint = f"\n  Tip: check that you are in the right directory and that {path.parent} exists"
    match = find_case_insensitive_match(path)
    if match is not None:
        hint += f"\n  Tip: file exists with different casing: {match}"
    return hint


def ensure_exists(path: Path, cwd: Path) -> None:
    """Raise NotFoundError with a suggestion if `path` does not exist.

    Raises:
        NotFoundError: if nothing exists at `path`
    """
    if not path.exists():
        raise NotFoundError(path=path, cwd=cwd, hint=not_found_hint(path))


def read_text(path: Path) -> str:
    """Read a UTF-8 text file without translating line endings.

    Raises:
        FileProcessingError: if the file cannot be read or decoded

    Returns:
        str: the exact file content
    """
    try:
        with path.open(encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileProcessingError(message=f"Cannot read {path}: {e}") from e


def read_text_lines(path: Path) -> list[str]:
    """Read a text file and return its lines, without line terminators.

    Only "\\n" (and "\\r\\n") end a line, so form feeds or Unicode line
    separators inside a line do not shift line numbers. A trailing newline
    does not add an empty last line.

    Args:
        path (Path): the file path to read

    Returns:
        list[str]: the lines of the file
    """
    lines = read_text(path).split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def extract_line_ranges(lines: Sequence[str], ranges: Sequence[LineRange]) -> str:
    """Slice the requested line ranges out of `lines`.

    Each range is 1-indexed and inclusive. The end of a range is clamped to the
    number of lines; a start beyond the last line is an error. Slices are joined
    with a blank line between them, in the requested order, duplicates included.

    Args:
        lines (Sequence[str]): the file lines
        ranges (Sequence[LineRange]): the requested ranges

    Raises:
        RangeExceededError: if a range starts after the last line

    Returns:
        str: the extracted text
    """
    total = len(lines)
    segments: list[str] = []
    for r in ranges:
        if r.start > total:
            raise RangeExceededError(line=r.start, total=total)
        end = min(r.end, total)
        segments.append("\n".join(lines[r.start - 1 : end]))
    return "\n\n".join(segments)


def extract_diff(path: Path, diff_range: str, cwd: Path) -> str:
    """Produce the diff block of a file, with a placeholder when nothing changed."""
    diff_content = read_diff(path, diff_range, cwd)
    if not diff_content.strip():
        diff_content = no_changes_placeholder(diff_range)
    return format_diff_block(path, diff_content, diff_range)


def extract(spec: FileSpec, cwd: Path | None = None) -> str:
    """Extract a file spec as a formatted markdown block.

    - No selector: the whole file in a language-tagged code block.
    - Line ranges: the concatenated slices, with every range listed in the header.
    - Diff: the unified diff against the ref or range, in a `diff` block.

    Args:
        spec (FileSpec): the file spec; relative paths are resolved against `cwd`
        cwd (Path | None): the invocation directory; defaults to the current directory

    Raises:
        NotFoundError: if the file does not exist
        RangeExceededError: if a line range starts after the end of the file
        RepoError: for diffs outside a git repository
        RefError: for diffs naming an unknown ref
        DiffError: if git fails to produce the diff
        FileProcessingError: if the file cannot be read as UTF-8 text

    Returns:
        str: the formatted block, without trailing separator
    """
    cwd = cwd or Path.cwd()
    path = resolve_path(spec.path, cwd)
    ensure_exists(path, cwd)

    selector = spec.selector
    if isinstance(selector, DiffSelector):
        logger.debug("extract_diff", path=str(path), diff_range=selector.range)
        return extract_diff(path, selector.range, cwd)

    language = file_language(path)
    if isinstance(selector, LineRangeSelector):
        logger.debug("extract_lines", path=str(path), ranges=[str(r) for r in selector.ranges])
        content = extract_line_ranges(read_text_lines(path), selector.ranges)
        return format_code_block(path, language, content, selector.ranges)

    logger.debug("extract_file", path=str(path))
    return format_code_block(path, language, read_text(path))
