from __future__ import annotations

from typing import TYPE_CHECKING

from extract_code.config import MAX_SIZE_BYTES

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from extract_code.config import LineRange

UNIT_SEPARATOR = "\n\n"


def format_size(num_bytes: int) -> str:
    """Format a byte count in KB with one decimal, e.g. "25.5 KB"."""
    return f"{num_bytes / 1024:.1f} KB"


def format_code_block(
    path: Path,
    language: str,
    content: str,
    ranges: Sequence[LineRange] | None = None,
) -> str:
    """Format file content as a fenced markdown code block.

    The block is headed by a `# File:` line. When line ranges are given, every
    requested range is listed in the header, in the requested order.

    Args:
        path (Path): the file path shown in the header
        language (str): the fence language tag
        content (str): the file content or the joined range slices
        ranges (Sequence[LineRange] | None): the requested line ranges, if any

    Returns:
        str: the formatted block, without trailing newline
    """
    header = f"# File: {path}"
    if ranges:
        header += f" (lines {', '.join(str(r) for r in ranges)})"
    return f"{header}\n```{language}\n{content}\n```"


def format_diff_block(path: Path, diff_content: str, diff_range: str) -> str:
    """Format unified diff output as a fenced `diff` block."""
    return f"# File: {path} (diff={diff_range})\n```diff\n{diff_content}\n```"


def no_changes_placeholder(diff_range: str) -> str:
    return f"(No changes between {diff_range})"


def format_section_header(header: str) -> str:
    return f"### {header}\n\n"


def format_progress(
    index: int,
    count: int,
    name: str,
    added: int,
    total: int,
    percent: float,
    *,
    indent: str = "",
) -> str:
    """Format a size tracking progress line.

    Example: "[2/5] service.py -> +3.2 KB (40.1 KB / 125 KB, 32.1%)"
    """
    return (
        f"{indent}[{index}/{count}] {name} -> +{format_size(added)} "
        f"({format_size(total)} / {MAX_SIZE_BYTES // 1024} KB, {percent:.1f}%)"
    )


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"
