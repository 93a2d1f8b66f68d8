from pathlib import Path

import pytest

from extract_code.config import LineRange
from extract_code.output_construction import (
    format_code_block,
    format_diff_block,
    format_progress,
    format_section_header,
    format_size,
    plural,
)


@pytest.mark.unit
def test_format_code_block_without_ranges() -> None:
    block = format_code_block(Path("/repo/app.py"), "python", "print('ok')")

    assert block == "# File: /repo/app.py\n```python\nprint('ok')\n```"


@pytest.mark.unit
def test_format_code_block_lists_ranges_in_order() -> None:
    ranges = [LineRange(start=100, end=150), LineRange(start=1, end=30)]

    block = format_code_block(Path("/repo/app.py"), "python", "...", ranges)

    assert block.startswith("# File: /repo/app.py (lines 100-150, 1-30)\n```python\n")


@pytest.mark.unit
def test_format_diff_block() -> None:
    block = format_diff_block(Path("/repo/app.py"), "-a\n+b", "master..HEAD")

    assert block == "# File: /repo/app.py (diff=master..HEAD)\n```diff\n-a\n+b\n```"


@pytest.mark.unit
def test_format_helpers() -> None:
    assert format_section_header("Core") == "### Core\n\n"
    assert format_size(26112) == "25.5 KB"
    assert plural(1, "file") == "1 file"
    assert plural(3, "section") == "3 sections"


@pytest.mark.unit
def test_format_progress() -> None:
    line = format_progress(2, 5, "service.py", 2048, 64000, 50.0)
    nested = format_progress(1, 3, "a.py", 512, 1024, 0.8, indent="  ")

    assert line == "[2/5] service.py -> +2.0 KB (62.5 KB / 125 KB, 50.0%)"
    assert nested == "  [1/3] a.py -> +0.5 KB (1.0 KB / 125 KB, 0.8%)"
