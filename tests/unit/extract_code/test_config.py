from pathlib import Path

import pytest

from extract_code.config import DiffSelector, FileType, guess_file_type, guess_language
from extract_code.file_spec import parse_file_spec


@pytest.mark.unit
def test_guess_file_type_prefers_well_known_names() -> None:
    assert guess_file_type(Path("Makefile")) is FileType.MAKEFILE
    assert guess_file_type(Path("build/Dockerfile")) is FileType.DOCKERFILE
    assert guess_file_type(Path("src/app.tsx")) is FileType.TSX


@pytest.mark.unit
def test_every_file_type_has_a_fence_language() -> None:
    for file_type in FileType:
        assert guess_language(file_type)


@pytest.mark.unit
def test_file_spec_is_frozen() -> None:
    spec = parse_file_spec("a.py:diff=HEAD~1")

    assert spec.selector == DiffSelector(range="HEAD~1")
    with pytest.raises(ValueError, match="frozen"):
        spec.source = "b.py"  # type: ignore[misc]
