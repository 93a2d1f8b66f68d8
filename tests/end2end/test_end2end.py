import os
import subprocess  # noqa: S404
import sys
from pathlib import Path

import pytest

from extract_code import cli

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def test_end_to_end_incremental_document(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    src = tmp_path / "src"
    src.mkdir()
    (src / "service.py").write_text("".join(f"x{i} = {i}\n" for i in range(1, 21)), encoding="utf-8")
    (src / "model.py").write_text("class Model:\n    pass\n", encoding="utf-8")
    output = tmp_path / "consultation.md"

    assert cli.main(["--track-size", "-o", str(output), "src/model.py"]) == 0
    first = output.read_text(encoding="utf-8")
    assert cli.main(["--track-size", "-o", str(output), "src/service.py:1-2,19-40"]) == 0

    text = output.read_text(encoding="utf-8")
    assert text.startswith(first)
    assert f"# File: {src / 'service.py'} (lines 1-2, 19-40)\n```python\nx1 = 1\nx2 = 2\n\nx19 = 19\nx20 = 20\n```" in text


def test_end_to_end_range_beyond_file_leaves_document_untouched(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a.py").write_text("a = 1\n", encoding="utf-8")
    output = tmp_path / "doc.md"
    output.write_text("kept\n", encoding="utf-8")

    assert cli.main(["-o", str(output), "a.py", "a.py:5-9"]) == 1
    assert output.read_text(encoding="utf-8") == "kept\n"


def test_end_to_end_module_entry_point(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("a = 1\n", encoding="utf-8")

    out = subprocess.run(  # noqa: S603
        [sys.executable, "-m", "extract_code", "a.py:1-1"],
        cwd=str(tmp_path),
        text=True,
        capture_output=True,
        check=False,
        env={**os.environ, "PYTHONPATH": os.pathsep.join(filter(None, [str(SRC_DIR), os.environ.get("PYTHONPATH")]))},
    )

    assert out.returncode == 0
    assert out.stdout == f"# File: {tmp_path / 'a.py'} (lines 1-1)\n```python\na = 1\n```\n"
