import json
from pathlib import Path

import pytest

from extract_code.batch_config import load_batch_config
from extract_code.exceptions import SchemaError


def write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.mark.unit
def test_load_json_config(tmp_path: Path) -> None:
    path = write_json(
        tmp_path / "plan.json",
        {
            "output": "doc.md",
            "trackSize": True,
            "sections": [
                {"header": "Core", "files": ["a.py", "b.py:1-5"]},
                {"files": ["c.py:diff"]},
            ],
        },
    )

    config = load_batch_config(path)

    assert config.output == Path("doc.md")
    assert config.track_size is True
    assert [s.header for s in config.sections] == ["Core", None]
    assert config.sections[0].files == ["a.py", "b.py:1-5"]
    assert config.sections[1].label == "(no header)"


@pytest.mark.unit
def test_load_yaml_config(tmp_path: Path) -> None:
    path = tmp_path / "plan.yaml"
    path.write_text(
        "track_size: false\nsections:\n  - header: Tests\n    files:\n      - tests/test_app.py:10-20\n",
        encoding="utf-8",
    )

    config = load_batch_config(path)

    assert config.output is None
    assert config.track_size is False
    assert config.sections[0].files == ["tests/test_app.py:10-20"]


@pytest.mark.unit
def test_load_toml_config(tmp_path: Path) -> None:
    path = tmp_path / "plan.toml"
    path.write_text(
        'output = "doc.md"\n\n[[sections]]\nheader = "Core"\nfiles = ["a.py"]\n',
        encoding="utf-8",
    )

    config = load_batch_config(path)

    assert config.output == Path("doc.md")
    assert config.sections[0].header == "Core"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"output": "doc.md"}, 'Config must have "sections" array'),
        ({"sections": {"header": "x"}}, 'Config must have "sections" array'),
        ({"sections": []}, "Config must have at least one section"),
        (
            {"sections": [{"header": "Core", "files": ["a.py"]}, {"header": "Empty", "files": []}]},
            "Section 2 must have at least one file. Header: Empty",
        ),
        ({"sections": [{"files": "a.py"}]}, 'Section 1 must have "files" array. Header: (no header)'),
        ([1, 2], 'Config must have "sections" array'),
    ],
)
def test_schema_errors(tmp_path: Path, data: object, message: str) -> None:
    path = write_json(tmp_path / "plan.json", data)

    with pytest.raises(SchemaError) as exc_info:
        load_batch_config(path)

    assert message in str(exc_info.value)


@pytest.mark.unit
def test_unparsable_and_missing_config(tmp_path: Path) -> None:
    broken = tmp_path / "plan.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(SchemaError, match="Failed to parse config file"):
        load_batch_config(broken)
    with pytest.raises(SchemaError, match="Config file not found"):
        load_batch_config(tmp_path / "missing.json")


@pytest.mark.unit
def test_non_string_files_are_schema_errors(tmp_path: Path) -> None:
    path = write_json(tmp_path / "plan.json", {"sections": [{"files": [1]}]})

    with pytest.raises(SchemaError, match="Invalid config file"):
        load_batch_config(path)


@pytest.mark.unit
def test_undecodable_config_is_schema_error(tmp_path: Path) -> None:
    path = tmp_path / "plan.json"
    path.write_bytes(b'{"sections": "\xff"}')

    with pytest.raises(SchemaError, match="Failed to read config file"):
        load_batch_config(path)
