from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

MAX_SIZE_BYTES = 125 * 1024
VERY_CLOSE_BYTES = 115 * 1024
APPROACHING_BYTES = 100 * 1024

DEFAULT_DIFF_BASE = "master"
NO_HEADER = "(no header)"


class FileType(StrEnum):
    """Categorization of source files, used to pick the code fence language.

    This is a heuristic classification based on file extensions and a few
    well-known file names. It only affects syntax highlighting hints.
    """

    TEXT = auto()
    PYTHON = auto()
    CSHARP = auto()
    JAVASCRIPT = auto()
    JSX = auto()
    TYPESCRIPT = auto()
    TSX = auto()
    VUE = auto()
    JSON = auto()
    MARKDOWN = auto()
    YAML = auto()
    TOML = auto()
    HTML = auto()
    CSS = auto()
    SCSS = auto()
    XML = auto()
    SQL = auto()
    BASH = auto()
    POWERSHELL = auto()
    RUST = auto()
    GO = auto()
    JAVA = auto()
    KOTLIN = auto()
    SWIFT = auto()
    RUBY = auto()
    PHP = auto()
    C = auto()
    CPP = auto()
    INI = auto()
    DOCKERFILE = auto()
    MAKEFILE = auto()


EXT2LANG: dict[str, FileType] = {
    ".bash": FileType.BASH,
    ".c": FileType.C,
    ".cc": FileType.CPP,
    ".cfg": FileType.INI,
    ".conf": FileType.INI,
    ".cpp": FileType.CPP,
    ".cs": FileType.CSHARP,
    ".css": FileType.CSS,
    ".cxx": FileType.CPP,
    ".go": FileType.GO,
    ".h": FileType.C,
    ".hpp": FileType.CPP,
    ".htm": FileType.HTML,
    ".html": FileType.HTML,
    ".ini": FileType.INI,
    ".java": FileType.JAVA,
    ".js": FileType.JAVASCRIPT,
    ".json": FileType.JSON,
    ".jsx": FileType.JSX,
    ".kt": FileType.KOTLIN,
    ".markdown": FileType.MARKDOWN,
    ".md": FileType.MARKDOWN,
    ".mjs": FileType.JAVASCRIPT,
    ".php": FileType.PHP,
    ".ps1": FileType.POWERSHELL,
    ".py": FileType.PYTHON,
    ".rb": FileType.RUBY,
    ".rs": FileType.RUST,
    ".scss": FileType.SCSS,
    ".sh": FileType.BASH,
    ".sql": FileType.SQL,
    ".swift": FileType.SWIFT,
    ".toml": FileType.TOML,
    ".ts": FileType.TYPESCRIPT,
    ".tsx": FileType.TSX,
    ".txt": FileType.TEXT,
    ".vue": FileType.VUE,
    ".xml": FileType.XML,
    ".yaml": FileType.YAML,
    ".yml": FileType.YAML,
    ".zsh": FileType.BASH,
}

NAME2LANG: dict[str, FileType] = {
    "dockerfile": FileType.DOCKERFILE,
    "makefile": FileType.MAKEFILE,
}

_FENCE_LANGUAGE: dict[FileType, str] = {
    FileType.TEXT: "text",
    FileType.PYTHON: "python",
    FileType.CSHARP: "csharp",
    FileType.JAVASCRIPT: "javascript",
    FileType.JSX: "jsx",
    FileType.TYPESCRIPT: "typescript",
    FileType.TSX: "tsx",
    FileType.VUE: "vue",
    FileType.JSON: "json",
    FileType.MARKDOWN: "markdown",
    FileType.YAML: "yaml",
    FileType.TOML: "toml",
    FileType.HTML: "html",
    FileType.CSS: "css",
    FileType.SCSS: "scss",
    FileType.XML: "xml",
    FileType.SQL: "sql",
    FileType.BASH: "bash",
    FileType.POWERSHELL: "powershell",
    FileType.RUST: "rust",
    FileType.GO: "go",
    FileType.JAVA: "java",
    FileType.KOTLIN: "kotlin",
    FileType.SWIFT: "swift",
    FileType.RUBY: "ruby",
    FileType.PHP: "php",
    FileType.C: "c",
    FileType.CPP: "cpp",
    FileType.INI: "ini",
    FileType.DOCKERFILE: "dockerfile",
    FileType.MAKEFILE: "makefile",
}


def guess_file_type(path: Path) -> FileType:
    """Heuristic guess of file type based on file name and extension.

    Args:
        path (Path): The file path to guess the type for.

    Returns:
        FileType: The guessed file type, or FileType.TEXT if unknown.
    """
    by_name = NAME2LANG.get(path.name.lower())
    if by_name is not None:
        return by_name
    return EXT2LANG.get(path.suffix.lower(), FileType.TEXT)


def guess_language(file_type: FileType) -> str:
    """Get the code fence language for a given file type.

    Args:
        file_type (FileType): The categorized file type.

    Returns:
        str: The language tag for code fences, "text" when unknown.
    """
    return _FENCE_LANGUAGE.get(file_type, "text")


class LineRange(BaseModel):
    """An inclusive, 1-indexed line interval."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=1, description="First line (1-indexed)")
    end: int = Field(..., ge=1, description="Last line, inclusive")

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


class LineRangeSelector(BaseModel):
    """Select one or more line ranges of a file, in the requested order."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["lines"] = "lines"
    ranges: tuple[LineRange, ...] = Field(..., min_length=1)


class DiffSelector(BaseModel):
    """Select the unified git diff of a file for a ref or `refA..refB` range."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["diff"] = "diff"
    range: str = Field(default=DEFAULT_DIFF_BASE, min_length=1)


Selector = Annotated[LineRangeSelector | DiffSelector, Field(discriminator="kind")]


class FileSpec(BaseModel):
    """A parsed file argument: path plus optional line ranges or diff range.

    Attributes:
        source: The raw token, as given on the command line or in a config.
        path: File path, relative to the invocation directory until resolved.
        selector: Line ranges or diff range; None means the whole file.
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Raw file argument")
    path: Path = Field(..., description="File path")
    selector: Selector | None = Field(default=None, description="Range or diff selector")

    def resolve(self, cwd: Path) -> FileSpec:
        """Return a copy whose path is absolute, resolved against `cwd`."""
        if self.path.is_absolute():
            return self
        return self.model_copy(update={"path": cwd / self.path})


class Section(BaseModel):
    """A labeled group of file arguments in a batch config."""

    model_config = ConfigDict(frozen=True)

    header: str | None = Field(default=None, description="Markdown section header")
    files: list[str] = Field(..., description="File arguments, in output order")

    @property
    def label(self) -> str:
        return self.header or NO_HEADER


class Unit(BaseModel):
    """One (optional header, file argument) pair processed by the batch core.

    `spec` is filled in by the validation pass with the resolved FileSpec, so
    extraction reuses the path resolved during validation.
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Raw file argument")
    spec: FileSpec | None = None
    header: str | None = None
    section: str | None = Field(default=None, description="Owning section label (config mode)")
    section_index: int | None = Field(default=None, description="0-based owning section position")


class ValidationResult(BaseModel):
    """Outcome of validating a single file argument before any output."""

    model_config = ConfigDict(frozen=True)

    source: str
    valid: bool
    section: str | None = None
    error: str | None = None
    spec: FileSpec | None = None
