from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ExtractCodeError(Exception):
    """Base exception for errors in the extract_code module."""

    message: str = "Code extraction failed."

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class GitCommandError(ExtractCodeError):
    """Raised when a git command fails."""

    command: str = ""
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        detail = self.stderr.strip() or self.stdout.strip()
        return f"`{self.command}` exited with {self.returncode}: {detail}"


@dataclass(frozen=True)
class FileProcessingError(ExtractCodeError):
    """Raised when an error occurs during file processing."""


@dataclass(frozen=True)
class NotFoundError(ExtractCodeError):
    """Raised when a requested file does not exist."""

    path: Path = Path()
    cwd: Path = Path()
    hint: str = ""

    def __str__(self) -> str:
        return f"File not found: {self.path}\n  Current directory: {self.cwd}{self.hint}"


@dataclass(frozen=True)
class FormatError(ExtractCodeError):
    """Raised when a line range segment is malformed."""

    segment: str = ""

    def __str__(self) -> str:
        return f'Invalid line range format: "{self.segment}". Use format "10-20" or "10:20"'


@dataclass(frozen=True)
class RangeError(ExtractCodeError):
    """Raised when line range bounds are invalid (start < 1 or end < start)."""


@dataclass(frozen=True)
class RangeExceededError(ExtractCodeError):
    """Raised when a line range starts beyond the end of the file."""

    line: int = 0
    total: int = 0

    def __str__(self) -> str:
        return f"Start line {self.line} exceeds file length ({self.total} lines)"


@dataclass(frozen=True)
class RepoError(ExtractCodeError):
    """Raised when the working directory is not inside a Git repository."""

    folder: Path = Path()
    message: str = "Not in a git repository"


@dataclass(frozen=True)
class RefError(ExtractCodeError):
    """Raised when a git reference does not resolve."""

    ref: str = ""

    def __str__(self) -> str:
        return f"Invalid git reference: {self.ref}"


@dataclass(frozen=True)
class DiffError(ExtractCodeError):
    """Raised when `git diff` fails after the range has been validated."""

    def __str__(self) -> str:
        return f"Git diff failed: {self.message}"


@dataclass(frozen=True)
class SchemaError(ExtractCodeError):
    """Raised when a batch config document is malformed."""


@dataclass(frozen=True)
class SizeLimitError(ExtractCodeError):
    """Raised when the cumulative output reaches the hard size limit."""

    total: int = 0
    limit: int = 0

    def __str__(self) -> str:
        return f"Exceeded {self.limit // 1024} KB limit ({self.total / 1024:.1f} KB)"
