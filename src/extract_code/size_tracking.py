from __future__ import annotations

from enum import StrEnum, auto
from typing import TYPE_CHECKING

from extract_code.config import APPROACHING_BYTES, MAX_SIZE_BYTES, VERY_CLOSE_BYTES
from extract_code.exceptions import SizeLimitError

if TYPE_CHECKING:
    from pathlib import Path

OUTPUT_ENCODING = "utf-8"


class SizeLevel(StrEnum):
    """Classification of a running output size against the thresholds."""

    OK = auto()
    APPROACHING = auto()
    VERY_CLOSE = auto()
    EXCEEDED = auto()


def classify_size(total: int) -> SizeLevel:
    """Classify a byte total; only the highest threshold reached applies.

    Args:
        total (int): the running byte total

    Returns:
        SizeLevel: EXCEEDED at 125 KiB, VERY_CLOSE at 115 KiB, APPROACHING at 100 KiB, else OK
    """
    if total >= MAX_SIZE_BYTES:
        return SizeLevel.EXCEEDED
    if total >= VERY_CLOSE_BYTES:
        return SizeLevel.VERY_CLOSE
    if total >= APPROACHING_BYTES:
        return SizeLevel.APPROACHING
    return SizeLevel.OK


def byte_length(text: str) -> int:
    """Size of `text` once written, in bytes of the output encoding."""
    return len(text.encode(OUTPUT_ENCODING))


class SizeAccountant:
    """Running byte total of an output document.

    The total starts at the size of the existing output (incremental documents
    are built over several invocations) and only grows. The check happens after
    a unit is added: the unit that crosses the hard limit is still counted.
    """

    def __init__(self, initial_bytes: int = 0) -> None:
        if initial_bytes < 0:
            msg = f"initial_bytes must be >= 0, got {initial_bytes}"
            raise ValueError(msg)
        self.initial_bytes = initial_bytes
        self.total_bytes = initial_bytes
        self.level = classify_size(initial_bytes)

    @classmethod
    def from_output(cls, output: Path | None) -> SizeAccountant:
        """Seed the total from the current size of `output` (0 if absent)."""
        if output is None or not output.exists():
            return cls()
        return cls(output.stat().st_size)

    def add(self, text: str) -> SizeLevel:
        """Account for one written unit and classify the new total.

        Returns:
            SizeLevel: the classification of the running total
        """
        self.total_bytes += byte_length(text)
        self.level = classify_size(self.total_bytes)
        return self.level

    @property
    def percent(self) -> float:
        return self.total_bytes / MAX_SIZE_BYTES * 100

    @property
    def limit_reached(self) -> bool:
        return self.level is SizeLevel.EXCEEDED

    def check(self) -> None:
        """Raise SizeLimitError once the hard limit has been reached."""
        if self.limit_reached:
            raise SizeLimitError(total=self.total_bytes, limit=MAX_SIZE_BYTES)
