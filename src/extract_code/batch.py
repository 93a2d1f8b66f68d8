"""Validate a whole batch of file arguments, then extract them in order into one document.

The validation pass runs over every file argument before anything is written:
if one of them is invalid, all errors are reported and the output is left
untouched. Once validation has passed, units are written one by one (append
mode) while the running size is tracked against the hard limit.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from pydantic import BaseModel, Field

from extract_code.batch_config import load_batch_config
from extract_code.config import MAX_SIZE_BYTES, DiffSelector, LineRangeSelector, Unit, ValidationResult
from extract_code.exceptions import ExtractCodeError, RangeExceededError, SchemaError, SizeLimitError
from extract_code.file_manipulation import ensure_exists, extract, read_text_lines, resolve_path
from extract_code.file_spec import parse_file_spec
from extract_code.git import validate_diff_range
from extract_code.logging import logger
from extract_code.output_construction import (
    UNIT_SEPARATOR,
    format_progress,
    format_section_header,
    format_size,
    plural,
)
from extract_code.size_tracking import SizeAccountant, SizeLevel

if TYPE_CHECKING:
    from collections.abc import Sequence

    from extract_code.config import Section
    from extract_code.settings import Settings

_LIMIT_KB = MAX_SIZE_BYTES // 1024


def echo(message: str, stream: TextIO | None = None) -> None:
    """Print a user-facing line to `stream` (stderr by default)."""
    print(message, file=stream or sys.stderr)


def _where(section: str | None) -> str:
    return f' in section "{section}"' if section is not None else ""


class FileSink:
    """Append each unit to the output file as soon as it is produced."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8", newline="") as f:
            f.write(text)

    def close(self) -> None:
        """Nothing to flush: every write opens and closes the file."""


class StdoutSink:
    """Collect units and write them to stdout in a single write on close."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream
        self.chunks: list[str] = []

    def write(self, text: str) -> None:
        self.chunks.append(text)

    def close(self) -> None:
        if not self.chunks:
            return
        stream = self.stream or sys.stdout
        stream.write("".join(self.chunks).removesuffix(UNIT_SEPARATOR) + "\n")
        stream.flush()


class BatchOutcome(BaseModel):
    """Counters of a processing run."""

    processed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    halted: bool = False

    @property
    def ok(self) -> bool:
        return self.processed > 0 and not self.failed and not self.halted


def validate_file_argument(source: str, cwd: Path, section: str | None = None) -> ValidationResult:
    """Validate one file argument without producing any output.

    Checks the syntax, that the file exists, and either the git repository and
    refs (diffs) or that no line range starts beyond the end of the file. An
    end line beyond the file is accepted: extraction clamps it.

    Args:
        source (str): the raw file argument
        cwd (Path): the invocation directory, used to resolve relative paths
        section (str | None): owning section label, reported with errors

    Returns:
        ValidationResult: valid with the resolved spec, or invalid with the error message
    """
    try:
        spec = parse_file_spec(source).resolve(cwd)
        ensure_exists(spec.path, cwd)
        if isinstance(spec.selector, DiffSelector):
            validate_diff_range(spec.selector.range, cwd)
        elif isinstance(spec.selector, LineRangeSelector):
            total = len(read_text_lines(spec.path))
            for r in spec.selector.ranges:
                if r.start > total:
                    raise RangeExceededError(line=r.start, total=total)
    except ExtractCodeError as e:
        return ValidationResult(source=source, section=section, valid=False, error=str(e))
    return ValidationResult(source=source, section=section, valid=True, spec=spec)


def validate_units(units: Sequence[Unit], cwd: Path) -> list[ValidationResult]:
    """Validate every unit of the batch; nothing stops at the first error."""
    results = [validate_file_argument(u.source, cwd, u.section) for u in units]
    logger.info(
        "batch_validated",
        units=len(results),
        invalid=sum(1 for r in results if not r.valid),
    )
    return results


def report_validation_errors(failures: Sequence[ValidationResult], stream: TextIO | None = None) -> None:
    """Print every validation error and state that nothing was written."""
    echo(f"Validation failed for {len(failures)} file(s):\n", stream)
    for failure in failures:
        echo(f'  - "{failure.source}"{_where(failure.section)}:', stream)
        message = (failure.error or "").replace("\n", "\n    ")
        echo(f"    {message}\n", stream)
    echo("No files were written to avoid partial output.", stream)


def flat_units(files: Sequence[str], headers: Sequence[str] = ()) -> list[Unit]:
    """Pair file arguments with section headers positionally.

    The Nth header is printed before the Nth file only; an empty header keeps
    its slot without printing anything, extra headers are ignored.
    """
    units: list[Unit] = []
    for index, source in enumerate(files):
        header = headers[index] if index < len(headers) else None
        units.append(Unit(source=source, header=header or None))
    return units


def config_units(sections: Sequence[Section]) -> list[Unit]:
    """Flatten config sections; each section header rides on the first file of its section.

    `process_units` carries the header to the next file of the section when the
    first one fails, so it is written once, before the section's first written file.
    """
    units: list[Unit] = []
    for section_index, section in enumerate(sections):
        for file_index, source in enumerate(section.files):
            units.append(
                Unit(
                    source=source,
                    header=section.header if file_index == 0 else None,
                    section=section.label,
                    section_index=section_index,
                ),
            )
    return units


def process_units(
    units: Sequence[Unit],
    sink: FileSink | StdoutSink,
    accountant: SizeAccountant,
    *,
    cwd: Path,
    track_size: bool = False,
    section_count: int | None = None,
    stream: TextIO | None = None,
) -> BatchOutcome:
    """Extract units in order, write them to `sink` and track the output size.

    A unit is its optional `### header`, the formatted block and a blank line
    separator. Extraction errors are reported and the batch goes on; reaching
    the hard size limit stops the batch after the unit that crossed it.

    Args:
        units (Sequence[Unit]): the units, in output order
        sink (FileSink | StdoutSink): where the units are written
        accountant (SizeAccountant): the running size, seeded from the existing output
        cwd (Path): the invocation directory
        track_size (bool): print progress lines
        section_count (int | None): number of config sections, for section banners
        stream (TextIO | None): where progress and errors go (stderr by default)

    Returns:
        BatchOutcome: processed/failed counters and whether the limit halted the batch
    """
    outcome = BatchOutcome()
    current_section: int | None = None
    # config section header not yet written: (section_index, header)
    pending_header: tuple[int, str] | None = None
    for index, unit in enumerate(units, start=1):
        if track_size and unit.section_index is not None and unit.section_index != current_section:
            current_section = unit.section_index
            echo(f"[Section {current_section + 1}/{section_count or '?'}] {unit.section}", stream)

        header = unit.header
        if unit.section_index is not None:
            if header:
                pending_header = (unit.section_index, header)
            elif pending_header is not None and pending_header[0] == unit.section_index:
                header = pending_header[1]

        try:
            spec = unit.spec or parse_file_spec(unit.source).resolve(cwd)
            block = extract(spec, cwd)
        except (ExtractCodeError, OSError) as e:
            outcome.failed += 1
            logger.warning("unit_failed", source=unit.source, error=str(e))
            echo(f'Error processing "{unit.source}"{_where(unit.section)}: {e}', stream)
            continue

        text = (format_section_header(header) if header else "") + block + UNIT_SEPARATOR
        try:
            sink.write(text)
        except OSError as e:
            outcome.failed += 1
            outcome.halted = True
            logger.error("output_write_failed", source=unit.source, error=str(e))
            echo(f"Error writing output: {e}", stream)
            break
        pending_header = None
        before = accountant.total_bytes
        level = accountant.add(text)
        outcome.processed += 1
        logger.info("unit_written", source=unit.source, bytes=accountant.total_bytes - before)

        if track_size:
            echo(
                format_progress(
                    index,
                    len(units),
                    spec.path.name,
                    accountant.total_bytes - before,
                    accountant.total_bytes,
                    accountant.percent,
                    indent="  " if unit.section_index is not None else "",
                ),
                stream,
            )

        try:
            accountant.check()
        except SizeLimitError as e:
            outcome.halted = True
            echo(f"Error: {e}", stream)
            echo("   Stop processing to stay within the document size limit", stream)
            break
        if level is SizeLevel.VERY_CLOSE:
            echo(f"Warning: very close to {_LIMIT_KB} KB limit!", stream)
        elif level is SizeLevel.APPROACHING:
            echo(f"Warning: approaching {_LIMIT_KB} KB limit (over 100 KB)", stream)

    return outcome


def run_batch(
    units: Sequence[Unit],
    *,
    output: Path | None,
    track_size: bool = False,
    cwd: Path | None = None,
    section_count: int | None = None,
    stream: TextIO | None = None,
) -> int:
    """Validate then process a batch, returning the process exit code.

    Args:
        units (Sequence[Unit]): the units, in output order
        output (Path | None): the file to append to; None writes to stdout
        track_size (bool): print progress lines and a summary (with an output file)
        cwd (Path | None): the invocation directory; defaults to the current directory
        section_count (int | None): number of config sections, for banners and summary
        stream (TextIO | None): where progress and errors go (stderr by default)

    Returns:
        int: 0 on full success, 1 otherwise
    """
    cwd = cwd or Path.cwd()
    if not units:
        echo("Error: No files specified", stream)
        return 1

    results = validate_units(units, cwd)
    failures = [r for r in results if not r.valid]
    if failures:
        report_validation_errors(failures, stream)
        return 1
    resolved = [u.model_copy(update={"spec": r.spec}) for u, r in zip(units, results, strict=True)]

    output = resolve_path(output, cwd) if output is not None else None
    accountant = SizeAccountant.from_output(output)
    if output is not None and track_size and output.exists():
        echo(f"{output}: {format_size(accountant.total_bytes)} (existing)", stream)

    sink: FileSink | StdoutSink = FileSink(output) if output is not None else StdoutSink()
    outcome = process_units(
        resolved,
        sink,
        accountant,
        cwd=cwd,
        track_size=track_size,
        section_count=section_count,
        stream=stream,
    )
    sink.close()

    if outcome.processed == 0:
        echo("Error: No files were successfully processed", stream)
        return 1

    if output is not None and track_size:
        status = "Completed with errors" if outcome.failed or outcome.halted else "Saved"
        counts = plural(outcome.processed, "file")
        if section_count is not None:
            counts += f", {plural(section_count, 'section')}"
        echo(
            f"{status}: {counts} to {output} ({format_size(accountant.total_bytes)} / {_LIMIT_KB} KB)",
            stream,
        )
    return 0 if outcome.ok else 1


def run_flat(settings: Settings, *, cwd: Path | None = None, stream: TextIO | None = None) -> int:
    """Run the file arguments given on the command line."""
    units = flat_units(settings.non_blank_files, settings.section)
    return run_batch(
        units,
        output=settings.output,
        track_size=settings.track_size,
        cwd=cwd,
        stream=stream,
    )


def run_config(settings: Settings, *, cwd: Path | None = None, stream: TextIO | None = None) -> int:
    """Run a batch config document; `--output` and `--track-size` override its values."""
    cwd = cwd or Path.cwd()
    if settings.config is None:
        echo("Error: no config file given", stream)
        return 1
    try:
        config = load_batch_config(resolve_path(settings.config, cwd))
    except SchemaError as e:
        echo(f"Error processing config file: {e}", stream)
        return 1
    return run_batch(
        config_units(config.sections),
        output=settings.output or config.output,
        track_size=settings.track_size or config.track_size,
        cwd=cwd,
        section_count=len(config.sections),
        stream=stream,
    )
