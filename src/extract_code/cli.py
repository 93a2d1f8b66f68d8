"""
extract_code: build size-bounded markdown documents from code excerpts.

Overview
--------
Each file argument is a path with an optional line range or git diff selector:

    src/app.py                      whole file
    src/app.py:10-50                lines 10 to 50 (also "10:50")
    src/app.py:1-30,86-213          several ranges, joined by a blank line
    src/app.py:diff                 git diff against master
    src/app.py:diff=master..HEAD    git diff for an explicit range
    src/app.py:diff=HEAD~3          git diff against three commits ago

Every file argument is validated before anything is written, so a batch either
fails as a whole or is written in full. With `--output` the excerpts are
appended to the file (documents can be built over several invocations) and the
running size is checked against a 125 KB limit: warnings at 100 KB and 115 KB,
processing stops once 125 KB is reached.

Usage
-----
    extract-code src/Service.cs tests/ServiceTests.cs:50-75
    extract-code --track-size -o doc.md --section "Core" Service.cs --section "Tests" Tests.cs:100-200
    extract-code --config extraction-plan.json --track-size
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from extract_code import __version__
from extract_code.batch import echo, run_config, run_flat
from extract_code.logging import logger, setup_logging
from extract_code.settings import Settings

if TYPE_CHECKING:
    from collections.abc import Sequence

_EPILOG = """\
file formats:
  path/to/file.py                     extract the full file
  path/to/file.py:10-50               extract lines 10-50 (or 10:50)
  path/to/file.py:10-50,100-150       several ranges, comma separated
  path/to/file.py:diff                git diff vs master
  path/to/file.py:diff=master..HEAD   git diff with an explicit range
  path/to/file.py:diff=HEAD~3         git diff vs 3 commits ago

notes:
  - line numbers are 1-indexed and ranges are inclusive
  - --output always appends, like >> redirection
  - size tracking warns at 100 KB and 115 KB and stops at 125 KB
  - in flat mode the Nth --section header is printed before the Nth file only
  - in config mode a section header precedes all the files of its section
"""


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="extract-code",
        description="Extract files, line ranges or git diffs as markdown code blocks.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("files", nargs="*", help="File arguments, with optional range or diff selector.")
    p.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Append output to this file instead of printing it.",
    )
    p.add_argument(
        "--track-size",
        action="store_true",
        default=None,
        help="Show size tracking and progress (with --output).",
    )
    p.add_argument(
        "--section",
        action="append",
        default=[],
        help="Markdown section header for the next file (repeatable).",
    )
    p.add_argument("--config", type=str, default=None, help="Batch config file (JSON, YAML or TOML).")
    p.add_argument("--log-file", type=str, default=None, help="Write diagnostic logs to this file.")
    p.add_argument("--verbose", action="store_true", help="Log diagnostics at debug level.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command line arguments into Settings.

    Options and file arguments may be interleaved, so that `--section` can be
    written next to the file it introduces.

    Args:
        argv (Sequence[str] | None): the arguments; defaults to sys.argv[1:]

    Returns:
        Settings: the parsed settings; unset options keep their `.env` defaults
    """
    args = build_parser().parse_intermixed_args(argv)
    values = {k: v for k, v in vars(args).items() if v is not None}
    return Settings(**values)


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    if settings.log_file or settings.verbose:
        setup_logging(
            settings.log_file or None,
            level=logging.DEBUG if settings.verbose else logging.INFO,
            force=True,
        )
    logger.debug("settings", **settings.model_dump(mode="json"))

    if settings.config is not None:
        return run_config(settings)

    if not settings.non_blank_files:
        echo("Error: No files specified")
        build_parser().print_usage(sys.stderr)
        return 1

    return run_flat(settings)


if __name__ == "__main__":
    raise SystemExit(main())
