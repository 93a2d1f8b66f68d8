from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False


def setup_logging(
    filename: str | Path | None = None,
    level: int = logging.WARNING,
    *,
    force: bool = False,
) -> structlog.BoundLogger:
    """Set up structured logging for the extract_code module.

    Progress lines and error reports are part of the CLI output and are printed
    directly; the logger only carries diagnostics, so the default level keeps
    stderr quiet.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        level: Minimum level of the emitted events.
        force: Reconfigure even if logging was already set up (used by the CLI
            once `--log-file` / `--verbose` are known).

    Returns:
        A structlog logger instance configured for the extract_code module.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if not _LOGGING_CONFIGURED or force:
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=level,
            handlers=handlers,
            format="%(message)s",
            force=force,
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger("extract_code")


logger = setup_logging()
