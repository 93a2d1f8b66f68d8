"""Extract files, line ranges and git diffs into size-bounded markdown documents."""

__version__ = "0.1.0"
