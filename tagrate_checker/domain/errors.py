"""Fatal input errors raised at the loading boundary."""
from __future__ import annotations

from typing import Sequence


class TagRateCheckerError(Exception):
    """Base class for errors that abort a reconciliation run."""


class InputNotFound(TagRateCheckerError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Input file not found: {path}")


class InputUnreadable(TagRateCheckerError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read {path}: {reason}")


class SchemaMismatch(TagRateCheckerError):
    """A required column is absent after header normalization."""

    def __init__(self, source: str, missing: Sequence[str]) -> None:
        self.source = source
        self.missing = tuple(missing)
        super().__init__(f"{source} is missing required column(s): {', '.join(self.missing)}")
