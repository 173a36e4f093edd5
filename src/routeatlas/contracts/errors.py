"""Fatal error types.

Only two conditions abort analysis of a routes file: the file cannot be read,
or its text cannot be tokenized/parsed at all. Everything else is reported as
a Diagnostic next to the best achievable result.
"""

from __future__ import annotations

from pathlib import Path


class RouteParseError(Exception):
    """Raised when a routes file cannot be read or parsed.

    The message always starts with a fixed prefix naming the operation and
    the absolute file path, so callers can match on it.
    """

    def __init__(self, message: str, *, file_path: Path, line: int | None = None) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.line = line

    @classmethod
    def read_failure(cls, file_path: Path, reason: str) -> RouteParseError:
        return cls(f'Failed to read routes file "{file_path}": {reason}', file_path=file_path)

    @classmethod
    def syntax_failure(cls, file_path: Path, reason: str, line: int | None = None) -> RouteParseError:
        return cls(f'Syntax error in routes file "{file_path}": {reason}', file_path=file_path, line=line)


class CatalogError(Exception):
    """Raised when a screen catalog cannot be loaded or validated."""
