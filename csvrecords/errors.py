"""
Error taxonomy for csv loading and saving.

Every error can carry the path of the file it came from; the file-based entry
points attach it before re-raising so the fault can be located in the input.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class CsvError(Exception):
    """Base class for all csvrecords errors."""

    def __init__(self, message: str, path: Optional[PathLike] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def with_path(self, path: PathLike) -> "CsvError":
        if self.path is None:
            self.path = Path(path)
        return self

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class OpenError(CsvError):
    """The input file could not be opened for reading."""


class CreateError(CsvError):
    """The output file could not be created or truncated."""


class DecodeError(CsvError):
    """The byte source could not be read."""


class RowParseError(CsvError):
    def __init__(
        self,
        row: int,
        cause: Union[Exception, str],
        field: Optional[str] = None,
        line: Optional[int] = None,
        path: Optional[PathLike] = None,
        reason: Optional[str] = None,
    ):
        self.row = row
        self.field = field
        self.line = line
        self.cause = cause

        where = f"row {row}"
        if line is not None and line != row:
            where += f" (line {line})"
        if field is not None:
            where += f", field '{field}'"
        super().__init__(f"{where}: {reason or cause}", path=path)


class WriteError(CsvError):
    """A write or flush to the sink failed, or a value could not be rendered."""
