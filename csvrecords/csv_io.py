"""
Load and save typed records as csv.

File-based entry points open and close their own handles and attach the path
to any error they raise. Stream-based entry points work on what the caller
hands them and leave the stream open.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import IO, Any, Iterable, List, Optional, Union

from .decoding import read_decoded
from .errors import CreateError, CsvError, DecodeError
from .reader import parse_records
from .rules import CANONICAL_ENCODING
from .writer import CsvWriter, serialize_records

logger = logging.getLogger(__name__)

Source = Union[str, bytes, bytearray, IO]


def _as_text_stream(source: Source) -> IO[str]:
    if isinstance(source, str):
        return io.StringIO(source, newline="")
    if isinstance(source, (bytes, bytearray)):
        return io.StringIO(bytes(source).decode(CANONICAL_ENCODING, errors="replace"), newline="")
    if isinstance(source, io.TextIOBase):
        return source

    try:
        data = source.read()
    except OSError as e:
        raise DecodeError(f"cannot read: {e}") from e
    if isinstance(data, str):
        return io.StringIO(data, newline="")
    return io.StringIO(data.decode(CANONICAL_ENCODING, errors="replace"), newline="")


def load_csv_file(path: Union[str, Path], record_type: Any, encoding: Optional[str] = None) -> List[Any]:
    """
    Load records from a csv file.

    A leading byte-order mark is stripped and the text is transcoded from the
    BOM-indicated encoding, from `encoding` when given, or from a detected one.
    """
    stream, report = read_decoded(path, encoding=encoding)
    try:
        records = parse_records(stream, record_type)
    except CsvError as e:
        e.with_path(path)
        raise

    logger.debug("loaded %d record(s) from %s (%s)", len(records), path, report.encoding)
    return records


def load_csv_read(source: Source, record_type: Any) -> List[Any]:
    """
    Load records from text the caller already holds.

    `source` may be a str, UTF-8 bytes, or a text or binary stream. No BOM
    handling and no encoding detection happen here.
    """
    return parse_records(_as_text_stream(source), record_type)


def save_csv_file(path: Union[str, Path], records: Iterable[Any], record_type: Any = None) -> None:
    """Create or truncate `path` and write `records` to it as UTF-8 csv."""
    try:
        f = open(path, "w", encoding=CANONICAL_ENCODING, newline="")
    except OSError as e:
        raise CreateError(f"cannot create: {e.strerror or e}", path=path) from e

    with f:
        try:
            writer = save_csv_write(f, records, record_type=record_type)
        except CsvError as e:
            e.with_path(path)
            raise

    logger.debug("saved %d record(s) to %s", writer.rows_written, path)


def save_csv_write(sink: IO, records: Iterable[Any], record_type: Any = None) -> CsvWriter:
    """Write `records` to any writable text or binary sink, flush it, and return the writer handle."""
    return serialize_records(sink, records, record_type=record_type)
