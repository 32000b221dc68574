"""
Serialize typed records as csv rows.

Output is one header row (the record type's field names, in declared order)
followed by one row per record. Cells are quoted only when they contain the
delimiter, a quote or a line break.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import IO, Any, Iterable, List, Sequence, Tuple

from .errors import WriteError
from .models import RecordMapping, record_mapping_for
from .rules import CANONICAL_ENCODING, DELIMITER, LINE_TERMINATOR, QUOTECHAR

logger = logging.getLogger(__name__)

_QUOTING_TERMINATOR = "\r\n"


class CsvWriter:
    """Handle returned after a successful save; gives the caller its sink back."""

    def __init__(self, sink: IO, header: Sequence[str], rows_written: int):
        self.sink = sink
        self.header: Tuple[str, ...] = tuple(header)
        self.rows_written = rows_written

    def into_inner(self) -> IO:
        return self.sink

    def __repr__(self) -> str:
        return f"CsvWriter(header={list(self.header)!r}, rows_written={self.rows_written})"


def _is_binary(sink: IO) -> bool:
    if isinstance(sink, io.TextIOBase):
        return False
    if isinstance(sink, (io.RawIOBase, io.BufferedIOBase)):
        return True
    return "b" in str(getattr(sink, "mode", ""))


class _RowFormatter:
    """
    Renders one row at a time.

    The csv module only quotes line breaks found in its own line terminator,
    so rows are formatted with CRLF and the ending is swapped afterwards.
    """

    def __init__(self, lineterminator: str):
        self.lineterminator = lineterminator
        self.buffer = io.StringIO(newline="")
        self.writer = csv.writer(
            self.buffer,
            delimiter=DELIMITER,
            quotechar=QUOTECHAR,
            doublequote=True,
            quoting=csv.QUOTE_MINIMAL,
            lineterminator=_QUOTING_TERMINATOR,
        )

    def format(self, cells: Sequence[str]) -> str:
        self.buffer.seek(0)
        self.buffer.truncate()
        self.writer.writerow(cells)
        return self.buffer.getvalue()[: -len(_QUOTING_TERMINATOR)] + self.lineterminator


def record_cells(mapping: RecordMapping, header: Sequence[str], record: Any, index: int) -> List[str]:
    try:
        pairs = list(mapping.to_fields(record))
    except (ValueError, TypeError, AttributeError) as e:
        raise WriteError(f"record {index}: cannot render fields: {e}") from e

    names = [name for name, _ in pairs]
    if names != list(header):
        raise WriteError(f"record {index}: fields {names} do not match header {list(header)}")

    cells = []
    for name, text in pairs:
        if not isinstance(text, str):
            raise WriteError(f"record {index}: field '{name}' rendered as {type(text).__name__}, not text")
        cells.append(text)
    return cells


def serialize_records(
    sink: IO,
    records: Iterable[Any],
    record_type: Any = None,
    lineterminator: str = LINE_TERMINATOR,
) -> CsvWriter:
    """
    Write `records` to `sink` as csv and flush it.

    The record type is `record_type` when given, otherwise the type of the
    first record. With no records and no record type nothing is written;
    with an explicit record type the header is always written.

    `sink` is anything with a `write` method. Binary streams get UTF-8
    bytes, everything else gets text.
    """
    records = list(records)
    if record_type is None:
        if not records:
            logger.debug("nothing to write: no records and no record type")
            return CsvWriter(sink, (), 0)
        record_type = type(records[0])

    mapping = record_mapping_for(record_type)
    header = list(mapping.field_names)
    formatter = _RowFormatter(lineterminator)
    binary = _is_binary(sink)

    def emit(cells: Sequence[str]) -> None:
        line = formatter.format(cells)
        sink.write(line.encode(CANONICAL_ENCODING) if binary else line)

    try:
        emit(header)
        for index, record in enumerate(records, start=1):
            emit(record_cells(mapping, header, record, index))
        flush = getattr(sink, "flush", None)
        if flush is not None:
            flush()
    except (OSError, ValueError, TypeError, AttributeError, csv.Error) as e:
        raise WriteError(f"write failed: {e}") from e

    logger.debug("wrote %d record(s) with %d column(s)", len(records), len(header))
    return CsvWriter(sink, header, len(records))
