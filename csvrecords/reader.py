"""
Parse csv text into typed records.

The first non-blank row is the header; every later row is matched to it by
position and handed to the record type as a column name -> cell text mapping.
"""

from __future__ import annotations

import csv
import logging
from typing import Any, List, Mapping, Optional, Sequence, TextIO

from pydantic import ValidationError

from .errors import RowParseError
from .models import RecordMapping, record_mapping_for
from .rules import DELIMITER, FIELD_SIZE_LIMIT, QUOTECHAR

logger = logging.getLogger(__name__)


def _first_error_field(exc: ValidationError) -> Optional[str]:
    for err in exc.errors():
        if err.get("loc"):
            return str(err["loc"][0])
    return None


def _first_error_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    err = errors[0]
    if "input" in err and err.get("type") != "missing":
        return f"{err['msg']} (got {err['input']!r})"
    return err["msg"]


def deserialize_row(
    mapping: RecordMapping,
    header: Sequence[str],
    row: Sequence[str],
    row_number: int,
    line: Optional[int] = None,
) -> Any:
    if len(row) != len(header):
        raise RowParseError(
            row_number,
            f"found {len(row)} fields, header has {len(header)}",
            line=line,
        )

    fields: Mapping[str, str] = dict(zip(header, row))
    try:
        return mapping.from_fields(fields)
    except ValidationError as e:
        raise RowParseError(
            row_number, e, field=_first_error_field(e), line=line, reason=_first_error_message(e)
        ) from e
    except KeyError as e:
        name = str(e.args[0]) if e.args else None
        raise RowParseError(row_number, e, field=name, line=line, reason="Field required") from e
    except (ValueError, TypeError) as e:
        raise RowParseError(row_number, e, line=line) from e


def _lift_field_size_limit() -> None:
    # Process-wide setting; raised, never lowered.
    if csv.field_size_limit() < FIELD_SIZE_LIMIT:
        csv.field_size_limit(FIELD_SIZE_LIMIT)


def parse_records(stream: TextIO, record_type: Any) -> List[Any]:
    """
    Read every row of `stream` into a list of `record_type` instances.

    Empty input and header-only input both give an empty list. The first bad
    row aborts the whole load with a RowParseError.
    """
    mapping = record_mapping_for(record_type)
    _lift_field_size_limit()
    reader = csv.reader(stream, delimiter=DELIMITER, quotechar=QUOTECHAR, doublequote=True)

    header: Optional[List[str]] = None
    records: List[Any] = []
    row_number = 0

    try:
        for row in reader:
            if not row:
                continue
            row_number += 1
            if header is None:
                header = row
                continue
            records.append(deserialize_row(mapping, header, row, row_number, line=reader.line_num))
    except csv.Error as e:
        raise RowParseError(row_number + 1, e, line=reader.line_num) from e

    logger.debug("parsed %d record(s) with %d column(s)", len(records), len(header or ()))
    return records
