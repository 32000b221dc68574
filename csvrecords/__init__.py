from .csv_io import load_csv_file, load_csv_read, save_csv_file, save_csv_write
from .errors import CreateError, CsvError, DecodeError, OpenError, RowParseError, WriteError
from .models import CsvRecord, DecodeReport, RecordMapping, default_only, record_mapping_for
from .writer import CsvWriter

__all__ = [
    "load_csv_file",
    "load_csv_read",
    "save_csv_file",
    "save_csv_write",
    "CsvRecord",
    "CsvWriter",
    "DecodeReport",
    "RecordMapping",
    "default_only",
    "record_mapping_for",
    "CsvError",
    "OpenError",
    "CreateError",
    "DecodeError",
    "RowParseError",
    "WriteError",
]
