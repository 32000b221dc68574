"""
Byte decoding for csv input files.

Responsibilities:
- byte-order-mark detection + stripping
- encoding detection when there is no BOM
- lossy decode into text (malformed sequences become U+FFFD)
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from charset_normalizer import from_bytes

from .errors import DecodeError, OpenError
from .models import DecodeReport
from .rules import BOMS, CANONICAL_ENCODING

logger = logging.getLogger(__name__)


def strip_bom(raw: bytes) -> Tuple[Optional[str], bytes]:
    """Return the BOM-indicated encoding (or None) and the bytes after the BOM."""
    for bom, encoding in BOMS:
        if raw.startswith(bom):
            return encoding, raw[len(bom):]
    return None, raw


def _guess_encoding(raw: bytes) -> Optional[str]:
    match = from_bytes(raw).best()
    if match is None:
        return None
    return match.encoding


def decode_bytes(raw: bytes, encoding: Optional[str] = None) -> Tuple[str, DecodeReport]:
    """
    Decode raw csv bytes into text.

    Rules:
    - A leading BOM wins and is never part of the returned text.
    - Without a BOM, use `encoding` if the caller gave one.
    - Otherwise UTF-8 if the bytes are valid UTF-8, else the best guess of
      charset-normalizer, else UTF-8.
    - Never fail on malformed input: decode with replacement characters.
    """
    bom_encoding, payload = strip_bom(raw)
    detected = None

    if bom_encoding is not None:
        decode_used = bom_encoding
        logger.debug("stripped %s byte-order mark", bom_encoding)
    elif encoding is not None:
        decode_used = encoding
    else:
        decode_used = CANONICAL_ENCODING
        try:
            payload.decode(CANONICAL_ENCODING)
        except UnicodeDecodeError:
            detected = _guess_encoding(payload)
            if detected is not None:
                decode_used = detected
            logger.debug("input is not %s, detected %s", CANONICAL_ENCODING, detected)

    replacements = 0
    try:
        text = payload.decode(decode_used)
    except LookupError as e:
        raise DecodeError(f"unknown encoding: {decode_used}") from e
    except UnicodeDecodeError:
        text = payload.decode(decode_used, errors="replace")
        replacements = text.count("\ufffd")
        logger.warning(
            "decoding as %s replaced %d malformed sequence(s)", decode_used, replacements
        )

    report = DecodeReport(
        encoding=decode_used,
        bom=bom_encoding is not None,
        detected=detected,
        replacements=replacements,
    )
    return text, report


def read_decoded(path: Union[str, Path], encoding: Optional[str] = None) -> Tuple[io.StringIO, DecodeReport]:
    """Read a file and return its decoded text as a stream ready for the csv parser."""
    try:
        f = open(path, "rb")
    except OSError as e:
        raise OpenError(f"cannot open for reading: {e.strerror or e}", path=path) from e

    with f:
        try:
            raw = f.read()
        except OSError as e:
            raise DecodeError(f"cannot read: {e.strerror or e}", path=path) from e

    try:
        text, report = decode_bytes(raw, encoding=encoding)
    except DecodeError as e:
        raise e.with_path(path)

    logger.debug("decoded %s as %s (%d bytes)", path, report.encoding, len(raw))
    return io.StringIO(text, newline=""), report
