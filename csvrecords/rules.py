"""
Fixed format rules.

This file exists to make the non-configurable parts of the format explicit.
"""

import codecs
import os

CANONICAL_ENCODING = "utf-8"
DELIMITER = ","
QUOTECHAR = '"'
LINE_TERMINATOR = os.linesep

# Longest signatures first: the UTF-32-LE BOM starts with the UTF-16-LE one.
BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

# Largest cell the parser accepts; fits a C long on every platform.
FIELD_SIZE_LIMIT = 2**31 - 1
