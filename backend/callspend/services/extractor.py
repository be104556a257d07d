import logging
from io import BytesIO
from typing import Any, List, NamedTuple, Tuple
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from callspend.config import settings
from callspend.errors import MalformedInputError

logger = logging.getLogger(__name__)

# XML parse errors from both ElementTree and lxml subclass SyntaxError.
READ_ERRORS = (InvalidFileException, BadZipFile, KeyError, ValueError, OSError, SyntaxError)


class ExtractedRow(NamedTuple):
    number: int
    cells: Tuple[Any, ...]


def is_blank_row(cells: Tuple[Any, ...]) -> bool:
    for value in cells:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return False
    return True


def trim_padding(cells: Tuple[Any, ...]) -> Tuple[Any, ...]:
    """Drop the trailing empty cells read-only worksheets add to reach the sheet width."""
    end = len(cells)
    while end and cells[end - 1] is None:
        end -= 1
    return tuple(cells[:end])


def extract_rows(data: bytes, header_rows: int | None = None) -> List[ExtractedRow]:
    """Read the first worksheet of an xlsx payload into raw data rows.

    The leading ``header_rows`` rows are dropped unconditionally, fully blank
    rows are skipped and trailing empty cells are trimmed from each row. Row numbers are the 1-based sheet row numbers so
    that errors can point at the spreadsheet line an operator sees.
    """
    skip = settings.header_rows if header_rows is None else header_rows
    try:
        workbook = openpyxl.load_workbook(BytesIO(data), read_only=True, data_only=True)
    except READ_ERRORS as exc:
        raise MalformedInputError(f"Unable to read spreadsheet: {exc}") from exc
    try:
        if not workbook.worksheets:
            raise MalformedInputError("Spreadsheet contains no worksheets")
        worksheet = workbook.worksheets[0]
        rows: List[ExtractedRow] = []
        for number, cells in enumerate(worksheet.iter_rows(values_only=True), start=1):
            if number <= skip or is_blank_row(cells):
                continue
            rows.append(ExtractedRow(number, trim_padding(cells)))
    except READ_ERRORS as exc:
        raise MalformedInputError(f"Unable to read worksheet: {exc}") from exc
    finally:
        workbook.close()
    logger.debug("Extracted %s data rows from sheet %r", len(rows), worksheet.title)
    return rows
