"""
Spreadsheet codec for inventory imports and exports.

Reading: first sheet only, first non-blank row is the header row, every
following row becomes a dict keyed by those headers in column order.
Writing: one header row from the first record's keys, then one row per
record. Strings are always stored as text (never as formulas) and lose the
control characters a workbook cannot hold.

Round-trip: decode(encode(rows)) == rows for rows of strings and numbers,
except that records whose cells are all "" are dropped on read.

Header names are the contract with the import pipeline, so they are kept
verbatim (no lower-casing, no trimming) in both directions.
"""

from io import BytesIO
from pathlib import Path
from typing import Any, Iterable, Optional, Union
import math
import structlog

import numpy as np
import pandas as pd
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from exceptions import ExcelParseError

logger = structlog.get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

DEFAULT_SHEET_TITLE = "Products"

Row = dict[str, Any]


def decode_spreadsheet(
    file: Union[bytes, bytearray, str, Path, BytesIO],
) -> list[Row]:
    """
    Parse an uploaded spreadsheet into header-keyed rows.

    Args:
        file: Raw bytes, a file path or a file-like object

    Returns:
        Rows in sheet order. Empty cells are "", cells under a blank header
        are dropped, fully blank rows are dropped.

    Raises:
        ExcelParseError: If the file is not a readable workbook
    """
    if isinstance(file, (bytes, bytearray)):
        file = BytesIO(file)

    logger.info("decoding_spreadsheet", file_type=type(file).__name__)

    try:
        excel = pd.ExcelFile(file, engine="openpyxl")
    except Exception as e:
        logger.error("excel_read_failed", error=str(e))
        raise ExcelParseError(
            message="Failed to read Excel file",
            details={"original_error": str(e)}
        )

    if not excel.sheet_names:
        return []

    sheet_name = excel.sheet_names[0]
    try:
        # No NA coercion: "N/A" and "NA" are real values in exported sheets
        df = excel.parse(
            sheet_name,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_filter=False,
        )
    except Exception as e:
        logger.error("excel_sheet_read_failed", sheet=sheet_name, error=str(e))
        raise ExcelParseError(
            message=f"Failed to read sheet: {sheet_name}",
            details={"sheet": sheet_name, "original_error": str(e)}
        )

    grid = [[_clean_cell(v) for v in raw] for raw in df.itertuples(index=False, name=None)]
    grid = [cells for cells in grid if not _is_blank(cells)]

    if not grid:
        logger.info("spreadsheet_decoded", sheet=sheet_name, row_count=0)
        return []

    headers = [_header_name(h) for h in grid[0]]

    rows: list[Row] = []
    for cells in grid[1:]:
        record: Row = {}
        for header, value in zip(headers, cells):
            if header is None:
                continue
            record[header] = value
        if not _is_blank(record.values()):
            rows.append(record)

    logger.info(
        "spreadsheet_decoded",
        sheet=sheet_name,
        column_count=sum(1 for h in headers if h is not None),
        row_count=len(rows),
    )

    return rows


def encode_spreadsheet(
    rows: list[Row],
    sheet_title: str = DEFAULT_SHEET_TITLE,
) -> BytesIO:
    """
    Serialize rows into an .xlsx workbook.

    Column order follows the first record's key order; later records are
    looked up by those keys (missing keys become blank cells).

    Args:
        rows: Uniformly-keyed records
        sheet_title: Worksheet name

    Returns:
        BytesIO containing the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title

    headers = list(rows[0].keys()) if rows else []

    logger.info(
        "encoding_spreadsheet",
        sheet=sheet_title,
        column_count=len(headers),
        row_count=len(rows),
    )

    bold_font = Font(bold=True)
    for col_idx, header in enumerate(headers, start=1):
        _write_cell(ws, 1, col_idx, header).font = bold_font
        ws.column_dimensions[get_column_letter(col_idx)].width = max(12, len(str(header)) + 4)

    for row_idx, record in enumerate(rows, start=2):
        for col_idx, header in enumerate(headers, start=1):
            _write_cell(ws, row_idx, col_idx, record.get(header, ""))

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output


# ===================
# HELPER FUNCTIONS
# ===================

def _clean_cell(value: Any) -> Any:
    """Normalize a raw cell to str / int / float / "" (plus dates untouched)."""
    if value is None:
        return ""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return int(value)
    return value


def _header_name(value: Any) -> Optional[str]:
    """Header cell to column key; None marks an unlabeled column."""
    if value == "":
        return None
    return str(value)


def _is_blank(values: Iterable[Any]) -> bool:
    return all(v == "" for v in values)


def _to_excel_value(value: Any) -> Any:
    if isinstance(value, str):
        value = ILLEGAL_CHARACTERS_RE.sub("", value)
    if value is None or value == "":
        return None
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, np.generic):
        return value.item()
    return ILLEGAL_CHARACTERS_RE.sub("", str(value))


def _write_cell(ws, row: int, column: int, value: Any):
    """Write one value; strings such as "=1+1" stay literal text, never formulas."""
    cell = ws.cell(row=row, column=column, value=_to_excel_value(value))
    if isinstance(cell.value, str):
        cell.data_type = "s"
    return cell
