"""
Spreadsheet parsers module.
"""

from parsers.excel_parser import (
    decode_spreadsheet,
    encode_spreadsheet,
    XLSX_MEDIA_TYPE,
)

__all__ = [
    "decode_spreadsheet",
    "encode_spreadsheet",
    "XLSX_MEDIA_TYPE",
]
