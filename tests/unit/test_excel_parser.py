"""
Unit tests for the spreadsheet codec.

Tests decode_spreadsheet / encode_spreadsheet with in-memory workbooks.
"""

from io import BytesIO
import pytest
import pandas as pd
from openpyxl import Workbook, load_workbook

from parsers.excel_parser import decode_spreadsheet, encode_spreadsheet
from exceptions import ExcelParseError


# ===================
# HELPERS
# ===================

def create_excel_file(*sheets: list[list]) -> BytesIO:
    """Helper to create a workbook in memory, one grid per sheet."""
    wb = Workbook()
    wb.remove(wb.active)
    for idx, grid in enumerate(sheets):
        ws = wb.create_sheet(title=f"Sheet{idx + 1}")
        for row in grid:
            ws.append(row)
    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output


# ===================
# DECODE
# ===================

class TestDecodeSpreadsheet:
    """Tests for reading uploaded files."""

    def test_first_row_becomes_keys(self):
        excel_file = create_excel_file([
            ["SKU", "Quantity Available", "Inventory Location"],
            ["A1", 5, "Warehouse"],
            ["B2", 0, "Back Room"],
        ])

        rows = decode_spreadsheet(excel_file)

        assert rows == [
            {"SKU": "A1", "Quantity Available": 5, "Inventory Location": "Warehouse"},
            {"SKU": "B2", "Quantity Available": 0, "Inventory Location": "Back Room"},
        ]

    def test_keeps_column_order(self):
        excel_file = create_excel_file([
            ["Inventory Location", "SKU", "Quantity Available"],
            ["Warehouse", "A1", 5],
        ])

        rows = decode_spreadsheet(excel_file)

        assert list(rows[0].keys()) == ["Inventory Location", "SKU", "Quantity Available"]

    def test_skips_cells_under_unlabeled_columns(self):
        excel_file = create_excel_file([
            ["SKU", None, "Quantity Available"],
            ["A1", "scribble", 5],
        ])

        rows = decode_spreadsheet(excel_file)

        assert rows == [{"SKU": "A1", "Quantity Available": 5}]

    def test_empty_cells_become_empty_strings(self):
        excel_file = create_excel_file([
            ["SKU", "Quantity Available", "Inventory Location"],
            ["A1", None, "Warehouse"],
        ])

        rows = decode_spreadsheet(excel_file)

        assert rows[0]["Quantity Available"] == ""

    def test_drops_blank_rows(self):
        excel_file = create_excel_file([
            ["SKU", "Quantity Available"],
            ["A1", 5],
            [None, None],
            ["B2", 3],
        ])

        rows = decode_spreadsheet(excel_file)

        assert [r["SKU"] for r in rows] == ["A1", "B2"]

    def test_na_strings_are_not_coerced(self):
        excel_file = create_excel_file([
            ["SKU", "Inventory Location"],
            ["NA", "N/A"],
        ])

        rows = decode_spreadsheet(excel_file)

        assert rows == [{"SKU": "NA", "Inventory Location": "N/A"}]

    def test_header_names_are_case_sensitive(self):
        excel_file = create_excel_file([
            ["sku", "SKU"],
            ["lower", "upper"],
        ])

        rows = decode_spreadsheet(excel_file)

        assert rows == [{"sku": "lower", "SKU": "upper"}]

    def test_numbers_keep_their_type(self):
        excel_file = create_excel_file([
            ["SKU", "Quantity Available", "Price"],
            ["A1", 7, 19.5],
        ])

        row = decode_spreadsheet(excel_file)[0]

        assert row["Quantity Available"] == 7
        assert isinstance(row["Quantity Available"], int)
        assert row["Price"] == 19.5

    def test_text_quantities_stay_text(self):
        excel_file = create_excel_file([
            ["SKU", "Quantity Available"],
            ["B2", "abc"],
        ])

        rows = decode_spreadsheet(excel_file)

        assert rows[0]["Quantity Available"] == "abc"

    def test_reads_only_first_sheet(self):
        excel_file = create_excel_file(
            [["SKU"], ["FIRST"]],
            [["SKU"], ["SECOND"]],
        )

        rows = decode_spreadsheet(excel_file)

        assert rows == [{"SKU": "FIRST"}]

    def test_header_only_sheet_returns_no_rows(self):
        excel_file = create_excel_file([["SKU", "Quantity Available"]])

        assert decode_spreadsheet(excel_file) == []

    def test_accepts_raw_bytes(self):
        excel_file = create_excel_file([["SKU"], ["A1"]])

        rows = decode_spreadsheet(excel_file.getvalue())

        assert rows == [{"SKU": "A1"}]

    def test_reads_pandas_written_file(self):
        output = BytesIO()
        df = pd.DataFrame(
            [["A1", 5, "Warehouse"]],
            columns=["SKU", "Quantity Available", "Inventory Location"],
        )
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Products", index=False)
        output.seek(0)

        rows = decode_spreadsheet(output)

        assert rows == [{"SKU": "A1", "Quantity Available": 5, "Inventory Location": "Warehouse"}]

    def test_invalid_file_raises(self):
        with pytest.raises(ExcelParseError) as exc_info:
            decode_spreadsheet(b"this is not a workbook")

        assert exc_info.value.code == "EXCEL_PARSE_ERROR"
        assert exc_info.value.status_code == 422


# ===================
# ENCODE
# ===================

class TestEncodeSpreadsheet:
    """Tests for writing download files."""

    @pytest.fixture
    def sample_rows(self):
        return [
            {"Product Title": "Shirt", "SKU": "A1", "Quantity Available": 10},
            {"Product Title": "Shirt", "SKU": "A2", "Quantity Available": 0},
        ]

    def test_writes_header_from_first_record(self, sample_rows):
        wb = load_workbook(encode_spreadsheet(sample_rows))
        ws = wb.active

        assert [c.value for c in ws[1]] == ["Product Title", "SKU", "Quantity Available"]
        assert ws["A1"].font.bold is True

    def test_writes_rows_in_order(self, sample_rows):
        wb = load_workbook(encode_spreadsheet(sample_rows))
        ws = wb.active

        assert [c.value for c in ws[2]] == ["Shirt", "A1", 10]
        assert [c.value for c in ws[3]] == ["Shirt", "A2", 0]
        assert ws.max_row == 3

    def test_uses_sheet_title(self, sample_rows):
        wb = load_workbook(encode_spreadsheet(sample_rows, sheet_title="Report"))

        assert wb.sheetnames == ["Report"]

    def test_later_records_follow_first_key_order(self):
        rows = [
            {"SKU": "A1", "Quantity Available": 1},
            {"Quantity Available": 2, "SKU": "A2"},
        ]

        ws = load_workbook(encode_spreadsheet(rows)).active

        assert [c.value for c in ws[3]] == ["A2", 2]

    def test_empty_rows_give_empty_sheet(self):
        output = encode_spreadsheet([])

        assert decode_spreadsheet(output) == []

    def test_round_trip(self):
        rows = [
            {"SKU": "A1", "Quantity Available": 5, "Inventory Location": "Warehouse", "Note": "keep me"},
            {"SKU": "B2", "Quantity Available": -3, "Inventory Location": "N/A", "Note": ""},
            {"SKU": "C3", "Quantity Available": 2.5, "Inventory Location": "Back Room", "Note": "x"},
        ]

        assert decode_spreadsheet(encode_spreadsheet(rows)) == rows

    def test_formula_like_strings_round_trip_as_text(self):
        rows = [
            {"Product Title": "=1+1", "SKU": "A1"},
            {"Product Title": "Shirt", "SKU": "=B2"},
        ]

        output = encode_spreadsheet(rows)
        ws = load_workbook(output).active

        assert ws["A2"].value == "=1+1"
        assert ws["A2"].data_type == "s"
        assert ws["B3"].data_type == "s"
        output.seek(0)
        assert decode_spreadsheet(output) == rows

    def test_formula_like_header_stays_text(self):
        ws = load_workbook(encode_spreadsheet([{"=HEADER()": "x"}])).active

        assert ws["A1"].value == "=HEADER()"
        assert ws["A1"].data_type == "s"

    def test_control_characters_are_stripped(self):
        rows = [{"Product Title": "Tee\x01", "SKU": "A\x00B\x1f", "Note": "tab\tkept"}]

        decoded = decode_spreadsheet(encode_spreadsheet(rows))

        assert decoded == [{"Product Title": "Tee", "SKU": "AB", "Note": "tab\tkept"}]

    def test_all_blank_records_are_dropped_on_read(self):
        rows = [{"a": "x", "b": "y"}, {"a": "", "b": ""}, {"a": "z", "b": ""}]

        assert decode_spreadsheet(encode_spreadsheet(rows)) == [rows[0], rows[2]]
