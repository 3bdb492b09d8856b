import pytest

from crm.csv_ingest import CSV_TEMPLATE_HEADERS, parse_csv, read_csv_file, row_to_payload, unknown_headers
from crm.errors import ValidationError


def test_parses_rows_keyed_by_header():
    rows = parse_csv("Address,Asking Price\n123 Main St,150000\n456 Oak Ave,200000\n")
    assert rows == [
        {"Address": "123 Main St", "Asking Price": "150000"},
        {"Address": "456 Oak Ave", "Asking Price": "200000"},
    ]


def test_missing_trailing_cells_are_empty_and_extra_cells_dropped():
    rows = parse_csv("Address,Asking Price,Notes\n1 Main,100\n2 Oak,200,nice,extra")
    assert rows == [
        {"Address": "1 Main", "Asking Price": "100", "Notes": ""},
        {"Address": "2 Oak", "Asking Price": "200", "Notes": "nice"},
    ]


def test_blank_lines_are_skipped_and_values_trimmed():
    rows = parse_csv(" Address , Notes \n\n  9 Elm ,  quiet  \n   \n")
    assert rows == [{"Address": "9 Elm", "Notes": "quiet"}]


def test_windows_line_endings():
    rows = parse_csv("Address,Notes\r\n1 Main,a\r\n")
    assert rows == [{"Address": "1 Main", "Notes": "a"}]


def test_header_only_yields_no_rows():
    assert parse_csv("Address,Asking Price") == []


def test_row_to_payload_maps_template_columns():
    payload = row_to_payload({
        "Address": "1 Main",
        "Asking Price": "100000",
        "Contact Name": "Jane",
        "Notes": "",
        "Color": "blue",
    })
    assert payload == {"address": "1 Main", "askingPrice": "100000", "contactName": "Jane"}


def test_unknown_headers():
    assert unknown_headers(list(CSV_TEMPLATE_HEADERS)) == []
    assert unknown_headers(["Address", "Color"]) == ["Color"]


def test_read_csv_file_requires_csv_extension(tmp_path):
    path = tmp_path / "sheet.txt"
    path.write_text("Address\n1 Main\n")
    with pytest.raises(ValidationError) as excinfo:
        read_csv_file(str(path))
    assert excinfo.value.message == "Please select a valid CSV file"


def test_read_csv_file_strips_bom(tmp_path):
    path = tmp_path / "sheet.csv"
    path.write_bytes("\ufeffAddress,Asking Price\n1 Main,5\n".encode("utf-8"))
    assert read_csv_file(str(path)) == [{"Address": "1 Main", "Asking Price": "5"}]
