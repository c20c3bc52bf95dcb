import pytest

from import_pipeline.excel_reader import (
    SpreadsheetError,
    check_extension,
    parse_sheet,
    read_sheet,
)

HEADERS = ["Descripcion", "Fecha", "Monto ARS", "Medio"]


def test_parse_sheet_single_row(write_xlsx):
    path = write_xlsx(HEADERS, [["Netflix", "15/01/2025", 15000, "visa"]])

    rows = parse_sheet(path)

    assert len(rows) == 1
    row = rows[0]
    assert row.description == "Netflix"
    assert row.date == "15/01/2025"
    assert row.amount_local == 15000.0
    assert row.payment_method == "Visa"
    assert row.line_number == 2
    assert row.is_valid


def test_parse_sheet_keeps_invalid_rows(write_xlsx):
    path = write_xlsx(
        HEADERS,
        [
            ["Netflix", "15/01/2025", 15000, "visa"],
            ["Spotify", "16/01/2025", None, "mc"],
        ],
    )

    rows = parse_sheet(path)

    assert [row.is_valid for row in rows] == [True, False]
    assert "missing amount" in rows[1].validation.errors


def test_blank_rows_are_skipped(write_xlsx):
    path = write_xlsx(
        HEADERS,
        [
            ["Netflix", "15/01/2025", 15000, "visa"],
            [None, None, None, None],
            ["Luz", "20/01/2025", 8000, "efectivo"],
        ],
    )

    rows = parse_sheet(path)

    assert [row.description for row in rows] == ["Netflix", "Luz"]
    assert rows[1].payment_method == "Cash"


def test_read_sheet_from_bytes(write_xlsx):
    path = write_xlsx(HEADERS, [["Netflix", "15/01/2025", 15000, "visa"]])
    with open(path, "rb") as f:
        data = f.read()

    headers, data_rows = read_sheet(data, filename="upload.xlsx")

    assert headers == HEADERS
    assert len(data_rows) == 1
    line_number, cells = data_rows[0]
    assert line_number == 2
    assert cells[0] == "Netflix"


def test_header_only_file_is_rejected(write_xlsx):
    path = write_xlsx(HEADERS, [])

    with pytest.raises(SpreadsheetError, match="empty or only has headers"):
        read_sheet(path)


def test_unreadable_bytes_are_rejected():
    with pytest.raises(SpreadsheetError):
        read_sheet(b"this is not a spreadsheet", filename="expenses.xlsx")


def test_wrong_extension_is_rejected(tmp_path):
    path = tmp_path / "expenses.csv"
    path.write_text("Descripcion,Fecha\nNetflix,15/01/2025\n")

    with pytest.raises(SpreadsheetError, match="accepted"):
        read_sheet(str(path))


def test_check_extension_is_case_insensitive():
    check_extension("GASTOS.XLSX")
    check_extension("old.xls")
    with pytest.raises(SpreadsheetError):
        check_extension("notes.txt")


def test_spreadsheet_error_is_a_value_error():
    assert issubclass(SpreadsheetError, ValueError)
