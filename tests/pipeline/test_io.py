from __future__ import annotations

import io
import zipfile
from datetime import datetime

import pytest

from fixtures.sample_inputs import contacts_csv, multi_sheet_xlsx, programs_xlsx, xlsx_bytes
from sheetsift.infrastructure.io.workbook import coerce_cell, read_sheets, sheet_title
from sheetsift.models.errors import DecodeError


def test_reads_every_visible_sheet_in_order():
    sheets = read_sheets(multi_sheet_xlsx(), "multi.xlsx")

    assert [s.sheet_name for s in sheets] == ["Primary", "Blank", "Secondary"]
    assert sheets[0].grid[0] == ["member_id", "value"]
    assert sheets[0].grid[1] == ["1001", 10]
    assert sheets[1].grid == []


def test_hidden_sheets_are_skipped():
    payload = xlsx_bytes({"Shown": [["a"], [1]], "Secret": [["b"], [2]]}, hidden=["Secret"])

    assert [s.sheet_name for s in read_sheets(payload, "book.xlsx")] == ["Shown"]


def test_blank_cells_become_absent_and_trailing_blanks_trimmed():
    sheets = read_sheets(programs_xlsx(), "programs.xlsx")
    grid = sheets[0].grid

    assert grid[0] == ["Summer Programs 2024"]
    assert grid[1] == []
    assert grid[4] == ["Math Circle", "10", None, "2024-04-15"]
    assert grid[5] == []
    assert grid[-1] == ["Art Studio", None, 0]


def test_zip_magic_detected_without_extension():
    sheets = read_sheets(programs_xlsx(), None)

    assert sheets[0].sheet_name == "Programs"


def test_csv_with_bom():
    sheets = read_sheets(contacts_csv(), "contacts 2024.csv")

    assert len(sheets) == 1
    assert sheets[0].sheet_name == "contacts 2024"
    assert sheets[0].grid == [
        ["Name", "Email", "Grade"],
        ["Ada", "ada@example.com", "11"],
        ["Grace", None, "9"],
    ]


def test_coerce_cell():
    assert coerce_cell(True) == "TRUE"
    assert coerce_cell(3) == 3
    assert coerce_cell("   ") is None
    assert coerce_cell(datetime(2024, 1, 2, 3, 4)) == "2024-01-02T03:04:00"


def test_sheet_title():
    assert sheet_title("my/weird:name") == "my weird name"
    assert sheet_title("***") == "Sheet"
    assert len(sheet_title("x" * 50)) == 31


@pytest.mark.parametrize(
    ("payload", "filename"),
    [
        (b"", "empty.xlsx"),
        (b"hello world", "notes.txt"),
        (b"\xd0\xcf\x11\xe0legacy", "old.xls"),
        (b"not a zip at all", "broken.xlsx"),
        (b"\xff\xfe\x00bad", "latin.csv"),
    ],
)
def test_unrecognized_payloads_raise_decode_error(payload, filename):
    with pytest.raises(DecodeError) as excinfo:
        read_sheets(payload, filename)

    assert excinfo.value.filename == filename


def test_zip_that_is_not_a_workbook():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("hello.txt", "hi")

    with pytest.raises(DecodeError):
        read_sheets(buffer.getvalue(), "archive.xlsx")


def test_supported_extensions_enforced():
    with pytest.raises(DecodeError, match="unsupported extension"):
        read_sheets(contacts_csv(), "contacts.csv", supported_extensions=[".xlsx"])


def test_csv_cells_longer_than_reader_default_are_kept():
    notes = "x" * 200_000
    payload = f"Name,Notes\nA,{notes}\n".encode("utf-8")

    (sheet,) = read_sheets(payload, "big.csv")

    assert sheet.grid[1] == ["A", notes]
