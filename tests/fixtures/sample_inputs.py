from __future__ import annotations

import io
from typing import Iterable

from openpyxl import Workbook


def xlsx_bytes(sheets: dict[str, Iterable[list]], *, hidden: Iterable[str] = ()) -> bytes:
    """Build an in-memory workbook with one worksheet per ``sheets`` entry."""

    workbook = Workbook()
    workbook.remove(workbook.active)
    hidden_names = set(hidden)
    for title, rows in sheets.items():
        sheet = workbook.create_sheet(title=title)
        for row in rows:
            sheet.append(list(row))
        if title in hidden_names:
            sheet.sheet_state = "hidden"
    buffer = io.BytesIO()
    workbook.save(buffer)
    workbook.close()
    return buffer.getvalue()


def programs_xlsx() -> bytes:
    """A noisy sheet: title and blank rows above the real header."""

    return xlsx_bytes(
        {
            "Programs": [
                ["Summer Programs 2024", None, None, None],
                [None, None, None, None],
                ["Program Name", "Grade Level", "Program Fee", "Deadline "],
                ["Robotics Camp", "9-12", 250, "2024-03-01"],
                ["Math Circle", "10", None, "2024-04-15"],
                [None, None, None, None],
                ["Art Studio", None, 0, None],
            ]
        }
    )


def contacts_csv() -> bytes:
    return "\ufeffName,Email,Grade\nAda,ada@example.com,11\nGrace,,9\n,,\n".encode("utf-8")


def multi_sheet_xlsx() -> bytes:
    return xlsx_bytes(
        {
            "Primary": [
                ["member_id", "value"],
                ["1001", 10],
                ["1002", 20],
            ],
            "Blank": [],
            "Secondary": [
                [None],
                ["member_id", "note"],
                ["1003", "gamma"],
            ],
        }
    )
