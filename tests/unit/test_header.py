from __future__ import annotations

from sheetsift.application.pipeline.header import locate_header
from sheetsift.models.errors import NO_HEADER, NoHeaderFound


def test_first_non_empty_row_after_blank_rows():
    grid = [[], [None, None], ["", "  "], ["Name", "Grade"], ["A", "9"]]

    assert locate_header(grid) == 3


def test_single_row_grid_is_its_own_header():
    assert locate_header([["Name"]]) == 0


def test_all_empty_grid_returns_sentinel():
    result = locate_header([[None], [], ["   "]])

    assert result is NO_HEADER
    assert isinstance(result, NoHeaderFound)
    assert not result


def test_empty_grid_returns_sentinel():
    assert locate_header([]) is NO_HEADER


def test_keyword_policy_skips_metadata_rows():
    grid = [
        ["Report generated 2024-01-01"],
        ["Prepared by admissions"],
        ["Program", "Grade", "Fee"],
        ["Camp", "9", 100],
    ]

    assert locate_header(grid, keywords=["grade", "fee"]) == 2


def test_keyword_policy_is_case_insensitive():
    grid = [["notes"], ["PROGRAM NAME", "COST"]]

    assert locate_header(grid, keywords=["cost"]) == 1


def test_keyword_policy_falls_back_to_first_non_empty_row():
    grid = [[None], ["Title"], ["Name", "Value"]]

    assert locate_header(grid, keywords=["grade"]) == 1


def test_keyword_policy_only_scans_window():
    grid = [["title"], [None], [None], ["Grade"]]

    assert locate_header(grid, keywords=["grade"], scan_limit=2) == 0
    assert locate_header(grid, keywords=["grade"], scan_limit=4) == 3


def test_keyword_policy_ignores_numeric_cells():
    grid = [[2024], ["Grade"]]

    assert locate_header(grid, keywords=["2024", "grade"]) == 1
