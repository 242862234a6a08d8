from __future__ import annotations

import io
import json
import logging

import pytest
from openpyxl import load_workbook

from fixtures.sample_inputs import contacts_csv, programs_xlsx
from sheetsift import Engine, Settings
from sheetsift.infrastructure.observability.logger import SessionLogger
from sheetsift.models.errors import EncodeError
from sheetsift.models.ingest import IngestStatus
from sheetsift.models.query import SortDirection


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    monkeypatch.chdir(tmp_path)
    return Settings(header_keywords=["fee", "email"])


@pytest.fixture
def engine(settings) -> Engine:
    eng = Engine(settings=settings)
    eng.ingest([("programs.xlsx", programs_xlsx()), ("contacts.csv", contacts_csv())])
    return eng


def test_ingest_extends_dataset(engine):
    assert len(engine.dataset) == 5

    result = engine.ingest([("contacts.csv", contacts_csv())])

    assert result.status is IngestStatus.SUCCEEDED
    assert len(engine.dataset) == 7


def test_default_page(engine):
    page = engine.get_page()

    assert page.total_count == 5
    assert page.total_pages == 1
    assert page.current_page == 1
    assert len(page.records) == 5


def test_category_filter_uses_canonical_field(engine):
    engine.set_category_filter("Cost")

    names = [r.get("Program Name") for r in engine.view()]
    assert names == ["Robotics Camp", "Art Studio"]


def test_grade_category_includes_csv_rows(engine):
    engine.set_category_filter("Grade Level")

    assert [r.get("Program Name") or r.get("Name") for r in engine.view()] == [
        "Robotics Camp",
        "Math Circle",
        "Ada",
        "Grace",
    ]


def test_sort_search_and_paging_compose(engine):
    engine.set_category_filter("Grade Level")
    engine.set_sort("Grade Level")
    engine.set_sort("Grade Level")
    engine.set_page_size(2)

    assert engine.state.sort_direction is SortDirection.DESCENDING
    assert engine.state.page_index == 1
    # "9-12" is not a number, so it compares as text and sorts above the digits.
    assert [r["Grade Level"] for r in engine.view()] == ["9-12", "11", "10", "9"]

    engine.set_page_index(5)
    page = engine.get_page()
    assert page.current_page == 2
    assert [r["Grade Level"] for r in page.records] == ["10", "9"]

    engine.set_search_term("ADA")
    assert [r["Name"] for r in engine.view()] == ["Ada"]
    assert engine.get_page().current_page == 1


def test_columns_put_categories_first(engine):
    columns = engine.columns()

    assert columns[:4] == engine.categories()
    assert "Program Name" in columns and "Email" in columns
    assert columns.index("Program Name") < columns.index("Email")


def test_export_current_view(engine):
    engine.set_search_term("circle")

    result = engine.export()

    workbook = load_workbook(io.BytesIO(result.payload))
    rows = list(workbook["Export"].iter_rows(values_only=True))
    workbook.close()
    assert result.row_count == 1
    assert rows[0][:4] == ("Grade Level", "Cost", "Application Deadline", "Eligibility Requirements")
    assert "Math Circle" in rows[1]


def test_export_failure_is_raised(engine):
    engine.ingest([("bad.csv", "Name\nbad\x02value\n".encode("utf-8"))])
    engine.set_search_term("bad")

    with pytest.raises(EncodeError):
        engine.export()


def test_reset_clears_everything(engine):
    engine.set_search_term("x")
    engine.reset()

    assert engine.dataset == []
    assert engine.state.search_term == ""
    assert engine.state.page_size == 250


def test_classification_can_be_disabled(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    engine = Engine(settings=Settings(classify=False))

    engine.ingest([("contacts.csv", contacts_csv())])

    assert engine.categories() == []
    assert engine.dataset[0] == {"Name": "Ada", "Email": "ada@example.com", "Grade": "11"}


def test_events_validate_against_schemas(settings):
    base = logging.getLogger("sheetsift.test.engine")
    base.handlers.clear()
    base.setLevel(logging.DEBUG)
    base.propagate = False
    records: list[logging.LogRecord] = []

    class _Capture(logging.Handler):
        def emit(self, record):
            records.append(record)

    base.addHandler(_Capture())
    engine = Engine(settings=settings, logger=SessionLogger(base))

    engine.log_settings()
    engine.ingest([("programs.xlsx", programs_xlsx()), ("junk.bin", b"??")])
    engine.set_sort("Cost")
    engine.export()

    events = [r.event for r in records]
    assert "sheetsift.ingest.started" in events
    assert "sheetsift.file.failed" in events
    assert "sheetsift.sheet.normalized" in events
    assert "sheetsift.query.changed" in events
    assert "sheetsift.export.written" in events
    completed = next(r for r in records if r.event == "sheetsift.ingest.completed")
    assert completed.data["status"] == "partial"
    json.dumps(completed.data)


def test_columns_follow_the_current_view(engine):
    engine.set_search_term("ada")

    columns = engine.columns()

    assert "Email" in columns
    assert "Program Name" not in columns


def test_bad_sheet_title_reported_as_encode_error(engine):
    base = logging.getLogger("sheetsift.test.export")
    base.handlers.clear()
    base.setLevel(logging.DEBUG)
    base.propagate = False
    records: list[logging.LogRecord] = []

    class _Capture(logging.Handler):
        def emit(self, record):
            records.append(record)

    base.addHandler(_Capture())
    engine.logger = SessionLogger(base)
    engine.settings = engine.settings.model_copy(update={"export_sheet_name": "Q1/Q2"})

    with pytest.raises(EncodeError):
        engine.export()

    assert [r.event for r in records] == ["sheetsift.export.failed"]
