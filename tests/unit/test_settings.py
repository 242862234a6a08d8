from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from sheetsift.application.engine import build_classifier
from sheetsift.infrastructure.settings import Settings


@pytest.fixture(autouse=True)
def _isolate(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("SHEETSIFT_PAGE_SIZE", "SHEETSIFT_HEADER_KEYWORDS", "SHEETSIFT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings()

    assert settings.page_size == 250
    assert settings.header_scan_limit == 5
    assert settings.header_keywords == ()
    assert settings.classify is True
    assert settings.log_level == logging.INFO
    assert settings.supported_file_extensions == (".xlsx", ".xlsm", ".csv")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SHEETSIFT_PAGE_SIZE", "25")
    monkeypatch.setenv("SHEETSIFT_HEADER_KEYWORDS", "Name, Grade")
    monkeypatch.setenv("SHEETSIFT_LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.page_size == 25
    assert settings.header_keywords == ("name", "grade")
    assert settings.log_level == logging.DEBUG


def test_settings_toml(tmp_path):
    (tmp_path / "settings.toml").write_text('page_size = 10\nexport_sheet_name = "Results"\n', encoding="utf-8")

    settings = Settings()

    assert settings.page_size == 10
    assert settings.export_sheet_name == "Results"


def test_init_kwargs_beat_env(monkeypatch):
    monkeypatch.setenv("SHEETSIFT_PAGE_SIZE", "25")

    assert Settings(page_size=7).page_size == 7


def test_extensions_are_normalized():
    settings = Settings(supported_file_extensions=["XLSX", "*.csv"])

    assert settings.supported_file_extensions == (".xlsx", ".csv")


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        Settings(page_size=0)
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_build_classifier_follows_settings():
    assert build_classifier(Settings(classify=False)) is None
    custom = build_classifier(Settings(categories={"Location": ["city"]}))
    assert custom is not None and custom.categories == ["Location"]
    assert build_classifier(Settings()).categories[0] == "Grade Level"


def test_export_sheet_name_rejects_forbidden_characters():
    with pytest.raises(ValidationError, match="export_sheet_name"):
        Settings(export_sheet_name="Q1/Q2")

    assert Settings(export_sheet_name="Q1 and Q2").export_sheet_name == "Q1 and Q2"
