"""Settings for :mod:`sheetsift` (infrastructure).

Settings are defined in one place (this file) and loaded using `pydantic-settings`.

Supported sources (lowest → highest precedence):
1) `settings.toml` (current working directory)
2) `.env` (current working directory)
3) environment variables (prefix: `SHEETSIFT_`)
4) explicit overrides (`Settings(...)` / CLI)

`settings.toml` is flat: keys map 1:1 to `Settings` fields.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Literal

from openpyxl.workbook.child import INVALID_TITLE_REGEX
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, TomlConfigSettingsSource

from sheetsift.models.query import DEFAULT_PAGE_SIZE

ENV_PREFIX = "SHEETSIFT_"


def _coerce_log_level(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("log_level must be an int or a log level name")

    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not text:
        return logging.INFO

    if text.isdigit():
        return int(text)

    mapped = logging.getLevelNamesMapping().get(text.upper())
    if isinstance(mapped, int):
        return mapped

    raise ValueError(f"Invalid log_level: {value!r}")


def _coerce_str_tuple(value: Any, *, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()

    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if str(v).strip())

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ()
        return tuple(part.strip() for part in text.split(",") if part.strip())

    raise TypeError(f"{field_name} must be a list/tuple of strings or a comma-separated string")


class Settings(BaseSettings):
    """Runtime settings for an ingestion/query session."""

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix=ENV_PREFIX,
        env_file=".env",
    )

    # Query defaults
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    # Header location
    header_scan_limit: int = Field(default=5, ge=1)
    header_keywords: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description="Keywords that mark a header row; empty selects the first non-empty row.",
    )

    # Classification
    classify: bool = Field(default=True)
    categories: dict[str, list[str]] | None = Field(
        default=None,
        description="Ordered category -> keywords table; None uses the built-in table.",
    )

    # Decoding
    max_workers: int = Field(default=4, ge=1)
    supported_file_extensions: Annotated[tuple[str, ...], NoDecode] = Field(default=(".xlsx", ".xlsm", ".csv"))

    # Export
    export_sheet_name: str = Field(default="Export", min_length=1, max_length=31)

    # Logging
    log_format: Literal["text", "ndjson"] = Field(default="text")
    log_level: int = Field(default=logging.INFO)

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> int:
        return _coerce_log_level(value)

    @field_validator("header_keywords", mode="before")
    @classmethod
    def _validate_header_keywords(cls, value: Any) -> tuple[str, ...]:
        return tuple(word.lower() for word in _coerce_str_tuple(value, field_name="header_keywords"))

    @field_validator("supported_file_extensions", mode="before")
    @classmethod
    def _validate_supported_file_extensions(cls, value: Any) -> tuple[str, ...]:
        normalized: list[str] = []
        for ext in _coerce_str_tuple(value, field_name="supported_file_extensions"):
            if not ext.startswith("."):
                ext = f".{ext.lstrip('*.')}"
            normalized.append(ext.lower())
        return tuple(normalized)

    @field_validator("export_sheet_name")
    @classmethod
    def _validate_export_sheet_name(cls, value: str) -> str:
        match = INVALID_TITLE_REGEX.search(value)
        if match:
            raise ValueError(f"export_sheet_name contains {match.group(0)!r}, which xlsx sheet titles forbid")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_settings = TomlConfigSettingsSource(settings_cls, toml_file=Path.cwd() / "settings.toml")

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            toml_settings,
            file_secret_settings,
        )


__all__ = ["ENV_PREFIX", "Settings"]
