"""Keyword-based mapping of source field names onto canonical categories.

The mapping is a heuristic: a field whose lowercase name contains any keyword
of a category feeds that category's canonical field. Categories are tried in
table order and the first match wins, so each source field feeds at most one
category. Original fields are always kept.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterable

from sheetsift.models.errors import ConfigError
from sheetsift.models.table import Record

NOT_APPLICABLE = "N/A"

DEFAULT_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Grade Level", ("grade", "class", "year")),
    ("Cost", ("cost", "price", "fee")),
    ("Application Deadline", ("deadline", "due date", "application close")),
    ("Eligibility Requirements", ("eligibility", "requirements", "qualifications")),
)


@dataclass(frozen=True)
class CategoryTable:
    """Ordered ``category -> keywords`` table."""

    entries: tuple[tuple[str, tuple[str, ...]], ...] = DEFAULT_CATEGORIES

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> "CategoryTable":
        entries: list[tuple[str, tuple[str, ...]]] = []
        for category, keywords in mapping.items():
            name = str(category).strip()
            if not name:
                raise ConfigError("Category names must be non-empty")
            if isinstance(keywords, str):
                raise ConfigError(f"Keywords for category '{name}' must be a list, not a string")
            cleaned = tuple(str(k).strip().lower() for k in keywords if str(k).strip())
            if not cleaned:
                raise ConfigError(f"Category '{name}' needs at least one keyword")
            entries.append((name, cleaned))
        if not entries:
            raise ConfigError("Category table is empty")
        return cls(entries=tuple(entries))

    @property
    def categories(self) -> list[str]:
        return [name for name, _ in self.entries]

    def match(self, field_name: str) -> str | None:
        """Return the first category whose keywords occur in ``field_name``."""

        lowered = field_name.lower()
        for category, keywords in self.entries:
            if any(keyword in lowered for keyword in keywords):
                return category
        return None


class FieldClassifier:
    """Adds canonical category fields to records."""

    def __init__(self, table: CategoryTable | None = None) -> None:
        self.table = table or CategoryTable()

    @property
    def categories(self) -> list[str]:
        return self.table.categories

    def sources(self, record: Record) -> dict[str, str]:
        """Map each category to the first source field that feeds it."""

        found: dict[str, str] = {}
        for field_name in record:
            category = self.table.match(field_name)
            if category is not None and category not in found:
                found[category] = field_name
        return found

    def classify(self, record: Record) -> Record:
        sources = self.sources(record)
        enriched: Record = {}
        for category in self.table.categories:
            source = sources.get(category)
            enriched[category] = record[source] if source is not None else NOT_APPLICABLE
        # Original values win over derived ones when names collide.
        enriched.update(record)
        return enriched

    def classify_all(self, records: Iterable[Record]) -> list[Record]:
        return [self.classify(record) for record in records]


__all__ = [
    "CategoryTable",
    "DEFAULT_CATEGORIES",
    "FieldClassifier",
    "NOT_APPLICABLE",
]
