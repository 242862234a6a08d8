from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Sequence

from sheetsift.application.ingest import Upload, ingest_uploads
from sheetsift.application.pipeline.classify import CategoryTable, FieldClassifier
from sheetsift.application.pipeline.export import export_view, view_columns
from sheetsift.application.pipeline.query import QueryEngine
from sheetsift.infrastructure.observability.logger import NullLogger, SessionLogger
from sheetsift.infrastructure.settings import Settings
from sheetsift.models.errors import EncodeError
from sheetsift.models.ingest import ExportResult, IngestResult
from sheetsift.models.query import Page, QueryState
from sheetsift.models.table import Record


def build_classifier(settings: Settings) -> FieldClassifier | None:
    if not settings.classify:
        return None
    if settings.categories:
        return FieldClassifier(CategoryTable.from_mapping(settings.categories))
    return FieldClassifier()


class Engine:
    """Single owner of a session's dataset and query state.

    Presentation code calls :meth:`ingest` on uploads, the ``set_*`` methods on
    filter/search/sort/page interactions, :meth:`get_page` to render, and
    :meth:`export` to download the current view. Each call completes as a
    whole before the next one starts.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        logger: SessionLogger | None = None,
        classifier: FieldClassifier | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.logger = logger or NullLogger()
        self.classifier = classifier if classifier is not None else build_classifier(self.settings)
        self._lock = threading.RLock()
        self._query = QueryEngine(page_size=self.settings.page_size, lock=self._lock)

    def _settings_snapshot(self) -> dict[str, Any]:
        def _jsonify(val: Any) -> Any:
            if isinstance(val, dict):
                return {k: _jsonify(v) for k, v in val.items()}
            if isinstance(val, (list, tuple, set)):
                return [_jsonify(v) for v in val]
            if isinstance(val, Path):
                return str(val)
            return val

        return _jsonify(self.settings.model_dump(mode="python", exclude_none=True))

    def log_settings(self) -> None:
        self.logger.event(
            "settings.effective",
            message="Effective settings",
            level=logging.DEBUG,
            data={"settings": self._settings_snapshot()},
        )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------
    def ingest(self, uploads: Sequence[Upload]) -> IngestResult:
        """Decode and normalize ``uploads`` and append their records to the dataset."""

        result = ingest_uploads(
            uploads,
            settings=self.settings,
            classifier=self.classifier,
            logger=self.logger,
        )
        with self._lock:
            self._query.extend(result.records)
            dataset_size = len(self._query.records)

        self.logger.event(
            "ingest.completed",
            message=f"Ingest {result.status.value}",
            level=logging.INFO if not result.errors else logging.WARNING,
            data={
                "status": result.status.value,
                "record_count": len(result.records),
                "error_count": len(result.errors),
                "dataset_size": dataset_size,
            },
        )
        return result

    def ingest_paths(self, paths: Sequence[Path]) -> IngestResult:
        return self.ingest([(path.name, path.read_bytes()) for path in paths])

    def reset(self) -> None:
        with self._lock:
            self._query.reset(page_size=self.settings.page_size)
        self.logger.event("dataset.reset", message="Dataset cleared")

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------
    @property
    def state(self) -> QueryState:
        return self._query.state

    @property
    def dataset(self) -> list[Record]:
        return self._query.records

    def _changed(self, state: QueryState) -> QueryState:
        page = self._query.get_page()
        self.logger.event(
            "query.changed",
            message="Query updated",
            level=logging.DEBUG,
            data={
                "category_filter": state.category_filter,
                "search_term": state.search_term,
                "sort_key": state.sort_key,
                "sort_direction": state.sort_direction.value,
                "page_index": state.page_index,
                "page_size": state.page_size,
                "total_count": page.total_count,
                "total_pages": page.total_pages,
            },
        )
        return state

    def set_category_filter(self, field: str | None) -> QueryState:
        with self._lock:
            return self._changed(self._query.set_category_filter(field))

    def set_search_term(self, text: str | None) -> QueryState:
        with self._lock:
            return self._changed(self._query.set_search_term(text))

    def set_sort(self, field: str | None) -> QueryState:
        with self._lock:
            return self._changed(self._query.set_sort(field))

    def set_page_size(self, size: int) -> QueryState:
        with self._lock:
            return self._changed(self._query.set_page_size(size))

    def set_page_index(self, index: int) -> QueryState:
        with self._lock:
            return self._changed(self._query.set_page_index(index))

    def set_field_filter(self, field: str, text: str | None) -> QueryState:
        with self._lock:
            return self._changed(self._query.set_field_filter(field, text))

    def clear_field_filters(self) -> QueryState:
        with self._lock:
            return self._changed(self._query.clear_field_filters())

    def get_page(self) -> Page:
        return self._query.get_page()

    def view(self) -> list[Record]:
        return self._query.view()

    def categories(self) -> list[str]:
        return self.classifier.categories if self.classifier is not None else []

    def columns(self) -> list[str]:
        """Display order of the current view: categories first, then other fields as first seen."""

        with self._lock:
            seen = view_columns(self._query.view())
        canonical = self.categories()
        return canonical + [name for name in seen if name not in canonical]

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export(self) -> ExportResult:
        """Serialize the filtered and sorted view (all pages) to xlsx bytes."""

        with self._lock:
            records = self._query.view()
            try:
                result = export_view(records, sheet_name=self.settings.export_sheet_name)
            except EncodeError as exc:
                self.logger.event(
                    "export.failed",
                    message="Export failed",
                    level=logging.ERROR,
                    data={"row_count": len(records), "error": str(exc)},
                )
                raise

        self.logger.event(
            "export.written",
            message=f"Exported {result.row_count} records",
            data={
                "filename": result.filename,
                "row_count": result.row_count,
                "column_count": result.column_count,
                "byte_count": len(result.payload),
            },
        )
        return result


__all__ = ["Engine", "build_classifier"]
