"""Ingestion and query stages: header location, normalization, classification, query, export."""

from sheetsift.application.pipeline.classify import CategoryTable, FieldClassifier, NOT_APPLICABLE
from sheetsift.application.pipeline.export import export_view
from sheetsift.application.pipeline.header import locate_header
from sheetsift.application.pipeline.normalize import merge_records, normalize_grid
from sheetsift.application.pipeline.query import QueryEngine, compute_view, paginate

__all__ = [
    "CategoryTable",
    "FieldClassifier",
    "NOT_APPLICABLE",
    "QueryEngine",
    "compute_view",
    "export_view",
    "locate_header",
    "merge_records",
    "normalize_grid",
    "paginate",
]
