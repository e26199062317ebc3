"""CSV extraction for project datasets."""

from .projects_csv import ingest_csv, read_header, validate_ingest_path

__all__ = ["ingest_csv", "read_header", "validate_ingest_path"]
