"""Upload ingestion helpers."""

from .extractor import extract_rows, normalize_extension, resolve_extension
from .normalizer import normalize_rows

__all__ = ["extract_rows", "normalize_extension", "resolve_extension", "normalize_rows"]
