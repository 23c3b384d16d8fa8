"""Lead ingestion and round-robin distribution service."""

__version__ = "0.1.0"
