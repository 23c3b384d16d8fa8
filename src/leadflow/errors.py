"""Error taxonomy shared by the ingestion pipeline, roster and store."""

from __future__ import annotations


class LeadflowError(Exception):
    """Base class for failures that map onto a client-visible HTTP status."""

    status_code: int = 500
    default_message = "Lead distribution failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class UnsupportedFormatError(LeadflowError):
    status_code = 415
    default_message = "Invalid file type. Only CSV, XLS, and XLSX files are allowed."


class ParseError(LeadflowError):
    """Raised when an upload cannot be parsed; the cause is chained."""

    status_code = 400
    default_message = "Failed to parse file. Please ensure the file is properly formatted."


class NoValidRecordsError(LeadflowError):
    status_code = 400
    default_message = "No valid customers found. Please ensure the file contains FirstName and Phone fields."


class NoActiveAgentsError(LeadflowError):
    status_code = 400
    default_message = "No active agents found. Please create agents first."


class PayloadTooLargeError(LeadflowError):
    status_code = 413
    default_message = "Uploaded file exceeds the maximum allowed size."


class NotFoundError(LeadflowError):
    status_code = 404
    default_message = "Resource not found."


class ValidationError(LeadflowError):
    status_code = 400
    default_message = "Invalid request."


class ConflictError(LeadflowError):
    status_code = 409
    default_message = "Resource already exists."


class RosterLimitError(LeadflowError):
    status_code = 400
    default_message = "Agent limit reached."


class StorageError(LeadflowError):
    status_code = 503
    default_message = "Backing store request failed."


class StorageTimeoutError(StorageError):
    status_code = 504
    default_message = "Backing store request timed out."
