"""
Exception hierarchy for the upload service.
"""

from enum import Enum


class UploadServiceError(Exception):
    """Base exception for all upload service errors."""


class RequestValidationError(UploadServiceError):
    """Raised when a submission is missing required input. Never starts a run."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(next(iter(errors.values()), "Invalid request"))

    @property
    def message(self) -> str:
        return str(self)


class FileRejectedError(UploadServiceError):
    """Raised when a file fails the acceptance filter."""

    def __init__(self, reason: str, message: str):
        self.reason = reason
        self.message = message
        super().__init__(message)


class ParseError(UploadServiceError):
    """Raised when file content is not well-formed XML."""


class UpstreamErrorKind(str, Enum):
    """Classification of AAS generator failures."""

    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


class UpstreamError(UploadServiceError):
    """Raised when the AAS generator rejects or fails a request."""

    def __init__(self, kind: UpstreamErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


class SessionNotFoundError(UploadServiceError):
    """Raised when an upload session id is unknown."""
