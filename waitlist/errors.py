"""Exceptions raised while accepting a waitlist submission.

Every error knows the HTTP status it maps to and the message shown to the
client. Validation and transport errors are client-caused (4xx); storage
errors are server-caused (500).
"""

from typing import Iterable


class WaitlistError(Exception):
    """Base class for all waitlist errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Client errors
# ---------------------------------------------------------------------------


class ValidationError(WaitlistError):
    """The submitted payload was rejected."""

    status_code = 400


class EmptyBody(ValidationError):
    def __init__(self):
        super().__init__("No data received")


class InvalidJson(ValidationError):
    def __init__(self, detail: str):
        super().__init__(f"Invalid JSON: {detail}")
        self.detail = detail


class MissingFields(ValidationError):
    """One or more required fields were absent or blank."""

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class InvalidEmail(ValidationError):
    def __init__(self, value: str):
        super().__init__(f"Invalid email format: {value}")
        self.value = value


class TransportError(WaitlistError):
    """The request reached the endpoint in an unsupported form."""

    status_code = 400


class MethodNotAllowed(TransportError):
    status_code = 405

    def __init__(self, method: str):
        super().__init__("Method not allowed. Use POST.")
        self.method = method


# ---------------------------------------------------------------------------
# Server errors
# ---------------------------------------------------------------------------


class StorageError(WaitlistError):
    """The record could not be persisted.

    ``message`` is the short detail included in the client response;
    the underlying ``OSError`` (if any) is chained as ``__cause__``.
    """

    status_code = 500


class DirectoryUnwritable(StorageError):
    def __init__(self, directory):
        super().__init__("Media directory is not writable")
        self.directory = directory


class DirectoryCreateFailed(StorageError):
    def __init__(self, directory):
        super().__init__("Failed to create media directory")
        self.directory = directory


class FileUnwritable(StorageError):
    def __init__(self, path):
        super().__init__("CSV file is not writable")
        self.path = path


class OpenFailed(StorageError):
    def __init__(self, path, reason: str = "Could not open file for writing. Check permissions."):
        super().__init__(reason)
        self.path = path


class WriteFailed(StorageError):
    def __init__(self, path, reason: str = "Failed to write CSV data"):
        super().__init__(reason)
        self.path = path
