"""Waitlist signup service.

Accepts signup submissions over HTTP and appends them to a CSV file.

Modules:
- domain: WaitlistRecord and the fixed CSV layout
- validation: Submission validation and defaulting
- storage: Append-only CSV store with per-file locking
- errors: Client and storage error hierarchy
- api: FastAPI router
- app: Application factory
"""

__version__ = "1.0.0"

from waitlist.domain import CSV_HEADER, FIELD_ORDER, WaitlistRecord
from waitlist.errors import (
    StorageError,
    TransportError,
    ValidationError,
    WaitlistError,
)
from waitlist.storage import WaitlistStore
from waitlist.validation import is_valid_email, validate_submission

__all__ = [
    "__version__",
    "CSV_HEADER",
    "FIELD_ORDER",
    "WaitlistRecord",
    "WaitlistError",
    "ValidationError",
    "TransportError",
    "StorageError",
    "WaitlistStore",
    "is_valid_email",
    "validate_submission",
]
