"""Validation of raw waitlist submissions.

Turns a decoded JSON object into a WaitlistRecord. The checks run in a
fixed order:

1. Required fields (fullName, email, phone) must be present and non-blank.
   Every missing field is reported at once, in that order.
2. The email must match a dot-atom address grammar with a dotted domain.

Optional fields are defaulted: empty string for countryCode, country and
interests; the current local time for timestamp; the client address (or
"Unknown") for ipAddress. Defaults apply only when a key is absent or null,
so an explicit empty string is stored as sent.
"""

import json
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from waitlist.domain import (
    REQUIRED_FIELDS,
    TIMESTAMP_FORMAT,
    UNKNOWN_IP,
    WaitlistRecord,
)
from waitlist.errors import InvalidEmail, InvalidJson, MissingFields

_ATOM = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+"
_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
_EMAIL_RE = re.compile(
    r"(?P<local>" + _ATOM + r"(?:\." + _ATOM + r")*)"
    r"@"
    r"(?P<domain>" + _LABEL + r"(?:\." + _LABEL + r")+)"
)

MAX_EMAIL_LENGTH = 254
MAX_LOCAL_PART_LENGTH = 64


def is_valid_email(value: str) -> bool:
    """Check an address against the accepted email grammar.

    ``"jane@example.com"`` passes; ``"a@b"`` (undotted domain) and
    ``"not-an-email"`` do not.
    """
    if len(value) > MAX_EMAIL_LENGTH:
        return False
    match = _EMAIL_RE.fullmatch(value)
    if match is None:
        return False
    return len(match.group("local")) <= MAX_LOCAL_PART_LENGTH


def _dump(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except RecursionError as exc:
        raise InvalidJson("Maximum stack depth exceeded") from exc


def _scalar_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return _dump(value)


def _to_text(value: Any) -> Optional[str]:
    """Coerce a decoded JSON value to the text stored in a CSV cell.

    A list is joined one level deep; nested lists and objects inside it
    are kept as JSON text.
    """
    if isinstance(value, (list, tuple)):
        parts = (_scalar_text(item) for item in value)
        return ", ".join(part for part in parts if part)
    return _scalar_text(value)


def find_missing_fields(data: Mapping[str, Any]) -> list[str]:
    """Return the required fields that are absent, null or blank."""
    missing = []
    for key in REQUIRED_FIELDS:
        text = _to_text(data.get(key))
        if text is None or not text.strip():
            missing.append(key)
    return missing


def validate_submission(
    data: Mapping[str, Any],
    client_ip: Optional[str] = None,
    now: Optional[datetime] = None,
) -> WaitlistRecord:
    """Validate a submission and build the record to store.

    Args:
        data: Decoded JSON object from the request body
        client_ip: Address of the connecting client, used when the
            payload has no ipAddress
        now: Time used for a missing timestamp (defaults to local now)

    Returns:
        WaitlistRecord with optional fields defaulted

    Raises:
        MissingFields: If any of fullName, email, phone is absent or blank
        InvalidEmail: If the email does not match the address grammar
        InvalidJson: If a nested value is too deep to serialize
    """
    missing = find_missing_fields(data)
    if missing:
        raise MissingFields(missing)

    raw_email = _to_text(data["email"])
    email = raw_email.strip()
    if not is_valid_email(email):
        raise InvalidEmail(raw_email)

    timestamp = _to_text(data.get("timestamp"))
    if timestamp is None:
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)

    ip_address = _to_text(data.get("ipAddress"))
    if ip_address is None:
        ip_address = client_ip or UNKNOWN_IP

    return WaitlistRecord(
        full_name=_to_text(data["fullName"]).strip(),
        email=email,
        country_code=_to_text(data.get("countryCode")) or "",
        phone=_to_text(data["phone"]).strip(),
        country=_to_text(data.get("country")) or "",
        interests=_to_text(data.get("interests")) or "",
        timestamp=timestamp,
        ip_address=ip_address,
    )
