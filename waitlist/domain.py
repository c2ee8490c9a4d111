"""Domain objects for the waitlist service.

Defines the record appended to storage and the fixed CSV layout:
- WaitlistRecord: One accepted signup, optional fields already defaulted
- CSV_HEADER: Header labels, written once as the first line of the file
- FIELD_ORDER: JSON keys in column order
"""

from dataclasses import astuple, dataclass

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

UNKNOWN_IP = "Unknown"

# Column order of every row; JSON key -> header label
COLUMNS: tuple[tuple[str, str], ...] = (
    ("fullName", "Full Name"),
    ("email", "Email"),
    ("countryCode", "Country Code"),
    ("phone", "Phone Number"),
    ("country", "Country"),
    ("interests", "Interests"),
    ("timestamp", "Timestamp"),
    ("ipAddress", "IP Address"),
)

FIELD_ORDER: tuple[str, ...] = tuple(key for key, _ in COLUMNS)
CSV_HEADER: tuple[str, ...] = tuple(label for _, label in COLUMNS)

REQUIRED_FIELDS: tuple[str, ...] = ("fullName", "email", "phone")


@dataclass(frozen=True)
class WaitlistRecord:
    """A validated waitlist signup.

    Attribute order matches the CSV column order, so ``to_row`` is a
    plain tuple conversion.

    Attributes:
        full_name: Submitter's name
        email: Email address, trimmed
        country_code: Dialing prefix, may be empty
        phone: Phone number
        country: Country name, may be empty
        interests: Free-form interests text, may be empty
        timestamp: Submission time as ``YYYY-MM-DD HH:MM:SS`` (or as sent)
        ip_address: Client address, or ``"Unknown"``
    """

    full_name: str
    email: str
    country_code: str
    phone: str
    country: str
    interests: str
    timestamp: str
    ip_address: str

    def to_row(self) -> list[str]:
        """Return the field values in CSV column order."""
        return list(astuple(self))
