"""Tests for submission validation and defaulting."""

from datetime import datetime

import pytest

from waitlist.domain import UNKNOWN_IP, WaitlistRecord
from waitlist.errors import InvalidEmail, InvalidJson, MissingFields
from waitlist.validation import find_missing_fields, is_valid_email, validate_submission

NOW = datetime(2024, 3, 9, 14, 5, 7)


def _payload(**overrides):
    """Helper to build a valid submission with sensible defaults."""
    data = {
        "fullName": "Jane Doe",
        "email": "jane@x.com",
        "phone": "+1 555-0100",
    }
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# Required fields
# ---------------------------------------------------------------------------


class TestMissingFields:
    """Missing or blank required fields."""

    def test_single_missing_field(self):
        with pytest.raises(MissingFields) as exc_info:
            validate_submission(_payload(fullName=""))

        assert exc_info.value.fields == ["fullName"]
        assert exc_info.value.message == "Missing required fields: fullName"

    def test_all_missing_fields_listed_in_fixed_order(self):
        with pytest.raises(MissingFields) as exc_info:
            validate_submission({"country": "NL"})

        assert exc_info.value.message == "Missing required fields: fullName, email, phone"

    def test_order_independent_of_payload_key_order(self):
        data = {"phone": "", "email": None, "fullName": "Jane"}

        assert find_missing_fields(data) == ["email", "phone"]

    def test_whitespace_only_counts_as_missing(self):
        with pytest.raises(MissingFields) as exc_info:
            validate_submission(_payload(fullName="   ", phone="\t"))

        assert exc_info.value.fields == ["fullName", "phone"]

    def test_null_counts_as_missing(self):
        with pytest.raises(MissingFields) as exc_info:
            validate_submission(_payload(email=None))

        assert exc_info.value.fields == ["email"]

    def test_missing_fields_checked_before_email_format(self):
        """A bad email plus a missing name reports the missing name."""
        with pytest.raises(MissingFields):
            validate_submission(_payload(fullName="", email="bad-email"))


# ---------------------------------------------------------------------------
# Email grammar
# ---------------------------------------------------------------------------


class TestEmailGrammar:
    """Boundaries of the accepted address grammar."""

    @pytest.mark.parametrize(
        "value",
        [
            "jane@x.com",
            "first.last@example.co.uk",
            "user+tag@sub.domain.org",
            "o'brien@example.ie",
            "a@b.c",
            "x_y-z@my-host.example",
        ],
    )
    def test_accepts(self, value):
        assert is_valid_email(value)

    @pytest.mark.parametrize(
        "value",
        [
            "not-an-email",
            "a@b",
            "@example.com",
            "jane@",
            "jane@@x.com",
            "jane doe@x.com",
            ".jane@x.com",
            "jane.@x.com",
            "ja..ne@x.com",
            "jane@-x.com",
            "jane@x-.com",
            "jane@x..com",
            "jane@x.com.",
        ],
    )
    def test_rejects(self, value):
        assert not is_valid_email(value)

    def test_rejects_overlong_local_part(self):
        assert not is_valid_email("a" * 65 + "@x.com")
        assert is_valid_email("a" * 64 + "@x.com")

    def test_rejects_overlong_address(self):
        domain = ".".join(["a" * 60] * 5) + ".com"
        assert not is_valid_email("jane@" + domain)

    def test_invalid_email_error_carries_value(self):
        with pytest.raises(InvalidEmail) as exc_info:
            validate_submission(_payload(email="bad-email"))

        assert exc_info.value.value == "bad-email"
        assert exc_info.value.message == "Invalid email format: bad-email"

    def test_surrounding_whitespace_is_trimmed(self):
        """Padded addresses are accepted on purpose and stored trimmed."""
        record = validate_submission(_payload(email="  jane@x.com "), now=NOW)

        assert record.email == "jane@x.com"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    """Optional fields are defaulted when absent."""

    def test_optional_fields_default(self):
        record = validate_submission(_payload(), client_ip="203.0.113.7", now=NOW)

        assert record == WaitlistRecord(
            full_name="Jane Doe",
            email="jane@x.com",
            country_code="",
            phone="+1 555-0100",
            country="",
            interests="",
            timestamp="2024-03-09 14:05:07",
            ip_address="203.0.113.7",
        )

    def test_ip_falls_back_to_unknown(self):
        record = validate_submission(_payload(), now=NOW)

        assert record.ip_address == UNKNOWN_IP == "Unknown"

    def test_empty_client_ip_falls_back_to_unknown(self):
        record = validate_submission(_payload(), client_ip="", now=NOW)

        assert record.ip_address == "Unknown"

    def test_payload_ip_wins_over_client_ip(self):
        record = validate_submission(
            _payload(ipAddress="198.51.100.1"), client_ip="203.0.113.7", now=NOW
        )

        assert record.ip_address == "198.51.100.1"

    def test_payload_timestamp_kept_as_sent(self):
        record = validate_submission(_payload(timestamp="2023-12-31T23:59:59Z"), now=NOW)

        assert record.timestamp == "2023-12-31T23:59:59Z"

    def test_explicit_empty_timestamp_is_not_replaced(self):
        record = validate_submission(_payload(timestamp=""), now=NOW)

        assert record.timestamp == ""

    def test_timestamp_defaults_to_local_now(self):
        before = datetime.now().replace(microsecond=0)
        record = validate_submission(_payload())
        after = datetime.now()

        stamped = datetime.strptime(record.timestamp, "%Y-%m-%d %H:%M:%S")
        assert before <= stamped <= after

    def test_all_fields_carried_through(self):
        record = validate_submission(
            _payload(
                countryCode="+31",
                country="Netherlands",
                interests="Investing, Saving",
                timestamp="2024-01-01 00:00:00",
                ipAddress="10.0.0.1",
            )
        )

        assert record.to_row() == [
            "Jane Doe",
            "jane@x.com",
            "+31",
            "+1 555-0100",
            "Netherlands",
            "Investing, Saving",
            "2024-01-01 00:00:00",
            "10.0.0.1",
        ]


class TestCoercion:
    """Non-string JSON values are stored as text."""

    def test_numeric_phone(self):
        record = validate_submission(_payload(phone=5550100), now=NOW)

        assert record.phone == "5550100"

    def test_interests_list_is_joined(self):
        record = validate_submission(_payload(interests=["Stocks", "Crypto", None]), now=NOW)

        assert record.interests == "Stocks, Crypto"

    def test_boolean_value(self):
        record = validate_submission(_payload(country=True), now=NOW)

        assert record.country == "true"

    def test_object_value_is_serialized(self):
        record = validate_submission(_payload(interests={"tier": "gold"}), now=NOW)

        assert record.interests == '{"tier": "gold"}'

    def test_required_fields_are_trimmed(self):
        record = validate_submission(_payload(fullName="  Jane Doe  ", phone=" 1 "), now=NOW)

        assert record.full_name == "Jane Doe"
        assert record.phone == "1"

    def test_nested_lists_are_joined_one_level(self):
        record = validate_submission(_payload(interests=["a", ["b", ["c"]]]), now=NOW)

        assert record.interests == 'a, ["b", ["c"]]'

    def test_deeply_nested_list_is_kept_as_json(self):
        value = []
        for _ in range(600):
            value = [value]

        record = validate_submission(_payload(interests=value), now=NOW)

        assert record.interests.startswith("[[")
        assert record.interests.count("[") == 600

    def test_unserializable_depth_is_invalid_json(self):
        value = []
        for _ in range(100000):
            value = [value]

        with pytest.raises(InvalidJson) as exc_info:
            validate_submission(_payload(interests=value), now=NOW)

        assert exc_info.value.message == "Invalid JSON: Maximum stack depth exceeded"
