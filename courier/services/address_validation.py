import re
from collections.abc import Sequence
from typing import NamedTuple

from courier.schemas.address import Address, ValidationResult

US_STATES: dict[str, str] = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
}


class FakePattern(NamedTuple):
    """A low-effort/placeholder input pattern.

    When ``message`` is None the field's own "Please enter a valid ..." message is used.
    """

    pattern: re.Pattern[str]
    message: str | None = None


def _fake(expr: str, message: str | None = None) -> FakePattern:
    return FakePattern(re.compile(expr, re.IGNORECASE), message)


DEFAULT_FAKE_PATTERNS: tuple[FakePattern, ...] = (
    _fake(r"test"),
    _fake(r"fake"),
    _fake(r"dummy"),
    _fake(r"example"),
    _fake(r"asdf"),
    _fake(r"qwerty"),
    _fake(r"abc\s*(street|st|avenue|ave|road|rd)"),
    _fake(r"123\s*(test|fake|dummy)"),
    _fake(r"^([a-z])\1*$"),  # one letter repeated
)

_DIGIT_RE = re.compile(r"\d")
_CITY_CHARS_RE = re.compile(r"^[A-Za-z\s\-']+$")
_ZIP_RE = re.compile(r"[0-9]{5}(-[0-9]{4})?")


class AddressValidator:
    """Structural and plausibility checks for US addresses.

    Every check returns an error message or None; nothing here raises for bad input.
    """

    def __init__(self, fake_patterns: Sequence[FakePattern] = DEFAULT_FAKE_PATTERNS):
        self.fake_patterns = tuple(fake_patterns)

    def _match_fake(self, value: str, default_message: str) -> str | None:
        for fake in self.fake_patterns:
            if fake.pattern.search(value):
                return fake.message or default_message
        return None

    def validate_street(self, street: str) -> str | None:
        trimmed = street.strip()
        if not trimmed:
            return "Street address is required"
        if len(trimmed) < 5:
            return "Street address is too short"
        if not _DIGIT_RE.search(trimmed):
            return "Street address must include a number"
        return self._match_fake(trimmed, "Please enter a valid street address")

    def validate_city(self, city: str) -> str | None:
        trimmed = city.strip()
        if not trimmed:
            return "City is required"
        if len(trimmed) < 2:
            return "City name is too short"
        if not _CITY_CHARS_RE.match(trimmed):
            return "City name can only contain letters, spaces, and hyphens"
        return self._match_fake(trimmed, "Please enter a valid city name")

    def validate_state(self, state: str) -> str | None:
        if not state:
            return "State is required"
        if state.upper() not in US_STATES:
            return "Please select a valid US state"
        return None

    def validate_zip_code(self, zip_code: str) -> str | None:
        if not zip_code.strip():
            return "ZIP code is required"
        # No trimming here: surrounding whitespace makes the code invalid
        if not _ZIP_RE.fullmatch(zip_code):
            return "ZIP code must be 5 digits (e.g., 12345) or 5+4 format (e.g., 12345-6789)"
        return None

    def validate_address(self, address: Address) -> ValidationResult:
        checks = {
            "street": self.validate_street(address.street),
            "city": self.validate_city(address.city),
            "state": self.validate_state(address.state),
            "zipCode": self.validate_zip_code(address.zip_code),
        }
        return ValidationResult.from_errors(
            {field: error for field, error in checks.items() if error}
        )


def format_address(address: Address) -> str:
    """Render an address as a single line, verbatim."""
    return f"{address.street}, {address.city}, {address.state} {address.zip_code}"


address_validator = AddressValidator()


def validate_street(street: str) -> str | None:
    return address_validator.validate_street(street)


def validate_city(city: str) -> str | None:
    return address_validator.validate_city(city)


def validate_state(state: str) -> str | None:
    return address_validator.validate_state(state)


def validate_zip_code(zip_code: str) -> str | None:
    return address_validator.validate_zip_code(zip_code)


def validate_address(address: Address) -> ValidationResult:
    return address_validator.validate_address(address)
