"""Street and postal code validation for recipient addresses."""

import re
from dataclasses import dataclass
from typing import Optional

from .exceptions import AddressError, ErrorKind

CC_NL = "NL"
CC_BE = "BE"

# Street line ending in a house number plus optional suffix ("Teststraat 123A", "Kade 4-bis").
SPLIT_STREET_NL = re.compile(
    r"^(?P<street>.+?)\s?(?P<number>\d{1,5})[\s-]{0,2}"
    r"(?P<number_suffix>[a-zA-Z/\s]{0,5}|[0-9/]{0,5}|\s[a-zA-Z][0-9]{0,3}|\s[0-9]{2}[a-zA-Z]{0,3})$"
)
# Belgian lines may carry a box number ("Rue de la Loi 16 bus 3").
SPLIT_STREET_BE = re.compile(
    r"^(?P<street>.+?)\s(?P<number>\d{1,4})\s?"
    r"(?:(?P<box_separator>bus|box|bte)\s?)?(?P<box_number>\d{0,8}|[a-zA-Z]{0,2})$",
    re.IGNORECASE,
)

POSTAL_CODE_PATTERNS = {
    "NL": re.compile(r"^[1-9][0-9]{3}[a-zA-Z]{2}$"),
    "BE": re.compile(r"^[1-9][0-9]{3}$"),
    "DE": re.compile(r"^[0-9]{5}$"),
    "FR": re.compile(r"^[0-9]{5}$"),
    "ES": re.compile(r"^[0-9]{5}$"),
    "IT": re.compile(r"^[0-9]{5}$"),
    "SE": re.compile(r"^[0-9]{5}$"),
    "AT": re.compile(r"^[0-9]{4}$"),
    "DK": re.compile(r"^[0-9]{4}$"),
    "LU": re.compile(r"^(L-?)?[0-9]{4}$", re.IGNORECASE),
    "PL": re.compile(r"^[0-9]{2}-?[0-9]{3}$"),
    "GB": re.compile(r"^[A-Z]{1,2}[0-9][A-Z0-9]?[0-9][A-Z]{2}$", re.IGNORECASE),
}

_WHITESPACE = re.compile(r"\s+")


@dataclass
class ValidationResult:
    street: str
    number: Optional[int] = None
    number_suffix: str = ""
    box_number: str = ""
    postal_code: str = ""


def normalize_postal_code(postal_code: Optional[str]) -> str:
    return _WHITESPACE.sub("", postal_code or "")


def _street_pattern(origin_country: str, destination_country: str):
    if origin_country != CC_NL:
        return None
    if destination_country == CC_NL:
        return SPLIT_STREET_NL
    if destination_country == CC_BE:
        return SPLIT_STREET_BE
    return None


def split_street(full_street: str, origin_country: str, destination_country: str) -> ValidationResult:
    """Split a street line into street, number and suffix.

    Destinations without a house-number rule keep the whole line as street.
    """
    full_street = _WHITESPACE.sub(" ", (full_street or "").strip())
    pattern = _street_pattern(origin_country, destination_country)
    if pattern is None:
        return ValidationResult(street=full_street)

    match = pattern.match(full_street)
    if not match:
        raise AddressError(
            f"Street '{full_street}' has no house number", kind=ErrorKind.INVALID_STREET
        )

    parts = match.groupdict()
    return ValidationResult(
        street=parts["street"].strip(),
        number=int(parts["number"]),
        number_suffix=(parts.get("number_suffix") or "").strip(),
        box_number=(parts.get("box_number") or "").strip(),
    )


def validate_postal_code(postal_code: Optional[str], destination_country: str) -> str:
    """Return the whitespace-free postal code or raise ``AddressError``."""
    normalized = normalize_postal_code(postal_code)
    pattern = POSTAL_CODE_PATTERNS.get((destination_country or "").upper())
    if pattern is not None and not pattern.match(normalized):
        raise AddressError(
            f"Postal code '{postal_code}' is not valid for {destination_country}",
            kind=ErrorKind.INVALID_POSTAL_CODE,
        )
    return normalized


def validate(
    full_street: str,
    postal_code: Optional[str],
    origin_country: str,
    destination_country: str,
) -> ValidationResult:
    result = split_street(full_street, origin_country, destination_country)
    result.postal_code = validate_postal_code(postal_code, destination_country)
    return result
