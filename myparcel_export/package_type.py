"""Package type and age check resolution.

The two decisions use different precedence rules and are kept as separate
functions on purpose:

* package type: request override > merchant default, then age check wins;
* age check: request flag > product attribute > merchant default, and only
  inside the carrier's home country.
"""

import logging
from enum import IntEnum
from typing import Any, Optional

from .address_validator import CC_NL

_logger = logging.getLogger(__name__)

DEFAULT_SENTINEL = "default"


class PackageType(IntEnum):
    PACKAGE = 1
    MAILBOX = 2
    LETTER = 3
    DIGITAL_STAMP = 4


PACKAGE_TYPES_NAMES_IDS_MAP = {
    "package": PackageType.PACKAGE,
    "mailbox": PackageType.MAILBOX,
    "letter": PackageType.LETTER,
    "digital_stamp": PackageType.DIGITAL_STAMP,
}


def _to_code(value: Any) -> Optional[int]:
    """Map a numeric or symbolic package type to its code, ``None`` if unknown."""
    if value is None or value == "" or value == DEFAULT_SENTINEL:
        return None
    if isinstance(value, int):
        return int(value)
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    return PACKAGE_TYPES_NAMES_IDS_MAP.get(text.lower())


def resolve_package_type(merchant_default: Any, request_override: Any, age_check: bool) -> int:
    package_type = _to_code(request_override)
    if package_type is None:
        if request_override not in (None, "", DEFAULT_SENTINEL):
            _logger.warning("Unknown package type %r, using merchant default", request_override)
        package_type = _to_code(merchant_default) or PackageType.PACKAGE

    # Age verification needs a signature at the door: never mailbox or stamp.
    if age_check:
        return int(PackageType.PACKAGE)
    return int(package_type)


def resolve_age_check(
    destination_country: str,
    from_options: Optional[bool],
    from_product: Optional[bool],
    from_settings: bool,
) -> bool:
    if destination_country != CC_NL:
        return False
    for value in (from_options, from_product):
        if value is not None:
            return bool(value)
    return bool(from_settings)
