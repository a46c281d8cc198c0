"""Store configuration and per-request export options.

Both values are immutable. A batch builds its ``ExportSettings`` once from
the store's configuration parameters and hands the same object to every
consignment it builds.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional, Tuple

EXPORT_MODE_SHIPMENTS = "shipments"
EXPORT_MODE_PPS = "pps"

REQUEST_TYPE_DOWNLOAD = "download"
REQUEST_TYPE_CONCEPT = "concept"

WEIGHT_UNIT_GRAM = "gram"
WEIGHT_UNIT_KILO = "kilo"

PARAM_PREFIX = "myparcel."

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def parse_flag(value: Any) -> Optional[bool]:
    """Read a tri-state flag. Empty and unknown values mean "not set"."""
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


def parse_int(value: Any) -> Optional[int]:
    if value is None or value is False or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class DefaultOptions:
    """Merchant defaults applied when neither request nor product decide."""

    package_type: Any = "package"
    only_recipient: bool = False
    signature: bool = False
    return_shipment: bool = False
    large_format: bool = False
    age_check: bool = False
    insurance: int = 0
    digital_stamp_weight: int = 0

    def flag(self, name: str) -> bool:
        return bool(getattr(self, name))


@dataclass(frozen=True)
class ExportSettings:
    api_key: Optional[str] = None
    carrier: str = "postnl"
    export_mode: str = EXPORT_MODE_SHIPMENTS
    weight_unit: str = WEIGHT_UNIT_GRAM
    country_of_origin: str = "NL"
    label_description: str = ""
    defaults: DefaultOptions = field(default_factory=DefaultOptions)

    @classmethod
    def from_params(cls, get_param: Callable[..., Any]) -> "ExportSettings":
        """Build settings from a ``get_param(key, default)`` callable.

        ``get_param`` is ``ir.config_parameter.get_param`` inside Odoo and a
        plain ``dict.get`` in tests.
        """

        def param(name, default=None):
            return get_param(PARAM_PREFIX + name, default)

        defaults = DefaultOptions(
            package_type=param("default_package_type", "package") or "package",
            only_recipient=bool(parse_flag(param("default_only_recipient"))),
            signature=bool(parse_flag(param("default_signature"))),
            return_shipment=bool(parse_flag(param("default_return"))),
            large_format=bool(parse_flag(param("default_large_format"))),
            age_check=bool(parse_flag(param("default_age_check"))),
            insurance=parse_int(param("default_insurance")) or 0,
            digital_stamp_weight=parse_int(param("digital_stamp_default_weight")) or 0,
        )
        return cls(
            api_key=param("api_key") or None,
            carrier=param("carrier", "postnl") or "postnl",
            export_mode=param("export_mode", EXPORT_MODE_SHIPMENTS) or EXPORT_MODE_SHIPMENTS,
            weight_unit=param("weight_unit", WEIGHT_UNIT_GRAM) or WEIGHT_UNIT_GRAM,
            country_of_origin=param("country_of_origin", "NL") or "NL",
            label_description=param("label_description", "") or "",
            defaults=defaults,
        )

    def convert_weight(self, weight: Optional[float]) -> int:
        """Convert a catalog weight to whole grams."""
        if not weight:
            return 0
        if self.weight_unit == WEIGHT_UNIT_KILO:
            return int(weight * 1000)
        return int(weight)


@dataclass(frozen=True)
class ExportOptions:
    """Options chosen for one export request.

    ``None`` means the request did not decide and lower layers (product
    attributes, merchant defaults) apply.
    """

    package_type: Optional[str] = None
    only_recipient: Optional[bool] = None
    signature: Optional[bool] = None
    return_shipment: Optional[bool] = None
    large_format: Optional[bool] = None
    age_check: Optional[bool] = None
    insurance: Optional[int] = None
    digital_stamp_weight: Optional[int] = None
    request_type: str = REQUEST_TYPE_DOWNLOAD
    export_mode: Optional[str] = None
    paper_type: str = "A4"
    positions: Tuple[int, ...] = (1, 2, 3, 4)
    track_email: bool = False
    return_label: bool = False

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ExportOptions":
        positions = params.get("positions") or (1, 2, 3, 4)
        if isinstance(positions, str):
            positions = tuple(int(p) for p in positions.replace(";", ",").split(",") if p.strip())
        return cls(
            package_type=str(params["package_type"]) if params.get("package_type") else None,
            only_recipient=parse_flag(params.get("only_recipient")),
            signature=parse_flag(params.get("signature")),
            return_shipment=parse_flag(params.get("return")),
            large_format=parse_flag(params.get("large_format")),
            age_check=parse_flag(params.get("age_check")),
            insurance=parse_int(params.get("insurance")),
            digital_stamp_weight=parse_int(params.get("digital_stamp_weight")),
            request_type=params.get("request_type") or REQUEST_TYPE_DOWNLOAD,
            export_mode=params.get("export_mode") or None,
            paper_type=params.get("paper_type") or "A4",
            positions=tuple(positions),
            track_email=bool(parse_flag(params.get("track_email"))),
            return_label=bool(parse_flag(params.get("return_label"))),
        )

    def merged(self, **overrides) -> "ExportOptions":
        return replace(self, **overrides)

    def flag(self, name: str) -> Optional[bool]:
        return getattr(self, name)

    @property
    def is_concept(self) -> bool:
        return self.request_type == REQUEST_TYPE_CONCEPT
