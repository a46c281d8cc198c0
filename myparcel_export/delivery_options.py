"""Delivery options chosen at checkout.

The checkout widget stores a JSON document on the order. Current widgets
write the strict shape below; older orders and orders created by hand carry
loose or broken data, which is normalized into the same ``DeliveryOptions``.

Strict shape::

    {
        "carrier": "postnl",
        "date": "2024-05-14T00:00:00.000Z",
        "deliveryType": "pickup",
        "packageType": "package",
        "isPickup": true,
        "pickupLocation": {"location_name": ..., "location_code": ..., ...},
        "shipmentOptions": {"signature": true}
    }
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Union

from dateutil import parser as date_parser

from .consignment import PickupLocation

_logger = logging.getLogger(__name__)

DELIVERY_TYPE_MORNING = 1
DELIVERY_TYPE_STANDARD = 2
DELIVERY_TYPE_EVENING = 3
DELIVERY_TYPE_PICKUP = 4
DELIVERY_TYPE_PICKUP_EXPRESS = 5

DELIVERY_TYPES_NAMES_IDS_MAP = {
    "morning": DELIVERY_TYPE_MORNING,
    "standard": DELIVERY_TYPE_STANDARD,
    "evening": DELIVERY_TYPE_EVENING,
    "pickup": DELIVERY_TYPE_PICKUP,
    "pickup_express": DELIVERY_TYPE_PICKUP_EXPRESS,
}
PICKUP_DELIVERY_TYPES = (DELIVERY_TYPE_PICKUP, DELIVERY_TYPE_PICKUP_EXPRESS)

PICKUP_FIELDS = (
    "location_name",
    "location_code",
    "street",
    "number",
    "postal_code",
    "city",
    "cc",
    "retail_network_id",
)


@dataclass(frozen=True)
class DeliveryOptions:
    carrier: str = "postnl"
    delivery_type: int = DELIVERY_TYPE_STANDARD
    date: Optional[str] = None
    package_type: Optional[str] = None
    pickup_location: Optional[PickupLocation] = None
    shipment_options: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_pickup(self) -> bool:
        return self.delivery_type in PICKUP_DELIVERY_TYPES


@dataclass(frozen=True)
class Strict:
    """Payload matched the checkout widget's document shape."""

    options: DeliveryOptions


@dataclass(frozen=True)
class Normalized:
    """Payload was absent or loose; options were rebuilt from raw values."""

    options: DeliveryOptions


DecodedDeliveryOptions = Union[Strict, Normalized]


def delivery_type_id(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if text.isdigit():
        return int(text)
    return DELIVERY_TYPES_NAMES_IDS_MAP.get(text)


def _load(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, Mapping):
        return dict(payload)
    if isinstance(payload, (str, bytes)) and payload:
        try:
            data = json.loads(payload)
        except ValueError:
            _logger.warning("Delivery options are not valid JSON: %.80r", payload)
            return {}
        return data if isinstance(data, dict) else {}
    return {}


def _pickup_from(data: Mapping[str, Any]) -> PickupLocation:
    return PickupLocation(**{name: str(data.get(name) or "") for name in PICKUP_FIELDS})


def _strict_decode(data: Mapping[str, Any]) -> Optional[DeliveryOptions]:
    if not isinstance(data.get("carrier"), str) or "deliveryType" not in data:
        return None
    delivery_type = delivery_type_id(data["deliveryType"])
    if delivery_type is None:
        return None

    pickup = None
    if data.get("isPickup") or delivery_type in PICKUP_DELIVERY_TYPES:
        location = data.get("pickupLocation")
        if not isinstance(location, Mapping):
            return None
        pickup = _pickup_from(location)
        if delivery_type not in PICKUP_DELIVERY_TYPES:
            delivery_type = DELIVERY_TYPE_PICKUP

    shipment_options = data.get("shipmentOptions") or {}
    return DeliveryOptions(
        carrier=data["carrier"],
        delivery_type=delivery_type,
        date=data.get("date") or None,
        package_type=data.get("packageType") or None,
        pickup_location=pickup,
        shipment_options=dict(shipment_options) if isinstance(shipment_options, Mapping) else {},
    )


def _normalize(data: Mapping[str, Any], fallback: Mapping[str, Any]) -> DeliveryOptions:
    """Rebuild options from legacy or hand-made data.

    Keys already in the payload win over ``fallback`` (the request options).
    """
    merged = dict(fallback)
    merged.update({key: value for key, value in data.items() if value not in (None, "")})

    delivery_type = delivery_type_id(merged.get("delivery_type") or merged.get("deliveryType"))
    # Legacy checkout wrote {"time": [{"type": 4, ...}]}.
    time_slots = merged.get("time")
    if delivery_type is None and isinstance(time_slots, list) and time_slots:
        first = time_slots[0] if isinstance(time_slots[0], Mapping) else {}
        delivery_type = delivery_type_id(first.get("type"))

    location = merged.get("pickupLocation") or merged.get("pickup_location")
    if not isinstance(location, Mapping):
        location = dict(merged)
        if "location" in merged and "location_name" not in merged:
            location["location_name"] = merged["location"]
    if delivery_type is None and location.get("location_code"):
        delivery_type = DELIVERY_TYPE_PICKUP

    delivery_type = delivery_type or DELIVERY_TYPE_STANDARD
    pickup = _pickup_from(location) if delivery_type in PICKUP_DELIVERY_TYPES else None

    return DeliveryOptions(
        carrier=str(merged.get("carrier") or "postnl").lower(),
        delivery_type=delivery_type,
        date=merged.get("date") or merged.get("delivery_date") or None,
        package_type=merged.get("package_type") or merged.get("packageType") or None,
        pickup_location=pickup,
    )


def decode_delivery_options(payload: Any, fallback: Optional[Mapping[str, Any]] = None) -> DecodedDeliveryOptions:
    data = _load(payload)
    options = _strict_decode(data)
    if options is not None:
        return Strict(options)
    return Normalized(_normalize(data, fallback or {}))


def convert_delivery_date(value: Optional[str], today: Optional[date] = None) -> Optional[str]:
    """Format a checkout date for the API; today or earlier becomes tomorrow."""
    if not value:
        return None
    try:
        delivery = date_parser.parse(value).date()
    except (TypeError, ValueError, OverflowError):
        _logger.warning("Ignoring unreadable delivery date %r", value)
        return None

    today = today or date.today()
    if delivery <= today:
        delivery = today + timedelta(days=1)
    return datetime.combine(delivery, datetime.min.time()).strftime("%Y-%m-%d %H:%M:%S")
