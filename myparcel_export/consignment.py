"""Consignment entity sent to the MyParcel API."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

CARRIER_POSTNL = 1
CARRIER_BPOST = 2
CARRIER_DPD = 4

CARRIERS_NAMES_IDS_MAP = {
    "postnl": CARRIER_POSTNL,
    "bpost": CARRIER_BPOST,
    "dpd": CARRIER_DPD,
}

MAX_COMPANY_NAME_LENGTH = 50
MAX_LABEL_DESCRIPTION_LENGTH = 45
CURRENCY = "EUR"


def carrier_id(carrier: Any) -> int:
    if isinstance(carrier, int):
        return carrier
    text = str(carrier or "postnl").strip().lower()
    if text.isdigit():
        return int(text)
    if text not in CARRIERS_NAMES_IDS_MAP:
        raise ValueError(f"Unknown carrier: {carrier}")
    return CARRIERS_NAMES_IDS_MAP[text]


@dataclass
class Recipient:
    cc: str
    person: str = ""
    company: str = ""
    street: str = ""
    number: Optional[int] = None
    number_suffix: str = ""
    box_number: str = ""
    postal_code: str = ""
    city: str = ""
    phone: str = ""
    email: str = ""


@dataclass
class PickupLocation:
    location_name: str = ""
    location_code: str = ""
    street: str = ""
    number: str = ""
    postal_code: str = ""
    city: str = ""
    cc: str = ""
    retail_network_id: str = ""

    @property
    def is_complete(self) -> bool:
        return all(
            (self.location_name, self.location_code, self.street, self.number, self.postal_code, self.city, self.cc)
        )


@dataclass
class CustomsItem:
    """One line of a customs declaration. Weight in grams, value in cents."""

    description: str
    amount: int
    weight: int
    item_value: int
    classification: int
    country: str


@dataclass
class Consignment:
    carrier: int
    reference_id: str
    recipient: Recipient
    consignment_id: Optional[int] = None
    barcode: Optional[str] = None
    label_description: str = ""
    delivery_date: Optional[str] = None
    delivery_type: int = 2
    package_type: int = 1
    only_recipient: bool = False
    signature: bool = False
    return_shipment: bool = False
    large_format: bool = False
    age_check: bool = False
    insurance: int = 0
    invoice: str = ""
    pickup: Optional[PickupLocation] = None
    weight: Optional[int] = None
    items: List[CustomsItem] = field(default_factory=list)

    # Labels never add entries to the MyParcel address book.
    @property
    def save_recipient_address(self) -> bool:
        return False

    @property
    def is_pickup(self) -> bool:
        return self.pickup is not None

    @property
    def total_customs_weight(self) -> int:
        return sum(item.weight for item in self.items)

    def attach_remote_ids(self, consignment_id: int, barcode: Optional[str] = None):
        self.consignment_id = consignment_id
        if barcode:
            self.barcode = barcode

    def to_api_payload(self) -> Dict[str, Any]:
        """Shipment object in the shape expected by ``POST /shipments``."""
        recipient = self.recipient
        options: Dict[str, Any] = {
            "package_type": self.package_type,
            "delivery_type": self.delivery_type,
            "only_recipient": int(self.only_recipient),
            "signature": int(self.signature),
            "return": int(self.return_shipment),
            "large_format": int(self.large_format),
            "age_check": int(self.age_check),
            "label_description": self.label_description,
        }
        if self.delivery_date:
            options["delivery_date"] = self.delivery_date
        if self.insurance:
            options["insurance"] = {"amount": self.insurance * 100, "currency": CURRENCY}

        payload: Dict[str, Any] = {
            "carrier": self.carrier,
            "reference_identifier": self.reference_id,
            "recipient": {
                "cc": recipient.cc,
                "person": recipient.person,
                "company": recipient.company,
                "street": recipient.street,
                "number": recipient.number,
                "number_suffix": recipient.number_suffix,
                "box_number": recipient.box_number,
                "postal_code": recipient.postal_code,
                "city": recipient.city,
                "phone": recipient.phone,
                "email": recipient.email,
            },
            "options": options,
            "general_settings": {"save_recipient_address": int(self.save_recipient_address)},
        }
        if self.consignment_id:
            payload["id"] = self.consignment_id
        if self.pickup:
            payload["pickup"] = {
                "location_name": self.pickup.location_name,
                "location_code": self.pickup.location_code,
                "street": self.pickup.street,
                "number": self.pickup.number,
                "postal_code": self.pickup.postal_code,
                "city": self.pickup.city,
                "cc": self.pickup.cc,
            }
            if self.pickup.retail_network_id:
                payload["pickup"]["retail_network_id"] = self.pickup.retail_network_id
        if self.weight:
            payload["physical_properties"] = {"weight": self.weight}
        if self.items:
            payload["customs_declaration"] = {
                "contents": 1,
                "invoice": self.invoice,
                "weight": self.total_customs_weight,
                "items": [
                    {
                        "description": item.description,
                        "amount": item.amount,
                        "weight": item.weight,
                        "item_value": {"amount": item.item_value, "currency": CURRENCY},
                        "classification": item.classification,
                        "country": item.country,
                    }
                    for item in self.items
                ],
            }
        return payload
