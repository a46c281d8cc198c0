"""Customs declaration lines for shipments leaving the EU."""

from typing import Iterable, List

from .address_validator import CC_NL
from .config import ExportSettings
from .consignment import CustomsItem
from .shipment import LineItem

EU_COUNTRIES = frozenset(
    (
        "AT", "BE", "BG", "CY", "CZ", "DE", "DK", "EE", "ES", "FI", "FR", "GR", "HR", "HU",
        "IE", "IT", "LT", "LU", "LV", "MC", "MT", "NL", "PL", "PT", "RO", "SE", "SI", "SK",
    )
)


def requires_customs_declaration(origin_country: str, destination_country: str) -> bool:
    destination = (destination_country or "").upper()
    if destination == (origin_country or "").upper():
        return False
    return destination not in EU_COUNTRIES


def cents_by_price(price: float) -> int:
    # Truncates to whole units before converting: 12.99 -> 1200.
    return int(price) * 100


def build_customs_items(
    items: Iterable[LineItem],
    destination_country: str,
    settings: ExportSettings,
    origin_country: str = CC_NL,
) -> List[CustomsItem]:
    if not requires_customs_declaration(origin_country, destination_country):
        return []

    customs_items = []
    for item in items:
        customs_items.append(
            CustomsItem(
                description=item.name,
                amount=int(item.quantity),
                weight=settings.convert_weight((item.weight or 0) * item.quantity) or 1,
                item_value=cents_by_price(item.price or 0),
                classification=int(item.classification or 0),
                country=item.country_of_manufacture or settings.country_of_origin,
            )
        )
    return customs_items
