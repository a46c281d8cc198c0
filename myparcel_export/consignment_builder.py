"""Turns one shipment of a shop order into a MyParcel consignment."""

import logging
from datetime import date
from typing import Any, Callable, List, Optional

from .address_validator import CC_NL, validate
from .consignment import MAX_COMPANY_NAME_LENGTH, MAX_LABEL_DESCRIPTION_LENGTH, Consignment, Recipient, carrier_id
from .customs import build_customs_items
from .delivery_options import DecodedDeliveryOptions, Normalized, convert_delivery_date, decode_delivery_options
from .exceptions import AddressError, ConfigurationError, ConsignmentError, ErrorKind
from .package_type import DEFAULT_SENTINEL, resolve_age_check, resolve_package_type
from .shipment import ShipmentContext
from .weight import calculate_weight

_logger = logging.getLogger(__name__)

ORDER_STATUS_NEW = "new"

# consignment attribute -> (request option, product/checkout option key, merchant default)
FEATURE_FLAGS = {
    "only_recipient": ("only_recipient", "only_recipient", "only_recipient"),
    "signature": ("signature", "signature", "signature"),
    "return_shipment": ("return_shipment", "return", "return_shipment"),
    "large_format": ("large_format", "large_format", "large_format"),
}


def first_set(*providers: Callable[[], Any]) -> Any:
    """Evaluate providers in order and return the first value that is not ``None``."""
    for provider in providers:
        value = provider()
        if value is not None:
            return value
    return None


class ConsignmentBuilder:
    """Builds consignments for the shipments of one export batch.

    Address problems do not stop the build: they are reported in
    ``messages`` and the order goes back to the ``new`` status through
    ``store`` so it can be fixed and exported again.
    """

    def __init__(self, store=None, messages: Optional[List[str]] = None, today: Optional[date] = None):
        self.store = store
        self.messages = messages if messages is not None else []
        self.today = today

    def build(self, context: ShipmentContext) -> Consignment:
        if not context.api_key:
            raise ConfigurationError(
                "API key is not known. Go to the MyParcel settings and fill in the API key.",
                kind=ErrorKind.MISSING_API_KEY,
            )

        decoded = self.decode_delivery_options(context)
        delivery = decoded.options
        address = context.address
        settings = context.settings
        options = context.options

        try:
            carrier = carrier_id(delivery.carrier)
        except ValueError as exc:
            raise ConsignmentError(f"Order {context.order_number}: {exc}") from exc

        consignment = Consignment(
            carrier=carrier,
            reference_id=str(context.shipment_id),
            consignment_id=context.consignment_id,
            recipient=Recipient(
                cc=address.country,
                person=address.name,
                company=(address.company or "")[:MAX_COMPANY_NAME_LENGTH],
                city=address.city,
                phone=address.phone,
                email=address.email,
            ),
            invoice=str(context.order_number),
        )
        self._set_address(consignment, context)

        age_check = resolve_age_check(
            address.country,
            options.age_check,
            context.product_flag("age_check"),
            settings.defaults.age_check,
        )
        consignment.age_check = age_check
        consignment.package_type = resolve_package_type(
            delivery.package_type or settings.defaults.package_type,
            options.package_type,
            age_check,
        )
        consignment.delivery_type = delivery.delivery_type
        consignment.delivery_date = convert_delivery_date(delivery.date, self.today)
        consignment.label_description = self.label_description(context, consignment.delivery_date)

        for attribute, (option_name, product_key, default_name) in FEATURE_FLAGS.items():
            value = first_set(
                lambda: options.flag(option_name),
                lambda: delivery.shipment_options.get(product_key),
                lambda: context.product_flag(product_key),
                lambda: settings.defaults.flag(default_name),
            )
            setattr(consignment, attribute, bool(value))
        consignment.insurance = int(
            first_set(
                lambda: options.insurance,
                lambda: context.product_insurance,
                lambda: settings.defaults.insurance,
            ) or 0
        )

        if delivery.is_pickup:
            pickup = delivery.pickup_location
            if pickup is None or not pickup.is_complete:
                raise ConsignmentError(
                    f"Order {context.order_number} has an incomplete pickup location"
                )
            consignment.pickup = pickup
            consignment.return_shipment = False

        consignment.items = build_customs_items(context.items, address.country, settings)
        consignment.weight = calculate_weight(
            options.digital_stamp_weight,
            settings.defaults.digital_stamp_weight,
            context.items,
            consignment.package_type,
            settings.convert_weight,
        )
        return consignment

    def decode_delivery_options(self, context: ShipmentContext) -> DecodedDeliveryOptions:
        fallback = {"carrier": context.settings.carrier}
        if context.options.package_type not in (None, "", DEFAULT_SENTINEL):
            fallback["package_type"] = context.options.package_type
        decoded = decode_delivery_options(context.delivery_options, fallback)
        if isinstance(decoded, Normalized) and context.delivery_options:
            _logger.info("Order %s: normalized legacy delivery options", context.order_number)
        return decoded

    def _set_address(self, consignment: Consignment, context: ShipmentContext):
        address = context.address
        try:
            result = validate(address.full_street, address.postal_code, CC_NL, address.country)
        except AddressError as exc:
            error_human = (
                f"An error has occurred while validating order number {context.order_number}. Check address."
            )
            self.messages.append(error_human + " View log file for more information.")
            _logger.critical("%s - %s", error_human, exc)
            if self.store is not None:
                self.store.set_order_status(context.order_id, ORDER_STATUS_NEW)
            return

        recipient = consignment.recipient
        recipient.street = result.street
        recipient.number = result.number
        recipient.number_suffix = result.number_suffix
        recipient.box_number = result.box_number
        recipient.postal_code = result.postal_code

    @staticmethod
    def label_description(context: ShipmentContext, delivery_date: Optional[str] = None) -> str:
        template = context.settings.label_description
        if not template:
            return ""
        replacements = {
            "%order_nr%": str(context.order_number),
            "%delivery_date%": (delivery_date or "")[:10],
            "%product_id%": ",".join(str(item.product_id) for item in context.items if item.product_id),
            "%product_name%": ",".join(item.name for item in context.items),
            "%product_qty%": str(sum(int(item.quantity) for item in context.items)),
        }
        description = template
        for placeholder, value in replacements.items():
            description = description.replace(placeholder, value)
        return description.strip()[:MAX_LABEL_DESCRIPTION_LENGTH]
