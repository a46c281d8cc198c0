"""Tests for checkout delivery options decoding."""

import json
from datetime import date

from myparcel_export.delivery_options import (
    DELIVERY_TYPE_EVENING,
    DELIVERY_TYPE_MORNING,
    DELIVERY_TYPE_PICKUP,
    DELIVERY_TYPE_STANDARD,
    Normalized,
    Strict,
    convert_delivery_date,
    decode_delivery_options,
)

PICKUP_LOCATION = {
    "location_name": "Primera Centrum",
    "location_code": "176227",
    "retail_network_id": "PNPNL-01",
    "street": "Marktplein",
    "number": "2",
    "postal_code": "2132DA",
    "city": "Hoofddorp",
    "cc": "NL",
}


class TestDecode:
    def test_strict_pickup_payload(self):
        payload = json.dumps(
            {
                "carrier": "postnl",
                "date": "2024-05-15T00:00:00.000Z",
                "deliveryType": "pickup",
                "isPickup": True,
                "pickupLocation": PICKUP_LOCATION,
                "shipmentOptions": {"signature": True},
            }
        )
        decoded = decode_delivery_options(payload)

        assert isinstance(decoded, Strict)
        options = decoded.options
        assert options.delivery_type == DELIVERY_TYPE_PICKUP
        assert options.is_pickup
        assert options.pickup_location.location_code == "176227"
        assert options.pickup_location.retail_network_id == "PNPNL-01"
        assert options.shipment_options == {"signature": True}

    def test_strict_evening_delivery(self):
        decoded = decode_delivery_options({"carrier": "postnl", "deliveryType": "evening"})
        assert isinstance(decoded, Strict)
        assert decoded.options.delivery_type == DELIVERY_TYPE_EVENING
        assert decoded.options.pickup_location is None

    def test_pickup_without_location_is_normalized(self):
        decoded = decode_delivery_options({"carrier": "postnl", "deliveryType": "pickup", "isPickup": True})
        assert isinstance(decoded, Normalized)

    def test_invalid_json_falls_back(self):
        decoded = decode_delivery_options("{not json", {"carrier": "bpost"})
        assert isinstance(decoded, Normalized)
        assert decoded.options.carrier == "bpost"
        assert decoded.options.delivery_type == DELIVERY_TYPE_STANDARD

    def test_missing_payload_uses_fallback(self):
        decoded = decode_delivery_options(None, {"carrier": "postnl", "package_type": "mailbox"})
        assert isinstance(decoded, Normalized)
        assert decoded.options.package_type == "mailbox"

    def test_payload_keys_win_over_fallback(self):
        decoded = decode_delivery_options({"carrier": "DPD"}, {"carrier": "postnl"})
        assert decoded.options.carrier == "dpd"

    def test_legacy_time_slot(self):
        decoded = decode_delivery_options({"date": "2024-05-15", "time": [{"type": 1, "start": "08:00:00"}]})
        assert isinstance(decoded, Normalized)
        assert decoded.options.delivery_type == DELIVERY_TYPE_MORNING

    def test_legacy_flat_pickup_location(self):
        data = dict(PICKUP_LOCATION)
        data["location"] = data.pop("location_name")
        decoded = decode_delivery_options(data, {"carrier": "postnl"})
        assert decoded.options.delivery_type == DELIVERY_TYPE_PICKUP
        assert decoded.options.pickup_location.location_name == "Primera Centrum"
        assert decoded.options.pickup_location.is_complete


class TestConvertDeliveryDate:
    def test_future_date_is_kept(self):
        assert convert_delivery_date("2024-05-20T00:00:00.000Z", date(2024, 5, 13)) == "2024-05-20 00:00:00"

    def test_today_moves_to_tomorrow(self):
        assert convert_delivery_date("2024-05-13", date(2024, 5, 13)) == "2024-05-14 00:00:00"

    def test_past_moves_to_tomorrow(self):
        assert convert_delivery_date("2024-01-01 10:00", date(2024, 5, 13)) == "2024-05-14 00:00:00"

    def test_empty_and_unreadable(self):
        assert convert_delivery_date(None) is None
        assert convert_delivery_date("someday") is None

    def test_non_string_date_is_ignored(self):
        assert convert_delivery_date(20240520, date(2024, 5, 13)) is None
