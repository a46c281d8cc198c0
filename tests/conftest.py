from datetime import date
from itertools import count

import pytest

from myparcel_export.config import DefaultOptions, ExportSettings
from myparcel_export.exceptions import RemoteApiError
from myparcel_export.shipment import Address, LineItem, ShipmentContext
from myparcel_export.store import OrderRecord, OrderStore, ShipmentRecord, TrackRecord

TODAY = date(2024, 5, 13)


def nl_address(**overrides):
    values = dict(
        street="Teststraat 123A",
        postal_code="1234 AB",
        city="Amsterdam",
        country="NL",
        name="Jan Jansen",
        email="jan@example.com",
        phone="0612345678",
    )
    values.update(overrides)
    return Address(**values)


def make_order(order_id, address=None, items=None, delivery_options=None):
    return OrderRecord(
        order_id=order_id,
        order_number=f"S{order_id:05d}",
        address=address or nl_address(),
        items=items if items is not None else [LineItem("Mug", quantity=1, weight=300, price=12.5, product_id="MUG")],
        delivery_options=delivery_options,
    )


class FakeStore(OrderStore):
    """In-memory store: one shipment per order, unless listed in ``unshippable``."""

    def __init__(self, orders, unshippable=()):
        self.orders = {order.order_id: order for order in orders}
        self.unshippable = set(unshippable)
        self.shipments = {}
        self.statuses = {}
        self.emails = []
        self.labels = []
        self.track_updates = []
        self._track_ids = count(1)

    def load_order(self, order_id):
        return self.orders[order_id]

    def create_shipment(self, order):
        if order.order_id in self.unshippable or order.order_id in self.shipments:
            return
        self.shipments[order.order_id] = [
            ShipmentRecord(
                shipment_id=1000 + order.order_id,
                order_id=order.order_id,
                total_qty=sum(item.quantity for item in order.items),
            )
        ]

    def get_shipments(self, order):
        return self.shipments.get(order.order_id, [])

    def create_track(self, shipment):
        track = TrackRecord(
            track_id=next(self._track_ids),
            shipment_id=shipment.shipment_id,
            order_id=shipment.order_id,
            qty=shipment.total_qty,
        )
        shipment.track = track
        return track

    def update_track(self, track, consignment_id, track_number):
        track.consignment_id = consignment_id
        track.track_number = track_number
        self.track_updates.append((track.order_id, consignment_id, track_number))

    def set_order_status(self, order_id, status):
        self.statuses[order_id] = status

    def send_track_email(self, order, track):
        self.emails.append((order.order_id, track.track_number))

    def store_labels(self, pdf, order_ids):
        self.labels.append((pdf, list(order_ids)))
        return "attachment-1"


class FakeClient:
    """Stands in for ``MyParcelClient``; ids start at 500, barcodes derive from them."""

    def __init__(self, failing_references=()):
        self.failing_references = set(failing_references)
        self.created = []
        self.returns = []
        self.label_requests = []
        self.fulfilment_orders = []
        self._ids = count(500)

    def create_consignments(self, consignments):
        results = []
        for consignment in consignments:
            if consignment.reference_id in self.failing_references:
                raise RemoteApiError("MyParcel create consignments failed: rejected", status_code=422)
            consignment.attach_remote_ids(next(self._ids))
            self.created.append(consignment)
            results.append({"consignment_id": consignment.consignment_id, "reference_id": consignment.reference_id})
        return results

    def get_consignments(self, consignment_ids):
        return [{"consignment_id": i, "barcode": f"3SMYPA{i}", "status": 2} for i in consignment_ids]

    def create_return_shipments(self, consignments):
        self.returns.extend(consignments)
        return [c.consignment_id + 10000 for c in consignments]

    def fetch_labels(self, consignment_ids, paper_type="A4", positions=None):
        self.label_requests.append((list(consignment_ids), paper_type, positions))
        return b"%PDF-1.4 labels"

    def request_fulfilment(self, orders):
        self.fulfilment_orders.extend(orders)
        return [{"id": 9000 + n} for n, _ in enumerate(orders)]


@pytest.fixture
def settings():
    return ExportSettings(api_key="test-api-key", carrier="postnl")


@pytest.fixture
def make_context(settings):
    def _make(**overrides):
        values = dict(
            order_id=1,
            order_number="S00001",
            shipment_id=1001,
            address=nl_address(),
            settings=settings,
            items=[LineItem("Mug", quantity=1, weight=300, price=12.5, product_id="MUG")],
        )
        values.update(overrides)
        return ShipmentContext(**values)

    return _make


@pytest.fixture
def stamp_settings():
    return ExportSettings(api_key="test-api-key", defaults=DefaultOptions(package_type="digital_stamp"))
