"""Batch export of selected orders to MyParcel.

A batch walks through a fixed sequence of stages. Each stage handles the
orders one at a time in selection order. Per-order problems are turned into
messages and only drop that order; configuration and selection problems stop
the batch. Stages already done are never rolled back.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .address_validator import CC_NL, split_street, validate_postal_code
from .config import EXPORT_MODE_PPS, ExportOptions, ExportSettings
from .consignment import Consignment
from .consignment_builder import ConsignmentBuilder
from .customs import cents_by_price
from .exceptions import (
    AddressError,
    ConfigurationError,
    ConsignmentError,
    ErrorKind,
    MissingFieldError,
    RemoteApiError,
    StateError,
)
from .myparcel_api import MyParcelClient
from .shipment import ShipmentContext
from .store import TRACK_NUMBER_CONCEPT, OrderRecord, OrderStore, ShipmentRecord, TrackRecord

_logger = logging.getLogger(__name__)

ERROR_API_KEY = (
    "You have not entered the correct API key. To get your personal API credentials you should contact MyParcel."
)
ERROR_NO_ITEMS_SELECTED = "No items selected"
ERROR_ORDER_HAS_NO_SHIPMENT = (
    "No shipment can be made with this order. Shipments can not be created if the status is On Hold "
    "or if the product is digital."
)


class ExportStage(Enum):
    SELECTED = "selected"
    ADDRESS_FILTERED = "address_filtered"
    COLLECTED = "collected"
    OPTIONS_APPLIED = "options_applied"
    SHIPMENTS_CREATED = "shipments_created"
    FULFILMENT_REQUESTED = "fulfilment_requested"
    CONSIGNMENTS_SYNCED = "consignments_synced"
    TRACKS_CREATED = "tracks_created"
    CONCEPTS_CREATED = "concepts_created"
    TRACKS_UPDATED = "tracks_updated"
    RETURN_SHIPMENTS_ADDED = "return_shipments_added"
    LABELS_RENDERED = "labels_rendered"
    TRACKS_REFRESHED = "tracks_refreshed"
    EMAILS_SENT = "emails_sent"
    LABELS_DOWNLOADED = "labels_downloaded"


# Allowed successor of each stage. The branch after SHIPMENTS_CREATED depends on the export mode.
TRANSITIONS = {
    ExportStage.SELECTED: (ExportStage.ADDRESS_FILTERED,),
    ExportStage.ADDRESS_FILTERED: (ExportStage.COLLECTED,),
    ExportStage.COLLECTED: (ExportStage.OPTIONS_APPLIED,),
    ExportStage.OPTIONS_APPLIED: (ExportStage.SHIPMENTS_CREATED,),
    ExportStage.SHIPMENTS_CREATED: (ExportStage.FULFILMENT_REQUESTED, ExportStage.CONSIGNMENTS_SYNCED),
    ExportStage.FULFILMENT_REQUESTED: (),
    ExportStage.CONSIGNMENTS_SYNCED: (ExportStage.TRACKS_CREATED,),
    ExportStage.TRACKS_CREATED: (ExportStage.CONCEPTS_CREATED,),
    ExportStage.CONCEPTS_CREATED: (ExportStage.TRACKS_UPDATED,),
    ExportStage.TRACKS_UPDATED: (ExportStage.RETURN_SHIPMENTS_ADDED,),
    ExportStage.RETURN_SHIPMENTS_ADDED: (ExportStage.LABELS_RENDERED,),
    ExportStage.LABELS_RENDERED: (ExportStage.TRACKS_REFRESHED,),
    ExportStage.TRACKS_REFRESHED: (ExportStage.EMAILS_SENT,),
    ExportStage.EMAILS_SENT: (ExportStage.LABELS_DOWNLOADED,),
    ExportStage.LABELS_DOWNLOADED: (),
}


@dataclass
class OrderOutcome:
    order_id: Any
    order_number: str = ""
    consignments: List[Consignment] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class BatchResult:
    stage: ExportStage = ExportStage.SELECTED
    messages: List[str] = field(default_factory=list)
    outcomes: Dict[Any, OrderOutcome] = field(default_factory=dict)
    aborted: bool = False
    labels: Any = None
    fulfilment_ids: List[Any] = field(default_factory=list)

    @property
    def consignments(self) -> List[Consignment]:
        return [c for outcome in self.outcomes.values() for c in outcome.consignments]


@dataclass
class _Export:
    """One shipment travelling through the standard pipeline."""

    order: OrderRecord
    shipment: ShipmentRecord
    track: Optional[TrackRecord] = None
    consignment: Optional[Consignment] = None


def _known_barcode(track: Optional[TrackRecord]) -> Optional[str]:
    """Barcode already stored on ``track``, if it holds one."""
    if track and track.track_number and track.track_number != TRACK_NUMBER_CONCEPT:
        return track.track_number
    return None


class OrderBatchExport:
    def __init__(
        self,
        settings: ExportSettings,
        store: OrderStore,
        client: Optional[MyParcelClient] = None,
        today: Optional[date] = None,
    ):
        self.settings = settings
        self.store = store
        self.client = client
        self.today = today

    def run(self, order_ids: Sequence[Any], options: Optional[ExportOptions] = None) -> BatchResult:
        """Export the given orders. Never raises for expected failures; see ``BatchResult``."""
        result = BatchResult()
        try:
            self._run(list(order_ids or []), options or ExportOptions(), result)
        except (ConfigurationError, StateError) as exc:
            _logger.critical("MyParcel export stopped at %s: %s", result.stage.value, exc.message)
            result.aborted = True
            result.messages.append(exc.message)
        return result

    def _advance(self, result: BatchResult, stage: ExportStage):
        if stage not in TRANSITIONS[result.stage]:
            raise RuntimeError(f"Invalid export transition {result.stage.value} -> {stage.value}")
        _logger.debug("MyParcel export: %s -> %s", result.stage.value, stage.value)
        result.stage = stage

    def _fail(self, result: BatchResult, order: OrderRecord, message: str):
        outcome = result.outcomes.setdefault(order.order_id, OrderOutcome(order.order_id, order.order_number))
        outcome.errors.append(message)
        result.messages.append(message)

    def _run(self, order_ids: List[Any], options: ExportOptions, result: BatchResult):
        if not self.settings.api_key:
            raise ConfigurationError(ERROR_API_KEY, kind=ErrorKind.MISSING_API_KEY)
        client = self.client or MyParcelClient.from_settings(self.settings)

        orders = self._filter_correct_address(order_ids, result)
        self._advance(result, ExportStage.ADDRESS_FILTERED)
        if not orders:
            raise StateError(ERROR_NO_ITEMS_SELECTED, kind=ErrorKind.NO_ITEMS_SELECTED)

        for order in orders:
            result.outcomes[order.order_id] = OrderOutcome(order.order_id, order.order_number)
        self._advance(result, ExportStage.COLLECTED)

        options = options.merged(track_email=True)
        export_mode = options.export_mode or self.settings.export_mode
        self._advance(result, ExportStage.OPTIONS_APPLIED)

        shipments = self._create_shipments(orders)
        self._advance(result, ExportStage.SHIPMENTS_CREATED)
        if not any(shipments.values()):
            raise StateError(ERROR_ORDER_HAS_NO_SHIPMENT, kind=ErrorKind.NO_SHIPMENT)

        builder = ConsignmentBuilder(self.store, result.messages, self.today)
        if export_mode == EXPORT_MODE_PPS:
            self._request_fulfilment(client, builder, orders, shipments, options, result)
            self._advance(result, ExportStage.FULFILMENT_REQUESTED)
            return

        exports = [_Export(order, shipment) for order in orders for shipment in shipments[order.order_id]]

        self._sync_existing(client, exports, result)
        self._advance(result, ExportStage.CONSIGNMENTS_SYNCED)

        tracked = [e for e in exports if self._create_track(e, result)]
        self._advance(result, ExportStage.TRACKS_CREATED)

        created = [e for e in tracked if self._create_concept(client, builder, e, options, result)]
        self._advance(result, ExportStage.CONCEPTS_CREATED)

        for export in created:
            consignment = export.consignment
            track_number = consignment.barcode or _known_barcode(export.track) or TRACK_NUMBER_CONCEPT
            self._update_track(export, consignment.consignment_id, track_number, result)
        self._advance(result, ExportStage.TRACKS_UPDATED)

        if options.is_concept or not created:
            return

        if options.return_label:
            try:
                client.create_return_shipments([e.consignment for e in created])
            except RemoteApiError as exc:
                _logger.critical("MyParcel return shipments failed: %s", exc)
                result.messages.append(exc.message)
        self._advance(result, ExportStage.RETURN_SHIPMENTS_ADDED)

        try:
            pdf = client.fetch_labels(
                [e.consignment.consignment_id for e in created], options.paper_type, options.positions
            )
        except RemoteApiError as exc:
            _logger.critical("MyParcel labels failed: %s", exc)
            result.messages.append(exc.message)
            return
        self._advance(result, ExportStage.LABELS_RENDERED)

        printed = [e for e in created if self._refresh_track(client, e, result)]
        self._advance(result, ExportStage.TRACKS_REFRESHED)

        if options.track_email:
            for export in printed:
                try:
                    self.store.send_track_email(export.order, export.track)
                except Exception:  # pylint: disable=broad-except
                    _logger.exception("Track email failed for order %s", export.order.order_number)
                    message = f"Could not send the track email for order {export.order.order_number}."
                    self._fail(result, export.order, message)
        self._advance(result, ExportStage.EMAILS_SENT)

        try:
            result.labels = self.store.store_labels(pdf, [o.order_id for o in orders])
        except Exception:  # pylint: disable=broad-except
            _logger.exception("Storing the MyParcel label PDF failed")
            result.messages.append("The labels were created but could not be saved.")
            return
        self._advance(result, ExportStage.LABELS_DOWNLOADED)

    def _filter_correct_address(self, order_ids: List[Any], result: BatchResult) -> List[OrderRecord]:
        orders = []
        for order_id in dict.fromkeys(order_ids):
            order = self.store.load_order(order_id)
            address = order.address
            valid = True
            try:
                split_street(address.full_street, CC_NL, address.country)
            except AddressError:
                valid = False
                self._fail(
                    result,
                    order,
                    f"An error has occurred while validating the order number {order.order_number}. Check street.",
                )
            try:
                validate_postal_code(address.postal_code, address.country)
            except AddressError:
                valid = False
                self._fail(
                    result,
                    order,
                    f"An error has occurred while validating the order number {order.order_number}. Check postcode.",
                )
            if valid:
                orders.append(order)
            else:
                _logger.warning("Order %s dropped from MyParcel export: invalid address", order.order_number)
        return orders

    def _create_shipments(self, orders: List[OrderRecord]) -> Dict[Any, List[ShipmentRecord]]:
        for order in orders:
            self.store.create_shipment(order)
        return {order.order_id: self.store.get_shipments(order) for order in orders}

    def _context(self, order: OrderRecord, shipment: ShipmentRecord, options: ExportOptions) -> ShipmentContext:
        track = shipment.track
        return ShipmentContext(
            order_id=order.order_id,
            order_number=order.order_number,
            shipment_id=shipment.shipment_id,
            address=order.address,
            settings=self.settings,
            items=shipment.items or order.items,
            delivery_options=order.delivery_options,
            options=options,
            consignment_id=track.consignment_id if track else None,
        )

    def _build(self, builder, order, shipment, options, result) -> Optional[Consignment]:
        try:
            return builder.build(self._context(order, shipment, options))
        except ConsignmentError as exc:
            _logger.warning("Order %s: %s", order.order_number, exc.message)
            self._fail(result, order, exc.message)
        except ConfigurationError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            _logger.exception("Building the consignment for order %s failed", order.order_number)
            self._fail(result, order, f"Order {order.order_number} could not be exported: {exc}")
        return None

    def _create_track(self, export: _Export, result: BatchResult) -> bool:
        if export.shipment.track:
            export.track = export.shipment.track
            return True
        try:
            export.track = self.store.create_track(export.shipment)
        except Exception:  # pylint: disable=broad-except
            _logger.exception("Creating the track of order %s failed", export.order.order_number)
            self._fail(result, export.order, f"Could not create the track for order {export.order.order_number}.")
            return False
        return True

    def _update_track(self, export: _Export, consignment_id, track_number, result: BatchResult) -> bool:
        try:
            self.store.update_track(export.track, consignment_id, track_number)
        except Exception:  # pylint: disable=broad-except
            _logger.exception("Updating the track of order %s failed", export.order.order_number)
            self._fail(result, export.order, f"Could not update the track for order {export.order.order_number}.")
            return False
        return True

    def _create_concept(self, client, builder, export: _Export, options, result) -> bool:
        consignment = self._build(builder, export.order, export.shipment, options, result)
        if consignment is None:
            return False
        try:
            client.create_consignments([consignment])
        except (RemoteApiError, MissingFieldError) as exc:
            _logger.critical("MyParcel export of order %s failed: %s", export.order.order_number, exc)
            self._fail(result, export.order, exc.message)
            return False
        if not consignment.consignment_id:
            message = f"MyParcel did not return a consignment for order {export.order.order_number}."
            _logger.critical("No consignment id returned for order %s", export.order.order_number)
            self._fail(result, export.order, message)
            return False
        export.consignment = consignment
        result.outcomes[export.order.order_id].consignments.append(consignment)
        return True

    def _sync_existing(self, client, exports: List[_Export], result: BatchResult):
        """Refresh barcodes of shipments exported before (re-export)."""
        for export in exports:
            track = export.shipment.track
            if not track or not track.consignment_id:
                continue
            try:
                remote = client.get_consignments([track.consignment_id])
            except RemoteApiError as exc:
                _logger.critical("MyParcel sync of order %s failed: %s", export.order.order_number, exc)
                self._fail(result, export.order, exc.message)
                continue
            for entry in remote:
                if entry.get("barcode") and entry["barcode"] != track.track_number:
                    export.track = track
                    self._update_track(export, track.consignment_id, entry["barcode"], result)

    def _refresh_track(self, client, export: _Export, result: BatchResult) -> bool:
        consignment = export.consignment
        try:
            remote = client.get_consignments([consignment.consignment_id])
        except RemoteApiError as exc:
            _logger.critical("MyParcel barcode of order %s failed: %s", export.order.order_number, exc)
            self._fail(result, export.order, exc.message)
            return False
        for entry in remote:
            if entry.get("barcode"):
                consignment.attach_remote_ids(consignment.consignment_id, entry["barcode"])
        track_number = consignment.barcode or TRACK_NUMBER_CONCEPT
        if not self._update_track(export, consignment.consignment_id, track_number, result):
            return False
        return bool(consignment.barcode)

    def _request_fulfilment(self, client, builder, orders, shipments, options, result: BatchResult):
        fulfilment_orders = []
        for order in orders:
            for shipment in shipments[order.order_id]:
                consignment = self._build(builder, order, shipment, options, result)
                if consignment is None:
                    continue
                result.outcomes[order.order_id].consignments.append(consignment)
                fulfilment_orders.append(self._fulfilment_order(order, shipment, consignment))

        if not fulfilment_orders:
            return
        try:
            result.fulfilment_ids = client.request_fulfilment(fulfilment_orders)
        except (RemoteApiError, MissingFieldError) as exc:
            _logger.critical("MyParcel fulfilment request failed: %s", exc)
            result.messages.append(exc.message)

    @staticmethod
    def _fulfilment_order(order: OrderRecord, shipment: ShipmentRecord, consignment: Consignment) -> Dict[str, Any]:
        return {
            "external_identifier": str(order.order_number),
            "order_lines": [
                {
                    "quantity": int(item.quantity),
                    "price": cents_by_price(item.price or 0),
                    "product": {"name": item.name, "external_identifier": str(item.product_id or "")},
                }
                for item in (shipment.items or order.items)
            ],
            "shipment": consignment.to_api_payload(),
        }
