"""Interface to the shop that owns orders, shipments and track records."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from .shipment import Address, LineItem

MYPARCEL_CARRIER_CODE = "myparcel"
MYPARCEL_TRACK_TITLE = "MyParcel"
TRACK_NUMBER_CONCEPT = "concept"


@dataclass
class TrackRecord:
    track_id: Any
    shipment_id: Any
    order_id: Any
    qty: int = 0
    carrier_code: str = MYPARCEL_CARRIER_CODE
    title: str = MYPARCEL_TRACK_TITLE
    consignment_id: Optional[int] = None
    track_number: Optional[str] = None


@dataclass
class ShipmentRecord:
    shipment_id: Any
    order_id: Any
    total_qty: int = 0
    # Lines shipped with this shipment. Empty means "all lines of the order".
    items: List[LineItem] = field(default_factory=list)
    track: Optional[TrackRecord] = None


@dataclass
class OrderRecord:
    order_id: Any
    order_number: str
    address: Address
    items: List[LineItem] = field(default_factory=list)
    delivery_options: Any = None


class OrderStore(ABC):
    """Local order storage used by the batch export.

    Implementations load orders, keep one track record per shipment and
    notify customers. Every method is a blocking call.
    """

    @abstractmethod
    def load_order(self, order_id) -> OrderRecord:
        pass

    @abstractmethod
    def create_shipment(self, order: OrderRecord) -> None:
        """Create the local shipment for ``order`` unless it has one or cannot ship."""

    @abstractmethod
    def get_shipments(self, order: OrderRecord) -> List[ShipmentRecord]:
        pass

    @abstractmethod
    def create_track(self, shipment: ShipmentRecord) -> TrackRecord:
        pass

    @abstractmethod
    def update_track(self, track: TrackRecord, consignment_id: int, track_number: Optional[str]) -> None:
        pass

    @abstractmethod
    def set_order_status(self, order_id, status: str) -> None:
        pass

    @abstractmethod
    def send_track_email(self, order: OrderRecord, track: TrackRecord) -> None:
        pass

    @abstractmethod
    def store_labels(self, pdf: bytes, order_ids: Sequence[Any]) -> Any:
        """Keep the label PDF and return a reference the caller can download."""
