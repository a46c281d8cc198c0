from .batch_export import BatchResult, ExportStage, OrderBatchExport, OrderOutcome
from .config import ExportOptions, ExportSettings
from .consignment import Consignment
from .consignment_builder import ConsignmentBuilder
from .exceptions import (
    AddressError,
    ConfigurationError,
    ConsignmentError,
    ErrorKind,
    MissingFieldError,
    MyParcelError,
    RemoteApiError,
    StateError,
    WeightError,
)
from .myparcel_api import MyParcelClient
from .shipment import Address, LineItem, ShipmentContext
from .store import OrderRecord, OrderStore, ShipmentRecord, TrackRecord

__version__ = "0.1.0"
