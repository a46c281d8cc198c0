"""Error types raised by the export pipeline."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    MISSING_API_KEY = "missing_api_key"
    INVALID_STREET = "invalid_street"
    INVALID_POSTAL_CODE = "invalid_postal_code"
    NO_WEIGHT_DATA = "no_weight_data"
    NO_ITEMS_SELECTED = "no_items_selected"
    NO_SHIPMENT = "no_shipment"


class MyParcelError(Exception):
    """Base class for every error the pipeline raises on purpose."""

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class ConfigurationError(MyParcelError):
    """Store configuration is unusable. Aborts the whole batch."""


class ConsignmentError(MyParcelError):
    """A single shipment could not be turned into a consignment."""


class AddressError(ConsignmentError):
    pass


class WeightError(ConsignmentError):
    pass


class RemoteApiError(MyParcelError):
    """The MyParcel API refused a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[list] = None):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class MissingFieldError(MyParcelError):
    """A consignment lacks a field the API requires."""

    def __init__(self, message: str, field_name: str):
        super().__init__(message)
        self.field_name = field_name


class StateError(MyParcelError):
    """Batch-level early stop: nothing to export."""
