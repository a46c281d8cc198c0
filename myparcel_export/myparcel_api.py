"""Client for the MyParcel shipment API."""

import base64
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from .address_validator import CC_BE, CC_NL
from .config import ExportSettings
from .consignment import Consignment
from .exceptions import ConfigurationError, ErrorKind, MissingFieldError, RemoteApiError

_logger = logging.getLogger(__name__)

CONTENT_TYPE_SHIPMENT = "application/vnd.shipment+json;version=1.1;charset=utf-8"
CONTENT_TYPE_RETURN_SHIPMENT = "application/vnd.return_shipment+json;charset=utf-8"
CONTENT_TYPE_JSON = "application/json;charset=utf-8"


def validate_consignment(consignment: Consignment):
    """Raise ``MissingFieldError`` for fields the API rejects when empty."""
    recipient = consignment.recipient
    required = [("cc", recipient.cc), ("person", recipient.person), ("city", recipient.city)]
    if recipient.cc in (CC_NL, CC_BE):
        required += [
            ("street", recipient.street),
            ("number", recipient.number),
            ("postal_code", recipient.postal_code),
        ]
    else:
        required.append(("street", recipient.street))

    for field_name, value in required:
        if value in (None, ""):
            raise MissingFieldError(
                f"Consignment {consignment.reference_id} is missing recipient {field_name}", field_name
            )


class MyParcelClient:
    API_URL = "https://api.myparcel.nl"

    def __init__(self, api_key: str, api_url: str = API_URL, timeout: int = 30):
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: ExportSettings) -> "MyParcelClient":
        if not settings.api_key:
            raise ConfigurationError("MyParcel API key is not configured", kind=ErrorKind.MISSING_API_KEY)
        return cls(settings.api_key)

    def _headers(self, content_type: str = CONTENT_TYPE_JSON, accept: str = "application/json"):
        token = base64.b64encode(self.api_key.encode()).decode()
        return {
            "Authorization": f"basic {token}",
            "Content-Type": content_type,
            "Accept": accept,
        }

    def _check(self, resp: requests.Response, action: str) -> requests.Response:
        if resp.status_code < 400:
            return resp
        errors: List[Any] = []
        message = resp.text
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            errors = body.get("errors") or []
            message = body.get("message") or message
        _logger.error("MyParcel %s failed (%s): %s", action, resp.status_code, message)
        raise RemoteApiError(f"MyParcel {action} failed: {message}", status_code=resp.status_code, errors=errors)

    def _post(self, path: str, payload: Dict[str, Any], content_type: str, action: str) -> Dict[str, Any]:
        url = f"{self.api_url}{path}"
        try:
            resp = requests.post(url, headers=self._headers(content_type), json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RemoteApiError(f"MyParcel {action} failed: {exc}") from exc
        return self._check(resp, action).json()

    def _get(self, path: str, action: str, params: Optional[dict] = None, accept: str = "application/json"):
        url = f"{self.api_url}{path}"
        try:
            resp = requests.get(url, headers=self._headers(accept=accept), params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RemoteApiError(f"MyParcel {action} failed: {exc}") from exc
        return self._check(resp, action)

    def create_consignments(self, consignments: Sequence[Consignment]) -> List[Dict[str, Any]]:
        """Create concepts and attach the returned ids to ``consignments``."""
        for consignment in consignments:
            validate_consignment(consignment)

        payload = {"data": {"shipments": [c.to_api_payload() for c in consignments]}}
        _logger.info("MyParcel: creating %d consignment(s)", len(consignments))
        data = self._post("/shipments", payload, CONTENT_TYPE_SHIPMENT, "create consignments")

        by_reference = {c.reference_id: c for c in consignments}
        results = []
        for entry in data.get("data", {}).get("ids", []):
            reference = str(entry.get("reference_identifier") or "")
            consignment = by_reference.get(reference)
            if consignment is None and len(consignments) == 1:
                consignment = consignments[0]
            if consignment is not None:
                consignment.attach_remote_ids(entry["id"])
            results.append({"consignment_id": entry["id"], "reference_id": reference, "barcode": None})
        return results

    def get_consignments(self, consignment_ids: Iterable[int]) -> List[Dict[str, Any]]:
        ids = ";".join(str(i) for i in consignment_ids)
        data = self._get(f"/shipments/{ids}", "fetch consignments").json()
        return [
            {
                "consignment_id": shipment.get("id"),
                "barcode": shipment.get("barcode") or None,
                "status": shipment.get("status"),
            }
            for shipment in data.get("data", {}).get("shipments", [])
        ]

    def create_return_shipments(self, consignments: Sequence[Consignment]) -> List[int]:
        payload = {
            "data": {
                "return_shipments": [
                    {
                        "parent": c.consignment_id,
                        "carrier": c.carrier,
                        "email": c.recipient.email,
                        "name": c.recipient.person,
                    }
                    for c in consignments
                    if c.consignment_id
                ]
            }
        }
        data = self._post("/shipments", payload, CONTENT_TYPE_RETURN_SHIPMENT, "create return shipments")
        return [entry["id"] for entry in data.get("data", {}).get("ids", [])]

    def fetch_labels(
        self, consignment_ids: Iterable[int], paper_type: str = "A4", positions: Optional[Sequence[int]] = None
    ) -> bytes:
        ids = ";".join(str(i) for i in consignment_ids)
        params = {"format": paper_type}
        if paper_type == "A4" and positions:
            params["positions"] = ";".join(str(p) for p in positions)
        return self._get(f"/shipment_labels/{ids}", "fetch labels", params=params, accept="application/pdf").content

    def request_fulfilment(self, orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        _logger.info("MyParcel: requesting fulfilment for %d order(s)", len(orders))
        data = self._post("/fulfilment/orders", {"data": {"orders": orders}}, CONTENT_TYPE_JSON, "request fulfilment")
        return data.get("data", {}).get("ids", [])
