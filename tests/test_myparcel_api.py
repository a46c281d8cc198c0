"""Tests for the MyParcel HTTP client."""

import base64
from unittest.mock import MagicMock, patch

import pytest
import requests

from myparcel_export.config import ExportSettings
from myparcel_export.consignment import Consignment, Recipient
from myparcel_export.exceptions import ConfigurationError, MissingFieldError, RemoteApiError
from myparcel_export.myparcel_api import CONTENT_TYPE_SHIPMENT, MyParcelClient


def _response(status_code=200, json_data=None, content=b""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data if json_data is not None else {}
    resp.text = str(json_data)
    resp.content = content
    return resp


def _consignment(reference_id="1001", **recipient):
    values = dict(cc="NL", person="Jan Jansen", street="Teststraat", number=123, postal_code="1234AB", city="Amsterdam")
    values.update(recipient)
    return Consignment(carrier=1, reference_id=reference_id, recipient=Recipient(**values))


@pytest.fixture
def client():
    return MyParcelClient("test-api-key")


def test_from_settings_requires_api_key():
    with pytest.raises(ConfigurationError):
        MyParcelClient.from_settings(ExportSettings(api_key=None))


def test_authorization_header(client):
    token = base64.b64encode(b"test-api-key").decode()
    assert client._headers()["Authorization"] == f"basic {token}"


@patch("myparcel_export.myparcel_api.requests.post")
def test_create_consignments_attaches_ids(mock_post, client):
    mock_post.return_value = _response(
        json_data={"data": {"ids": [{"id": 11, "reference_identifier": "1002"}, {"id": 10, "reference_identifier": "1001"}]}}
    )
    first, second = _consignment("1001"), _consignment("1002")

    results = client.create_consignments([first, second])

    assert (first.consignment_id, second.consignment_id) == (10, 11)
    assert [r["consignment_id"] for r in results] == [11, 10]
    args, kwargs = mock_post.call_args
    assert args[0] == "https://api.myparcel.nl/shipments"
    assert kwargs["headers"]["Content-Type"] == CONTENT_TYPE_SHIPMENT
    shipments = kwargs["json"]["data"]["shipments"]
    assert [s["reference_identifier"] for s in shipments] == ["1001", "1002"]
    assert shipments[0]["general_settings"]["save_recipient_address"] == 0


@patch("myparcel_export.myparcel_api.requests.post")
def test_missing_field_is_checked_before_request(mock_post, client):
    with pytest.raises(MissingFieldError) as excinfo:
        client.create_consignments([_consignment(city="")])
    assert excinfo.value.field_name == "city"
    mock_post.assert_not_called()


@patch("myparcel_export.myparcel_api.requests.post")
def test_foreign_address_needs_no_house_number(mock_post, client):
    mock_post.return_value = _response(json_data={"data": {"ids": [{"id": 7}]}})
    consignment = _consignment(cc="US", number=None, postal_code="", street="1 Main Street")

    client.create_consignments([consignment])

    assert consignment.consignment_id == 7


@patch("myparcel_export.myparcel_api.requests.post")
def test_http_error(mock_post, client):
    mock_post.return_value = _response(
        422, {"message": "Invalid shipment", "errors": [{"code": 3212, "message": "postal_code"}]}
    )
    with pytest.raises(RemoteApiError) as excinfo:
        client.create_consignments([_consignment()])
    assert excinfo.value.status_code == 422
    assert excinfo.value.errors[0]["code"] == 3212


@patch("myparcel_export.myparcel_api.requests.post")
def test_transport_error(mock_post, client):
    mock_post.side_effect = requests.ConnectionError("timed out")
    with pytest.raises(RemoteApiError):
        client.create_consignments([_consignment()])


@patch("myparcel_export.myparcel_api.requests.get")
def test_get_consignments(mock_get, client):
    mock_get.return_value = _response(
        json_data={"data": {"shipments": [{"id": 10, "barcode": "3SMYPA10", "status": 2}, {"id": 11, "barcode": ""}]}}
    )

    result = client.get_consignments([10, 11])

    assert mock_get.call_args[0][0] == "https://api.myparcel.nl/shipments/10;11"
    assert result == [
        {"consignment_id": 10, "barcode": "3SMYPA10", "status": 2},
        {"consignment_id": 11, "barcode": None, "status": None},
    ]


@patch("myparcel_export.myparcel_api.requests.get")
def test_fetch_labels(mock_get, client):
    mock_get.return_value = _response(content=b"%PDF-1.4")

    pdf = client.fetch_labels([10, 11], "A4", (2, 3))

    assert pdf == b"%PDF-1.4"
    args, kwargs = mock_get.call_args
    assert args[0] == "https://api.myparcel.nl/shipment_labels/10;11"
    assert kwargs["params"] == {"format": "A4", "positions": "2;3"}
    assert kwargs["headers"]["Accept"] == "application/pdf"


@patch("myparcel_export.myparcel_api.requests.get")
def test_a6_labels_have_no_positions(mock_get, client):
    mock_get.return_value = _response(content=b"%PDF-1.4")
    client.fetch_labels([10], "A6", (2, 3))
    assert mock_get.call_args[1]["params"] == {"format": "A6"}


@patch("myparcel_export.myparcel_api.requests.post")
def test_return_shipments(mock_post, client):
    mock_post.return_value = _response(json_data={"data": {"ids": [{"id": 90}]}})
    consignment = _consignment(email="jan@example.com")
    consignment.attach_remote_ids(10)

    assert client.create_return_shipments([consignment]) == [90]
    returns = mock_post.call_args[1]["json"]["data"]["return_shipments"]
    assert returns == [{"parent": 10, "carrier": 1, "email": "jan@example.com", "name": "Jan Jansen"}]
