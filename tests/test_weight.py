"""Tests for digital stamp weight calculation."""

import pytest

from myparcel_export.exceptions import ErrorKind, WeightError
from myparcel_export.package_type import PackageType
from myparcel_export.shipment import LineItem
from myparcel_export.weight import calculate_weight


def grams(weight):
    return int(weight or 0)


def test_not_weight_based_package():
    assert calculate_weight(None, None, [], PackageType.PACKAGE, grams) is None


def test_sum_of_lines():
    items = [LineItem("A", weight=100), LineItem("B", weight=150)]
    assert calculate_weight(None, 0, items, PackageType.DIGITAL_STAMP, grams) == 250


def test_quantity_multiplies_line_weight():
    items = [LineItem("A", quantity=3, weight=20)]
    assert calculate_weight(None, None, items, PackageType.DIGITAL_STAMP, grams) == 60


def test_override_wins():
    items = [LineItem("A", weight=100)]
    assert calculate_weight(40, 80, items, PackageType.DIGITAL_STAMP, grams) == 40


def test_default_wins_over_lines():
    items = [LineItem("A", weight=100)]
    assert calculate_weight(0, 80, items, PackageType.DIGITAL_STAMP, grams) == 80


def test_no_weight_anywhere():
    items = [LineItem("A", weight=0), LineItem("B", weight=0)]
    with pytest.raises(WeightError) as excinfo:
        calculate_weight(None, None, items, PackageType.DIGITAL_STAMP, grams)
    assert excinfo.value.kind == ErrorKind.NO_WEIGHT_DATA
