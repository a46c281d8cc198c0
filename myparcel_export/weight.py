"""Total weight for digital stamp shipments."""

from typing import Callable, Iterable, Optional

from .exceptions import ErrorKind, WeightError
from .package_type import PackageType
from .shipment import LineItem


def calculate_weight(
    override_weight: Optional[int],
    default_weight: Optional[int],
    items: Iterable[LineItem],
    package_type: int,
    convert: Callable[[float], int],
) -> Optional[int]:
    """Return the weight in grams, or ``None`` when the package type is not weight based.

    The first positive source wins: request override, merchant default, then
    the sum of the line weights. Digital stamp pricing depends on the
    weight, so a stamp without any weight cannot be exported.
    """
    if package_type != PackageType.DIGITAL_STAMP:
        return None

    for weight in (override_weight, default_weight):
        if weight and int(weight) > 0:
            return int(weight)

    total = sum(convert((item.weight or 0) * item.quantity) for item in items)
    if total <= 0:
        raise WeightError(
            "The order with digital stamp can not be exported, no weights have been entered",
            kind=ErrorKind.NO_WEIGHT_DATA,
        )
    return total
