"""Read-only input records handed over by the store for one shipment."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import ExportOptions, ExportSettings


@dataclass(frozen=True)
class Address:
    street: Union[str, Sequence[str]]
    postal_code: str
    city: str
    country: str
    house_number: str = ""
    company: str = ""
    name: str = ""
    phone: str = ""
    email: str = ""

    @property
    def full_street(self) -> str:
        lines = [self.street] if isinstance(self.street, str) else list(self.street)
        if self.house_number:
            lines.append(str(self.house_number))
        return " ".join(line.strip() for line in lines if line and line.strip())


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: int = 1
    weight: float = 0.0
    price: float = 0.0
    product_id: Optional[Any] = None
    classification: Optional[int] = None
    country_of_manufacture: Optional[str] = None
    # Insured amount in EUR set on the product, None when the product does not decide.
    insurance: Optional[int] = None
    # Product-level option flags, e.g. {"age_check": True}. Missing keys mean "not set".
    options: Dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class ShipmentContext:
    order_id: Any
    order_number: str
    shipment_id: Any
    address: Address
    settings: ExportSettings
    items: List[LineItem] = field(default_factory=list)
    delivery_options: Any = None
    options: ExportOptions = field(default_factory=ExportOptions)
    consignment_id: Optional[int] = None

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.api_key

    def product_flag(self, name: str) -> Optional[bool]:
        """Combine a product option over all lines: any True wins, then any False."""
        values = [item.options[name] for item in self.items if item.options.get(name) is not None]
        if not values:
            return None
        return any(values)

    @property
    def product_insurance(self) -> Optional[int]:
        """Highest insured amount asked for by any line, None when no product sets one."""
        values = [int(item.insurance) for item in self.items if item.insurance is not None]
        return max(values) if values else None
