"""
DriverLedger - every settleable record of one driver.
"""

from typing import Optional

from pydantic import BaseModel, Field

from freight_cms.data.models.enums import LineItemKind
from freight_cms.data.models.expenses import FuelPurchase, OtherSupply
from freight_cms.data.models.freight import Freight
from freight_cms.data.models.line_item import LineItem
from freight_cms.data.models.payment import Payment


class DriverLedger(BaseModel):
    """Freights, fuel purchases, supplies and payments of a single driver."""

    driver_id: int
    freights: list[Freight] = Field(default_factory=list)
    abastecimentos: list[FuelPurchase] = Field(default_factory=list)
    outros_insumos: list[OtherSupply] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)

    def line_items(self) -> list[LineItem]:
        """All records as line items, freights first."""
        items = [f.as_line_item() for f in self.freights]
        items.extend(a.as_line_item() for a in self.abastecimentos)
        items.extend(o.as_line_item() for o in self.outros_insumos)
        return items

    def unpaid_items(self) -> list[LineItem]:
        """Complete line items not yet settled by a payment."""
        return [item for item in self.line_items() if item.is_unpaid]

    def find(self, kind: LineItemKind, item_id: int) -> Optional[LineItem]:
        for item in self.line_items():
            if item.kind is kind and item.id == item_id:
                return item
        return None
