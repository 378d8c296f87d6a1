"""
LineItem - uniform view of a freight, fuel purchase or supply row.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, computed_field

from freight_cms.data.models.enums import LineItemKind


class LineItem(BaseModel):
    """
    A settleable row attributed to a driver.

    Freights are owed to the driver; fuel purchases and other supplies are
    deducted from what the driver receives.
    """

    kind: LineItemKind
    id: int
    driver_id: int
    date: dt.date
    value: Decimal
    paid: bool = False
    complete: bool = True

    @computed_field
    @property
    def signed_value(self) -> Decimal:
        """Value with the sign it contributes to a driver balance."""
        return self.value * self.kind.sign

    @property
    def is_unpaid(self) -> bool:
        """Complete and not yet settled by a payment."""
        return self.complete and not self.paid
