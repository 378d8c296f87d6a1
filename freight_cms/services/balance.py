"""
Balance Aggregator - amounts owed to drivers.

Nets a driver's unpaid line items:
- Freights add to the balance
- Fuel purchases and other supplies are deducted
- Pending (incomplete) items are ignored
"""

from decimal import Decimal
from time import time
from typing import Any, Iterable

from pydantic import BaseModel

from freight_cms.data.models import LineItem, LineItemKind
from freight_cms.services.base import BaseService
from freight_cms.utils.formatting import format_balance


class DriverBalance(BaseModel):
    """Unpaid totals of one driver."""

    driver_id: int
    freights_total: Decimal = Decimal("0")
    fuel_total: Decimal = Decimal("0")
    supplies_total: Decimal = Decimal("0")
    item_count: int = 0

    @property
    def unpaid_total(self) -> Decimal:
        """Unpaid freights minus unpaid fuel minus unpaid supplies."""
        return self.freights_total - self.fuel_total - self.supplies_total

    def display(self) -> str:
        """pt-BR currency string, or "-" when nothing is owed either way."""
        return format_balance(self.unpaid_total)


class BalanceAggregator(BaseService):
    """Computes driver balances from line items. Pure; no requests are made."""

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the balance aggregator."""
        super().__init__(service_name="balance", **kwargs)

    @staticmethod
    def _accumulate(balance: DriverBalance, item: LineItem) -> None:
        if item.kind is LineItemKind.FREIGHT:
            balance.freights_total += item.value
        elif item.kind is LineItemKind.FUEL:
            balance.fuel_total += item.value
        elif item.kind is LineItemKind.SUPPLY:
            balance.supplies_total += item.value
        else:
            raise ValueError(f"Unknown line item kind: {item.kind}")
        balance.item_count += 1

    def driver_balance(self, driver_id: int, items: Iterable[LineItem]) -> DriverBalance:
        """
        Compute the balance owed to one driver.

        Args:
            driver_id: Driver to compute for
            items: Line items; those of other drivers are skipped

        Returns:
            DriverBalance over the driver's complete, unpaid items
        """
        start_time = time()
        balance = DriverBalance(driver_id=driver_id)
        for item in items:
            if item.driver_id == driver_id and item.is_unpaid:
                self._accumulate(balance, item)

        self._record(
            "driver_balance",
            {"driver_id": driver_id},
            {"unpaid_total": str(balance.unpaid_total), "items": balance.item_count},
            start_time,
            time(),
        )
        return balance

    def unpaid_totals(self, items: Iterable[LineItem]) -> dict[int, DriverBalance]:
        """
        Compute the balance of every driver appearing in items.

        Returns:
            Balances keyed by driver id
        """
        balances: dict[int, DriverBalance] = {}
        for item in items:
            if item.driver_id not in balances:
                balances[item.driver_id] = DriverBalance(driver_id=item.driver_id)
            if item.is_unpaid:
                self._accumulate(balances[item.driver_id], item)

        self.logger.debug("unpaid_totals_computed", drivers=len(balances))
        return balances

    def execute(self, driver_id: int, items: Iterable[LineItem]) -> DriverBalance:
        """Compute one driver's balance (delegates to driver_balance)."""
        return self.driver_balance(driver_id, items)
