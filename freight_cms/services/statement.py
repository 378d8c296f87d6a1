"""
Statement Service - driver account statement (extrato).

Summarizes everything a driver earned, was charged and was paid:
- Complete freights (earned)
- Fuel purchases and other supplies (charged)
- Payments (received), plus freights marked paid without a payment record
- to_receive = freights - fuel - supplies - paid
"""

import datetime as dt
from decimal import Decimal
from time import time
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

from freight_cms.data.models import Driver, Freight, FuelPurchase, LineItemKind, OtherSupply, Payment
from freight_cms.data.models.ledger import DriverLedger
from freight_cms.services.base import BaseService
from freight_cms.utils.formatting import (
    format_currency,
    format_date,
    format_number,
    format_price_per_km_ton,
    format_price_per_liter,
)


def paid_without_payment(freights: Sequence[Freight], payments: Sequence[Payment]) -> Decimal:
    """Value of complete freights flagged paid that no payment record settles."""
    return sum(
        (
            f.total_value
            for f in freights
            if f.is_complete
            and f.paid
            and not any(p.settles(LineItemKind.FREIGHT, f.id) for p in payments)
        ),
        Decimal("0"),
    )


class DriverStatement(BaseModel):
    """Complete statement of one driver."""

    driver: Driver
    freights: list[Freight] = Field(default_factory=list)
    abastecimentos: list[FuelPurchase] = Field(default_factory=list)
    outros_insumos: list[OtherSupply] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)
    generated_at: dt.datetime

    freights_total: Decimal
    fuel_total: Decimal
    supplies_total: Decimal
    paid_total: Decimal

    @property
    def to_receive(self) -> Decimal:
        """Outstanding balance after every charge and payment."""
        return self.freights_total - self.fuel_total - self.supplies_total - self.paid_total

    def render_text(self) -> str:
        """Plain-text report of the statement."""
        lines = [
            f"EXTRATO - {self.driver.name}",
            f"Data: {format_date(self.generated_at.date())}",
            "",
            f"FRETES ({len(self.freights)})",
        ]
        for f in self.freights:
            lines.append(
                f"  {format_date(f.date)}  {f.client or '-'}  {format_number(f.km, 2)} km  "
                f"{format_number(f.tons, 2)} t  {format_price_per_km_ton(f.price_per_km_ton)}  "
                f"{format_currency(f.total_value)}"
            )

        lines.append(f"ABASTECIMENTOS ({len(self.abastecimentos)})")
        for a in self.abastecimentos:
            lines.append(
                f"  {format_date(a.date)}  {format_number(a.quantity, 2)} L  "
                f"{format_price_per_liter(a.price_per_liter)}  -{format_currency(a.total_value)}"
            )

        lines.append(f"OUTROS INSUMOS ({len(self.outros_insumos)})")
        for o in self.outros_insumos:
            lines.append(
                f"  {format_date(o.date)}  {o.description or '-'}  {format_number(o.quantity, 2)} x "
                f"{format_currency(o.unit_price)}  -{format_currency(o.total_value)}"
            )

        lines.append(f"PAGAMENTOS ({len(self.payments)})")
        for p in self.payments:
            lines.append(f"  {p.date_range}  {format_currency(p.total_value)}")

        lines.extend(
            [
                "",
                f"Total fretes:          {format_currency(self.freights_total)}",
                f"Total abastecimentos: -{format_currency(self.fuel_total)}",
                f"Total outros insumos: -{format_currency(self.supplies_total)}",
                f"Total pago:           -{format_currency(self.paid_total)}",
                f"A receber:             {format_currency(self.to_receive)}",
            ]
        )
        return "\n".join(lines)


class StatementService(BaseService):
    """Builds driver statements from already-fetched collections."""

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the statement service."""
        super().__init__(service_name="statement", **kwargs)

    def build(
        self,
        driver: Driver,
        freights: Sequence[Freight],
        fuel: Sequence[FuelPurchase] = (),
        supplies: Sequence[OtherSupply] = (),
        payments: Sequence[Payment] = (),
        generated_at: Optional[dt.datetime] = None,
    ) -> DriverStatement:
        """
        Build the statement of a driver.

        Pending freights and fuel purchases are left out; every other supply
        and payment of the driver is included, paid or not. Freights flagged
        paid without a payment record count as already received.
        """
        start_time = time()

        driver_freights = [f for f in freights if f.driver_id == driver.id and f.is_complete]
        driver_fuel = [a for a in fuel if a.driver_id == driver.id and a.is_complete]
        driver_supplies = [o for o in supplies if o.driver_id == driver.id]
        driver_payments = [p for p in payments if p.driver_id == driver.id]
        paid_total = sum((p.total_value for p in driver_payments), Decimal("0")) + paid_without_payment(
            driver_freights, driver_payments
        )

        statement = DriverStatement(
            driver=driver,
            freights=sorted(driver_freights, key=lambda f: f.date),
            abastecimentos=sorted(driver_fuel, key=lambda a: a.date),
            outros_insumos=sorted(driver_supplies, key=lambda o: o.date),
            payments=driver_payments,
            generated_at=generated_at or dt.datetime.now(),
            freights_total=sum((f.total_value for f in driver_freights), Decimal("0")),
            fuel_total=sum((a.total_value for a in driver_fuel), Decimal("0")),
            supplies_total=sum((o.total_value for o in driver_supplies), Decimal("0")),
            paid_total=paid_total,
        )

        self._record(
            "driver_statement",
            {"driver_id": driver.id},
            {
                "freights": len(driver_freights),
                "payments": len(driver_payments),
                "to_receive": str(statement.to_receive),
            },
            start_time,
            time(),
        )
        return statement

    def from_ledger(self, driver: Driver, ledger: DriverLedger) -> DriverStatement:
        return self.build(
            driver,
            ledger.freights,
            ledger.abastecimentos,
            ledger.outros_insumos,
            ledger.payments,
        )

    def execute(self, *args: Any, **kwargs: Any) -> DriverStatement:
        """Build a statement (delegates to build)."""
        return self.build(*args, **kwargs)


def main() -> None:
    """Example usage of the statement service."""
    from freight_cms.core.logger import configure_logging

    configure_logging(json_output=False)

    service = StatementService()

    driver = Driver(id=1, name="João Silva", plate="ABC-1D23", plates='["XYZ-9876"]')

    freights = [
        Freight(
            id=10,
            date="2026-01-12",
            driver_id=1,
            client="Agro Sul",
            km=Decimal("100"),
            tons=Decimal("20"),
            price_per_km_ton=Decimal("0.25"),
            price_per_km_ton_transportadora=Decimal("0.30"),
        ),
        Freight(
            id=11,
            date="2026-01-19",
            driver_id=1,
            client="Agro Sul",
            km=Decimal("50"),
            tons=Decimal("10"),
            price_per_km_ton=Decimal("1.00"),
        ),
    ]
    fuel = [
        FuelPurchase(
            id=20, date="2026-01-13", driver_id=1, quantity=Decimal("40"), price_per_liter=Decimal("5.00")
        )
    ]
    supplies = [
        OtherSupply(
            id=30,
            date="2026-01-14",
            driver_id=1,
            quantity=Decimal("1"),
            description="Lona",
            unit_price=Decimal("50"),
        )
    ]
    payments = [
        Payment(id=40, driver_id=1, date_range="12/01/2026", total_value=Decimal("250.00"))
    ]

    statement = service.build(driver, freights, fuel, supplies, payments)

    print("\n" + "=" * 60)
    print(statement.render_text())
    print("=" * 60)


if __name__ == "__main__":
    main()
