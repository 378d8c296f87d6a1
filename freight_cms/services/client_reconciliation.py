"""
Client Reconciliation - received vs. owed per client, and the carrier margin.

For the complete freights of a client:
- received / to_receive: carrier-side value, split on client_paid
- paid_to_driver / to_pay_driver: driver-side value, split on paid
- margin = (received + to_receive) - (paid_to_driver + to_pay_driver)
"""

from decimal import Decimal
from time import time
from typing import Any, Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from freight_cms.data.models import ClientRecord, Freight, FuelPurchase, OtherSupply
from freight_cms.services.base import BaseService


class ClientSummary(BaseModel):
    """Reconciliation of one client."""

    name: str
    driver_ids: list[int] = Field(default_factory=list)
    freight_count: int = 0

    received: Decimal = Decimal("0")
    to_receive: Decimal = Decimal("0")
    paid_to_driver: Decimal = Decimal("0")
    to_pay_driver: Decimal = Decimal("0")

    # Informational only; not part of the margin
    fuel_total: Decimal = Decimal("0")
    supplies_total: Decimal = Decimal("0")

    @property
    def driver_count(self) -> int:
        return len(self.driver_ids)

    @property
    def total_from_client(self) -> Decimal:
        return self.received + self.to_receive

    @property
    def total_to_driver(self) -> Decimal:
        return self.paid_to_driver + self.to_pay_driver

    @property
    def margin(self) -> Decimal:
        return self.total_from_client - self.total_to_driver


class ClientReconciler(BaseService):
    """Derives client summaries from the freight and expense collections."""

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the client reconciler."""
        super().__init__(service_name="client_reconciliation", **kwargs)

    def summarize(
        self,
        client_name: str,
        freights: Iterable[Freight],
        fuel: Iterable[FuelPurchase] = (),
        supplies: Iterable[OtherSupply] = (),
    ) -> ClientSummary:
        """
        Reconcile a single client.

        Args:
            client_name: Client name as written on freights
            freights: All freights (other clients and pending ones are skipped)
            fuel: All fuel purchases
            supplies: All other supplies

        Returns:
            ClientSummary
        """
        start_time = time()
        summary = ClientSummary(name=client_name)

        for freight in freights:
            if freight.client != client_name or not freight.is_complete:
                continue
            summary.freight_count += 1
            if freight.driver_id not in summary.driver_ids:
                summary.driver_ids.append(freight.driver_id)

            if freight.client_paid:
                summary.received += freight.client_value
            else:
                summary.to_receive += freight.client_value

            if freight.paid:
                summary.paid_to_driver += freight.total_value
            else:
                summary.to_pay_driver += freight.total_value

        drivers = set(summary.driver_ids)
        summary.fuel_total = sum((a.total_value for a in fuel if a.driver_id in drivers), Decimal("0"))
        summary.supplies_total = sum((o.total_value for o in supplies if o.driver_id in drivers), Decimal("0"))

        self._record(
            "client_summary",
            {"client": client_name},
            {
                "freights": summary.freight_count,
                "received": str(summary.received),
                "to_receive": str(summary.to_receive),
                "margin": str(summary.margin),
            },
            start_time,
            time(),
        )
        return summary

    def summarize_all(
        self,
        freights: Sequence[Freight],
        fuel: Sequence[FuelPurchase] = (),
        supplies: Sequence[OtherSupply] = (),
        clients: Optional[Iterable[ClientRecord]] = None,
    ) -> list[ClientSummary]:
        """
        Reconcile every client, sorted by name.

        Covers clients named on a complete freight plus registered clients
        that have no freights yet.
        """
        names = {f.client for f in freights if f.client and f.is_complete}
        names.update(c.client for c in clients or [] if c.client)

        summaries = [self.summarize(name, freights, fuel, supplies) for name in names]
        summaries.sort(key=lambda s: s.name.casefold())

        self.logger.info("clients_reconciled", clients=len(summaries))
        return summaries

    def execute(self, *args: Any, **kwargs: Any) -> list[ClientSummary]:
        """Reconcile every client (delegates to summarize_all)."""
        return self.summarize_all(*args, **kwargs)
