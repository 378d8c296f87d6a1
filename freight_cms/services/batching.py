"""
Payment Batcher - groups selected unpaid line items into one payment.

The batcher only prepares the request; the backend persists the payment
and marks every listed item as paid.
"""

import datetime as dt
from decimal import Decimal
from time import time
from typing import Any, Iterable, Optional, Sequence

from pydantic import BaseModel

from freight_cms.core.errors import EmptySelection, InvalidInputError, ItemAlreadyPaid
from freight_cms.data.models import LineItem, LineItemKind, PaymentRequest, ProofFile
from freight_cms.data.models.ledger import DriverLedger
from freight_cms.services.base import BaseService
from freight_cms.utils.formatting import format_currency, format_date


def date_range_label(dates: Iterable[dt.date], unpaid_items: Iterable[LineItem]) -> str:
    """
    Derive the period label of a payment.

    A selection covering every unpaid item between its first and last date
    reads "12/01/2026 - 19/01/2026"; any gap lists the dates one by one.

    Args:
        dates: Dates of the selected items
        unpaid_items: The driver's line items (paid or pending ones are skipped)

    Returns:
        Label in dd/mm/yyyy format; empty when no dates are given
    """
    selected = sorted(set(dates))
    if not selected:
        return ""
    if len(selected) == 1:
        return format_date(selected[0])

    first, last = selected[0], selected[-1]
    in_range = {item.date for item in unpaid_items if item.is_unpaid and first <= item.date <= last}

    if in_range.issubset(selected):
        return f"{format_date(first)} - {format_date(last)}"
    return ", ".join(format_date(d) for d in selected)


class BatchTotals(BaseModel):
    """Subtotals of a selection shown before a payment is confirmed."""

    freights_total: Decimal = Decimal("0")
    fuel_total: Decimal = Decimal("0")
    supplies_total: Decimal = Decimal("0")

    @property
    def net_total(self) -> Decimal:
        """Freights minus fuel minus supplies."""
        return self.freights_total - self.fuel_total - self.supplies_total


class PaymentBatcher(BaseService):
    """
    Builds payment requests from operator selections.

    Example:
        batcher = PaymentBatcher()
        selected = batcher.select(ledger, freight_ids=[1, 2], fuel_ids=[7])
        request = batcher.build(ledger.driver_id, selected, ledger.unpaid_items())
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize the payment batcher."""
        super().__init__(service_name="batching", **kwargs)

    def select(
        self,
        ledger: DriverLedger,
        freight_ids: Sequence[int] = (),
        fuel_ids: Sequence[int] = (),
        supply_ids: Sequence[int] = (),
    ) -> list[LineItem]:
        """
        Resolve selected ids against the driver's ledger.

        Raises:
            InvalidInputError: An id is not in the ledger or the item is pending
            ItemAlreadyPaid: An item already belongs to a payment
        """
        selected: list[LineItem] = []
        for kind, ids in (
            (LineItemKind.FREIGHT, freight_ids),
            (LineItemKind.FUEL, fuel_ids),
            (LineItemKind.SUPPLY, supply_ids),
        ):
            for item_id in dict.fromkeys(ids):
                item = ledger.find(kind, item_id)
                if item is None:
                    raise InvalidInputError(
                        f"{kind.label} {item_id} não pertence ao motorista {ledger.driver_id}"
                    )
                if item.paid:
                    raise ItemAlreadyPaid(kind.value, item_id, kind.label)
                if not item.complete:
                    raise InvalidInputError(f"{kind.label} {item_id} ainda está pendente")
                selected.append(item)
        return selected

    @staticmethod
    def totals(selected: Iterable[LineItem]) -> BatchTotals:
        totals = BatchTotals()
        for item in selected:
            if item.kind is LineItemKind.FREIGHT:
                totals.freights_total += item.value
            elif item.kind is LineItemKind.FUEL:
                totals.fuel_total += item.value
            else:
                totals.supplies_total += item.value
        return totals

    def build(
        self,
        driver_id: int,
        selected: Sequence[LineItem],
        unpaid_items: Iterable[LineItem],
        comprovante: Optional[ProofFile] = None,
    ) -> PaymentRequest:
        """
        Build the payment request for a selection.

        Args:
            driver_id: Driver being paid
            selected: Selected line items
            unpaid_items: All of the driver's unpaid line items (for the period label)
            comprovante: Optional proof of payment

        Returns:
            PaymentRequest ready to be posted

        Raises:
            EmptySelection: Nothing was selected
        """
        if not selected:
            raise EmptySelection()

        start_time = time()
        totals = self.totals(selected)
        label = date_range_label((item.date for item in selected), unpaid_items)

        ids: dict[LineItemKind, list[int]] = {kind: [] for kind in LineItemKind}
        for item in selected:
            ids[item.kind].append(item.id)

        request = PaymentRequest(
            driver_id=driver_id,
            date_range=label,
            total_value=totals.net_total,
            freight_ids=ids[LineItemKind.FREIGHT],
            abastecimento_ids=ids[LineItemKind.FUEL],
            outros_insumo_ids=ids[LineItemKind.SUPPLY],
            comprovante=comprovante,
        )

        self.logger.info(
            "payment_batch_built",
            driver_id=driver_id,
            items=request.item_count,
            date_range=label,
            net_total=format_currency(totals.net_total),
        )
        self._record(
            "payment_batch",
            {"driver_id": driver_id, "items": request.item_count},
            {
                "date_range": label,
                "freights_total": str(totals.freights_total),
                "fuel_total": str(totals.fuel_total),
                "supplies_total": str(totals.supplies_total),
                "net_total": str(totals.net_total),
            },
            start_time,
            time(),
        )
        return request

    def execute(self, ledger: DriverLedger, **selection: Sequence[int]) -> PaymentRequest:
        """Select and build in one step."""
        selected = self.select(ledger, **selection)
        return self.build(ledger.driver_id, selected, ledger.unpaid_items())
