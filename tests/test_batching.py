import datetime as dt
from decimal import Decimal

import pytest

from freight_cms.core.errors import EmptySelection, InvalidInputError, ItemAlreadyPaid
from freight_cms.data.models import DriverLedger, Freight, FuelPurchase, OtherSupply, ProofFile
from freight_cms.services import PaymentBatcher, date_range_label

from tests.factories import freight_json, fuel_json, supply_json


def d(text: str) -> dt.date:
    return dt.date.fromisoformat(text)


def _ledger(freights=(), fuel=(), supplies=()) -> DriverLedger:
    return DriverLedger(
        driver_id=1,
        freights=[Freight(**f) for f in freights],
        abastecimentos=[FuelPurchase(**a) for a in fuel],
        outros_insumos=[OtherSupply(**o) for o in supplies],
    )


class TestDateRangeLabel:
    def test_complete_span_is_a_range(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12"), freight_json(2, "2026-01-19")])

        label = date_range_label([d("2026-01-12"), d("2026-01-19")], ledger.unpaid_items())

        assert label == "12/01/2026 - 19/01/2026"

    def test_unselected_item_inside_span_lists_dates(self):
        ledger = _ledger(
            freights=[
                freight_json(1, "2026-01-12"),
                freight_json(2, "2026-01-15"),
                freight_json(3, "2026-01-20"),
            ]
        )

        label = date_range_label([d("2026-01-20"), d("2026-01-12")], ledger.unpaid_items())

        assert label == "12/01/2026, 20/01/2026"

    def test_single_date(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12")])

        assert date_range_label([d("2026-01-12")], ledger.unpaid_items()) == "12/01/2026"

    def test_duplicate_dates_collapse_to_single_date(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12"), freight_json(2, "2026-01-12")])

        label = date_range_label([d("2026-01-12"), d("2026-01-12")], ledger.unpaid_items())

        assert label == "12/01/2026"

    def test_paid_items_inside_span_do_not_break_range(self):
        ledger = _ledger(
            freights=[
                freight_json(1, "2026-01-12"),
                freight_json(2, "2026-01-15", paid=1),
                freight_json(3, "2026-01-19"),
            ]
        )

        label = date_range_label([d("2026-01-12"), d("2026-01-19")], ledger.unpaid_items())

        assert label == "12/01/2026 - 19/01/2026"

    def test_unselected_fuel_inside_span_lists_dates(self):
        ledger = _ledger(
            freights=[freight_json(1, "2026-01-12"), freight_json(2, "2026-01-19")],
            fuel=[fuel_json(3, "2026-01-14")],
        )

        label = date_range_label([d("2026-01-12"), d("2026-01-19")], ledger.unpaid_items())

        assert label == "12/01/2026, 19/01/2026"

    def test_no_dates(self):
        assert date_range_label([], []) == ""


class TestPaymentBatcher:
    def test_net_total(self):
        ledger = _ledger(
            freights=[freight_json(1, "2026-01-12", value=600), freight_json(2, "2026-01-13", value=400)],
            fuel=[fuel_json(3, "2026-01-12", value=200)],
            supplies=[supply_json(4, "2026-01-13", value=50)],
        )
        batcher = PaymentBatcher()

        selected = batcher.select(ledger, freight_ids=[1, 2], fuel_ids=[3], supply_ids=[4])
        request = batcher.build(1, selected, ledger.unpaid_items())

        assert request.total_value == Decimal("750.00")
        assert request.freight_ids == [1, 2]
        assert request.abastecimento_ids == [3]
        assert request.outros_insumo_ids == [4]
        assert request.date_range == "12/01/2026 - 13/01/2026"

    def test_empty_selection(self):
        with pytest.raises(EmptySelection):
            PaymentBatcher().build(1, [], [])

    def test_execute_with_nothing_selected(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12")])

        with pytest.raises(EmptySelection):
            PaymentBatcher().execute(ledger)

    def test_already_paid_item_is_rejected(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12", paid=1)])

        with pytest.raises(ItemAlreadyPaid) as exc_info:
            PaymentBatcher().select(ledger, freight_ids=[1])

        assert exc_info.value.item_id == 1
        assert exc_info.value.message == "Frete 1 já foi pago"

    def test_unknown_item_is_rejected(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12")])

        with pytest.raises(InvalidInputError):
            PaymentBatcher().select(ledger, fuel_ids=[99])

    def test_pending_freight_is_rejected(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12", status="pending")])

        with pytest.raises(InvalidInputError, match="Frete 1 ainda está pendente"):
            PaymentBatcher().select(ledger, freight_ids=[1])

    def test_form_data_encodes_id_arrays_as_json(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12"), freight_json(2, "2026-01-13")])
        batcher = PaymentBatcher()
        proof = ProofFile(filename="pix.png", content=b"png", content_type="image/png")

        request = batcher.build(1, batcher.select(ledger, freight_ids=[1, 2]), ledger.unpaid_items(), proof)
        form = request.to_form_data()

        assert form["freight_ids"] == "[1, 2]"
        assert form["abastecimento_ids"] == "[]"
        assert form["driver_id"] == "1"
        assert request.to_files() == {"comprovante": ("pix.png", b"png", "image/png")}

    def test_build_is_recorded(self):
        ledger = _ledger(freights=[freight_json(1, "2026-01-12")])
        batcher = PaymentBatcher()

        batcher.execute(ledger, freight_ids=[1])

        record = batcher.record_history[-1]
        assert record.record_type == "payment_batch"
        assert record.output_data["date_range"] == "12/01/2026"
