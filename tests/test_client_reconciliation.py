from decimal import Decimal

from freight_cms.data.models import ClientRecord, Freight, FuelPurchase
from freight_cms.services import ClientReconciler, ClientSummary

from tests.factories import freight_json, fuel_json


def test_margin_formula():
    summary = ClientSummary(
        name="Agro Sul",
        received=Decimal("500"),
        to_receive=Decimal("300"),
        paid_to_driver=Decimal("400"),
        to_pay_driver=Decimal("100"),
    )

    assert summary.margin == Decimal("300")


def test_summarize_splits_on_paid_flags():
    freights = [
        Freight(**freight_json(1, "2026-01-12", value=400, carrier_value=500, paid=1, client_paid=1)),
        Freight(**freight_json(2, "2026-01-13", driver_id=2, value=100, carrier_value=300)),
        Freight(**freight_json(3, "2026-01-13", value=999, status="pending")),
        Freight(**freight_json(4, "2026-01-13", value=999, client="Outro")),
    ]
    fuel = [FuelPurchase(**fuel_json(5, "2026-01-12", value=80))]

    summary = ClientReconciler().summarize("Agro Sul", freights, fuel)

    assert summary.received == Decimal("500")
    assert summary.to_receive == Decimal("300")
    assert summary.paid_to_driver == Decimal("400")
    assert summary.to_pay_driver == Decimal("100")
    assert summary.margin == Decimal("300")
    assert summary.freight_count == 2
    assert summary.driver_count == 2
    assert summary.fuel_total == Decimal("80")


def test_client_value_falls_back_to_driver_value():
    freights = [Freight(**freight_json(1, "2026-01-12", value=250))]

    summary = ClientReconciler().summarize("Agro Sul", freights)

    assert summary.to_receive == Decimal("250")
    assert summary.margin == 0


def test_summarize_all_includes_registered_clients_sorted():
    freights = [Freight(**freight_json(1, "2026-01-12", client="Zeta Grãos"))]
    clients = [ClientRecord(client="Agro Sul")]

    summaries = ClientReconciler().summarize_all(freights, clients=clients)

    assert [s.name for s in summaries] == ["Agro Sul", "Zeta Grãos"]
    assert summaries[0].freight_count == 0
