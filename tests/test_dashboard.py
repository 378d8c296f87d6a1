import asyncio
from decimal import Decimal

import httpx
import pytest

from freight_cms.api import AdminApi, DriverApi
from freight_cms.core.errors import AuthorizationError, EmptySelection, InvalidInputError
from freight_cms.core.session import COLLECTION_UPDATED, EventChannel
from freight_cms.data.models import PortalRole
from freight_cms.services import AdminDashboard, DriverDashboard, Poller, wait_for_approval
from freight_cms.utils.pagination import FreightFilter

from tests.factories import freight_json, fuel_json, supply_json


@pytest.fixture
def admin_backend(backend):
    backend.on("GET", "/admin/drivers", [{"id": 1, "name": "João Silva"}, {"id": 2, "name": "Maria"}])
    backend.on("GET", "/admin/abastecedores", [])
    backend.on(
        "GET",
        "/admin/freights",
        [
            freight_json(1, "2026-01-12", value=600, carrier_value=700),
            freight_json(2, "2026-01-15", value=400, carrier_value=500, client_paid=1),
            freight_json(3, "2026-01-19", value=300),
        ],
    )
    backend.on("GET", "/admin/abastecimentos", [fuel_json(4, "2026-01-13", value=200)])
    backend.on("GET", "/admin/outrosinsumos", [supply_json(5, "2026-01-14", value=50)])
    backend.on("GET", "/admin/payments", [])
    backend.on("GET", "/admin/clients", [{"client": "Agro Sul"}])
    return backend


@pytest.fixture
def dashboard(make_client, admin_backend):
    dashboard = AdminDashboard(AdminApi(make_client(PortalRole.ADMIN)))
    asyncio.run(dashboard.load())
    return dashboard


def test_load_fills_every_collection(dashboard):
    assert len(dashboard.freights) == 3
    assert len(dashboard.drivers) == 2
    assert dashboard.clients[0].client == "Agro Sul"


def test_failed_collection_does_not_abort_others(make_client, admin_backend):
    admin_backend.on("GET", "/admin/clients", {"error": "Erro interno"}, status=500)
    dashboard = AdminDashboard(AdminApi(make_client(PortalRole.ADMIN)))

    loaded = asyncio.run(dashboard.load())

    assert loaded["clients"] is False
    assert loaded["freights"] is True
    assert len(dashboard.freights) == 3


def test_unauthorized_load_raises(make_client, admin_backend):
    admin_backend.on("GET", "/admin/payments", {"error": "Token inválido"}, status=401)
    dashboard = AdminDashboard(AdminApi(make_client(PortalRole.ADMIN)))

    with pytest.raises(AuthorizationError):
        asyncio.run(dashboard.load())


def test_unpaid_totals_cover_every_driver(dashboard):
    totals = dashboard.unpaid_totals()

    assert totals[1].unpaid_total == Decimal("1050")
    assert totals[2].display() == "-"


def test_preview_payment(dashboard):
    totals = dashboard.preview_payment(1, freight_ids=[1, 2], fuel_ids=[4], supply_ids=[5])

    assert totals.net_total == Decimal("750")


def test_empty_selection_sends_no_request(dashboard, admin_backend):
    sent_before = len(admin_backend.requests)

    with pytest.raises(EmptySelection):
        asyncio.run(dashboard.generate_payment(1))

    assert len(admin_backend.requests) == sent_before


def test_generate_payment_posts_and_refetches(dashboard, admin_backend):
    admin_backend.on(
        "POST",
        "/admin/payments",
        {"id": 9, "driver_id": 1, "date_range": "12/01/2026, 19/01/2026", "total_value": 900},
        status=201,
    )
    sent_before = len(admin_backend.requests)

    payment = asyncio.run(dashboard.generate_payment(1, freight_ids=[1, 3]))

    calls = admin_backend.paths()[sent_before:]
    assert calls[0] == "POST /admin/payments"
    assert sorted(calls[1:]) == [
        "GET /admin/abastecimentos",
        "GET /admin/freights",
        "GET /admin/outrosinsumos",
        "GET /admin/payments",
    ]
    assert b"12/01/2026, 19/01/2026" in admin_backend.requests[sent_before].content
    assert payment.id == 9


def test_toggle_client_paid_refetches_freights(dashboard, admin_backend):
    admin_backend.on("PATCH", "/admin/freights/1/toggle-client-paid", {"success": True})
    sent_before = len(admin_backend.requests)

    asyncio.run(dashboard.toggle_client_paid(1))

    assert admin_backend.paths()[sent_before:] == [
        "PATCH /admin/freights/1/toggle-client-paid",
        "GET /admin/freights",
    ]


def test_client_summaries(dashboard):
    summaries = dashboard.client_summaries()

    assert len(summaries) == 1
    summary = summaries[0]
    assert summary.received == Decimal("500")
    assert summary.to_receive == Decimal("1000")
    assert summary.margin == Decimal("200")


def test_driver_statement(dashboard):
    statement = dashboard.driver_statement(1)

    assert statement.to_receive == Decimal("1050")


def test_unknown_driver_statement(dashboard):
    with pytest.raises(InvalidInputError):
        dashboard.driver_statement(99)


def test_list_freights_paginates_newest_first(dashboard):
    page = dashboard.list_freights(FreightFilter(driver_id=1), page=7, limit=10)

    assert page.page == 1
    assert page.total_pages == 1
    assert [f.id for f in page.items] == [3, 2, 1]


def test_list_freights_rejects_unknown_page_size(dashboard):
    with pytest.raises(InvalidInputError):
        dashboard.list_freights(limit=7)


def test_driver_dashboard_to_receive(make_client, backend):
    backend.on("GET", "/driver/freights", {"freights": [freight_json(1, "2026-01-12", value=1000)]})
    backend.on("GET", "/driver/abastecimentos", {"abastecimentos": [fuel_json(2, "2026-01-12", value=100)]})
    backend.on("GET", "/driver/outrosinsumos", {"outrosInsumos": [supply_json(3, "2026-01-12", value=50)]})
    backend.on(
        "GET",
        "/driver/payments",
        {"payments": [{"id": 4, "driver_id": 1, "date_range": "05/01/2026", "total_value": 300}]},
    )
    backend.on("GET", "/driver/stats", {"total_received": 300, "outrosInsumos": {"count": 1}})
    dashboard = DriverDashboard(DriverApi(make_client(PortalRole.DRIVER)))

    asyncio.run(dashboard.load())

    assert dashboard.to_receive == Decimal("550")
    assert dashboard.stats.outros_insumos.count == 1


def test_driver_dashboard_skips_pending_fuel_and_directly_paid_freights(make_client, backend):
    backend.on(
        "GET",
        "/driver/freights",
        {"freights": [freight_json(1, "2026-01-12", value=1000, paid=1), freight_json(2, "2026-01-19", value=500)]},
    )
    backend.on(
        "GET",
        "/driver/abastecimentos",
        {"abastecimentos": [fuel_json(3, "2026-01-12", value=300, status="pending")]},
    )
    backend.on("GET", "/driver/outrosinsumos", {"outrosInsumos": []})
    backend.on("GET", "/driver/payments", {"payments": []})
    backend.on("GET", "/driver/stats", {})
    dashboard = DriverDashboard(DriverApi(make_client(PortalRole.DRIVER)))

    asyncio.run(dashboard.load())

    assert dashboard.to_receive == Decimal("500")


def test_driver_dashboard_keeps_collections_when_stats_fail(make_client, backend):
    backend.on("GET", "/driver/freights", {"freights": [freight_json(1, "2026-01-12", value=1000)]})
    backend.on("GET", "/driver/abastecimentos", {"abastecimentos": []})
    backend.on("GET", "/driver/outrosinsumos", {"outrosInsumos": []})
    backend.on("GET", "/driver/payments", {"payments": []})
    backend.on("GET", "/driver/stats", {"error": "Erro interno"}, status=500)
    dashboard = DriverDashboard(DriverApi(make_client(PortalRole.DRIVER)))

    loaded = asyncio.run(dashboard.load())

    assert loaded["stats"] is False
    assert loaded["freights"] is True
    assert dashboard.to_receive == Decimal("1000")


class TestPoller:
    def test_refreshes_until_stopped(self, make_client):
        session = make_client(PortalRole.ADMIN).session
        calls = []

        async def refresh():
            calls.append(1)

        async def run():
            poller = Poller(refresh, interval=0.01, session=session)
            poller.start()
            await asyncio.sleep(0.055)
            poller.stop()
            await poller.wait_idle()
            return poller

        poller = asyncio.run(run())

        assert len(calls) >= 3
        assert not poller.running

    def test_polls_are_not_coalesced(self, make_client):
        session = make_client(PortalRole.ADMIN).session
        inflight = []
        peak = []

        async def slow_refresh():
            inflight.append(1)
            peak.append(len(inflight))
            await asyncio.sleep(0.05)
            inflight.pop()

        async def run():
            poller = Poller(slow_refresh, interval=0.01, session=session)
            poller.start()
            await asyncio.sleep(0.035)
            poller.stop()
            await poller.wait_idle()

        asyncio.run(run())

        assert max(peak) > 1

    def test_authorization_error_stops_polling(self, make_client, token_store):
        session = make_client(PortalRole.ADMIN).session

        async def refresh():
            raise AuthorizationError("Token inválido")

        async def run():
            poller = Poller(refresh, interval=0.01, session=session)
            poller.start()
            await asyncio.sleep(0.03)
            return poller

        poller = asyncio.run(run())

        assert not poller.running
        assert poller.ticks == 1
        assert token_store.get(PortalRole.ADMIN) is None

    def test_other_errors_are_logged_and_polling_continues(self, make_client):
        session = make_client(PortalRole.ADMIN).session

        async def refresh():
            raise RuntimeError("timeout")

        async def run():
            poller = Poller(refresh, interval=0.01, session=session)
            poller.start()
            await asyncio.sleep(0.035)
            running = poller.running
            poller.stop()
            return poller, running

        poller, running = asyncio.run(run())

        assert running
        assert poller.failures >= 2

    def test_interval_must_be_positive(self, make_client):
        with pytest.raises(ValueError):
            Poller(lambda: None, interval=0, session=make_client(PortalRole.ADMIN).session)


def test_dashboard_load_notifies_subscribers(make_client, admin_backend):
    events = EventChannel()
    updated = []
    events.subscribe(COLLECTION_UPDATED, lambda payload: updated.append(payload["collection"]))
    dashboard = AdminDashboard(AdminApi(make_client(PortalRole.ADMIN, events=events)))

    asyncio.run(dashboard.load(["freights", "drivers"]))

    assert sorted(updated) == ["drivers", "freights"]


def test_wait_for_approval(make_client, backend):
    answers = iter([0, 0, 1])

    def verify(request):
        return httpx.Response(
            200, json={"valid": True, "type": "driver", "user": {"authenticated": next(answers)}}
        )

    backend.on("GET", "/auth/verify", verify)
    api = DriverApi(make_client(PortalRole.DRIVER))

    assert asyncio.run(wait_for_approval(api, interval=0.001)) is True
    assert len(backend.requests) == 3


def test_pollers_use_configured_intervals(make_client, dashboard):
    driver_dashboard = DriverDashboard(DriverApi(make_client(PortalRole.DRIVER)))

    assert dashboard.poller().interval == 5
    assert driver_dashboard.poller().interval == 3
