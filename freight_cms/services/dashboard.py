"""
Dashboards - cached portal state, server-authoritative mutations and polling.

Collections are fetched concurrently and cached in the session context.
Every mutation is followed by a re-fetch of the collections it touches;
local state is never patched. Subscribers of the session's event channel
are notified whenever a collection is replaced, and the Poller keeps
refreshing on a fixed interval as a fallback.
"""

import asyncio
from decimal import Decimal
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence

import structlog

from freight_cms.api import AdminApi, DriverApi
from freight_cms.core.errors import AuthorizationError, InvalidInputError
from freight_cms.core.session import SessionContext
from freight_cms.data.models import (
    ClientRecord,
    Driver,
    DriverLedger,
    DriverStats,
    Freight,
    FuelPurchase,
    LineItem,
    OtherSupply,
    Payment,
    ProofFile,
)
from freight_cms.services.balance import BalanceAggregator, DriverBalance
from freight_cms.services.batching import BatchTotals, PaymentBatcher
from freight_cms.services.client_reconciliation import ClientReconciler, ClientSummary
from freight_cms.services.statement import DriverStatement, StatementService, paid_without_payment
from freight_cms.utils.pagination import FreightFilter, Page, filter_freights, paginate

Fetcher = Callable[[], Awaitable[list[Any]]]

FREIGHTS = "freights"
ABASTECIMENTOS = "abastecimentos"
OUTROS_INSUMOS = "outros_insumos"
PAYMENTS = "payments"
DRIVERS = "drivers"
ABASTECEDORES = "abastecedores"
CLIENTS = "clients"

LEDGER_COLLECTIONS = [FREIGHTS, ABASTECIMENTOS, OUTROS_INSUMOS, PAYMENTS]


class CollectionLoader:
    """
    Fetches named collections into a session cache.

    Each fetch takes a sequence number before it is issued, so a slow
    response overtaken by a newer one is dropped instead of overwriting it.
    """

    def __init__(self, session: SessionContext, fetchers: dict[str, Fetcher], logger: structlog.BoundLogger) -> None:
        self.session = session
        self.fetchers = fetchers
        self.logger = logger

    async def _refresh(self, name: str) -> int:
        sequence = self.session.next_sequence()
        items = await self.fetchers[name]()
        self.session.apply(name, items, sequence)
        return len(items)

    async def load(self, collections: Optional[Iterable[str]] = None) -> dict[str, bool]:
        """
        Fetch collections concurrently.

        A failing collection is logged and does not abort the others.

        Args:
            collections: Names to refresh (defaults to every collection)

        Returns:
            Whether each collection was refreshed

        Raises:
            AuthorizationError: The session was rejected by the backend
        """
        names = list(collections) if collections is not None else list(self.fetchers)
        results = await asyncio.gather(*(self._refresh(n) for n in names), return_exceptions=True)

        loaded: dict[str, bool] = {}
        for name, result in zip(names, results):
            if isinstance(result, AuthorizationError):
                raise result
            if isinstance(result, Exception):
                self.logger.warning("collection_load_failed", collection=name, error=str(result))
                loaded[name] = False
            elif isinstance(result, BaseException):
                raise result
            else:
                loaded[name] = True
        return loaded

    def get(self, name: str) -> list[Any]:
        return self.session.get(name)


class AdminDashboard:
    """
    Admin dashboard state and operations.

    Example:
        dashboard = AdminDashboard(AdminApi(client))
        await dashboard.load()
        request_totals = dashboard.preview_payment(driver_id=3, freight_ids=[10, 11])
        payment = await dashboard.generate_payment(driver_id=3, freight_ids=[10, 11])
    """

    def __init__(
        self,
        api: AdminApi,
        balance: Optional[BalanceAggregator] = None,
        batcher: Optional[PaymentBatcher] = None,
        reconciler: Optional[ClientReconciler] = None,
        statements: Optional[StatementService] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.api = api
        self.session = api.session
        self.config_manager = api.client.config_manager
        self.logger = logger or structlog.get_logger(component="admin_dashboard")

        self.balance = balance or BalanceAggregator(config_manager=self.config_manager)
        self.batcher = batcher or PaymentBatcher(config_manager=self.config_manager)
        self.reconciler = reconciler or ClientReconciler(config_manager=self.config_manager)
        self.statements = statements or StatementService(config_manager=self.config_manager)

        self.loader = CollectionLoader(
            self.session,
            {
                DRIVERS: api.list_drivers,
                ABASTECEDORES: api.list_abastecedores,
                FREIGHTS: api.list_freights,
                ABASTECIMENTOS: api.list_abastecimentos,
                OUTROS_INSUMOS: api.list_outros_insumos,
                PAYMENTS: api.list_payments,
                CLIENTS: api.list_clients,
            },
            self.logger,
        )

    async def load(self, collections: Optional[Iterable[str]] = None) -> dict[str, bool]:
        """Refresh cached collections (all of them by default)."""
        return await self.loader.load(collections)

    def poller(self) -> "Poller":
        """Poller refreshing every collection at polling.admin_seconds."""
        interval = self.config_manager.get_polling_config().admin_seconds
        return Poller(self.load, interval, self.session, name="admin_dashboard")

    # Cached collections

    @property
    def drivers(self) -> list[Driver]:
        return self.loader.get(DRIVERS)

    @property
    def freights(self) -> list[Freight]:
        return self.loader.get(FREIGHTS)

    @property
    def abastecimentos(self) -> list[FuelPurchase]:
        return self.loader.get(ABASTECIMENTOS)

    @property
    def outros_insumos(self) -> list[OtherSupply]:
        return self.loader.get(OUTROS_INSUMOS)

    @property
    def payments(self) -> list[Payment]:
        return self.loader.get(PAYMENTS)

    @property
    def clients(self) -> list[ClientRecord]:
        return self.loader.get(CLIENTS)

    def get_driver(self, driver_id: int) -> Driver:
        for driver in self.drivers:
            if driver.id == driver_id:
                return driver
        raise InvalidInputError(f"Motorista {driver_id} não encontrado", field="driver_id")

    def line_items(self) -> list[LineItem]:
        items = [f.as_line_item() for f in self.freights]
        items.extend(a.as_line_item() for a in self.abastecimentos)
        items.extend(o.as_line_item() for o in self.outros_insumos)
        return items

    # Balances

    def driver_ledger(self, driver_id: int) -> DriverLedger:
        """Every cached record of one driver."""
        return DriverLedger(
            driver_id=driver_id,
            freights=[f for f in self.freights if f.driver_id == driver_id],
            abastecimentos=[a for a in self.abastecimentos if a.driver_id == driver_id],
            outros_insumos=[o for o in self.outros_insumos if o.driver_id == driver_id],
            payments=[p for p in self.payments if p.driver_id == driver_id],
        )

    def unpaid_totals(self) -> dict[int, DriverBalance]:
        """Balance of every registered driver, zero for drivers with no items."""
        balances = self.balance.unpaid_totals(self.line_items())
        for driver in self.drivers:
            balances.setdefault(driver.id, DriverBalance(driver_id=driver.id))
        return balances

    def driver_balance(self, driver_id: int) -> DriverBalance:
        return self.balance.driver_balance(driver_id, self.line_items())

    # Payments

    def preview_payment(
        self,
        driver_id: int,
        freight_ids: Sequence[int] = (),
        fuel_ids: Sequence[int] = (),
        supply_ids: Sequence[int] = (),
    ) -> BatchTotals:
        """Subtotals of a selection, before the payment is confirmed."""
        selected = self.batcher.select(self.driver_ledger(driver_id), freight_ids, fuel_ids, supply_ids)
        return self.batcher.totals(selected)

    async def generate_payment(
        self,
        driver_id: int,
        freight_ids: Sequence[int] = (),
        fuel_ids: Sequence[int] = (),
        supply_ids: Sequence[int] = (),
        comprovante: Optional[ProofFile] = None,
    ) -> Payment:
        """
        Pay a driver for the selected line items.

        Raises:
            EmptySelection: Nothing selected; no request is sent
            ItemAlreadyPaid: A selected item belongs to another payment
        """
        ledger = self.driver_ledger(driver_id)
        selected = self.batcher.select(ledger, freight_ids, fuel_ids, supply_ids)
        request = self.batcher.build(driver_id, selected, ledger.unpaid_items(), comprovante)

        payment = await self.api.create_payment(request)
        self.logger.info(
            "payment_generated",
            driver_id=driver_id,
            payment_id=payment.id,
            date_range=payment.date_range,
        )
        await self.load(LEDGER_COLLECTIONS)
        return payment

    async def delete_payment(self, payment_id: int) -> None:
        """Delete a payment; its line items become unpaid again."""
        await self.api.delete_payment(payment_id)
        self.logger.info("payment_deleted", payment_id=payment_id)
        await self.load(LEDGER_COLLECTIONS)

    async def attach_payment_proof(self, payment_id: int, proof: ProofFile) -> Payment:
        payment = await self.api.attach_payment_proof(payment_id, proof)
        await self.load([PAYMENTS])
        return payment

    # Status toggles

    async def toggle_paid(self, freight_id: int) -> None:
        await self.api.toggle_paid(freight_id)
        await self.load([FREIGHTS])

    async def toggle_client_paid(self, freight_id: int) -> None:
        await self.api.toggle_client_paid(freight_id)
        await self.load([FREIGHTS])

    async def authenticate_driver(self, driver_id: int) -> None:
        await self.api.authenticate_driver(driver_id)
        self.logger.info("driver_authenticated", driver_id=driver_id)
        await self.load([DRIVERS])

    # Derived views

    def client_summaries(self) -> list[ClientSummary]:
        return self.reconciler.summarize_all(
            self.freights, self.abastecimentos, self.outros_insumos, self.clients
        )

    def client_summary(self, client_name: str) -> ClientSummary:
        return self.reconciler.summarize(
            client_name, self.freights, self.abastecimentos, self.outros_insumos
        )

    def driver_statement(self, driver_id: int) -> DriverStatement:
        return self.statements.from_ledger(self.get_driver(driver_id), self.driver_ledger(driver_id))

    def list_freights(
        self,
        freight_filter: Optional[FreightFilter] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Page[Freight]:
        """Filtered, newest-first page of the freight table."""
        pagination = self.config_manager.get_pagination_config()
        limit = limit or pagination.default_limit
        if limit not in pagination.allowed_limits:
            raise InvalidInputError(f"Tamanho de página inválido: {limit}", field="limit")
        return paginate(filter_freights(self.freights, freight_filter or FreightFilter()), page, limit)


class DriverDashboard:
    """Driver portal state: own records, stats and statement totals."""

    def __init__(self, api: DriverApi, logger: Optional[structlog.BoundLogger] = None) -> None:
        self.api = api
        self.session = api.session
        self.logger = logger or structlog.get_logger(component="driver_dashboard")
        self._stats: Optional[DriverStats] = None
        self.loader = CollectionLoader(
            self.session,
            {
                FREIGHTS: api.freights,
                ABASTECIMENTOS: api.abastecimentos,
                OUTROS_INSUMOS: api.outros_insumos,
                PAYMENTS: api.payments,
            },
            self.logger,
        )

    async def load(self) -> dict[str, bool]:
        """Refresh the collections and stats; a failing stats call keeps the previous stats."""
        loaded, stats = await asyncio.gather(self.loader.load(), self.api.stats(), return_exceptions=True)
        if isinstance(loaded, BaseException):
            raise loaded
        if isinstance(stats, AuthorizationError):
            raise stats
        if isinstance(stats, Exception):
            self.logger.warning("stats_load_failed", error=str(stats))
            loaded["stats"] = False
        elif isinstance(stats, BaseException):
            raise stats
        else:
            self._stats = stats
            loaded["stats"] = True
        return loaded

    def poller(self) -> "Poller":
        """Poller refreshing the statement at polling.driver_statement_seconds."""
        interval = self.api.client.config_manager.get_polling_config().driver_statement_seconds
        return Poller(self.load, interval, self.session, name="driver_statement")

    @property
    def stats(self) -> DriverStats:
        return self._stats or DriverStats()

    @property
    def to_receive(self) -> Decimal:
        """Earned freights minus charges and payments already received."""
        freights = sum((f.total_value for f in self.loader.get(FREIGHTS) if f.is_complete), Decimal("0"))
        fuel = sum((a.total_value for a in self.loader.get(ABASTECIMENTOS) if a.is_complete), Decimal("0"))
        supplies = sum((o.total_value for o in self.loader.get(OUTROS_INSUMOS)), Decimal("0"))
        payments = self.loader.get(PAYMENTS)
        paid = sum((p.total_value for p in payments), Decimal("0"))
        paid += paid_without_payment(self.loader.get(FREIGHTS), payments)
        return freights - fuel - supplies - paid


class Poller:
    """
    Fixed-interval refresh, the fallback for event subscribers.

    Polls are not coalesced: a slow refresh may overlap the next one, and
    the session cache drops whichever response is stale. An
    AuthorizationError stops polling and ends the session; any other
    failure is logged and polling continues.
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[Any]],
        interval: float,
        session: SessionContext,
        name: str = "poller",
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")
        self.refresh = refresh
        self.interval = interval
        self.session = session
        self.name = name
        self.logger = logger or structlog.get_logger(component="poller", poller=name)

        self._task: Optional[asyncio.Task[None]] = None
        self._inflight: set[asyncio.Task[None]] = set()
        self.ticks = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _poll_once(self) -> None:
        try:
            await self.refresh()
        except AuthorizationError as e:
            self.logger.warning("poll_unauthorized", error=e.message)
            self.session.end()
            self.stop()
        except Exception as e:
            self.failures += 1
            self.logger.error("poll_failed", error=str(e))

    async def _run(self) -> None:
        while True:
            self.ticks += 1
            task = asyncio.create_task(self._poll_once())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Start polling on the running event loop."""
        if self.running:
            return
        self.logger.info("polling_started", interval=self.interval)
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Stop scheduling refreshes; in-flight refreshes still complete."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
            self.logger.info("polling_stopped", ticks=self.ticks)

    async def wait_idle(self) -> None:
        """Wait for in-flight refreshes to finish."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)


async def wait_for_approval(api: DriverApi, interval: Optional[float] = None, max_checks: Optional[int] = None) -> bool:
    """
    Poll until an admin approves the logged-in driver.

    Args:
        api: Driver API of the waiting session
        interval: Seconds between checks (defaults to polling.driver_waiting_seconds)
        max_checks: Give up after this many checks (unbounded by default)

    Returns:
        True once approved, False if max_checks ran out
    """
    if interval is None:
        interval = api.client.config_manager.get_polling_config().driver_waiting_seconds
    checks = 0
    while max_checks is None or checks < max_checks:
        checks += 1
        if await api.is_authenticated_by_admin():
            return True
        if max_checks is not None and checks >= max_checks:
            break
        await asyncio.sleep(interval)
    return False
