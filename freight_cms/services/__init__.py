"""
Reconciliation services and dashboards.

- BalanceAggregator: Amounts owed to drivers
- PaymentBatcher: Groups selected line items into a payment
- ClientReconciler: Received vs. owed per client, and the margin
- StatementService: Driver account statements
- AdminDashboard / DriverDashboard / Poller: Cached portal state and refresh
"""

from .balance import BalanceAggregator, DriverBalance
from .base import BaseService, ReconciliationRecord
from .batching import BatchTotals, PaymentBatcher, date_range_label
from .client_reconciliation import ClientReconciler, ClientSummary
from .dashboard import AdminDashboard, DriverDashboard, Poller, wait_for_approval
from .statement import DriverStatement, StatementService

__all__ = [
    "AdminDashboard",
    "BalanceAggregator",
    "BaseService",
    "BatchTotals",
    "ClientReconciler",
    "ClientSummary",
    "DriverBalance",
    "DriverDashboard",
    "DriverStatement",
    "PaymentBatcher",
    "Poller",
    "ReconciliationRecord",
    "StatementService",
    "date_range_label",
    "wait_for_approval",
]
