"""
Pydantic data models for the freight CMS.

Core models:
- Freight: Transport job with derived driver and carrier values
- FuelPurchase / OtherSupply: Expenses deducted from a driver
- Payment / PaymentRequest: Settled batches and the payload creating one
- Driver / Abastecedor / Cliente: Portal users
- LineItem: Uniform settleable view used by reconciliation
- DriverLedger: All settleable records of one driver
- Comprovante: Receipt photo waiting in the admin pool
"""

from .enums import ComprovanteKind, LineItemKind, PortalRole, RecordStatus
from .expenses import FuelPurchase, OtherSupply
from .freight import Freight
from .ledger import DriverLedger
from .line_item import LineItem
from .payment import Payment, PaymentRequest, ProofFile
from .receipt import Comprovante
from .people import Abastecedor, ClientRecord, Cliente, Driver
from .stats import ClienteStats, DriverStats

__all__ = [
    "Abastecedor",
    "ClientRecord",
    "Cliente",
    "Comprovante",
    "ClienteStats",
    "ComprovanteKind",
    "Driver",
    "DriverLedger",
    "DriverStats",
    "Freight",
    "FuelPurchase",
    "LineItem",
    "LineItemKind",
    "OtherSupply",
    "Payment",
    "PaymentRequest",
    "PortalRole",
    "ProofFile",
    "RecordStatus",
]
