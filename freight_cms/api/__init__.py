"""
REST API access for the four portals.

- ApiClient: Async HTTP client bound to a session
- AdminApi: Admin dashboard endpoints
- DriverApi: Driver portal endpoints
- AbastecedorApi: Fuel attendant endpoints
- ClienteApi: Client portal endpoints
"""

from .abastecedor import AbastecedorApi
from .admin import AdminApi
from .client import ApiClient, PortalApi
from .cliente import ClienteApi
from .driver import DriverApi

__all__ = [
    "AbastecedorApi",
    "AdminApi",
    "ApiClient",
    "ClienteApi",
    "DriverApi",
    "PortalApi",
]
