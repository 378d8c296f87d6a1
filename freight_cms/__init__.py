"""
Freight CMS portal client.

Typed models, an async REST client and the reconciliation services used by
the driver, fuel attendant, client and admin portals.
"""

__version__ = "0.1.0"
