"""
Summary statistics returned by the driver and client portals.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class FreightStats(BaseModel):
    count: int = 0
    total_km: Decimal = Decimal("0")
    total_tons: Decimal = Decimal("0")
    total_value: Decimal = Decimal("0")


class FuelStats(BaseModel):
    count: int = 0
    total_liters: Decimal = Decimal("0")
    total_value: Decimal = Decimal("0")


class SupplyStats(BaseModel):
    count: int = 0
    total_quantity: Decimal = Decimal("0")
    total_value: Decimal = Decimal("0")


class DriverStats(BaseModel):
    """
    Driver portal totals (/driver/stats).

    total_to_receive = freights - received - fuel - supplies
    """

    freights: FreightStats = Field(default_factory=FreightStats)
    abastecimentos: FuelStats = Field(default_factory=FuelStats)
    outros_insumos: SupplyStats = Field(default_factory=SupplyStats, alias="outrosInsumos")
    total_received: Decimal = Decimal("0")
    total_to_receive: Decimal = Decimal("0")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class ClienteStats(BaseModel):
    """Client portal totals (/cliente/stats)."""

    total_freights: int = 0
    total_value: Decimal = Decimal("0")
    total_km: Decimal = Decimal("0")
    total_tons: Decimal = Decimal("0")
