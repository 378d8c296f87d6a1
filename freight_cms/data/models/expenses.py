"""
Driver expense models - fuel purchases (abastecimentos) and other supplies (outros insumos).
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from freight_cms.data.models.enums import LineItemKind, RecordStatus
from freight_cms.data.models.line_item import LineItem
from freight_cms.data.validators import coerce_date, coerce_flag


class FuelPurchase(BaseModel):
    """Fuel purchase (abastecimento) charged to a driver."""

    id: int
    date: dt.date
    driver_id: int
    driver_name: Optional[str] = None
    plate: Optional[str] = None
    client: Optional[str] = None

    quantity: Decimal = Field(Decimal("0"), ge=0, description="Liters")
    price_per_liter: Decimal = Field(Decimal("0"), ge=0)

    status: RecordStatus = RecordStatus.COMPLETE
    paid: bool = False
    comprovante_abastecimento: Optional[str] = None

    @field_validator("paid", mode="before")
    @classmethod
    def _coerce_paid(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        return coerce_date(value)

    @field_validator("quantity", "price_per_liter", mode="before")
    @classmethod
    def _null_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    @computed_field
    @property
    def total_value(self) -> Decimal:
        """Liters times price per liter."""
        return self.quantity * self.price_per_liter

    @property
    def is_complete(self) -> bool:
        return self.status == RecordStatus.COMPLETE

    def as_line_item(self) -> LineItem:
        return LineItem(
            kind=LineItemKind.FUEL,
            id=self.id,
            driver_id=self.driver_id,
            date=self.date,
            value=self.total_value,
            paid=self.paid,
            complete=self.is_complete,
        )


class OtherSupply(BaseModel):
    """Miscellaneous supply (outros insumos) charged to a driver. Always complete."""

    id: int
    date: dt.date
    driver_id: int
    driver_name: Optional[str] = None

    quantity: Decimal = Field(Decimal("0"), ge=0)
    description: Optional[str] = None
    unit_price: Decimal = Field(Decimal("0"), ge=0)

    paid: bool = False
    comprovante: Optional[str] = None

    @field_validator("paid", mode="before")
    @classmethod
    def _coerce_paid(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        return coerce_date(value)

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def _null_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    @computed_field
    @property
    def total_value(self) -> Decimal:
        """Quantity times unit price."""
        return self.quantity * self.unit_price

    def as_line_item(self) -> LineItem:
        return LineItem(
            kind=LineItemKind.SUPPLY,
            id=self.id,
            driver_id=self.driver_id,
            date=self.date,
            value=self.total_value,
            paid=self.paid,
        )
