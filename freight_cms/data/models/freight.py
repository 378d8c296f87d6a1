"""
Freight data model - represents a single transport job.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from freight_cms.data.models.enums import LineItemKind, RecordStatus
from freight_cms.data.models.line_item import LineItem
from freight_cms.data.validators import coerce_date, coerce_flag


class Freight(BaseModel):
    """
    Represents a freight job performed by a driver for a client.

    Values are derived from distance, weight and the per km/ton rates; any
    total sent by the backend is ignored and recomputed here.
    """

    # Identification
    id: int = Field(..., description="Freight identifier")
    date: dt.date = Field(..., description="Date of the job")
    driver_id: int = Field(..., description="Driver who performed the job")
    driver_name: Optional[str] = Field(None, description="Driver name (joined by the backend)")
    plate: Optional[str] = Field(None, description="Vehicle plate used")
    client: Optional[str] = Field(None, description="Client company name")

    # Measures
    km: Decimal = Field(Decimal("0"), ge=0, description="Distance in km")
    tons: Decimal = Field(Decimal("0"), ge=0, description="Weight in tons")

    # Rates
    price_per_km_ton: Decimal = Field(Decimal("0"), ge=0, description="Driver rate per km/ton")
    price_per_km_ton_transportadora: Decimal = Field(
        Decimal("0"), ge=0, description="Carrier (client-side) rate per km/ton"
    )

    # Status
    status: RecordStatus = Field(RecordStatus.COMPLETE, description="Completion status")
    paid: bool = Field(False, description="Driver has been paid for this freight")
    client_paid: bool = Field(False, description="Client has paid the carrier for this freight")

    # Attachments
    comprovante_carga: Optional[str] = None
    comprovante_descarga: Optional[str] = None
    comprovante_recebimento: Optional[str] = None
    documento_frete: Optional[str] = None

    @field_validator("paid", "client_paid", mode="before")
    @classmethod
    def _coerce_flags(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        return coerce_date(value)

    @field_validator("km", "tons", "price_per_km_ton", "price_per_km_ton_transportadora", mode="before")
    @classmethod
    def _null_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    @computed_field
    @property
    def total_value(self) -> Decimal:
        """Amount owed to the driver."""
        return self.km * self.tons * self.price_per_km_ton

    @computed_field
    @property
    def total_value_transportadora(self) -> Decimal:
        """Amount charged to the client."""
        return self.km * self.tons * self.price_per_km_ton_transportadora

    @property
    def client_value(self) -> Decimal:
        """Carrier-side value, falling back to the driver value when no carrier rate is set."""
        return self.total_value_transportadora or self.total_value

    @property
    def is_complete(self) -> bool:
        return self.status == RecordStatus.COMPLETE

    def as_line_item(self) -> LineItem:
        """View this freight as a settleable line item."""
        return LineItem(
            kind=LineItemKind.FREIGHT,
            id=self.id,
            driver_id=self.driver_id,
            date=self.date,
            value=self.total_value,
            paid=self.paid,
            complete=self.is_complete,
        )
