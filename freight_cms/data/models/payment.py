"""
Payment models - settled batches and the request payload that creates one.
"""

import datetime as dt
import json
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from freight_cms.data.models.enums import LineItemKind
from freight_cms.data.validators import coerce_json_list


class Payment(BaseModel):
    """
    A payment made to a driver.

    Groups the freights, fuel purchases and supplies it settles under a
    date-range label such as "12/01/2026 - 19/01/2026".
    """

    id: int
    driver_id: int
    driver_name: Optional[str] = None
    date_range: str
    total_value: Decimal
    comprovante_path: Optional[str] = None
    freight_ids: list[int] = Field(default_factory=list)
    abastecimento_ids: list[int] = Field(default_factory=list)
    outros_insumo_ids: list[int] = Field(default_factory=list)
    created_at: Optional[dt.datetime] = None

    @field_validator("freight_ids", "abastecimento_ids", "outros_insumo_ids", mode="before")
    @classmethod
    def _parse_ids(cls, value: Any) -> list[Any]:
        return coerce_json_list(value)

    def settles(self, kind: LineItemKind, item_id: int) -> bool:
        """Whether this payment settles the given line item."""
        return item_id in getattr(self, kind.payment_field)


class ProofFile(BaseModel):
    """An image attached as proof (comprovante)."""

    filename: str
    content: bytes
    content_type: str = "image/jpeg"


class PaymentRequest(BaseModel):
    """
    Payload that asks the backend to create a payment.

    Built by the payment batcher; the backend persists it and marks every
    listed line item as paid.
    """

    driver_id: int
    date_range: str
    total_value: Decimal
    freight_ids: list[int] = Field(default_factory=list)
    abastecimento_ids: list[int] = Field(default_factory=list)
    outros_insumo_ids: list[int] = Field(default_factory=list)
    comprovante: Optional[ProofFile] = None

    @property
    def item_count(self) -> int:
        return len(self.freight_ids) + len(self.abastecimento_ids) + len(self.outros_insumo_ids)

    def to_form_data(self) -> dict[str, str]:
        """Multipart form fields; id arrays travel JSON-encoded."""
        return {
            "driver_id": str(self.driver_id),
            "date_range": self.date_range,
            "total_value": str(self.total_value),
            "freight_ids": json.dumps(self.freight_ids),
            "abastecimento_ids": json.dumps(self.abastecimento_ids),
            "outros_insumo_ids": json.dumps(self.outros_insumo_ids),
        }

    def to_files(self) -> Optional[dict[str, tuple[str, bytes, str]]]:
        """Multipart file part, if a proof was attached."""
        if self.comprovante is None:
            return None
        return {
            "comprovante": (
                self.comprovante.filename,
                self.comprovante.content,
                self.comprovante.content_type,
            )
        }
