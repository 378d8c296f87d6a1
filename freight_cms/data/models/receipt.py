"""
Receipt (comprovante) uploaded by a driver and waiting in the admin pool.
"""

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from freight_cms.data.validators import coerce_date


class Comprovante(BaseModel):
    """A receipt photo; unassigned until an admin attaches it to a record."""

    id: int
    driver_id: int
    driver_name: Optional[str] = None
    file_path: str
    date: dt.date
    display_name: Optional[str] = None
    assigned_freight_id: Optional[int] = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        return coerce_date(value)

    @property
    def is_assigned(self) -> bool:
        return self.assigned_freight_id is not None
