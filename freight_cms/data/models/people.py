"""
Portal user models - drivers, fuel attendants (abastecedores) and clients.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from freight_cms.data.validators import coerce_flag, coerce_json_list, normalize_plate


class Driver(BaseModel):
    """
    A driver (motorista).

    The backend stores additional plates as a JSON string; they are parsed
    once here into a list.
    """

    id: int
    name: str
    cpf: Optional[str] = None
    phone: Optional[str] = None
    plate: Optional[str] = Field(None, description="Primary plate")
    plates: list[str] = Field(default_factory=list, description="Additional plates")
    client: Optional[str] = None
    active: bool = True
    authenticated: bool = False

    @field_validator("plates", mode="before")
    @classmethod
    def _parse_plates(cls, value: Any) -> list[str]:
        return [normalize_plate(str(p)) for p in coerce_json_list(value) if p]

    @field_validator("active", "authenticated", mode="before")
    @classmethod
    def _coerce_flags(cls, value: Any) -> bool:
        return coerce_flag(value)

    @property
    def all_plates(self) -> list[str]:
        """Primary plate followed by the distinct additional plates."""
        result: list[str] = []
        for plate in [self.plate, *self.plates]:
            normalized = normalize_plate(plate or "")
            if normalized and normalized not in result:
                result.append(normalized)
        return result

    def has_plate(self, plate: str) -> bool:
        return normalize_plate(plate) in self.all_plates


class Abastecedor(BaseModel):
    """Fuel attendant who records fuel purchases and supplies for drivers."""

    id: int
    name: str
    cpf: Optional[str] = None
    active: bool = True

    @field_validator("active", mode="before")
    @classmethod
    def _coerce_active(cls, value: Any) -> bool:
        return coerce_flag(value)


class Cliente(BaseModel):
    """Client company with access to the client portal."""

    id: int
    name: str
    empresa: Optional[str] = None
    cpf: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Company name when present; freights reference clients by it."""
        return self.empresa or self.name


class ClientRecord(BaseModel):
    """Entry of the admin client list (/admin/clients)."""

    client: str
