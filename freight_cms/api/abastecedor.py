"""
Fuel attendant (abastecedor) portal endpoints.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from freight_cms.api.client import PortalApi
from freight_cms.core.errors import InvalidInputError
from freight_cms.data.models import Abastecedor, Driver, PortalRole, ProofFile
from freight_cms.data.validators import is_positive_number, only_digits


def _plate_key(plate: str) -> str:
    return "".join(ch for ch in plate.upper() if ch.isalnum())


class AbastecedorApi(PortalApi):
    """Endpoints used at the fuel station to charge drivers."""

    role = PortalRole.ABASTECEDOR

    async def login(self, cpf: str, password: str) -> str:
        if len(only_digits(cpf)) != 11:
            raise InvalidInputError("CPF inválido. Deve ter 11 dígitos.", field="cpf")
        return await self._login({"cpf": cpf, "password": password})

    async def profile(self) -> Abastecedor:
        return Abastecedor.model_validate(await self.client.get("/abastecedor/profile"))

    async def drivers(self) -> list[Driver]:
        data = await self.client.get("/abastecedor/drivers") or []
        return [Driver.model_validate(d) for d in data]

    async def validate_plate(self, plate: str) -> Optional[Driver]:
        """
        Look up the driver owning a plate.

        Returns:
            The driver, or None when the plate is unknown or too short to check
        """
        if len(_plate_key(plate)) < 7:
            return None
        data = await self.client.get(f"/abastecedor/validate-plate/{plate.strip().upper()}") or {}
        if not data.get("valid"):
            return None
        return Driver.model_validate(data["driver"])

    async def submit_abastecimento(
        self,
        plate: str,
        date: dt.date,
        liters: Decimal,
        photo: Optional[ProofFile] = None,
    ) -> dict[str, Any]:
        """Record a fuel purchase for the driver owning the plate."""
        if not plate.strip():
            raise InvalidInputError("Preencha todos os campos obrigatórios", field="plate")
        if not is_positive_number(liters):
            raise InvalidInputError("Quantidade de litros inválida", field="liters")

        fields = {"plate": plate.strip().upper(), "date": date.isoformat(), "liters": str(liters)}
        files = None
        if photo is not None:
            files = {"comprovante": (photo.filename, photo.content, photo.content_type)}
        return await self.client.post("/abastecedor/abastecimento", data=fields, files=files, multipart=True) or {}

    async def submit_outros_insumos(
        self,
        plate: str,
        date: dt.date,
        quantity: Decimal,
        description: str,
        unit_price: Decimal,
        photo: Optional[ProofFile] = None,
    ) -> dict[str, Any]:
        """Record a miscellaneous supply charged to the driver owning the plate."""
        if not plate.strip() or not description.strip():
            raise InvalidInputError("Preencha todos os campos obrigatórios")
        if not is_positive_number(quantity):
            raise InvalidInputError("Quantidade inválida", field="quantity")
        if not is_positive_number(unit_price):
            raise InvalidInputError("Valor unitário inválido", field="unit_price")

        fields = {
            "plate": plate.strip().upper(),
            "date": date.isoformat(),
            "quantity": str(quantity),
            "description": description.strip(),
            "unit_price": str(unit_price),
        }
        files = None
        if photo is not None:
            files = {"comprovante": (photo.filename, photo.content, photo.content_type)}
        return await self.client.post("/abastecedor/outros-insumos", data=fields, files=files, multipart=True) or {}
