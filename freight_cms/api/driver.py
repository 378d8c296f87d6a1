"""
Driver portal endpoints.
"""

from typing import Any, Optional, Sequence

from freight_cms.api.client import PasswordResetMixin, PortalApi
from freight_cms.core.errors import DuplicatePlate, InvalidInputError
from freight_cms.data.models import (
    ComprovanteKind,
    Driver,
    DriverStats,
    Freight,
    FuelPurchase,
    OtherSupply,
    Payment,
    PortalRole,
    ProofFile,
)
from freight_cms.data.validators import is_valid_cpf, is_valid_plate, normalize_plate, only_digits


class DriverApi(PasswordResetMixin, PortalApi):
    """Endpoints of the driver portal."""

    role = PortalRole.DRIVER

    async def signup(self, name: str, plates: Sequence[str], password: str, phone: str, cpf: str) -> str:
        """
        Register a driver and start a session.

        The driver stays unauthenticated until an admin approves them.

        Raises:
            InvalidInputError: A field fails validation (no request is sent)
        """
        if len(name.strip()) < 2:
            raise InvalidInputError("Nome deve ter pelo menos 2 caracteres", field="name")
        if len(password) < 4:
            raise InvalidInputError("Senha deve ter pelo menos 4 caracteres", field="password")
        if not is_valid_cpf(cpf):
            raise InvalidInputError("CPF inválido. Verifique os números digitados.", field="cpf")
        phone_digits = only_digits(phone)
        if len(phone_digits) < 10:
            raise InvalidInputError("Telefone inválido. Deve conter pelo menos 10 dígitos", field="phone")
        if not plates:
            raise InvalidInputError("Placa é obrigatória", field="plates")
        for plate in plates:
            if not is_valid_plate(plate):
                raise InvalidInputError(
                    "Formato de placa inválido. Use ABC-1234 ou ABC-1D23", field="plates"
                )

        data = await self.client.post(
            "/auth/driver/signup",
            json={
                "name": name.strip(),
                "plates": [normalize_plate(p) for p in plates],
                "password": password,
                "phone": phone_digits,
                "cpf": only_digits(cpf),
            },
        )
        token = (data or {}).get("token")
        if not token:
            raise InvalidInputError("Resposta de cadastro sem token")
        self.session.start(token)
        return token

    async def login(self, cpf: str, password: str) -> str:
        if len(only_digits(cpf)) != 11:
            raise InvalidInputError("CPF inválido. Deve ter 11 dígitos.", field="cpf")
        return await self._login({"cpf": cpf, "password": password})

    async def is_authenticated_by_admin(self) -> bool:
        """Whether an admin has approved this driver yet."""
        user = await self.verify()
        return bool(user.get("authenticated"))

    async def profile(self) -> Driver:
        return Driver.model_validate(await self.client.get("/driver/profile"))

    async def stats(self) -> DriverStats:
        return DriverStats.model_validate(await self.client.get("/driver/stats") or {})

    async def freights(self) -> list[Freight]:
        data = await self.client.get("/driver/freights") or {}
        return [Freight.model_validate(f) for f in data.get("freights", [])]

    async def abastecimentos(self) -> list[FuelPurchase]:
        data = await self.client.get("/driver/abastecimentos") or {}
        return [FuelPurchase.model_validate(a) for a in data.get("abastecimentos", [])]

    async def outros_insumos(self) -> list[OtherSupply]:
        data = await self.client.get("/driver/outrosinsumos") or {}
        return [OtherSupply.model_validate(o) for o in data.get("outrosInsumos", data.get("outros_insumos", []))]

    async def payments(self) -> list[Payment]:
        data = await self.client.get("/driver/payments") or {}
        return [Payment.model_validate(p) for p in data.get("payments", [])]

    # Plates

    async def plates(self) -> list[str]:
        data = await self.client.get("/driver/plates") or {}
        return list(data.get("plates", []))

    async def add_plate(self, plate: str, known_plates: Optional[Sequence[str]] = None) -> None:
        """
        Register another vehicle plate.

        Raises:
            InvalidInputError: Malformed plate
            DuplicatePlate: Plate already among known_plates
        """
        normalized = normalize_plate(plate)
        if not is_valid_plate(normalized):
            raise InvalidInputError("Formato de placa inválido. Use ABC-1234 ou ABC-1D23", field="plate")
        if known_plates is not None and normalized in {normalize_plate(p) for p in known_plates}:
            raise DuplicatePlate(normalized)
        await self.client.post("/driver/plates", json={"plate": normalized})

    async def remove_plate(self, plate: str) -> None:
        await self.client.delete(f"/driver/plates/{normalize_plate(plate)}")

    # Receipt uploads

    async def upload_comprovante(
        self, kind: ComprovanteKind, photo: ProofFile, plate: Optional[str] = None
    ) -> dict[str, Any]:
        """
        Upload a loading/unloading/fuel receipt photo.

        A loading receipt (carga) opens a pending freight dated today; the
        admin completes it later.
        """
        if kind is ComprovanteKind.ABASTECIMENTO:
            endpoint = "/driver/upload-comprovante-abastecimento"
        elif kind in (ComprovanteKind.CARGA, ComprovanteKind.DESCARGA):
            endpoint = "/driver/upload-comprovante"
        else:
            raise ValueError(f"Unsupported comprovante kind: {kind}")

        files = {kind.form_field: (photo.filename, photo.content, photo.content_type)}
        data = {"plate": normalize_plate(plate)} if plate else None
        return await self.client.post(endpoint, data=data, files=files) or {}
