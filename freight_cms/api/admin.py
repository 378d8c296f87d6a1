"""
Admin portal endpoints.

Every mutation is server-authoritative: callers re-fetch the affected
collections afterwards instead of patching local state.
"""

from typing import Any, Optional

from freight_cms.api.client import PortalApi
from freight_cms.data.models import (
    Abastecedor,
    ClientRecord,
    Comprovante,
    ComprovanteKind,
    Driver,
    Freight,
    FuelPurchase,
    OtherSupply,
    Payment,
    PaymentRequest,
    PortalRole,
    ProofFile,
)

Files = Optional[dict[str, tuple[str, bytes, str]]]


def _proof_files(field: str, proof: Optional[ProofFile]) -> Files:
    if proof is None:
        return None
    return {field: (proof.filename, proof.content, proof.content_type)}


def _form_fields(fields: dict[str, Any]) -> dict[str, str]:
    """Drop unset values and stringify the rest for a multipart form."""
    form: dict[str, str] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = int(value)
        form[key] = str(value)
    return form


class AdminApi(PortalApi):
    """Endpoints of the admin dashboard."""

    role = PortalRole.ADMIN

    async def login(self, username: str, password: str) -> str:
        return await self._login({"username": username, "password": password})

    # Drivers

    async def list_drivers(self) -> list[Driver]:
        data = await self.client.get("/admin/drivers") or []
        return [Driver.model_validate(d) for d in data]

    async def get_driver(self, driver_id: int) -> Driver:
        return Driver.model_validate(await self.client.get(f"/admin/drivers/{driver_id}"))

    async def create_driver(self, fields: dict[str, Any]) -> Driver:
        return Driver.model_validate(await self.client.post("/admin/drivers", json=fields))

    async def update_driver(self, driver_id: int, fields: dict[str, Any]) -> Driver:
        return Driver.model_validate(await self.client.put(f"/admin/drivers/{driver_id}", json=fields))

    async def delete_driver(self, driver_id: int) -> None:
        await self.client.delete(f"/admin/drivers/{driver_id}")

    async def authenticate_driver(self, driver_id: int) -> None:
        """Approve a self-registered driver."""
        await self.client.patch(f"/admin/drivers/{driver_id}/authenticate")

    # Fuel attendants

    async def list_abastecedores(self) -> list[Abastecedor]:
        data = await self.client.get("/admin/abastecedores") or []
        return [Abastecedor.model_validate(a) for a in data]

    async def create_abastecedor(self, fields: dict[str, Any]) -> Abastecedor:
        return Abastecedor.model_validate(await self.client.post("/admin/abastecedores", json=fields))

    async def update_abastecedor(self, abastecedor_id: int, fields: dict[str, Any]) -> Abastecedor:
        data = await self.client.put(f"/admin/abastecedores/{abastecedor_id}", json=fields)
        return Abastecedor.model_validate(data)

    async def delete_abastecedor(self, abastecedor_id: int) -> None:
        await self.client.delete(f"/admin/abastecedores/{abastecedor_id}")

    # Freights

    async def list_freights(self) -> list[Freight]:
        data = await self.client.get("/admin/freights") or []
        return [Freight.model_validate(f) for f in data]

    async def create_freight(self, fields: dict[str, Any], files: Files = None) -> Freight:
        data = await self.client.post(
            "/admin/freights", data=_form_fields(fields), files=files, multipart=True
        )
        return Freight.model_validate(data)

    async def update_freight(self, freight_id: int, fields: dict[str, Any], files: Files = None) -> Freight:
        data = await self.client.put(
            f"/admin/freights/{freight_id}", data=_form_fields(fields), files=files, multipart=True
        )
        return Freight.model_validate(data)

    async def delete_freight(self, freight_id: int) -> None:
        await self.client.delete(f"/admin/freights/{freight_id}")

    async def toggle_paid(self, freight_id: int) -> None:
        """Flip the driver-paid flag of a single freight outside any batch."""
        await self.client.patch(f"/admin/freights/{freight_id}/toggle-paid")

    async def toggle_client_paid(self, freight_id: int) -> None:
        """Flip the client-paid flag (payment received from the client)."""
        await self.client.patch(f"/admin/freights/{freight_id}/toggle-client-paid")

    async def upload_recebimento(self, freight_id: int, proof: ProofFile) -> Freight:
        """Attach the proof that the client paid for a freight."""
        data = await self.client.put(
            f"/admin/freights/{freight_id}",
            files=_proof_files("comprovante_recebimento", proof),
        )
        return Freight.model_validate(data)

    # Fuel purchases

    async def list_abastecimentos(self) -> list[FuelPurchase]:
        data = await self.client.get("/admin/abastecimentos") or []
        return [FuelPurchase.model_validate(a) for a in data]

    async def create_abastecimento(self, fields: dict[str, Any], proof: Optional[ProofFile] = None) -> FuelPurchase:
        data = await self.client.post(
            "/admin/abastecimentos",
            data=_form_fields(fields),
            files=_proof_files(ComprovanteKind.ABASTECIMENTO.form_field, proof),
            multipart=True,
        )
        return FuelPurchase.model_validate(data)

    async def update_abastecimento(
        self, abastecimento_id: int, fields: dict[str, Any], proof: Optional[ProofFile] = None
    ) -> FuelPurchase:
        data = await self.client.put(
            f"/admin/abastecimentos/{abastecimento_id}",
            data=_form_fields(fields),
            files=_proof_files(ComprovanteKind.ABASTECIMENTO.form_field, proof),
            multipart=True,
        )
        return FuelPurchase.model_validate(data)

    async def delete_abastecimento(self, abastecimento_id: int) -> None:
        await self.client.delete(f"/admin/abastecimentos/{abastecimento_id}")

    # Other supplies

    async def list_outros_insumos(self) -> list[OtherSupply]:
        data = await self.client.get("/admin/outrosinsumos") or []
        return [OtherSupply.model_validate(o) for o in data]

    async def create_outro_insumo(self, fields: dict[str, Any]) -> OtherSupply:
        return OtherSupply.model_validate(await self.client.post("/admin/outrosinsumos", json=fields))

    async def update_outro_insumo(
        self, insumo_id: int, fields: dict[str, Any], proof: Optional[ProofFile] = None
    ) -> OtherSupply:
        data = await self.client.put(
            f"/admin/outrosinsumos/{insumo_id}",
            data=_form_fields(fields),
            files=_proof_files("comprovante", proof),
            multipart=True,
        )
        return OtherSupply.model_validate(data)

    async def delete_outro_insumo(self, insumo_id: int) -> None:
        await self.client.delete(f"/admin/outrosinsumos/{insumo_id}")

    # Clients

    async def list_clients(self) -> list[ClientRecord]:
        data = await self.client.get("/admin/clients") or []
        return [ClientRecord.model_validate(c) for c in data]

    async def create_client(self, name: str) -> None:
        await self.client.post("/admin/clients", json={"name": name})

    # Receipt pools

    async def list_unassigned(self, kind: ComprovanteKind) -> list[Comprovante]:
        data = await self.client.get(kind.pool_endpoint) or []
        return [Comprovante.model_validate(c) for c in data]

    async def assign_comprovante(self, kind: ComprovanteKind, comprovante_id: int, record_id: int) -> None:
        await self.client.post(
            f"{kind.pool_endpoint}/{comprovante_id}/assign",
            json={kind.assign_field: record_id},
        )

    async def unassign_comprovante(self, kind: ComprovanteKind, record_id: int) -> None:
        await self.client.post(kind.unassign_endpoint(record_id))

    # Payments

    async def list_payments(self, driver_id: Optional[int] = None) -> list[Payment]:
        data = await self.client.get("/admin/payments", params={"driver_id": driver_id}) or []
        return [Payment.model_validate(p) for p in data]

    async def create_payment(self, request: PaymentRequest) -> Payment:
        """Persist a payment batch; the backend marks its line items paid."""
        data = await self.client.post(
            "/admin/payments",
            data=request.to_form_data(),
            files=request.to_files(),
            multipart=True,
        )
        return Payment.model_validate(data)

    async def attach_payment_proof(self, payment_id: int, proof: ProofFile) -> Payment:
        data = await self.client.put(
            f"/admin/payments/{payment_id}",
            files=_proof_files("comprovante", proof),
        )
        return Payment.model_validate(data)

    async def delete_payment(self, payment_id: int) -> None:
        """Delete a payment; the backend marks its line items unpaid again."""
        await self.client.delete(f"/admin/payments/{payment_id}")
