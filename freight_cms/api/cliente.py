"""
Client (cliente) portal endpoints.
"""

import datetime as dt
from typing import Optional

from freight_cms.api.client import PasswordResetMixin, PortalApi
from freight_cms.core.errors import InvalidInputError
from freight_cms.data.models import Cliente, ClienteStats, Freight, PortalRole


class ClienteApi(PasswordResetMixin, PortalApi):
    """Read-only view of the freights performed for a client."""

    role = PortalRole.CLIENTE

    async def login(self, cpf: str, password: str) -> str:
        return await self._login({"cpf": cpf, "password": password})

    async def profile(self) -> Cliente:
        return Cliente.model_validate(await self.client.get("/cliente/profile"))

    async def freights(
        self,
        date_from: Optional[dt.date] = None,
        date_to: Optional[dt.date] = None,
    ) -> list[Freight]:
        """Freights of this client, optionally restricted to a date window."""
        if date_from and date_to and date_from > date_to:
            raise InvalidInputError("Data inicial maior que a data final", field="date_from")
        params = {
            "date_from": date_from.isoformat() if date_from else None,
            "date_to": date_to.isoformat() if date_to else None,
        }
        data = await self.client.get("/cliente/freights", params=params) or {}
        return [Freight.model_validate(f) for f in data.get("freights", [])]

    async def stats(self) -> ClienteStats:
        return ClienteStats.model_validate(await self.client.get("/cliente/stats") or {})
