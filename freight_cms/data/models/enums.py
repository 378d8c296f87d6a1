"""
Enumerations shared by the data models and services.
"""

from enum import Enum


class PortalRole(str, Enum):
    """Portal a session is authenticated against."""

    ADMIN = "admin"
    DRIVER = "driver"
    ABASTECEDOR = "abastecedor"
    CLIENTE = "cliente"


class RecordStatus(str, Enum):
    """Completion status of a freight or fuel purchase."""

    PENDING = "pending"
    COMPLETE = "complete"


class LineItemKind(str, Enum):
    """Kind of line item that can be settled by a payment."""

    FREIGHT = "freight"
    FUEL = "fuel"
    SUPPLY = "supply"

    @property
    def sign(self) -> int:
        """Freights are owed to the driver; fuel and supplies are deducted."""
        if self is LineItemKind.FREIGHT:
            return 1
        if self in (LineItemKind.FUEL, LineItemKind.SUPPLY):
            return -1
        raise ValueError(f"Unsupported line item kind: {self}")

    @property
    def payment_field(self) -> str:
        """Name of the payment payload field listing ids of this kind."""
        if self is LineItemKind.FREIGHT:
            return "freight_ids"
        if self is LineItemKind.FUEL:
            return "abastecimento_ids"
        if self is LineItemKind.SUPPLY:
            return "outros_insumo_ids"
        raise ValueError(f"Unsupported line item kind: {self}")

    @property
    def label(self) -> str:
        """Portuguese name shown in messages."""
        if self is LineItemKind.FREIGHT:
            return "Frete"
        if self is LineItemKind.FUEL:
            return "Abastecimento"
        if self is LineItemKind.SUPPLY:
            return "Insumo"
        raise ValueError(f"Unsupported line item kind: {self}")


class ComprovanteKind(str, Enum):
    """Kind of receipt photo (comprovante) uploaded from the field."""

    CARGA = "carga"
    DESCARGA = "descarga"
    ABASTECIMENTO = "abastecimento"

    @property
    def form_field(self) -> str:
        """Multipart field name the backend expects for this receipt."""
        return f"comprovante_{self.value}"

    @property
    def pool_endpoint(self) -> str:
        """Admin endpoint listing unassigned receipts of this kind."""
        return f"/admin/comprovantes-{self.value}"

    @property
    def assign_field(self) -> str:
        """Body field naming the record a pooled receipt is assigned to."""
        if self in (ComprovanteKind.CARGA, ComprovanteKind.DESCARGA):
            return "freight_id"
        if self is ComprovanteKind.ABASTECIMENTO:
            return "abastecimento_id"
        raise ValueError(f"Unsupported comprovante kind: {self}")

    def unassign_endpoint(self, record_id: int) -> str:
        """Admin endpoint detaching this kind of receipt from a record."""
        if self in (ComprovanteKind.CARGA, ComprovanteKind.DESCARGA):
            return f"/admin/freights/{record_id}/unassign-{self.value}"
        if self is ComprovanteKind.ABASTECIMENTO:
            return f"/admin/abastecimentos/{record_id}/unassign-comprovante"
        raise ValueError(f"Unsupported comprovante kind: {self}")
