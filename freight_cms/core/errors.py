"""
Error taxonomy for the portal client.

Every error carries a user-facing message. Messages returned by the backend
are kept verbatim so dashboards can display them inline.
"""

from typing import Optional


class CMSError(Exception):
    """Base class for all portal client errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(CMSError):
    """Missing required field, malformed identifier or rejected payload."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class AuthorizationError(CMSError):
    """Invalid or expired token. The session has already been reset."""


class BusinessRuleError(CMSError):
    """Operation rejected by a business rule."""


class EmptySelection(BusinessRuleError):
    """A payment batch was requested with no line items selected."""

    def __init__(self, message: str = "Selecione pelo menos um item para gerar o pagamento.") -> None:
        super().__init__(message)


class ItemAlreadyPaid(BusinessRuleError):
    """A selected line item already belongs to a payment."""

    def __init__(self, kind: str, item_id: int, label: Optional[str] = None) -> None:
        super().__init__(f"{label or kind} {item_id} já foi pago")
        self.kind = kind
        self.item_id = item_id


class DuplicatePlate(BusinessRuleError):
    """A plate is already registered for the driver."""

    def __init__(self, plate: str) -> None:
        super().__init__(f"Placa {plate} já cadastrada")
        self.plate = plate


class TransportError(CMSError):
    """Non-2xx response from the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(TransportError):
    """The backend could not be reached."""
