"""
Async REST client for the freight CMS backend.

All portals share one request path:
- Bearer token taken from the session context
- Backend error messages surfaced verbatim
- 401/403 forces a session reset (token cleared, cache dropped)
- No retries
"""

from typing import Any, Optional

import httpx
import structlog

from freight_cms.core.config import ConfigManager, get_config
from freight_cms.core.errors import (
    AuthorizationError,
    InvalidInputError,
    NetworkError,
    TransportError,
)
from freight_cms.core.session import SessionContext
from freight_cms.data.models.enums import PortalRole


class ApiClient:
    """
    Thin async wrapper around httpx bound to one portal session.

    Example:
        async with ApiClient(session) as api:
            freights = await api.get("/admin/freights")
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: Optional[str] = None,
        config_manager: Optional[ConfigManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            session: Session context providing the bearer token
            base_url: Backend base URL (defaults to CMS_API_BASE_URL)
            config_manager: Optional config manager (defaults to global instance)
            transport: Optional httpx transport (used by tests to fake the backend)
            logger: Optional structured logger
        """
        self.session = session
        self.config_manager = config_manager or get_config()
        self.base_url = (base_url or self.config_manager.env.api_base_url).rstrip("/")
        self.logger = logger or structlog.get_logger(component="api_client", portal=session.role.value)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.config_manager.env.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        if self.session.token:
            return {"Authorization": f"Bearer {self.session.token}"}
        return {}

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        data: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        multipart: bool = False,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL (e.g., "/admin/freights")
            json: JSON body
            data: Form fields (multipart when files are given)
            files: Multipart files
            params: Query string parameters; None values are dropped
            multipart: Send form fields as multipart even without files

        Returns:
            Decoded JSON body (None for an empty body)

        Raises:
            NetworkError: The backend could not be reached
            AuthorizationError: 401/403; the session has been reset
            InvalidInputError: 400/422
            TransportError: Any other non-2xx response
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        # upload endpoints only parse multipart bodies
        if multipart and not files and data:
            files = {key: (None, str(value)) for key, value in data.items()}
            data = None

        self.logger.debug("api_request", method=method, endpoint=endpoint)

        try:
            response = await self._client.request(
                method,
                endpoint,
                json=json,
                data=data,
                files=files,
                params=params,
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            self.logger.error("api_network_error", method=method, endpoint=endpoint, error=str(e))
            raise NetworkError(f"Falha de conexão: {e}") from e

        body = self._decode(response)

        if response.is_success:
            return body

        message = body.get("error") if isinstance(body, dict) else None
        message = message or "Erro na requisição"
        self.logger.warning(
            "api_request_failed",
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
            error=message,
        )

        if response.status_code in (401, 403):
            self.session.end()
            raise AuthorizationError(message)
        if response.status_code in (400, 422):
            raise InvalidInputError(message)
        raise TransportError(message, status_code=response.status_code)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("POST", endpoint, **kwargs)

    async def put(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("PUT", endpoint, **kwargs)

    async def patch(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", endpoint, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", endpoint, **kwargs)


class PortalApi:
    """
    Endpoints shared by every portal: login, session verification, logout.

    Subclasses set `role`.
    """

    role: PortalRole

    def __init__(self, client: ApiClient) -> None:
        if client.session.role != self.role:
            raise ValueError(
                f"{self.__class__.__name__} needs a {self.role.value} session, "
                f"got {client.session.role.value}"
            )
        self.client = client
        self.session = client.session
        self.logger = client.logger

    async def _login(self, credentials: dict[str, Any]) -> str:
        data = await self.client.post(f"/auth/{self.role.value}/login", json=credentials)
        token = (data or {}).get("token")
        if not token:
            raise AuthorizationError("Resposta de login sem token")
        self.session.start(token)
        return token

    async def verify(self) -> dict[str, Any]:
        """
        Check the stored token with the backend.

        Returns:
            The authenticated user

        Raises:
            AuthorizationError: Token missing, invalid or issued for another portal
        """
        if not self.session.token:
            raise AuthorizationError("Sessão não iniciada")
        data = await self.client.get("/auth/verify") or {}
        if not data.get("valid") or data.get("type") != self.role.value:
            self.session.end()
            raise AuthorizationError("Sessão inválida")
        return data.get("user", {})

    def logout(self) -> None:
        self.session.end()


class PasswordResetMixin:
    """CPF + SMS code password reset (driver and client portals)."""

    client: ApiClient
    role: PortalRole

    async def forgot_password(self, cpf: str) -> dict[str, Any]:
        """Request an SMS code; the response names the (masked) phone it went to."""
        return await self.client.post(f"/auth/{self.role.value}/forgot-password", json={"cpf": cpf}) or {}

    async def verify_reset_code(self, cpf: str, code: str) -> None:
        await self.client.post(f"/auth/{self.role.value}/verify-reset-code", json={"cpf": cpf, "code": code})

    async def reset_password(self, cpf: str, new_password: str) -> None:
        await self.client.post(
            f"/auth/{self.role.value}/reset-password",
            json={"cpf": cpf, "newPassword": new_password},
        )
