import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from freight_cms.api import ApiClient
from freight_cms.core.config import ConfigManager
from freight_cms.core.session import EventChannel, SessionContext, TokenStore
from freight_cms.data.models import PortalRole

CONFIG_DIR = Path(__file__).parent.parent / "config"
BASE_URL = "http://cms.test/api"


class FakeBackend:
    """Routes requests by (method, path) and records every request it sees."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, response: Any = None, status: int = 200) -> None:
        if callable(response):
            self.routes[(method, "/api" + path)] = response
        else:
            self.routes[(method, "/api" + path)] = (status, response)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [f"{r.method} {r.url.path.removeprefix('/api')}" for r in self.requests]

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def config_manager() -> ConfigManager:
    return ConfigManager(config_dir=CONFIG_DIR)


@pytest.fixture
def token_store(tmp_path: Path, config_manager: ConfigManager) -> TokenStore:
    return TokenStore(path=tmp_path / "tokens.json", config_manager=config_manager)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_client(
    token_store: TokenStore, config_manager: ConfigManager, backend: FakeBackend
) -> Callable[..., ApiClient]:
    def factory(role: PortalRole, token: Optional[str] = "test-token", events: Optional[EventChannel] = None) -> ApiClient:
        if token:
            token_store.set(role, token)
        session = SessionContext(role, token_store=token_store, events=events or EventChannel())
        return ApiClient(
            session,
            base_url=BASE_URL,
            config_manager=config_manager,
            transport=backend.transport,
        )

    return factory
