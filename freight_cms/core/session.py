"""
Session state for a portal.

Replaces module-level globals (current token, cached collections) with an
explicit context whose lifecycle starts at login and ends at logout:
- TokenStore: persistent bearer tokens, one storage key per portal role
- EventChannel: publish/subscribe notifications for collection updates
- SessionContext: token + cached collections of one portal session
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import structlog

from freight_cms.core.config import ConfigManager, get_config
from freight_cms.data.models.enums import PortalRole

Subscriber = Callable[[dict[str, Any]], None]

COLLECTION_UPDATED = "collection_updated"
SESSION_STARTED = "session_started"
SESSION_ENDED = "session_ended"


class TokenStore:
    """
    Persistent key/value storage for bearer tokens.

    Backed by a small JSON file so a session survives restarts the same way
    browser local storage does.
    """

    def __init__(self, path: Optional[Path] = None, config_manager: Optional[ConfigManager] = None) -> None:
        self.config_manager = config_manager or get_config()
        self.path = Path(path or self.config_manager.env.token_file)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as f:
            content = f.read().strip()
        return json.loads(content) if content else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)

    def get(self, role: PortalRole) -> Optional[str]:
        return self._read().get(self.config_manager.get_storage_key(role))

    def set(self, role: PortalRole, token: str) -> None:
        data = self._read()
        data[self.config_manager.get_storage_key(role)] = token
        self._write(data)

    def remove(self, role: PortalRole) -> None:
        data = self._read()
        if data.pop(self.config_manager.get_storage_key(role), None) is not None:
            self._write(data)


class EventChannel:
    """In-process publish/subscribe channel."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = {}
        self.logger = structlog.get_logger(component="event_channel")

    def subscribe(self, topic: str, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for a topic.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.setdefault(topic, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(topic, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def publish(self, topic: str, payload: Optional[dict[str, Any]] = None) -> None:
        payload = payload or {}
        for callback in list(self._subscribers.get(topic, [])):
            try:
                callback(payload)
            except Exception as e:
                self.logger.error("subscriber_failed", topic=topic, error=str(e))


@dataclass
class CachedCollection:
    """A cached collection and the sequence number of the fetch that produced it."""

    items: list[Any]
    sequence: int


class SessionContext:
    """
    State of one portal session.

    Collections fetched from the backend are cached here. Each fetch takes a
    sequence number when it is issued; a response only replaces the cache if
    no newer fetch of the same collection has already been applied.
    """

    def __init__(
        self,
        role: PortalRole,
        token_store: Optional[TokenStore] = None,
        events: Optional[EventChannel] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.role = role
        self.token_store = token_store or TokenStore()
        self.events = events or EventChannel()
        self.logger = logger or structlog.get_logger(portal=role.value)

        self.token: Optional[str] = self.token_store.get(role)
        self._collections: dict[str, CachedCollection] = {}
        self._sequence = 0
        self._floor = 0

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def start(self, token: str) -> None:
        """Begin a session with a freshly issued token."""
        self.token = token
        self.token_store.set(self.role, token)
        self._collections.clear()
        self._floor = self._sequence
        self.logger.info("session_started")
        self.events.publish(SESSION_STARTED, {"role": self.role.value})

    def end(self) -> None:
        """Clear the token and every cached collection."""
        had_token = self.token is not None
        self.token = None
        self.token_store.remove(self.role)
        self._collections.clear()
        self._floor = self._sequence
        if had_token:
            self.logger.info("session_ended")
            self.events.publish(SESSION_ENDED, {"role": self.role.value})

    def next_sequence(self) -> int:
        """Sequence number for a fetch about to be issued."""
        self._sequence += 1
        return self._sequence

    def apply(self, name: str, items: list[Any], sequence: int) -> bool:
        """
        Store a fetched collection unless a newer fetch already landed.

        Fetches issued before the last session start or end are dropped.

        Args:
            name: Collection name (e.g., "freights")
            items: Parsed items
            sequence: Sequence number taken when the fetch was issued

        Returns:
            True if the cache was updated
        """
        if sequence <= self._floor:
            self.logger.debug("previous_session_collection_ignored", collection=name, sequence=sequence)
            return False
        current = self._collections.get(name)
        if current is not None and current.sequence > sequence:
            self.logger.debug("stale_collection_ignored", collection=name, sequence=sequence)
            return False
        self._collections[name] = CachedCollection(items=items, sequence=sequence)
        self.events.publish(COLLECTION_UPDATED, {"collection": name, "count": len(items)})
        return True

    def get(self, name: str) -> list[Any]:
        cached = self._collections.get(name)
        return list(cached.items) if cached else []
