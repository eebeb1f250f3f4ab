"""In-process change feed.

Delivers events synchronously to subscribers in the publishing thread.
A failing subscriber is logged and skipped so one broken listener cannot
fail the write that produced the event.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from tourdesk.application.ports import Callback, ChangeEvent, ChangeFeed, Subscription

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _Listener:
    entity: str
    callback: Callback
    owner_id: str | None

    def wants(self, event: ChangeEvent) -> bool:
        if event.entity != self.entity:
            return False
        return self.owner_id is None or event.owner_id == self.owner_id


class _LocalSubscription(Subscription):

    def __init__(self, feed: LocalChangeFeed, listener: _Listener) -> None:
        self._feed = feed
        self._listener = listener

    def close(self) -> None:
        self._feed._remove(self._listener)


class LocalChangeFeed(ChangeFeed):

    def __init__(self) -> None:
        self._listeners: list[_Listener] = []
        self._lock = threading.Lock()

    def subscribe(
        self, entity: str, callback: Callback, owner_id: str | None = None
    ) -> Subscription:
        listener = _Listener(entity, callback, owner_id)
        with self._lock:
            self._listeners.append(listener)
        return _LocalSubscription(self, listener)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = [listener for listener in self._listeners if listener.wants(event)]
        for listener in targets:
            try:
                listener.callback(event)
            except Exception:
                logger.exception("Change listener failed for %s %s", event.entity, event.entity_id)

    def _remove(self, listener: _Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
