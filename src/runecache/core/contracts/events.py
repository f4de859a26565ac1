"""Change-notification contracts.

Components expose a ``Signal`` per observable state; presentation code
subscribes to re-render when the catalog, visited set or session changes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from runecache.core.contracts.auth import AuthState, User

_LOG = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class CatalogChanged:
    reason: str
    count: int


@dataclass(frozen=True)
class VisitedChanged:
    visited_ids: frozenset[int]


@dataclass(frozen=True)
class AuthChanged:
    previous: AuthState
    current: AuthState
    user: User | None


class Signal(Generic[E]):
    """Synchronous publish/subscribe channel.

    Listeners run in subscription order; ``first=True`` puts a listener ahead
    of everything already connected. A failing listener is logged and does not
    stop delivery to the rest.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[[E], None]] = []

    def connect(self, listener: Callable[[E], None], *, first: bool = False) -> Callable[[], None]:
        if first:
            self._listeners.insert(0, listener)
        else:
            self._listeners.append(listener)

        def disconnect() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return disconnect

    def emit(self, event: E) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _LOG.exception("Listener %r failed handling %r", listener, event)

    def __len__(self) -> int:
        return len(self._listeners)
