"""Ownership of live-query subscriptions."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

from coach_checkins.services.store import Subscription

_logger = logging.getLogger(__name__)


@dataclass
class SubscriptionScope:
    """Owns the subscriptions of one screen or view-model.

    Callbacks registered through the scope are dropped once the scope is
    reset or closed, so a listener firing late can never write into state
    that now belongs to someone else.
    """

    _handles: list[Subscription] = field(default_factory=list)
    _generation: int = 0
    _closed: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active_count(self) -> int:
        return len(self._handles)

    def listen(
        self,
        subscribe: Callable[[Callable[..., None]], Subscription],
        callback: Callable[..., None],
    ) -> Subscription:
        """Register a listener whose deliveries stop when the scope moves on."""
        if self._closed:
            raise RuntimeError("Subscription scope is closed")
        generation = self._generation

        def deliver(*args: Any) -> None:
            if self._closed or generation != self._generation:
                _logger.debug("Discarding stale snapshot for generation %s", generation)
                return
            callback(*args)

        handle = subscribe(deliver)
        with self._lock:
            self._handles.append(handle)
        return handle

    def reset(self) -> None:
        """Cancel every subscription and invalidate pending deliveries."""
        with self._lock:
            handles, self._handles = self._handles, []
            self._generation += 1
        for handle in handles:
            handle.cancel()

    def close(self) -> None:
        """Release the scope for good."""
        self.reset()
        self._closed = True

    def __enter__(self) -> "SubscriptionScope":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
