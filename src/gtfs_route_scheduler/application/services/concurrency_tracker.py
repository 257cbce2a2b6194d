"""Per-route count of currently animating instances."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ConcurrencyTracker:
    """Counts active instances per route.

    Counts never go negative: completion reports are not guaranteed to pair
    up with firings (a map view may unmount mid-animation), so a decrement
    at zero is a no-op.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def count(self, route_id: str) -> int:
        """Return the number of active instances for a route."""
        return self._counts.get(route_id, 0)

    def increment(self, route_id: str) -> int:
        """Add one active instance and return the new count."""
        self._counts[route_id] = self.count(route_id) + 1
        return self._counts[route_id]

    def decrement(self, route_id: str) -> int:
        """Remove one active instance, clamped at zero, and return the new count."""
        current = self.count(route_id)
        if current == 0:
            logger.debug(f"Ignoring decrement for {route_id}: no active instances")
        self._counts[route_id] = max(0, current - 1)
        return self._counts[route_id]

    def try_acquire(self, route_id: str, limit: int) -> bool:
        """Increment only if the route is below ``limit``.

        Returns:
            True if a slot was taken, False if the route is at capacity.
        """
        if self.count(route_id) >= limit:
            return False
        self.increment(route_id)
        return True

    def reset(self, route_id: str | None = None) -> None:
        """Zero one route, or every route when ``route_id`` is None."""
        if route_id is None:
            self._counts.clear()
        else:
            self._counts[route_id] = 0

    def snapshot(self) -> dict[str, int]:
        """Return a copy of all counts."""
        return dict(self._counts)
