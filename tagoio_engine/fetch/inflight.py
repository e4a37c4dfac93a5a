"""Registry of request fingerprints currently being executed."""

import asyncio
from collections.abc import Hashable


class InFlightRegistry:
    """Set of in-flight fingerprints with completion notification.

    Each marker owns an ``asyncio.Event`` that is set when the marker is
    removed, so waiters wake as soon as the owning call finishes.
    """

    def __init__(self) -> None:
        self._events: dict[Hashable, asyncio.Event] = {}

    def add(self, key: Hashable) -> None:
        """Mark a fingerprint as in flight.

        Raises:
            ValueError: If the fingerprint is already in flight.
        """
        if key in self._events:
            msg = f"Request {key!r} is already in flight"
            raise ValueError(msg)
        self._events[key] = asyncio.Event()

    def remove(self, key: Hashable) -> None:
        """Clear a marker and wake its waiters. Unknown keys are ignored."""
        event = self._events.pop(key, None)
        if event is not None:
            event.set()

    def has(self, key: Hashable) -> bool:
        """Check whether a fingerprint is in flight."""
        return key in self._events

    async def wait(self, key: Hashable, timeout: float) -> bool:
        """Wait until a fingerprint leaves the registry.

        Args:
            key: Request fingerprint.
            timeout: Upper bound in seconds.

        Returns:
            True if the marker was cleared, False on timeout.
        """
        event = self._events.get(key)
        if event is None:
            return True
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
        except TimeoutError:
            return False
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._events

    def __len__(self) -> int:
        return len(self._events)
