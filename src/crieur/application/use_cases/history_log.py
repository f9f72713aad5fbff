"""
Use case for the append-only event history.
"""

import json
import time
from typing import Any, Callable, List

from crieur.infrastructure.storage import ILogStore


class HistoryLog:
    """
    Append-only log of emitted payloads for one channel.

    Keys embed a zero-padded monotonic nanosecond stamp ahead of the
    random event ID, so the store's lexicographic scan is chronological.
    Entries are never rewritten or deleted.
    """

    PREFIX = "history:"

    def __init__(self, store: ILogStore, id_factory: Callable[[], str]):
        """
        Initialize history log.

        Args:
            store: Log store scoped to the channel
            id_factory: Produces the random suffix of each key
        """
        self.store = store
        self.id_factory = id_factory
        self._last_stamp = 0

    def _next_key(self) -> str:
        stamp = max(time.time_ns(), self._last_stamp + 1)
        self._last_stamp = stamp
        return f"{self.PREFIX}{stamp:020d}_{self.id_factory()}"

    async def append(self, payload: Any) -> str:
        """
        Append a payload.

        Args:
            payload: JSON-serializable payload

        Returns:
            Key the entry was stored under
        """
        key = self._next_key()
        await self.store.put(key, json.dumps(payload))
        return key

    async def read(self, limit: int = 100) -> List[Any]:
        """
        Read up to ``limit`` entries, oldest first.

        Args:
            limit: Maximum number of entries

        Returns:
            Decoded payloads
        """
        values = await self.store.list(self.PREFIX, limit)
        return [json.loads(value) for value in values]
