"""In-process log store."""

import bisect
from typing import Dict, List

from crieur.infrastructure.storage.i_log_store import ILogStore


class InMemoryLogStore(ILogStore):
    """
    Log store kept in process memory.

    Keys are held in a sorted list so prefix scans are a bisect plus a
    linear walk. Lost on restart.
    """

    def __init__(self):
        self._keys: List[str] = []
        self._values: Dict[str, str] = {}

    async def put(self, key: str, value: str) -> None:
        if key not in self._values:
            bisect.insort(self._keys, key)
        self._values[key] = value

    async def list(self, prefix: str, limit: int) -> List[str]:
        values = []
        start = bisect.bisect_left(self._keys, prefix)

        for key in self._keys[start:]:
            if not key.startswith(prefix) or len(values) >= limit:
                break
            values.append(self._values[key])

        return values
