"""Log store interface for ordered key-value history storage."""

from abc import ABC, abstractmethod
from typing import List


class ILogStore(ABC):
    """
    Abstract ordered key-value store.

    Keys are listed in lexicographic order. One instance is scoped to a
    single channel; connection handling belongs to whoever builds it.
    """

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """
        Store a value under a key.

        Args:
            key: Entry key
            value: Serialized value
        """

    @abstractmethod
    async def list(self, prefix: str, limit: int) -> List[str]:
        """
        List values whose keys start with a prefix.

        Args:
            prefix: Key prefix
            limit: Maximum number of values

        Returns:
            Values in ascending key order
        """
