"""
History storage backends.
"""

from crieur.infrastructure.storage.i_log_store import ILogStore
from crieur.infrastructure.storage.memory_log_store import InMemoryLogStore
from crieur.infrastructure.storage.redis_log_store import RedisLogStore

__all__ = ["ILogStore", "InMemoryLogStore", "RedisLogStore"]
