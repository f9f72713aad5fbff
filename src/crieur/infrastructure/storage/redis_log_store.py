"""Redis log store implementation."""

from typing import List

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from crieur.domain.exceptions import LogStoreError
from crieur.infrastructure.storage.i_log_store import ILogStore


class RedisLogStore(ILogStore):
    """
    Log store backed by Redis.

    Each entry is a plain string key ``<namespace>:<key>``. A sorted set
    ``<namespace>:__index__`` holds every key with score 0, so
    ZRANGEBYLEX yields prefix scans in lexicographic order.
    """

    INDEX_SUFFIX = "__index__"

    def __init__(self, namespace: str, redis_client: aioredis.Redis):
        """
        Initialize Redis log store.

        Args:
            namespace: Key namespace, one per channel
            redis_client: Shared Redis client (decode_responses=True).
                Its lifecycle is managed by the container.
        """
        self.namespace = namespace
        self._client = redis_client

    @property
    def index_key(self) -> str:
        return f"{self.namespace}:{self.INDEX_SUFFIX}"

    def _value_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def put(self, key: str, value: str) -> None:
        try:
            # Value first so a listed key always resolves
            await self._client.set(self._value_key(key), value)
            await self._client.zadd(self.index_key, {key: 0})
        except RedisError as e:
            raise LogStoreError(f"Failed to store '{key}': {e}") from e

    async def list(self, prefix: str, limit: int) -> List[str]:
        try:
            keys = await self._client.zrangebylex(
                self.index_key,
                f"[{prefix}",
                f"[{prefix}\xff",
                start=0,
                num=limit,
            )
            if not keys:
                return []

            values = await self._client.mget([self._value_key(k) for k in keys])
        except RedisError as e:
            raise LogStoreError(f"Failed to list '{prefix}': {e}") from e

        return [v for v in values if v is not None]
