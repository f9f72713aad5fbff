"""
Dependency Injection container for Crieur.

Manages lifecycle and dependencies of all application components.
"""

from typing import Optional

import redis.asyncio as aioredis

from crieur.config.settings import Settings
from crieur.infrastructure.actor import ChannelActor, ChannelDirectory
from crieur.infrastructure.storage import ILogStore, InMemoryLogStore, RedisLogStore
from crieur.infrastructure.websocket import ConnectionLifecycleManager
from crieur.reporter import SystemReporter
from crieur.reporter.emojis import Emoji


class Container:
    """
    Dependency Injection container.

    Creates and manages all application dependencies.
    Implements singleton pattern for shared resources.
    """

    def __init__(self, settings: Settings, reporter: Optional[SystemReporter] = None):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: Optional SystemReporter shared by all components
        """
        self.settings = settings
        self.reporter = reporter or SystemReporter(
            name="crieur", verbose=settings.verbose
        )

        self._directory: Optional[ChannelDirectory] = None
        self._redis_client: Optional[aioredis.Redis] = None

    @property
    def directory(self) -> ChannelDirectory:
        """
        Get ChannelDirectory singleton.

        Returns:
            ChannelDirectory instance
        """
        if self._directory is None:
            self._directory = ChannelDirectory(
                settings=self.settings,
                store_factory=self.create_store,
                reporter=self.reporter,
            )
        return self._directory

    @property
    def uses_redis(self) -> bool:
        return self.settings.store_backend == "redis"

    @property
    def redis_client(self) -> aioredis.Redis:
        """
        Get the Redis client shared by every channel store.

        Returns:
            Redis client (connections are opened lazily by redis-py)
        """
        if self._redis_client is None:
            self._redis_client = aioredis.from_url(
                f"redis://{self.settings.redis_host}:{self.settings.redis_port}"
                f"/{self.settings.redis_db}",
                password=self.settings.redis_password or None,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis_client

    def create_store(self, channel: str) -> ILogStore:
        """
        Build the history store for one channel.

        Args:
            channel: Validated channel name

        Returns:
            Store namespaced to the channel
        """
        if self.uses_redis:
            return RedisLogStore(
                namespace=f"{self.settings.redis_key_prefix}:{channel}",
                redis_client=self.redis_client,
            )
        return InMemoryLogStore()

    def get_lifecycle_manager(self, actor: ChannelActor) -> ConnectionLifecycleManager:
        """
        Get ConnectionLifecycleManager for one channel.

        Args:
            actor: Channel actor the connection belongs to

        Returns:
            Lifecycle manager instance
        """
        return ConnectionLifecycleManager(
            actor=actor,
            heartbeat_interval=self.settings.heartbeat_interval,
            reporter=self.reporter,
        )

    async def connect_store(self) -> None:
        """Verify the shared Redis connection when the redis backend is used."""
        if not self.uses_redis:
            return

        await self.redis_client.ping()
        self.reporter.info(
            f"{Emoji.SUCCESS} Connected to Redis "
            f"[{self.settings.redis_host}:{self.settings.redis_port}"
            f"/{self.settings.redis_db}]",
            context="Container",
        )

    async def disconnect_store(self) -> None:
        """Close the shared Redis connection if one was opened."""
        if self._redis_client is not None:
            await self._redis_client.aclose()
            self._redis_client = None

    async def shutdown(self) -> None:
        """Stop every channel actor and release the store."""
        if self._directory is not None:
            await self._directory.shutdown()
        await self.disconnect_store()
