"""
Channel directory - one actor per channel name.
"""

from typing import Callable, Dict, List, Optional

from crieur.config.settings import Settings
from crieur.domain.value_objects import ChannelName
from crieur.infrastructure.actor.channel_actor import ChannelActor
from crieur.infrastructure.storage import ILogStore
from crieur.reporter import SystemReporter
from crieur.reporter.emojis import Emoji

StoreFactory = Callable[[str], ILogStore]


class ChannelDirectory:
    """
    Maps channel names to their actors.

    Actors are created on first use and live until shutdown, so every
    request for the same name reaches the same registry and history.
    """

    def __init__(
        self,
        settings: Settings,
        store_factory: StoreFactory,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize directory.

        Args:
            settings: Application settings passed to every actor
            store_factory: Builds the log store for a channel name
            reporter: Optional SystemReporter for logging
        """
        self.settings = settings
        self.store_factory = store_factory
        self.reporter = reporter
        self._actors: Dict[str, ChannelActor] = {}

    def get(self, name: str) -> ChannelActor:
        """
        Get the actor for a channel, creating it if needed.

        Args:
            name: Raw channel name

        Returns:
            ChannelActor for the channel

        Raises:
            InvalidChannelNameError: If name is invalid
        """
        channel = ChannelName(name).value

        actor = self._actors.get(channel)
        if actor is None:
            actor = ChannelActor(
                name=channel,
                store=self.store_factory(channel),
                settings=self.settings,
                reporter=self.reporter,
            )
            self._actors[channel] = actor

            if self.reporter:
                self.reporter.info(
                    f"{Emoji.SYSTEM.ACTOR} Channel actor created [channel={channel}]",
                    context="ChannelDirectory",
                    verbose_level=2,
                )

        return actor

    @property
    def names(self) -> List[str]:
        return list(self._actors)

    async def shutdown(self) -> None:
        """Stop every actor, closing their connections with code 1001."""
        actors = list(self._actors.values())

        for actor in actors:
            await actor.stop(code=1001, reason="Server shutdown")

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.CLEANUP} Stopped {len(actors)} channel actor(s)",
                context="ChannelDirectory",
            )
