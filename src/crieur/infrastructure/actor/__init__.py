"""Channel actors."""

from crieur.infrastructure.actor.channel_actor import ChannelActor
from crieur.infrastructure.actor.directory import ChannelDirectory

__all__ = ["ChannelActor", "ChannelDirectory"]
