"""Emoji definitions for system reporting."""

from crieur.reporter.emojis.emoji import Emoji
from crieur.reporter.emojis.errors_emojis import ErrorEmoji
from crieur.reporter.emojis.messaging_emojis import MessageEmoji
from crieur.reporter.emojis.network_emojis import NetworkEmoji
from crieur.reporter.emojis.system_emojis import SystemEmoji

__all__ = [
    "Emoji",
    "SystemEmoji",
    "NetworkEmoji",
    "MessageEmoji",
    "ErrorEmoji",
]
