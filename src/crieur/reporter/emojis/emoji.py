"""
Main Emoji registry class with centralized access to all emoji categories.

Usage:
    >>> from crieur.reporter.emojis import Emoji
    >>> Emoji.NETWORK.CONNECTED
    '🔗'
    >>> Emoji.format("SYSTEM", "STARTUP", "Server started")
    '🚀 Server started'
"""

from typing import Dict, Type

from crieur.reporter.emojis.base_emojis import ComponentEmoji
from crieur.reporter.emojis.errors_emojis import ErrorEmoji
from crieur.reporter.emojis.messaging_emojis import MessageEmoji
from crieur.reporter.emojis.network_emojis import NetworkEmoji
from crieur.reporter.emojis.system_emojis import SystemEmoji


class Emoji:
    """
    Central emoji registry with semantic categories.

    Categories:
        SYSTEM: System operations and lifecycle
        NETWORK: Connections and data flow
        MESSAGE: Events, presence and acknowledgements
        ERROR: Error levels and warnings
    """

    SYSTEM = SystemEmoji
    NETWORK = NetworkEmoji
    MESSAGE = MessageEmoji
    ERROR = ErrorEmoji

    # Common shortcuts
    SUCCESS = "✅"
    FAILURE = "❌"

    @classmethod
    def get_all_categories(cls) -> Dict[str, Type[ComponentEmoji]]:
        """Get all registered emoji categories."""
        return {
            name: attr
            for name, attr in vars(cls).items()
            if (
                not name.startswith("_")
                and isinstance(attr, type)
                and issubclass(attr, ComponentEmoji)
            )
        }

    @classmethod
    def format(cls, category: str, name: str, message: str) -> str:
        """
        Prefix a message with an emoji looked up by category and name.

        Args:
            category: Category name (e.g. "NETWORK")
            name: Emoji name within the category (e.g. "CONNECTED")
            message: Message text

        Returns:
            Formatted message

        Raises:
            KeyError: If category or name is unknown
        """
        category_class = cls.get_all_categories()[category.upper()]
        emoji = category_class.get_all()[name.upper()]
        return f"{emoji} {message}"
