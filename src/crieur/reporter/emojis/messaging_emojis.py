"""
Event and acknowledgement emoji definitions.
"""

from crieur.reporter.emojis.base_emojis import ComponentEmoji


class MessageEmoji(ComponentEmoji):
    """Emitted events, presence and acknowledgements."""

    EVENT = "📨"  # Event emitted
    ACK = "✅"  # Acknowledgement received
    ACK_TIMEOUT = "⌛"  # Acknowledgement wait expired
    PRESENCE = "👤"  # Presence change
    HISTORY = "📜"  # History read/append
