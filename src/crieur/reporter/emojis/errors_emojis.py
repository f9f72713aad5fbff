"""
Error level emoji definitions.
"""

from crieur.reporter.emojis.base_emojis import ComponentEmoji


class ErrorEmoji(ComponentEmoji):
    """Error levels and warnings."""

    CRITICAL = "🔴"  # Critical failure
    ERROR = "❌"  # Error
    WARNING = "⚠️"  # Warning
    VALIDATION = "🚫"  # Invalid input
