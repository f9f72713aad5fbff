"""
System lifecycle emoji definitions.
"""

from crieur.reporter.emojis.base_emojis import ComponentEmoji


class SystemEmoji(ComponentEmoji):
    """System operations and lifecycle."""

    STARTUP = "🚀"  # Service starting
    SHUTDOWN = "🛑"  # Service stopping
    READY = "✨"  # Service ready
    CLEANUP = "🧹"  # Resource cleanup
    ACTOR = "🎭"  # Channel actor lifecycle
