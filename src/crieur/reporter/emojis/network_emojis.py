"""
Connection and data-flow emoji definitions.

Usage:
    >>> from crieur.reporter.emojis import NetworkEmoji
    >>> print(f"{NetworkEmoji.CONNECTED} Client connected")
    🔗 Client connected
"""

from crieur.reporter.emojis.base_emojis import ComponentEmoji


class NetworkEmoji(ComponentEmoji):
    """WebSocket connections, heartbeats and data flow."""

    # ============================================================
    # Connection States
    # ============================================================

    CONNECTED = "🔗"  # Connection established
    DISCONNECT = "🔌"  # Connection closed
    TIMEOUT = "⏱️"  # Heartbeat timeout

    # ============================================================
    # Data Flow
    # ============================================================

    SEND = "📤"  # Data sent
    RECEIVE = "📥"  # Data received
    BROADCAST = "📡"  # Broadcasting to clients
    HEARTBEAT = "💓"  # Ping/pong
