"""
WebSocket infrastructure for Crieur.
"""

from crieur.infrastructure.websocket.connection import Connection
from crieur.infrastructure.websocket.connection_lifecycle import (
    ConnectionLifecycleManager,
)

__all__ = ["Connection", "ConnectionLifecycleManager"]
