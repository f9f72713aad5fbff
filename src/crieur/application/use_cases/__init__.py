"""
Application use cases for Crieur.
"""

from crieur.application.use_cases.dispatch_event import (
    AckCollector,
    Dispatch,
    EventDispatcher,
)
from crieur.application.use_cases.history_log import HistoryLog
from crieur.application.use_cases.track_presence import PresenceTracker

__all__ = [
    "AckCollector",
    "Dispatch",
    "EventDispatcher",
    "HistoryLog",
    "PresenceTracker",
]
