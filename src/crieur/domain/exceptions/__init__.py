"""
Domain exceptions for Crieur.
"""

from crieur.domain.exceptions.channel_exceptions import (
    ChannelError,
    InvalidChannelNameError,
    InvalidEnvelopeError,
    LogStoreError,
)
from crieur.domain.exceptions.dispatch_exceptions import (
    DispatchError,
    EmptyPayloadError,
    InsufficientClientsError,
)

__all__ = [
    "ChannelError",
    "InvalidChannelNameError",
    "InvalidEnvelopeError",
    "LogStoreError",
    "DispatchError",
    "EmptyPayloadError",
    "InsufficientClientsError",
]
