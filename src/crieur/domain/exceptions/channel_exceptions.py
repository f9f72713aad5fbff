"""
Channel-related exceptions.
"""


class ChannelError(Exception):
    """Base exception for channel errors."""

    pass


class InvalidChannelNameError(ChannelError, ValueError):
    """Raised when channel name is invalid."""

    def __init__(self, channel_name: str, reason: str):
        """
        Initialize InvalidChannelNameError.

        Args:
            channel_name: Invalid channel name
            reason: Reason why name is invalid
        """
        super().__init__(f"Invalid channel name '{channel_name}': {reason}")
        self.channel_name = channel_name
        self.reason = reason


class InvalidEnvelopeError(ChannelError, ValueError):
    """Raised when an inbound frame is not a valid envelope."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid envelope: {reason}")
        self.reason = reason


class LogStoreError(ChannelError):
    """Raised when the history store cannot be reached or written."""

    pass
