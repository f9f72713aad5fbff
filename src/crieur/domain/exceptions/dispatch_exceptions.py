"""
Event dispatch exceptions.

Both are user-input errors: the channel actor converts them into a
failed EmitResult instead of letting them escape to the caller.
"""


class DispatchError(Exception):
    """Base exception for event dispatch errors."""

    pass


class EmptyPayloadError(DispatchError):
    """Raised when an emit carries no payload."""

    def __init__(self):
        super().__init__("No payload provided.")


class InsufficientClientsError(DispatchError):
    """Raised when a numeric target asks for more clients than are connected."""

    def __init__(self, requested: int, available: int):
        """
        Initialize InsufficientClientsError.

        Args:
            requested: Number of random clients requested
            available: Number of clients currently connected
        """
        super().__init__("Not enough clients to target.")
        self.requested = requested
        self.available = available
