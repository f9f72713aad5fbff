"""
DTOs for event emission.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class EmitResult(BaseModel):
    """
    Outcome of one emit.

    Attributes:
        success: Whether the event was accepted
        error: Failure reason for user-input errors
        event_id: ID carried by the delivered DATA envelopes
        recipients: IDs of the clients the event was sent to
        acknowledged: IDs that acknowledged, None when no ack was requested
        history_key: Key the payload was logged under
    """

    success: bool = Field(..., description="Whether the event was accepted")
    error: Optional[str] = Field(None, description="Failure reason")
    event_id: Optional[str] = Field(None, description="Delivered event ID")
    recipients: List[str] = Field(default_factory=list)
    acknowledged: Optional[List[str]] = Field(None)
    history_key: Optional[str] = Field(None)

    @classmethod
    def failure(cls, error: str) -> "EmitResult":
        """Build a failed result."""
        return cls(success=False, error=error)
