"""
Schemas for emit endpoints.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from crieur.application.dto import EmitResult


class EmitResponse(BaseModel):
    """
    Response schema for GET|POST /{channel}/emit.

    Failures carry only ``success`` and ``error``.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(..., description="Whether the event was accepted")
    error: Optional[str] = Field(None, description="Failure reason")
    event_id: Optional[str] = Field(None, alias="eventID")
    recipients: Optional[int] = Field(
        None, description="Number of clients the event was sent to"
    )
    acknowledged: Optional[List[str]] = Field(
        None, description="Clients that acknowledged (require-ack only)"
    )

    @classmethod
    def from_result(cls, result: EmitResult) -> "EmitResponse":
        """Build a response from an EmitResult."""
        if not result.success:
            return cls(success=False, error=result.error)

        return cls(
            success=True,
            event_id=result.event_id,
            recipients=len(result.recipients),
            acknowledged=result.acknowledged,
        )

    def to_body(self) -> dict:
        """Serialize with wire names, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
