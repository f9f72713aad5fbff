"""
Schemas for history endpoints.
"""

from typing import Any, List

from pydantic import BaseModel, Field


class HistoryResponse(BaseModel):
    """
    Response schema for GET /{channel}/history.
    """

    history: List[Any] = Field(
        default_factory=list, description="Stored payloads, oldest first"
    )
