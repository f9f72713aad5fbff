"""
History endpoint.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from crieur.di import Container
from crieur.domain.exceptions import InvalidChannelNameError, LogStoreError
from crieur.presentation.api.dependencies import get_container
from crieur.presentation.schemas import HistoryResponse

router = APIRouter(tags=["history"])


@router.get("/{channel}/history", response_model=HistoryResponse)
async def read_history(
    channel: str,
    limit: Optional[int] = Query(None, ge=1, description="Maximum entries"),
    container: Container = Depends(get_container),
):
    """
    Read a channel's stored payloads, oldest first.

    Args:
        channel: Channel name
        limit: Maximum entries (defaults to history_default_limit,
            capped at history_max_limit)
        container: DI container

    Returns:
        Stored payloads

    Raises:
        HTTPException:
            - 400: Invalid channel name
            - 503: History store unavailable
    """
    settings = container.settings

    try:
        actor = container.directory.get(channel)
    except InvalidChannelNameError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    limit = min(limit or settings.history_default_limit, settings.history_max_limit)

    try:
        history = await actor.read_history(limit)
    except LogStoreError as e:
        container.reporter.error(
            f"History read failed [channel={channel}]: {e}",
            context="HistoryAPI",
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="History store unavailable",
        )

    return HistoryResponse(history=history)
