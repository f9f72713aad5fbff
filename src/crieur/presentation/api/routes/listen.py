"""
Listen endpoint: one WebSocket per channel member.
"""

from fastapi import APIRouter, Depends, WebSocket, status

from crieur.di import Container
from crieur.domain.exceptions import InvalidChannelNameError
from crieur.presentation.api.dependencies import get_container
from crieur.reporter.emojis import Emoji

router = APIRouter(tags=["listen"])


@router.websocket("/{channel}/listen")
async def listen(
    websocket: WebSocket,
    channel: str,
    container: Container = Depends(get_container),
):
    """
    WebSocket endpoint for channel members.

    On join the client receives CONNECTED with the current members, then
    a PING every heartbeat interval. Frames it sends (PONG, PRESENCE,
    ACK) are handled by the channel actor.

    Connection examples:
        - ws://localhost:8787/lobby/listen
        - ws://localhost:8787/game.42/listen
    """
    reporter = container.reporter

    await websocket.accept()

    try:
        actor = container.directory.get(channel)
    except InvalidChannelNameError as e:
        reporter.warning(
            f"{Emoji.ERROR.VALIDATION} Listen rejected: {e}",
            context="ListenAPI",
        )
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e))
        return

    lifecycle = container.get_lifecycle_manager(actor)
    await lifecycle.serve(websocket)
