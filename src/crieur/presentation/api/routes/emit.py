"""
Emit endpoint: deliver an event to a channel's clients.
"""

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from crieur.di import Container
from crieur.domain.exceptions import InvalidChannelNameError, LogStoreError
from crieur.presentation.api.dependencies import get_container
from crieur.presentation.schemas import EmitResponse

router = APIRouter(tags=["emit"])

CONTROL_PARAMS = ("clients", "require-ack")
FALSY_VALUES = {"", "0", "false", "no", "off"}


def parse_require_ack(raw: Optional[str]) -> bool:
    """
    Interpret the require-ack query parameter.

    Args:
        raw: Parameter value (None when absent)

    Returns:
        True when present and not a falsy word
    """
    if raw is None:
        return False
    return raw.strip().lower() not in FALSY_VALUES


async def read_payload(request: Request) -> Any:
    """
    Extract the event payload from a request.

    POST uses the JSON body. GET turns every query parameter except the
    control parameters into a flat object.

    Raises:
        ValueError: If a POST body is not valid JSON
    """
    if request.method == "POST":
        body = await request.body()
        if not body.strip():
            return None
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON body: {e.msg}") from e

    return {
        key: value
        for key, value in request.query_params.items()
        if key not in CONTROL_PARAMS
    }


def _failure(error: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=EmitResponse(success=False, error=error).to_body(),
    )


@router.api_route("/{channel}/emit", methods=["GET", "POST"])
async def emit_event(
    channel: str,
    request: Request,
    container: Container = Depends(get_container),
):
    """
    Emit an event to a channel.

    Query parameters:
        clients: Audience. Absent = broadcast, integer N = N random
            clients, otherwise a comma-separated list of client IDs.
        require-ack: Wait for recipients to acknowledge (bounded by
            ack_timeout_ms).

    Returns:
        ``{"success": true, ...}`` or ``400 {"success": false, "error"}``
    """
    reporter = container.reporter

    try:
        actor = container.directory.get(channel)
    except InvalidChannelNameError as e:
        return _failure(str(e))

    try:
        payload = await read_payload(request)
    except ValueError as e:
        return _failure(str(e))

    clients = request.query_params.get("clients")
    require_ack = parse_require_ack(request.query_params.get("require-ack"))

    try:
        result = await actor.emit(payload, clients=clients, require_ack=require_ack)
    except LogStoreError as e:
        reporter.error(
            f"History append failed [channel={channel}]: {e}",
            context="EmitAPI",
        )
        return _failure(
            "History store unavailable", status.HTTP_503_SERVICE_UNAVAILABLE
        )

    if not result.success:
        return _failure(result.error)

    return JSONResponse(content=EmitResponse.from_result(result).to_body())
