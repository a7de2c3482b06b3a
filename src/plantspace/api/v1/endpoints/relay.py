# src/plantspace/api/v1/endpoints/relay.py
"""WebSocket transport for the real-time relay."""

import logging
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError as PayloadValidationError

from plantspace.api.v1.dependencies import SessionDep
from plantspace.core.errors import AuthenticationError
from plantspace.schemas.relay import RelayEnvelope
from plantspace.services.identity import resolve_user
from plantspace.services.relay import RELAY_ERROR, RelayConnection, RelayHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])


class WebSocketConnection(RelayConnection):
    """Relay connection backed by a Starlette WebSocket."""

    def __init__(self, websocket: WebSocket, user_id: str) -> None:
        super().__init__(user_id)
        self.websocket = websocket

    async def send(self, event: str, data: Any = None) -> None:
        await self.websocket.send_json({"event": event, "data": data})


def _frame_text(message: dict[str, Any]) -> str | None:
    """Return the frame payload as text; binary frames must be UTF-8."""
    if message.get("text") is not None:
        return message["text"]
    data = message.get("bytes")
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


@router.websocket("/relay")
async def relay_socket(
    websocket: WebSocket,
    db: SessionDep,
    token: str | None = Query(None),
) -> None:
    """Authenticate the handshake, then pump envelopes into the hub until the client leaves."""
    try:
        user = resolve_user(db, token)
    except AuthenticationError as err:
        logger.info("Relay handshake rejected: %s", err.detail)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(err.detail))
        return

    hub: RelayHub = websocket.app.state.relay
    await websocket.accept()
    connection = WebSocketConnection(websocket, user.id)
    hub.connect(connection)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
            raw = _frame_text(message)
            if raw is None:
                await connection.send(RELAY_ERROR, {"error": "Malformed frame"})
                continue
            try:
                envelope = RelayEnvelope.model_validate_json(raw)
            except PayloadValidationError:
                await connection.send(RELAY_ERROR, {"error": "Malformed frame"})
                continue
            await hub.dispatch(connection, envelope.event, envelope.data, db)
    except WebSocketDisconnect as exc:
        logger.debug("Relay socket for %s closed (%s)", user.id, exc.code)
    finally:
        hub.disconnect(connection)
