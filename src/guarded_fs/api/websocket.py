"""WebSocket handler for tool calls that may need confirmation."""

import json
import uuid
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..core.guard import ConfirmationProvider
from ..dispatcher import ToolDispatcher
from ..logging import get_logger
from ..types import ConfirmationAction, ConfirmationRequest, ConfirmationResponse
from .schemas import CallMessage, ConfirmationPrompt, ConfirmMessage

logger = get_logger(__name__)


async def receive_message(websocket: WebSocket) -> dict[str, Any] | None:
    """Read the next frame as a JSON object.

    Returns None for frames that are not valid JSON or not an object, so
    the caller can answer with an error instead of dropping the connection.

    Raises:
        WebSocketDisconnect: when the client goes away
    """
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))

    raw = message.get("text")
    if raw is None:
        raw = message.get("bytes") or b""
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class WebSocketConfirmationProvider(ConfirmationProvider):
    """Asks the client on the other end of a WebSocket to confirm.

    Calls on one socket run one at a time, so the next message after a
    confirmation prompt must be the matching "confirm" reply. Anything else
    is treated as a rejection.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def request(self, request: ConfirmationRequest) -> ConfirmationResponse | None:
        request_id = uuid.uuid4().hex
        prompt = ConfirmationPrompt(
            request_id=request_id,
            message=request.message,
            affected_paths=request.affected_paths,
            requested_schema=request.requested_schema,
        )
        await self.websocket.send_json(prompt.model_dump())

        data = await receive_message(self.websocket)
        if data is None:
            logger.info("Confirmation reply is not a JSON object, rejecting")
            return None
        try:
            reply = ConfirmMessage.model_validate(data)
        except ValidationError:
            logger.info("Malformed confirmation reply, rejecting")
            return None

        if reply.type != "confirm" or reply.request_id != request_id:
            logger.info("Unexpected reply to confirmation %s, rejecting", request_id)
            return None
        try:
            action = ConfirmationAction(reply.action)
        except ValueError:
            return None
        return ConfirmationResponse(action=action, content=reply.content)


async def handle_websocket(websocket: WebSocket, dispatcher: ToolDispatcher) -> None:
    """Handle a WebSocket connection.

    Protocol:
    - Client sends: {"type": "call", "id": "...", "tool": "...", "arguments": {...}}
    - Server may send: {"type": "confirmation", "request_id": "...", "message": "...",
                        "affected_paths": [...], "requested_schema": {...}}
    - Client replies: {"type": "confirm", "request_id": "...", "action": "accept",
                       "content": {"confirm_risk": true, "confirm_backup": true}}
    - Server sends: {"type": "result", "id": "...", "text": "...", "is_error": false}
    - Server sends: {"type": "error", "message": "..."} for malformed messages,
      including frames that are not JSON objects; the connection stays open
    """
    await websocket.accept()
    provider = WebSocketConfirmationProvider(websocket)

    try:
        while True:
            data = await receive_message(websocket)
            if data is None:
                await websocket.send_json({
                    "type": "error",
                    "message": "Malformed message: expected a JSON object",
                })
                continue
            if data.get("type") != "call":
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {data.get('type')}",
                })
                continue

            try:
                message = CallMessage.model_validate(data)
            except ValidationError as e:
                await websocket.send_json({"type": "error", "message": str(e)})
                continue

            response = await dispatcher.call(message.tool, message.arguments, provider=provider)
            await websocket.send_json({
                "type": "result",
                "id": message.id,
                "text": response.text,
                "is_error": response.is_error,
            })

    except WebSocketDisconnect:
        logger.debug("WebSocket client disconnected")
